"""Tests for logging helpers."""

import io
import json
import logging

from cluster_init_lock.core.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    setup_logging,
    with_log_context,
)


def _capture(logger_name: str, formatter: logging.Formatter, *filters: logging.Filter):
    stream = io.StringIO()
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.handlers.clear()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    for log_filter in filters:
        handler.addFilter(log_filter)
    logger.addHandler(handler)
    return logger, stream


class TestFormattersAndContext:
    """Test structured output and contextual fields"""

    def test_json_formatter_includes_custom_record_fields(self):
        """JSONFormatter should include custom fields from logging extra."""
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="test.logger",
            level=logging.INFO,
            pathname=__file__,
            lineno=42,
            msg="hello",
            args=(),
            exc_info=None,
        )
        record.record_name = "abc-123-controlplane"
        record.extra_fields = {"namespace": "ns1"}

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "hello"
        assert payload["namespace"] == "ns1"
        assert payload["record_name"] == "abc-123-controlplane"
        assert payload["level"] == "INFO"
        assert "process" in payload

    def test_with_log_context_includes_fields_in_json_output(self):
        """with_log_context should emit adapter context as JSON fields."""
        logger, stream = _capture("test.context.adapter", JSONFormatter())

        contextual_logger = with_log_context(logger, namespace="ns1", cluster_name="cl1", dropped=None)
        contextual_logger.info("context message", extra={"record_name": "abc-123-controlplane"})

        payload = json.loads(stream.getvalue().strip())
        assert payload["namespace"] == "ns1"
        assert payload["cluster_name"] == "cl1"
        assert payload["record_name"] == "abc-123-controlplane"
        assert "dropped" not in payload

    def test_with_log_context_layers_on_existing_adapter(self):
        logger, stream = _capture("test.context.layered", JSONFormatter())

        outer = with_log_context(logger, namespace="ns1")
        inner = with_log_context(outer, cluster_name="cl1")
        inner.info("layered")

        payload = json.loads(stream.getvalue().strip())
        assert payload["namespace"] == "ns1"
        assert payload["cluster_name"] == "cl1"

    def test_with_log_context_passes_through_non_loggers(self):
        sentinel = object()
        assert with_log_context(sentinel, namespace="ns1") is sentinel


class TestRedaction:
    def test_json_formatter_redacts_bearer_token(self):
        """Bearer tokens echoed by transport errors should not reach the log."""
        formatter = JSONFormatter()
        secret = "eyJhbGciOiJSUzI1NiIsImtpZCI6IiJ9.payload.signature"
        record = logging.LogRecord(
            name="test.redaction.bearer",
            level=logging.ERROR,
            pathname=__file__,
            lineno=42,
            msg=f"Error creating control plane lock record: Authorization: Bearer {secret}",
            args=(),
            exc_info=None,
        )
        record.token = "service-account-token"

        payload = json.loads(formatter.format(record))

        assert secret not in payload["message"]
        assert "Bearer [REDACTED]" in payload["message"]
        assert payload["token"] == "[REDACTED]"

    def test_sensitive_data_filter_redacts_text_logs(self):
        logger, stream = _capture(
            "test.redaction.text",
            logging.Formatter("%(message)s | %(client_secret)s"),
            SensitiveDataFilter(),
        )

        logger.info("kubeconfig token=abc123 password: hunter2", extra={"client_secret": "secret-value"})

        output = stream.getvalue().strip()
        assert "abc123" not in output
        assert "hunter2" not in output
        assert output == "kubeconfig token=[REDACTED] password: [REDACTED] | [REDACTED]"

    def test_redaction_is_stable_when_applied_twice(self):
        """A second filter or formatter pass must leave redacted text unchanged."""
        logger, stream = _capture(
            "test.redaction.twice",
            JSONFormatter(),
            SensitiveDataFilter(),
            SensitiveDataFilter(),
        )

        logger.info("store error token=abc123 Bearer abc.def", extra={"note": "secret=xyz"})

        payload = json.loads(stream.getvalue().strip())
        assert payload["message"] == "store error token=[REDACTED] Bearer [REDACTED]"
        assert payload["note"] == "secret=[REDACTED]"

    def test_filter_keeps_lock_context_fields(self):
        logger, stream = _capture(
            "test.redaction.context",
            logging.Formatter("%(message)s | %(record_name)s"),
            SensitiveDataFilter(),
        )

        logger.info("Acquired control plane lock", extra={"record_name": "abc-123-controlplane"})

        assert stream.getvalue().strip() == "Acquired control plane lock | abc-123-controlplane"


class TestSetupLogging:
    def test_console_only_by_default(self, restore_root_logging):
        logger = setup_logging(log_level="INFO")

        assert logger.name == "cluster_init_lock"
        assert logging.root.level == logging.INFO
        assert len(logging.root.handlers) == 1

    def test_creates_log_file(self, restore_root_logging, tmp_path):
        log_file = tmp_path / "logs" / "init-lock.log"

        logger = setup_logging(log_level="INFO", log_file=log_file)
        logger.info("hello file")
        for handler in logging.root.handlers:
            handler.flush()

        assert log_file.exists()
        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_json_format_to_file(self, restore_root_logging, tmp_path):
        log_file = tmp_path / "init-lock.jsonl"

        logger = setup_logging(log_level="DEBUG", log_format="json", log_file=log_file)
        with_log_context(logger, namespace="ns1").debug("structured")
        for handler in logging.root.handlers:
            handler.flush()

        payload = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert payload["message"] == "structured"
        assert payload["namespace"] == "ns1"

    def test_text_file_redacts_exactly_once(self, restore_root_logging, tmp_path):
        log_file = tmp_path / "lock.log"

        logger = setup_logging(log_level="INFO", log_file=log_file)
        logger.info("store error token=abc123")
        for handler in logging.root.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert line.endswith(" - store error token=[REDACTED]")

    def test_json_output_redacts_exactly_once(self, restore_root_logging, tmp_path):
        log_file = tmp_path / "lock.jsonl"

        logger = setup_logging(log_level="INFO", log_format="json", log_file=log_file)
        logger.info("store error token=abc123")
        for handler in logging.root.handlers:
            handler.flush()

        payload = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
        assert payload["message"] == "store error token=[REDACTED]"

    def test_invalid_level_falls_back_to_info(self, restore_root_logging, capsys):
        setup_logging(log_level="LOUD")

        assert logging.root.level == logging.INFO
        assert "Invalid log level 'LOUD'" in capsys.readouterr().err

    def test_level_from_environment(self, restore_root_logging, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        setup_logging()

        assert logging.root.level == logging.WARNING
