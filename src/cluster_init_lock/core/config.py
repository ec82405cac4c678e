"""Configuration dataclasses for cluster-init-lock.

These dataclasses centralize the options needed to build a lock: which
record store to talk to and how to log. They can be created from the
environment (optionally seeded from a ``.env`` file) or used directly.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from cluster_init_lock.core.constants import (
    KUBE_CONTEXT_ENV,
    KUBECONFIG_ENV,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_ENV,
    LOG_FILE_MAX_BYTES,
    LOG_FORMAT_ENV,
    LOG_LEVEL_ENV,
    STORE_BACKEND_AUTO,
    STORE_BACKEND_ENV,
    VALID_LOG_FORMATS,
    VALID_STORE_BACKENDS,
)
from cluster_init_lock.core.exceptions import ConfigurationError


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "INFO")
        format: "text" or "json" (default: "text")
        file: Optional log file path; console only when None
        file_max_bytes: Maximum size per log file (default: 10MB)
        file_backup_count: Number of backup log files (default: 5)
    """

    level: str = "INFO"
    format: str = "text"
    file: str | None = None
    file_max_bytes: int = LOG_FILE_MAX_BYTES
    file_backup_count: int = LOG_FILE_BACKUP_COUNT


@dataclass
class StoreConfig:
    """Configuration for the lock record store.

    Attributes:
        backend: Store backend name (auto, memory, kubernetes, configmap)
        kubeconfig: Path to a kubeconfig file; in-cluster config is tried first
        context: Kubeconfig context to use (default: current context)
    """

    backend: str = STORE_BACKEND_AUTO
    kubeconfig: str | None = None
    context: str | None = None


@dataclass
class LockConfig:
    """Master configuration for building a control plane init lock."""

    store: StoreConfig = field(default_factory=StoreConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def validate(self) -> None:
        """Raise ConfigurationError when any option is out of range."""
        backend = self.store.backend.strip().lower()
        if backend not in VALID_STORE_BACKENDS:
            raise ConfigurationError(
                f"Unknown store backend '{self.store.backend}'",
                field="store.backend",
                details=f"expected one of {', '.join(sorted(VALID_STORE_BACKENDS))}",
            )
        if self.log.format.strip().lower() not in VALID_LOG_FORMATS:
            raise ConfigurationError(
                f"Unknown log format '{self.log.format}'",
                field="log.format",
                details=f"expected one of {', '.join(VALID_LOG_FORMATS)}",
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LockConfig:
        """Create configuration from environment variables."""
        env = os.environ if environ is None else environ

        config = cls(
            store=StoreConfig(
                backend=_env_value(env, STORE_BACKEND_ENV) or STORE_BACKEND_AUTO,
                kubeconfig=_env_value(env, KUBECONFIG_ENV),
                context=_env_value(env, KUBE_CONTEXT_ENV),
            ),
            log=LogConfig(
                level=(_env_value(env, LOG_LEVEL_ENV) or "INFO").upper(),
                format=(_env_value(env, LOG_FORMAT_ENV) or "text").lower(),
                file=_env_value(env, LOG_FILE_ENV),
            ),
        )
        config.validate()
        return config


def _env_value(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(
    dotenv_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    logger: logging.Logger | None = None,
) -> LockConfig:
    """Load configuration, seeding the process environment from a .env file.

    Values already present in the environment win over the .env file.

    Args:
        dotenv_path: Explicit .env path; python-dotenv searches upwards when None
        environ: Mapping to read instead of os.environ (the .env file is skipped)
        logger: Optional logger instance

    Returns:
        Validated LockConfig
    """
    logger = logger or logging.getLogger(__name__)

    if environ is None:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.debug(".env file found and loaded")
        else:
            logger.debug(".env file not found")

    return LockConfig.from_env(environ)
