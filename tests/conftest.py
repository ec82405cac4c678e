"""Pytest configuration and fixtures for cluster-init-lock tests"""

import logging

import pytest

from cluster_init_lock.core.constants import (
    KUBE_CONTEXT_ENV,
    KUBECONFIG_ENV,
    LOG_FILE_ENV,
    LOG_FORMAT_ENV,
    LOG_LEVEL_ENV,
    STORE_BACKEND_ENV,
)
from cluster_init_lock.locks import ClusterRef, ControlPlaneInitLocker, InMemoryRecordStore

_CONFIG_ENV_VARS = (
    STORE_BACKEND_ENV,
    KUBECONFIG_ENV,
    KUBE_CONTEXT_ENV,
    LOG_LEVEL_ENV,
    LOG_FORMAT_ENV,
    LOG_FILE_ENV,
)


@pytest.fixture
def cluster():
    """The cluster from the documented acquire/release walkthrough"""
    return ClusterRef(
        namespace="ns1",
        name="cl1",
        uid="abc-123",
        api_version="cluster.x-k8s.io/v1alpha2",
        kind="Cluster",
    )


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def locker(store):
    return ControlPlaneInitLocker(store, logger=logging.getLogger("tests.locker"))


@pytest.fixture
def clean_env(monkeypatch):
    """Remove config environment variables, restoring them (or their absence) afterwards.

    Setting before deleting makes monkeypatch also undo anything a .env load
    writes into os.environ during the test.
    """
    for key in _CONFIG_ENV_VARS:
        monkeypatch.setenv(key, "placeholder")
        monkeypatch.delenv(key)
    yield


@pytest.fixture
def restore_root_logging(monkeypatch):
    """Give setup_logging a scratch root handler list and restore the real one afterwards"""
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    original_level = root.level
    yield
    root.setLevel(original_level)
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
