"""Control plane initialization lock.

Exactly one of many racing controllers gets to initialize a cluster's
control plane. The claim is a single create of ``<uid>-controlplane`` in
the cluster's namespace; the store's create-if-absent decides the winner.
There is no lease, heartbeat or fencing, and nothing in this process is
load-bearing for exclusion across processes.

Both operations are fail-closed and never raise: any store failure is
logged and reported as ``False``. Retrying is the caller's next
reconciliation pass.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

from cluster_init_lock.core.config import LockConfig
from cluster_init_lock.core.constants import (
    STORE_BACKEND_AUTO,
    STORE_BACKEND_CONFIGMAP,
    STORE_BACKEND_ENV,
    STORE_BACKEND_KUBERNETES,
    STORE_BACKEND_MEMORY,
)
from cluster_init_lock.core.exceptions import RecordAlreadyExistsError, RecordNotFoundError
from cluster_init_lock.core.logging import with_log_context
from cluster_init_lock.locks.models import ClusterRef, LockRecord, lock_record_name
from cluster_init_lock.locks.stores import ConfigMapRecordStore, InMemoryRecordStore, RecordStore


@runtime_checkable
class InitLocker(Protocol):
    """Locking mechanism for cluster initialization."""

    def acquire(self, cluster: ClusterRef) -> bool:
        """Return True if this caller acquired the lock for the cluster."""

    def release(self, cluster: ClusterRef) -> bool:
        """Return True if the lock for the cluster is no longer held."""


class ControlPlaneInitLocker:
    """Uses one namespaced record per cluster to synchronize initialization."""

    def __init__(self, store: RecordStore, logger: logging.Logger | logging.LoggerAdapter | None = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def acquire(self, cluster: ClusterRef) -> bool:
        record = LockRecord.for_cluster(cluster)
        log = self._log_for(cluster, record.name)

        exists = self.is_locked(cluster)
        if exists is None or exists:
            return False

        log.info("Attempting to create control plane lock record")
        try:
            self.store.create(record)
        except RecordAlreadyExistsError:
            # Someone else beat us to it
            log.info("Control plane lock record already exists")
            return False
        except Exception as e:
            log.error("Error creating control plane lock record: %s", e)
            return False

        log.info("Acquired control plane lock")
        return True

    def release(self, cluster: ClusterRef) -> bool:
        record_name = lock_record_name(cluster)
        log = self._log_for(cluster, record_name)

        log.info("Checking for existence of control plane lock record")
        try:
            self.store.get(cluster.namespace, record_name)
        except RecordNotFoundError:
            log.info("Control plane lock record not found, it may have been released already")
            return True
        except Exception as e:
            log.error("Error retrieving control plane lock record: %s", e)
            return False

        try:
            self.store.delete(cluster.namespace, record_name)
        except RecordNotFoundError:
            log.info("Control plane lock record disappeared before delete, treating as released")
            return True
        except Exception as e:
            log.error("Error deleting control plane lock record: %s", e)
            return False

        log.info("Released control plane lock")
        return True

    def is_locked(self, cluster: ClusterRef) -> bool | None:
        """Probe for the lock record.

        Returns True/False for present/absent and None when the store could
        not answer. The probe only saves a create call when the lock is
        already held; it decides nothing on its own.
        """
        record_name = lock_record_name(cluster)
        try:
            self.store.get(cluster.namespace, record_name)
        except RecordNotFoundError:
            return False
        except Exception as e:
            self._log_for(cluster, record_name).error(
                "Error checking for control plane lock record existence: %s", e
            )
            return None
        return True

    def _log_for(self, cluster: ClusterRef, record_name: str) -> logging.Logger | logging.LoggerAdapter:
        return with_log_context(
            self.logger,
            namespace=cluster.namespace,
            cluster_name=cluster.name,
            record_name=record_name,
        )


def create_record_store(
    backend_name: str | None = None,
    *,
    kubeconfig: str | None = None,
    context: str | None = None,
    logger: logging.Logger | None = None,
) -> RecordStore:
    """Create a record store from an explicit value or environment override."""
    log = logger or logging.getLogger(__name__)
    requested = (backend_name or os.environ.get(STORE_BACKEND_ENV, STORE_BACKEND_AUTO)).strip().lower()

    if requested == STORE_BACKEND_MEMORY:
        log.warning("Using in-memory lock record store; locks are not shared between processes")
        return InMemoryRecordStore()

    if requested in (STORE_BACKEND_AUTO, STORE_BACKEND_KUBERNETES, STORE_BACKEND_CONFIGMAP):
        return ConfigMapRecordStore.from_kubeconfig(kubeconfig, context, logger=log)

    # LockConfig.validate rejects unknown names; raw arguments and env values only warn here.
    log.warning("Unknown lock record store '%s'; falling back to auto selection", requested)
    return create_record_store(STORE_BACKEND_AUTO, kubeconfig=kubeconfig, context=context, logger=log)


def create_init_locker(
    config: LockConfig | None = None,
    *,
    store: RecordStore | None = None,
    logger: logging.Logger | None = None,
) -> ControlPlaneInitLocker:
    """Build a locker, creating its store from config unless one is injected."""
    log = logger or logging.getLogger(__name__)
    if store is None:
        config = config or LockConfig.from_env()
        store = create_record_store(
            config.store.backend,
            kubeconfig=config.store.kubeconfig,
            context=config.store.context,
            logger=log,
        )
    return ControlPlaneInitLocker(store, logger=log)
