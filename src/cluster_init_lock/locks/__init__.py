"""Control plane initialization lock and its record stores.

This package centralizes lock acquisition/release behind a record store
abstraction so reconcilers can use a stable two-call API.
"""

from cluster_init_lock.locks.locker import (
    ControlPlaneInitLocker,
    InitLocker,
    create_init_locker,
    create_record_store,
)
from cluster_init_lock.locks.models import ClusterRef, LockRecord, OwnerReference, lock_record_name
from cluster_init_lock.locks.stores import ConfigMapRecordStore, InMemoryRecordStore, RecordStore

__all__ = [
    "ClusterRef",
    "ConfigMapRecordStore",
    "ControlPlaneInitLocker",
    "InMemoryRecordStore",
    "InitLocker",
    "LockRecord",
    "OwnerReference",
    "RecordStore",
    "create_init_locker",
    "create_record_store",
    "lock_record_name",
]
