"""
cluster-init-lock - one-shot control plane initialization lock

Lets exactly one of many racing controllers initialize a cluster by
creating a uniquely named, owner-referenced record in the cluster's
namespace.
"""

from cluster_init_lock.core.version import __version__
from cluster_init_lock.locks import (
    ClusterRef,
    ConfigMapRecordStore,
    ControlPlaneInitLocker,
    InMemoryRecordStore,
    InitLocker,
    create_init_locker,
    create_record_store,
    lock_record_name,
)

__all__ = [
    "ClusterRef",
    "ConfigMapRecordStore",
    "ControlPlaneInitLocker",
    "InMemoryRecordStore",
    "InitLocker",
    "__version__",
    "create_init_locker",
    "create_record_store",
    "lock_record_name",
]
