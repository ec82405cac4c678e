"""Identity of a protected cluster and the lock record derived from it."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from cluster_init_lock.core.constants import LOCK_RECORD_SUFFIX


@dataclass(frozen=True)
class ClusterRef:
    """Identity fields the lock reads from a cluster object."""

    namespace: str
    name: str
    uid: str
    api_version: str
    kind: str

    @classmethod
    def from_object(cls, obj: Mapping[str, Any]) -> ClusterRef:
        """Build a reference from a Kubernetes-style object mapping.

        Raises:
            ValueError: if apiVersion, kind or any of metadata namespace/name/uid is missing
        """
        metadata = obj.get("metadata") or {}
        values = {
            "namespace": metadata.get("namespace"),
            "name": metadata.get("name"),
            "uid": metadata.get("uid"),
            "api_version": obj.get("apiVersion"),
            "kind": obj.get("kind"),
        }
        missing = sorted(key for key, value in values.items() if not value)
        if missing:
            raise ValueError(f"cluster object is missing required fields: {', '.join(missing)}")
        return cls(**{key: str(value) for key, value in values.items()})


@dataclass(frozen=True)
class OwnerReference:
    """Back-reference from a lock record to the cluster it guards."""

    api_version: str
    kind: str
    name: str
    uid: str

    @classmethod
    def for_cluster(cls, cluster: ClusterRef) -> OwnerReference:
        return cls(
            api_version=cluster.api_version,
            kind=cluster.kind,
            name=cluster.name,
            uid=cluster.uid,
        )


@dataclass(frozen=True)
class LockRecord:
    """A namespaced record whose existence is the lock state."""

    namespace: str
    name: str
    owner_references: tuple[OwnerReference, ...] = ()

    @classmethod
    def for_cluster(cls, cluster: ClusterRef) -> LockRecord:
        return cls(
            namespace=cluster.namespace,
            name=lock_record_name(cluster),
            owner_references=(OwnerReference.for_cluster(cluster),),
        )


def lock_record_name(cluster: ClusterRef) -> str:
    """Return the deterministic lock record name for a cluster: ``<uid>-controlplane``."""
    return f"{cluster.uid}{LOCK_RECORD_SUFFIX}"
