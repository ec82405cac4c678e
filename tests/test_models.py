"""Tests for cluster identity and lock record derivation."""

import pytest

from cluster_init_lock.locks import ClusterRef, LockRecord, OwnerReference, lock_record_name


def _cluster_object(**overrides):
    obj = {
        "apiVersion": "cluster.x-k8s.io/v1alpha2",
        "kind": "Cluster",
        "metadata": {"namespace": "ns1", "name": "cl1", "uid": "abc-123"},
    }
    obj.update(overrides)
    return obj


class TestLockRecordName:
    def test_name_is_uid_with_controlplane_suffix(self, cluster):
        assert lock_record_name(cluster) == "abc-123-controlplane"

    def test_name_ignores_namespace_and_cluster_name(self, cluster):
        other = ClusterRef(namespace="ns9", name="renamed", uid="abc-123", api_version="v1", kind="Other")
        assert lock_record_name(other) == lock_record_name(cluster)

    def test_uuid_style_uid(self):
        cluster = ClusterRef(
            namespace="default",
            name="prod",
            uid="6d3c1e2a-1b7f-4f0e-9a55-0c1d2e3f4a5b",
            api_version="cluster.x-k8s.io/v1alpha2",
            kind="Cluster",
        )
        assert lock_record_name(cluster) == "6d3c1e2a-1b7f-4f0e-9a55-0c1d2e3f4a5b-controlplane"


class TestClusterRef:
    def test_from_object(self, cluster):
        assert ClusterRef.from_object(_cluster_object()) == cluster

    def test_from_object_reports_missing_fields(self):
        obj = _cluster_object(metadata={"namespace": "ns1", "name": "cl1"})
        del obj["kind"]

        with pytest.raises(ValueError, match="kind, uid"):
            ClusterRef.from_object(obj)

    def test_from_object_without_metadata(self):
        with pytest.raises(ValueError, match="name, namespace, uid"):
            ClusterRef.from_object({"apiVersion": "v1", "kind": "Cluster"})


class TestLockRecord:
    def test_for_cluster(self, cluster):
        record = LockRecord.for_cluster(cluster)

        assert record.namespace == "ns1"
        assert record.name == "abc-123-controlplane"
        assert record.owner_references == (OwnerReference.for_cluster(cluster),)

    def test_owner_reference_copies_identity(self, cluster):
        ref = OwnerReference.for_cluster(cluster)

        assert ref.api_version == cluster.api_version
        assert ref.kind == cluster.kind
        assert ref.name == cluster.name
        assert ref.uid == cluster.uid
