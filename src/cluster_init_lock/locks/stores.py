"""Record store implementations.

Design principles:
- Mutual exclusion lives entirely in a store's atomic create-if-absent.
  Nothing else in this package is load-bearing for it across processes.
- Every failure leaves a store as a ``RecordStoreError`` classified by
  ``StoreErrorKind``; client exceptions never escape unwrapped.
- Stores hold no lock state of their own beyond the records themselves.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Iterator
from typing import Protocol

import urllib3
from kubernetes import client as k8s_client
from kubernetes import config as k8s_config
from kubernetes.client.exceptions import ApiException

from cluster_init_lock.core.exceptions import (
    ConfigurationError,
    RecordAlreadyExistsError,
    RecordNotFoundError,
    RecordStoreError,
    StoreErrorKind,
)
from cluster_init_lock.locks.models import LockRecord, OwnerReference

_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409


class RecordStore(Protocol):
    """Namespaced record store with atomic create-if-absent semantics."""

    name: str

    def get(self, namespace: str, name: str) -> LockRecord:
        """Return the record. Raises RecordNotFoundError when absent."""

    def create(self, record: LockRecord) -> LockRecord:
        """Create the record atomically. Raises RecordAlreadyExistsError on conflict."""

    def delete(self, namespace: str, name: str) -> None:
        """Delete the record. Raises RecordNotFoundError when absent."""


class InMemoryRecordStore:
    """Process-local store keyed by (namespace, name).

    Atomicity of create comes from the store's own mutex, so racing threads
    in one process see exactly one winner. It offers nothing across
    processes and is meant for tests and single-process embedding.
    """

    name = "memory"

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], LockRecord] = {}
        self._mutex = threading.Lock()

    def get(self, namespace: str, name: str) -> LockRecord:
        with self._mutex:
            record = self._records.get((namespace, name))
        if record is None:
            raise RecordNotFoundError(namespace, name)
        return record

    def create(self, record: LockRecord) -> LockRecord:
        key = (record.namespace, record.name)
        with self._mutex:
            if key in self._records:
                raise RecordAlreadyExistsError(record.namespace, record.name)
            self._records[key] = record
        return record

    def delete(self, namespace: str, name: str) -> None:
        with self._mutex:
            if self._records.pop((namespace, name), None) is None:
                raise RecordNotFoundError(namespace, name)

    def __len__(self) -> int:
        with self._mutex:
            return len(self._records)

    def __iter__(self) -> Iterator[LockRecord]:
        with self._mutex:
            return iter(list(self._records.values()))


class ConfigMapRecordStore:
    """Store backed by Kubernetes ConfigMaps.

    The API server rejects a second create of the same ConfigMap name with
    409 Conflict, which is the create-if-absent guarantee the lock needs.
    Owner references on the ConfigMap let the Kubernetes garbage collector
    remove the record once the owning cluster is deleted.
    """

    name = "kubernetes"

    def __init__(self, core_api: k8s_client.CoreV1Api):
        self.core_api = core_api

    @classmethod
    def from_kubeconfig(
        cls,
        kubeconfig: str | None = None,
        context: str | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> ConfigMapRecordStore:
        """Build a store from in-cluster config, falling back to a kubeconfig file.

        In-cluster config is only tried when neither a kubeconfig path nor a
        context is given.

        Configuration is loaded into a private client configuration; the
        kubernetes module-level default is left untouched.

        Raises:
            ConfigurationError: if neither source yields usable credentials
        """
        log = logger or logging.getLogger(__name__)
        configuration = k8s_client.Configuration()

        if kubeconfig is None and context is None:
            try:
                k8s_config.load_incluster_config(client_configuration=configuration)
                log.debug("Loaded in-cluster Kubernetes configuration")
                return cls(k8s_client.CoreV1Api(k8s_client.ApiClient(configuration)))
            except k8s_config.ConfigException:
                log.debug("In-cluster Kubernetes configuration unavailable; trying kubeconfig")

        try:
            k8s_config.load_kube_config(
                config_file=kubeconfig,
                context=context,
                client_configuration=configuration,
                persist_config=False,
            )
        except (k8s_config.ConfigException, OSError) as e:
            raise ConfigurationError(
                "Unable to load Kubernetes configuration",
                field="store.kubeconfig",
                details=str(e),
            ) from e

        log.debug("Loaded Kubernetes configuration from kubeconfig (context=%s)", context or "<current>")
        return cls(k8s_client.CoreV1Api(k8s_client.ApiClient(configuration)))

    def get(self, namespace: str, name: str) -> LockRecord:
        with _translate_errors(namespace, name, "reading"):
            config_map = self.core_api.read_namespaced_config_map(name=name, namespace=namespace)
        return _record_from_config_map(config_map, namespace, name)

    def create(self, record: LockRecord) -> LockRecord:
        with _translate_errors(record.namespace, record.name, "creating"):
            body = _config_map_from_record(record)
            created = self.core_api.create_namespaced_config_map(namespace=record.namespace, body=body)
        return _record_from_config_map(created, record.namespace, record.name)

    def delete(self, namespace: str, name: str) -> None:
        with _translate_errors(namespace, name, "deleting"):
            self.core_api.delete_namespaced_config_map(name=name, namespace=namespace)


@contextlib.contextmanager
def _translate_errors(namespace: str, name: str, operation: str) -> Iterator[None]:
    """Classify Kubernetes client failures into RecordStoreError kinds."""
    try:
        yield
    except ApiException as e:
        if e.status == _HTTP_NOT_FOUND:
            raise RecordNotFoundError(namespace, name, original_error=e) from e
        if e.status == _HTTP_CONFLICT:
            raise RecordAlreadyExistsError(namespace, name, original_error=e) from e
        raise RecordStoreError(
            f"Kubernetes API error while {operation} ConfigMap",
            kind=StoreErrorKind.UNKNOWN,
            namespace=namespace,
            name=name,
            details=f"HTTP {e.status} {e.reason}",
            original_error=e,
        ) from e
    except (urllib3.exceptions.HTTPError, OSError, ValueError) as e:
        # Transport failures and client-side model validation
        raise RecordStoreError(
            f"Error while {operation} ConfigMap",
            kind=StoreErrorKind.UNKNOWN,
            namespace=namespace,
            name=name,
            details=str(e),
            original_error=e,
        ) from e


def _config_map_from_record(record: LockRecord) -> k8s_client.V1ConfigMap:
    return k8s_client.V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=k8s_client.V1ObjectMeta(
            namespace=record.namespace,
            name=record.name,
            owner_references=[
                k8s_client.V1OwnerReference(
                    api_version=ref.api_version,
                    kind=ref.kind,
                    name=ref.name,
                    uid=ref.uid,
                )
                for ref in record.owner_references
            ],
        ),
    )


def _record_from_config_map(config_map: k8s_client.V1ConfigMap, namespace: str, name: str) -> LockRecord:
    metadata = getattr(config_map, "metadata", None)
    owner_references = tuple(
        OwnerReference(api_version=ref.api_version, kind=ref.kind, name=ref.name, uid=ref.uid)
        for ref in (getattr(metadata, "owner_references", None) or [])
    )
    return LockRecord(
        namespace=getattr(metadata, "namespace", None) or namespace,
        name=getattr(metadata, "name", None) or name,
        owner_references=owner_references,
    )
