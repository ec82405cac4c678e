"""Custom exceptions for cluster-init-lock.

Store failures are classified once, at the store boundary, into a
``StoreErrorKind``. The locker dispatches on the typed subclasses instead
of inspecting status codes or messages.
"""

from __future__ import annotations

from enum import Enum


class ClusterInitLockError(Exception):
    """Base exception for all cluster-init-lock errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(ClusterInitLockError):
    """Exception raised for configuration-related errors.

    Examples:
        - Unknown store backend name
        - Unknown log format
        - Kubernetes credentials that cannot be loaded
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class StoreErrorKind(Enum):
    """Classification of record store failures."""

    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    UNKNOWN = "unknown"  # Connectivity, permission, validation, anything else


class RecordStoreError(ClusterInitLockError):
    """Exception raised by record stores for any failed operation.

    Attributes:
        kind: Classification of the failure
        namespace: Namespace of the record involved, if known
        name: Name of the record involved, if known
        original_error: Underlying client exception, if any
    """

    def __init__(
        self,
        message: str,
        kind: StoreErrorKind = StoreErrorKind.UNKNOWN,
        namespace: str | None = None,
        name: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.namespace is not None and self.name is not None:
            parts.append(f"record {self.namespace}/{self.name}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class RecordNotFoundError(RecordStoreError):
    """Raised when the requested record does not exist."""

    def __init__(self, namespace: str, name: str, original_error: Exception | None = None):
        super().__init__(
            "Record not found",
            kind=StoreErrorKind.NOT_FOUND,
            namespace=namespace,
            name=name,
            original_error=original_error,
        )


class RecordAlreadyExistsError(RecordStoreError):
    """Raised when create-if-absent loses to an existing record of the same name."""

    def __init__(self, namespace: str, name: str, original_error: Exception | None = None):
        super().__init__(
            "Record already exists",
            kind=StoreErrorKind.ALREADY_EXISTS,
            namespace=namespace,
            name=name,
            original_error=original_error,
        )
