"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the package:
- Version information
- Custom exceptions and the store error classification
- Configuration dataclasses
- Constants and defaults
- Logging helpers
"""

from cluster_init_lock.core.version import __version__

from cluster_init_lock.core.exceptions import (
    ClusterInitLockError,
    ConfigurationError,
    RecordAlreadyExistsError,
    RecordNotFoundError,
    RecordStoreError,
    StoreErrorKind,
)

from cluster_init_lock.core.config import (
    LockConfig,
    LogConfig,
    StoreConfig,
    load_config,
)

from cluster_init_lock.core.constants import (
    LOCK_RECORD_SUFFIX,
    STORE_BACKEND_ENV,
    VALID_STORE_BACKENDS,
)

from cluster_init_lock.core.logging import (
    ContextLoggerAdapter,
    JSONFormatter,
    SensitiveDataFilter,
    setup_logging,
    with_log_context,
)

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'ClusterInitLockError',
    'ConfigurationError',
    'RecordAlreadyExistsError',
    'RecordNotFoundError',
    'RecordStoreError',
    'StoreErrorKind',
    # Config dataclasses
    'LockConfig',
    'LogConfig',
    'StoreConfig',
    'load_config',
    # Constants
    'LOCK_RECORD_SUFFIX',
    'STORE_BACKEND_ENV',
    'VALID_STORE_BACKENDS',
    # Logging
    'ContextLoggerAdapter',
    'JSONFormatter',
    'SensitiveDataFilter',
    'setup_logging',
    'with_log_context',
]
