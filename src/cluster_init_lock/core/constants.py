"""Constants and default values for cluster-init-lock.

This module centralizes the record naming contract, environment variable
names and logging defaults used throughout the package.
"""

# ==================== LOCK RECORD ====================

# Appended to the cluster UID to form the lock record name. Must stay
# bit-exact so every controller derives the same record for a cluster.
LOCK_RECORD_SUFFIX: str = "-controlplane"

# ==================== STORE BACKENDS ====================

STORE_BACKEND_AUTO: str = "auto"
STORE_BACKEND_MEMORY: str = "memory"
STORE_BACKEND_KUBERNETES: str = "kubernetes"
STORE_BACKEND_CONFIGMAP: str = "configmap"  # Alias for kubernetes

VALID_STORE_BACKENDS: frozenset[str] = frozenset(
    {STORE_BACKEND_AUTO, STORE_BACKEND_MEMORY, STORE_BACKEND_KUBERNETES, STORE_BACKEND_CONFIGMAP}
)

# ==================== ENVIRONMENT VARIABLES ====================

STORE_BACKEND_ENV: str = "CLUSTER_INIT_LOCK_STORE"
KUBECONFIG_ENV: str = "KUBECONFIG"
KUBE_CONTEXT_ENV: str = "CLUSTER_INIT_LOCK_KUBE_CONTEXT"
LOG_LEVEL_ENV: str = "LOG_LEVEL"
LOG_FORMAT_ENV: str = "LOG_FORMAT"
LOG_FILE_ENV: str = "LOG_FILE"

# ==================== LOGGING DEFAULTS ====================

VALID_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_LOG_FORMATS: tuple[str, ...] = ("text", "json")
LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep
