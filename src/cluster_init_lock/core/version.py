"""Version information for cluster-init-lock."""

__version__ = "0.1.0"
