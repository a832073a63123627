"""Configuration and concurrency utilities."""

from .config_loader import ConfigLoader, apply_env_overrides, get_config
from .locks import ReadWriteLock

__all__ = [
    "ConfigLoader",
    "apply_env_overrides",
    "get_config",
    "ReadWriteLock",
]
