"""
cachefront - pluggable key-value cache layer.

One facade over interchangeable backends: local files, Redis and Valkey.
"""

from .cache import Cache, CacheAdapter, get_default_cache, reset_default_cache, set_default_cache
from .config import CacheBackend
from .errors import (
    CacheConnectionError,
    CacheError,
    CacheFrontError,
    CacheInitializationError,
    ConfigurationError,
    NotInitializedError,
)

__version__ = "1.0.0"

__all__ = [
    "Cache",
    "CacheAdapter",
    "CacheBackend",
    "CacheConnectionError",
    "CacheError",
    "CacheFrontError",
    "CacheInitializationError",
    "ConfigurationError",
    "NotInitializedError",
    "get_default_cache",
    "reset_default_cache",
    "set_default_cache",
]
