"""
cachefront - Cache Backends

Exports available cache backend implementations.

Redis and Valkey backends are lazy-loaded via factory.py so that their client
libraries are only required when selected.
"""

from .local import CacheEntry, LocalCacheAdapter

__all__ = [
    "CacheEntry",
    "LocalCacheAdapter",
]
