"""
cachefront - Cache Module

Provides a backend-agnostic cache facade with pluggable backends.

- facade.py: Cache, the single entry point, and the default-instance holder
- factory.py: backend selector -> adapter class
- interface.py: abstract adapter contract all backends implement
- codec.py: value serialization
- backends/: local (file), redis and valkey implementations

Usage:
    from cachefront.cache import Cache

    cache = Cache("redis", {"host": "localhost", "port": 6379})
    cache.set("key", "value", 3600)
    value = cache.get("key")
    cache.close()
"""

from .facade import Cache, get_default_cache, reset_default_cache, set_default_cache
from .factory import create_adapter, resolve_adapter
from .interface import CacheAdapter, CacheResult, ResultStatus

__all__ = [
    # Facade
    "Cache",
    "get_default_cache",
    "reset_default_cache",
    "set_default_cache",
    # Factory
    "create_adapter",
    "resolve_adapter",
    # Interface
    "CacheAdapter",
    "CacheResult",
    "ResultStatus",
]
