"""
cachefront - Cache Facade

The single entry point callers use. A Cache owns exactly one adapter,
prepends its prefix to every logical key and releases the adapter on close.

Usage:
    from cachefront.cache import Cache

    with Cache("local", {"path": "/tmp/cache"}) as cache:
        cache.set("answer", 42, 60)
        cache.get("answer")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from pydantic import BaseModel

from ..config import CacheBackend, load_config
from ..errors import CacheConnectionError, CacheError, ConfigurationError, NotInitializedError
from .factory import build_config, create_adapter, parse_backend
from .interface import CacheAdapter, CacheResult, ResultStatus, flatten_bool, flatten_value

logger = logging.getLogger(__name__)


class Cache:
    """
    Backend-agnostic cache.

    Per-key operations never raise: a backend failure behaves like a miss
    (get returns the default, the others return False). Construction raises
    ConfigurationError or CacheConnectionError when the cache is unusable.
    """

    def __init__(
        self,
        backend: str | CacheBackend = CacheBackend.REDIS,
        config: Mapping[str, Any] | BaseModel | None = None,
    ) -> None:
        """
        Create the adapter and connect it.

        Args:
            backend: Backend selector ("local", "redis", "valkey"; case-insensitive)
            config: Configuration bundle for the backend, mapping or config model

        Raises:
            ConfigurationError: Empty/invalid config, unknown backend or missing client library
            CacheConnectionError: The adapter could not connect
        """
        if not config:
            raise ConfigurationError("Cache configuration is required")

        self._backend = parse_backend(backend)
        self._config = build_config(self._backend, config)
        self._prefix = self._config.prefix
        self._adapter: CacheAdapter = create_adapter(self._backend)

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._errors = 0

        try:
            self._adapter.connect(self._config)
        except Exception as e:
            logger.error(
                "Failed to connect %s cache: %s",
                self._backend.value,
                e,
                extra={"backend": self._backend.value, "error": str(e)},
            )
            raise CacheConnectionError(
                f"Failed to connect to cache backend: {e}",
                details={"backend": self._backend.value, "error": str(e)},
            ) from e

        self._connected = True
        logger.info(
            "Cache ready (backend: %s, prefix: %s)",
            self._backend.value,
            self._prefix,
            extra={"backend": self._backend.value, "prefix": self._prefix},
        )

    @classmethod
    def from_env(cls, env_file: str | None = None, reload: bool = False) -> Cache:
        """Build a cache from CACHE_* environment variables (and an optional .env file)."""
        settings = load_config(env_file=env_file, reload=reload)
        return cls(settings.backend, settings.options)

    # ------------ Properties ------------

    @property
    def adapter(self) -> CacheAdapter:
        return self._adapter

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def connected(self) -> bool:
        return self._connected

    def _key(self, key: str) -> str:
        return self._prefix + key

    def _record_error(self, operation: str, key: str, result: CacheResult) -> None:
        if result.status is ResultStatus.ERROR:
            self._errors += 1
            logger.warning(
                "Cache %s failed for key '%s': %s",
                operation,
                key,
                result.error,
                extra={"backend": self._backend.value, "operation": operation, "key": key, "error": result.error},
            )

    # ------------ Operations ------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value for key, or default."""
        result = self._adapter.fetch(self._key(key))
        self._record_error("get", key, result)
        if result.status is ResultStatus.HIT:
            self._hits += 1
        else:
            self._misses += 1
            logger.debug("Cache miss for key '%s'", key, extra={"key": key})
        return flatten_value(result, default)

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        """
        Store a value.

        Args:
            key: Logical key
            value: Any picklable value
            expire: Time-to-live in seconds (0 = never expires)
        """
        result = self._adapter.store(self._key(key), value, expire)
        self._record_error("set", key, result)
        if result.ok:
            self._sets += 1
        return flatten_bool(result)

    def delete(self, key: str) -> bool:
        result = self._adapter.remove(self._key(key))
        self._record_error("delete", key, result)
        if result.ok:
            self._deletes += 1
        return flatten_bool(result)

    def has(self, key: str) -> bool:
        result = self._adapter.contains(self._key(key))
        self._record_error("has", key, result)
        return flatten_bool(result)

    def flush(self) -> bool:
        """Delete every entry under this cache's prefix."""
        result = self._adapter.purge(self._prefix)
        self._record_error("flush", self._prefix, result)
        return flatten_bool(result)

    def gc(self) -> bool:
        """Sweep expired entries (only meaningful for backends without native TTL)."""
        result = self._adapter.collect_garbage()
        self._record_error("gc", "", result)
        return flatten_bool(result)

    def get_stats(self) -> dict[str, Any]:
        """Return operation counters for this cache instance."""
        total_requests = self._hits + self._misses
        return {
            "backend": self._backend.value,
            "prefix": self._prefix,
            "connected": self._connected,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "errors": self._errors,
        }

    # ------------ Lifecycle ------------

    def close(self) -> bool:
        """Close the adapter. Safe to call more than once."""
        if not self._connected:
            return True
        self._connected = False
        closed = self._adapter.close()
        logger.info("Closed %s cache", self._backend.value, extra={"backend": self._backend.value})
        return closed

    def __enter__(self) -> Cache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Cache(backend={self._backend.value!r}, prefix={self._prefix!r}, connected={self._connected})"


# ------------ Default instance ------------

_default_cache: Cache | None = None
_default_lock = threading.Lock()


def set_default_cache(cache: Cache) -> None:
    """
    Register the process-wide default cache.

    The holder is assigned once: registering the same instance again is a
    no-op, registering a different one raises CacheError until
    reset_default_cache() is called.
    """
    global _default_cache

    with _default_lock:
        if _default_cache is cache:
            return
        if _default_cache is not None:
            raise CacheError(
                "A default cache is already registered",
                details={"registered": repr(_default_cache)},
            )
        _default_cache = cache
    logger.debug("Registered default cache: %r", cache)


def get_default_cache() -> Cache:
    """
    Return the process-wide default cache.

    Raises:
        NotInitializedError: If no cache has been registered
    """
    if _default_cache is None:
        raise NotInitializedError()
    return _default_cache


def reset_default_cache() -> Cache | None:
    """
    Clear the default cache holder and return the previous instance.

    Does NOT close the instance. Used for shutdown and tests.
    """
    global _default_cache

    with _default_lock:
        previous, _default_cache = _default_cache, None
    return previous
