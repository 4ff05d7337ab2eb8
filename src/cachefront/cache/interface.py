"""
cachefront - Cache Adapter Interface

Defines the abstract interface that all cache backends must implement.

Backends implement primitive operations returning a CacheResult that tells
a hit, a miss, a success and a backend error apart. The uniform public
contract (get/set/delete/has/flush/gc) is built on top of those primitives
here, so every backend flattens errors into defaults the same way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ResultStatus(str, Enum):
    """Outcome of a primitive adapter operation."""

    HIT = "hit"
    MISS = "miss"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class CacheResult:
    """Result of a primitive adapter operation."""

    status: ResultStatus
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True for HIT and OK."""
        return self.status in (ResultStatus.HIT, ResultStatus.OK)

    @property
    def is_error(self) -> bool:
        return self.status is ResultStatus.ERROR

    @classmethod
    def hit(cls, value: Any = None) -> CacheResult:
        return cls(ResultStatus.HIT, value)

    @classmethod
    def miss(cls) -> CacheResult:
        return _MISS

    @classmethod
    def success(cls) -> CacheResult:
        return _OK

    @classmethod
    def failure(cls, error: str | BaseException) -> CacheResult:
        return cls(ResultStatus.ERROR, error=str(error))


_MISS = CacheResult(ResultStatus.MISS)
_OK = CacheResult(ResultStatus.OK)

NOT_CONNECTED = CacheResult(ResultStatus.ERROR, error="not connected")


def flatten_value(result: CacheResult, default: Any = None) -> Any:
    """HIT -> stored value, anything else -> default."""
    if result.status is ResultStatus.HIT:
        return result.value
    return default


def flatten_bool(result: CacheResult) -> bool:
    """HIT/OK -> True, anything else -> False."""
    return result.ok


class CacheAdapter(ABC):
    """
    Abstract base class for cache backends.

    One adapter instance owns one backend endpoint. Subclasses implement
    connect/close and the primitive operations; the uniform contract methods
    are shared.
    """

    #: Backend name used in logs
    name: str = "abstract"

    def __init__(self) -> None:
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    # ------------ Lifecycle ------------

    @abstractmethod
    def connect(self, config: Any) -> None:
        """
        Open the backend. Idempotent.

        Args:
            config: Backend configuration model

        Raises:
            CacheConnectionError: If the backend cannot be reached or initialized
        """

    @abstractmethod
    def close(self) -> bool:
        """Release the backend connection. Idempotent."""

    # ------------ Primitives ------------

    @abstractmethod
    def fetch(self, key: str) -> CacheResult:
        """
        Read a key.

        Returns:
            HIT with the stored value, MISS, or ERROR
        """

    @abstractmethod
    def store(self, key: str, value: Any, expire: int = 0) -> CacheResult:
        """
        Write a key.

        Args:
            key: Physical (prefixed) key
            value: Value to store
            expire: Time-to-live in seconds (0 = never expires)

        Returns:
            OK or ERROR
        """

    @abstractmethod
    def remove(self, key: str) -> CacheResult:
        """Delete a key. Returns OK, MISS (nothing deleted) or ERROR."""

    @abstractmethod
    def contains(self, key: str) -> CacheResult:
        """Check a key. Returns HIT, MISS or ERROR."""

    @abstractmethod
    def purge(self, prefix: str = "") -> CacheResult:
        """Bulk delete keys starting with prefix. Returns OK or ERROR."""

    def collect_garbage(self) -> CacheResult:
        """
        Sweep expired entries.

        Backends with native TTL expire keys on their own; the default
        implementation has nothing to do.
        """
        return CacheResult.success()

    # ------------ Uniform contract ------------

    def _log_error(self, operation: str, key: str | None, result: CacheResult) -> None:
        if result.is_error:
            logger.warning(
                "Cache %s failed on %s backend: %s",
                operation,
                self.name,
                result.error,
                extra={"backend": self.name, "operation": operation, "key": key, "error": result.error},
            )

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or default on a miss or any failure."""
        result = self.fetch(key)
        self._log_error("get", key, result)
        return flatten_value(result, default)

    def set(self, key: str, value: Any, expire: int = 0) -> bool:
        """Store a value; True on success."""
        result = self.store(key, value, expire)
        self._log_error("set", key, result)
        return flatten_bool(result)

    def delete(self, key: str) -> bool:
        """Delete a key; see each backend for what counts as success."""
        result = self.remove(key)
        self._log_error("delete", key, result)
        return flatten_bool(result)

    def has(self, key: str) -> bool:
        """True if the key exists and has not expired."""
        result = self.contains(key)
        self._log_error("has", key, result)
        return flatten_bool(result)

    def flush(self, prefix: str = "") -> bool:
        """Delete every key starting with prefix."""
        result = self.purge(prefix)
        self._log_error("flush", prefix, result)
        return flatten_bool(result)

    def gc(self) -> bool:
        """Sweep expired entries."""
        result = self.collect_garbage()
        self._log_error("gc", None, result)
        return flatten_bool(result)
