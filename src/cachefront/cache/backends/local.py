"""
cachefront - Local File Cache Backend

Stores one file per key under a cache directory.

Notes:
- File names are md5(physical key) + extension, so they are filesystem-safe
  and cannot be mapped back to a key. The original key is kept inside the
  entry so prefix-scoped flush can match against it.
- Each file holds an encoded CacheEntry (key, value, created_at, expire_at).
- Expiry is checked lazily on read; gc() sweeps expired files in bulk.
- Writes go to a temporary file that is renamed over the target, so readers
  never observe a partially written entry.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ...config.schemas import LocalCacheConfig
from ...errors import CacheInitializationError, CacheSerializationError
from .. import codec
from ..interface import NOT_CONNECTED, CacheAdapter, CacheResult

logger = logging.getLogger(__name__)

NEVER_EXPIRES = 0
TEMP_PREFIX = ".tmp-"


@dataclass(frozen=True)
class CacheEntry:
    """Persisted form of a cached value."""

    key: str
    value: Any
    created_at: float
    expire_at: float = NEVER_EXPIRES

    def is_expired(self, now: float) -> bool:
        return self.expire_at > 0 and self.expire_at < now

    def to_payload(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "created_at": self.created_at,
            "expire_at": self.expire_at,
        }

    @classmethod
    def from_payload(cls, payload: Any) -> CacheEntry | None:
        """Rebuild an entry from a decoded payload, None if it is malformed."""
        if not isinstance(payload, dict) or "value" not in payload:
            return None
        return cls(
            key=payload.get("key", ""),
            value=payload["value"],
            created_at=payload.get("created_at", 0),
            expire_at=payload.get("expire_at", NEVER_EXPIRES) or NEVER_EXPIRES,
        )


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def default_cache_dir() -> Path:
    """Default cache directory: <cwd>/usr/cache."""
    return Path.cwd() / "usr" / "cache"


class LocalCacheAdapter(CacheAdapter):
    """File-per-key cache backend."""

    name = "local"

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        super().__init__()
        self.cache_dir: Path | None = None
        self.extension = ".cache"
        self._clock = clock
        self._file_mode = 0o644

    # ------------ Lifecycle ------------

    def connect(self, config: LocalCacheConfig) -> None:
        if self._connected:
            return

        cache_dir = Path(config.path) if config.path else default_cache_dir()

        if not cache_dir.is_dir():
            try:
                cache_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
            except OSError as e:
                logger.error(
                    "Failed to create cache directory %s: %s",
                    cache_dir,
                    e,
                    extra={"path": str(cache_dir), "error": str(e)},
                )
                raise CacheInitializationError(
                    f"Cannot create cache directory: {cache_dir}",
                    details={"path": str(cache_dir), "error": str(e)},
                ) from e

        if not os.access(cache_dir, os.W_OK):
            raise CacheInitializationError(
                f"Cache directory is not writable: {cache_dir}",
                details={"path": str(cache_dir)},
            )

        self.cache_dir = cache_dir
        self.extension = config.extension
        # mkstemp creates 0600 files; entries get the usual umask-derived mode instead
        self._file_mode = 0o666 & ~_current_umask()
        self._connected = True
        logger.info(
            "Local cache ready at %s",
            cache_dir,
            extra={"path": str(cache_dir), "extension": self.extension},
        )

    def close(self) -> bool:
        # No persistent handle is held
        return True

    # ------------ Helpers ------------

    def file_path(self, key: str) -> Path:
        """Path of the cache file for a physical key."""
        assert self.cache_dir is not None
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}{self.extension}"

    def _list_files(self) -> list[Path]:
        assert self.cache_dir is not None
        # Orphaned temp files are skipped even when the extension is ".part"
        files = self.cache_dir.glob(f"*{self.extension}")
        return [path for path in files if not path.name.startswith(TEMP_PREFIX)]

    @staticmethod
    def _read_entry(path: Path) -> CacheEntry | None:
        """Load an entry; None if the file is missing, unreadable or undecodable."""
        try:
            content = path.read_bytes()
        except OSError:
            return None
        decoded = codec.decode(content)
        if not decoded.ok:
            return None
        return CacheEntry.from_payload(decoded.value)

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.debug("Failed to remove cache file %s: %s", path, e, extra={"path": str(path), "error": str(e)})
            return False

    def _write_atomic(self, path: Path, content: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=TEMP_PREFIX, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.chmod(tmp_name, self._file_mode)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def _live_entry(self, key: str) -> CacheEntry | None:
        """Entry for key if present and not expired; expired files are removed."""
        path = self.file_path(key)
        if not path.exists():
            return None
        entry = self._read_entry(path)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._unlink(path)
            return None
        return entry

    # ------------ Primitives ------------

    def fetch(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED
        if not key:
            return CacheResult.miss()

        entry = self._live_entry(key)
        if entry is None:
            return CacheResult.miss()
        return CacheResult.hit(entry.value)

    def store(self, key: str, value: Any, expire: int = 0) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        now = self._clock()
        entry = CacheEntry(
            key=key,
            value=value,
            created_at=now,
            expire_at=now + expire if expire > 0 else NEVER_EXPIRES,
        )
        try:
            content = codec.encode(entry.to_payload())
            self._write_atomic(self.file_path(key), content)
        except (CacheSerializationError, OSError) as e:
            return CacheResult.failure(e)
        return CacheResult.success()

    def remove(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        path = self.file_path(key)
        if not path.exists():
            return CacheResult.success()
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            return CacheResult.failure(e)
        return CacheResult.success()

    def contains(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED
        if not key:
            return CacheResult.miss()

        if self._live_entry(key) is None:
            return CacheResult.miss()
        return CacheResult.hit()

    def purge(self, prefix: str = "") -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        removed = 0
        try:
            for path in self._list_files():
                if prefix:
                    entry = self._read_entry(path)
                    if entry is None or not entry.key.startswith(prefix):
                        continue
                if self._unlink(path):
                    removed += 1
        except OSError as e:
            return CacheResult.failure(e)

        logger.info(
            "Flushed %d local cache file(s)",
            removed,
            extra={"path": str(self.cache_dir), "prefix": prefix, "removed": removed},
        )
        return CacheResult.success()

    def collect_garbage(self) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        now = self._clock()
        removed = 0
        try:
            for path in self._list_files():
                entry = self._read_entry(path)
                if entry is not None and entry.is_expired(now) and self._unlink(path):
                    removed += 1
        except OSError as e:
            return CacheResult.failure(e)

        logger.debug("Removed %d expired cache file(s)", removed, extra={"path": str(self.cache_dir)})
        return CacheResult.success()
