"""
cachefront - Local File Cache Backend Tests

Tests directory initialization, expiry, prefix-scoped flush, garbage
collection and decode-failure handling of the file backend.
"""

import os
import stat
from pathlib import Path
from typing import Any

import pytest

from cachefront.cache import codec
from cachefront.cache.backends.local import CacheEntry, LocalCacheAdapter
from cachefront.config import LocalCacheConfig
from cachefront.errors import CacheConnectionError, CacheInitializationError


class TestLocalCacheAdapter:
    """Test suite for LocalCacheAdapter."""

    @pytest.fixture
    def cache(self, temp_cache_dir: str, clock: Any) -> LocalCacheAdapter:
        """Create a connected adapter over a fresh directory."""
        adapter = LocalCacheAdapter(clock=clock)
        adapter.connect(LocalCacheConfig(path=temp_cache_dir))
        return adapter

    def test_connect_creates_missing_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "deep" / "cache"
        adapter = LocalCacheAdapter()

        adapter.connect(LocalCacheConfig(path=str(target)))

        assert target.is_dir()
        assert adapter.connected is True
        assert adapter.cache_dir == target

    def test_connect_fails_when_directory_cannot_be_created(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        adapter = LocalCacheAdapter()

        with pytest.raises(CacheInitializationError) as exc_info:
            adapter.connect(LocalCacheConfig(path=str(blocker / "cache")))

        assert isinstance(exc_info.value, CacheConnectionError)
        assert adapter.connected is False

    def test_connect_is_idempotent(self, cache: LocalCacheAdapter, tmp_path: Path) -> None:
        first_dir = cache.cache_dir

        cache.connect(LocalCacheConfig(path=str(tmp_path / "other")))

        assert cache.cache_dir == first_dir
        assert not (tmp_path / "other").exists()

    def test_extension_override(self, temp_cache_dir: str) -> None:
        adapter = LocalCacheAdapter()
        adapter.connect(LocalCacheConfig(path=temp_cache_dir, extension="c"))

        adapter.set("key", "value")

        files = list(Path(temp_cache_dir).iterdir())
        assert len(files) == 1
        assert files[0].suffix == ".c"

    def test_file_name_is_hash_of_key(self, cache: LocalCacheAdapter) -> None:
        path = cache.file_path("typecho_key")

        assert path.parent == cache.cache_dir
        assert len(path.stem) == 32
        assert path.name.endswith(".cache")
        assert "typecho_key" not in path.name

    def test_operations_require_connect(self) -> None:
        adapter = LocalCacheAdapter()

        assert adapter.get("key", "default") == "default"
        assert adapter.set("key", "value") is False
        assert adapter.has("key") is False
        assert adapter.delete("key") is False
        assert adapter.flush() is False

    def test_set_and_get(self, cache: LocalCacheAdapter) -> None:
        assert cache.set("key1", "value1") is True
        assert cache.get("key1") == "value1"

    def test_set_with_various_types(self, cache: LocalCacheAdapter, sample_cache_data: dict[str, Any]) -> None:
        for key, value in sample_cache_data.items():
            assert cache.set(key, value) is True

        for key, expected_value in sample_cache_data.items():
            assert cache.get(key, "MISSING") == expected_value

    def test_get_missing_returns_default(self, cache: LocalCacheAdapter) -> None:
        assert cache.get("absent") is None
        assert cache.get("absent", "fallback") == "fallback"

    def test_get_empty_key_returns_default(self, cache: LocalCacheAdapter) -> None:
        cache.set("", "value")

        assert cache.get("", "fallback") == "fallback"
        assert cache.has("") is False

    def test_get_corrupt_file_returns_default(self, cache: LocalCacheAdapter) -> None:
        cache.file_path("broken").write_bytes(b"\x00garbage")

        assert cache.get("broken", "fallback") == "fallback"
        assert cache.has("broken") is False

    def test_get_malformed_entry_returns_default(self, cache: LocalCacheAdapter) -> None:
        cache.file_path("odd").write_bytes(codec.encode(["not", "an", "entry"]))

        assert cache.get("odd", "fallback") == "fallback"

    def test_entry_persists_key_and_timestamps(self, cache: LocalCacheAdapter, clock: Any) -> None:
        cache.set("typecho_a", [1, 2], 30)

        payload = codec.decode(cache.file_path("typecho_a").read_bytes()).value
        entry = CacheEntry.from_payload(payload)

        assert entry is not None
        assert entry.key == "typecho_a"
        assert entry.value == [1, 2]
        assert entry.created_at == clock.now
        assert entry.expire_at == clock.now + 30

    def test_no_expiry_is_stored_as_zero(self, cache: LocalCacheAdapter) -> None:
        cache.set("forever", 1, 0)

        payload = codec.decode(cache.file_path("forever").read_bytes()).value
        assert payload["expire_at"] == 0

    def test_overwrite_existing_key(self, cache: LocalCacheAdapter) -> None:
        cache.set("key", "old")
        cache.set("key", "new")

        assert cache.get("key") == "new"
        assert len(list(Path(cache.cache_dir).iterdir())) == 1

    def test_expiry(self, cache: LocalCacheAdapter, clock: Any) -> None:
        cache.set("temp", "value", 1)

        assert cache.get("temp") == "value"
        assert cache.has("temp") is True

        clock.advance(2)

        assert cache.has("temp") is False
        assert cache.get("temp", "gone") == "gone"
        assert not cache.file_path("temp").exists()

    def test_expired_entry_removed_on_get(self, cache: LocalCacheAdapter, clock: Any) -> None:
        cache.set("temp", "value", 5)
        clock.advance(10)

        assert cache.get("temp") is None
        assert not cache.file_path("temp").exists()

    def test_delete(self, cache: LocalCacheAdapter) -> None:
        cache.set("key1", "value1")
        assert cache.has("key1") is True

        assert cache.delete("key1") is True
        assert cache.has("key1") is False
        assert cache.get("key1") is None

    def test_delete_absent_key_succeeds(self, cache: LocalCacheAdapter) -> None:
        assert cache.delete("never-set") is True

    def test_flush_without_prefix_removes_everything(self, cache: LocalCacheAdapter) -> None:
        cache.set("a_1", 1)
        cache.set("b_1", 2)

        assert cache.flush() is True

        assert cache.get("a_1") is None
        assert cache.get("b_1") is None
        assert list(Path(cache.cache_dir).glob("*.cache")) == []

    def test_flush_with_prefix_only_removes_matching(self, cache: LocalCacheAdapter) -> None:
        cache.set("app_one", 1)
        cache.set("app_two", 2)
        cache.set("other_one", 3)

        assert cache.flush("app_") is True

        assert cache.has("app_one") is False
        assert cache.has("app_two") is False
        assert cache.get("other_one") == 3

    def test_flush_with_prefix_keeps_undecodable_files(self, cache: LocalCacheAdapter) -> None:
        stray = cache.file_path("stray")
        stray.write_bytes(b"junk")

        assert cache.flush("app_") is True
        assert stray.exists()

    def test_flush_ignores_other_extensions(self, cache: LocalCacheAdapter) -> None:
        other = Path(cache.cache_dir) / "keep.txt"
        other.write_text("keep me")
        cache.set("key", "value")

        cache.flush()

        assert other.exists()

    def test_flush_and_gc_skip_orphaned_temp_files(self, temp_cache_dir: str, clock: Any) -> None:
        adapter = LocalCacheAdapter(clock=clock)
        adapter.connect(LocalCacheConfig(path=temp_cache_dir, extension="part"))
        orphan = Path(temp_cache_dir) / ".tmp-leftover.part"
        orphan.write_bytes(codec.encode(CacheEntry("typecho_x", 1, 0, expire_at=1).to_payload()))
        adapter.set("typecho_key", "value")

        assert orphan not in adapter._list_files()
        assert adapter.gc() is True
        assert adapter.flush("typecho_") is True

        assert orphan.exists()
        assert not adapter.file_path("typecho_key").exists()

    @pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
    def test_entry_files_follow_umask(self, temp_cache_dir: str) -> None:
        previous = os.umask(0o022)
        try:
            adapter = LocalCacheAdapter()
            adapter.connect(LocalCacheConfig(path=temp_cache_dir))
            adapter.set("key", "value")
        finally:
            os.umask(previous)

        assert stat.S_IMODE(adapter.file_path("key").stat().st_mode) == 0o644

    def test_gc_removes_only_expired(self, cache: LocalCacheAdapter, clock: Any) -> None:
        cache.set("forever", 1, 0)
        cache.set("short", 2, 5)
        cache.set("long", 3, 500)

        clock.advance(10)

        assert cache.gc() is True
        assert cache.file_path("forever").exists()
        assert not cache.file_path("short").exists()
        assert cache.file_path("long").exists()
        assert cache.get("long") == 3

    def test_set_unpicklable_value_returns_false(self, cache: LocalCacheAdapter) -> None:
        assert cache.set("bad", lambda: None) is False
        assert not cache.file_path("bad").exists()

    def test_close_is_noop(self, cache: LocalCacheAdapter) -> None:
        cache.set("key", "value")

        assert cache.close() is True
        assert cache.close() is True
        assert cache.get("key") == "value"
