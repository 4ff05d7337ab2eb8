"""
cachefront - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from redis import Redis


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_redis_db() -> int:
    """Redis database used for live tests (15 for isolation)."""
    return int(os.environ.get("TEST_REDIS_DB", "15"))


@pytest.fixture
def redis_client(test_redis_db: int) -> Generator[Redis, None, None]:
    """
    Create a Redis client for live testing.

    Automatically skips tests if Redis is not available.
    Clears the test database before and after each test.
    """
    client = Redis(host="localhost", port=6379, db=test_redis_db)

    try:
        client.ping()
    except Exception as e:
        client.close()
        pytest.skip(f"Redis not available for testing: {e}")

    client.flushdb()

    yield client

    try:
        client.flushdb()
    finally:
        client.close()


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample values for cache round-trip tests, falsy values included."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "false_value": False,
        "zero": 0,
        "none_value": None,
        "empty_string": "",
        "empty_list": [],
        "empty_dict": {},
        "tuple_value": (1, "two", 3.0),
        "set_value": {"a", "b"},
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
    }


@pytest.fixture(autouse=True)
def reset_default_cache() -> Generator[None, None, None]:
    """Reset the default cache holder after each test to prevent state leakage."""
    yield
    from cachefront.cache.facade import reset_default_cache

    reset_default_cache()


@pytest.fixture
def temp_cache_dir(tmp_path: Path) -> str:
    """Create a temporary directory for cache testing."""
    cache_dir = tmp_path / "cache"
    cache_dir.mkdir()
    return str(cache_dir)


@pytest.fixture
def clean_cache_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CACHE_* variables from the environment."""
    for name in list(os.environ):
        if name.startswith("CACHE_"):
            monkeypatch.delenv(name, raising=False)
