"""
cachefront - Redis Cache Backend

Synchronous Redis cache implementation with:
- Pickle serialization for values (see cache.codec)
- Native per-key TTL (SET ... EX)
- Prefix-scoped flush via SCAN + DEL in batches

Requires: redis>=5.0

Example:
    adapter = RedisCacheAdapter()
    adapter.connect(RedisCacheConfig(host="localhost", port=6379))
    adapter.set("typecho_greeting", {"msg": "hello"}, 60)
    adapter.get("typecho_greeting")
"""

from __future__ import annotations

import logging
from typing import Any

from ...config.schemas import RedisCacheConfig
from ...errors import CacheConnectionError, CacheSerializationError
from .. import codec
from ..interface import NOT_CONNECTED, CacheAdapter, CacheResult
from .keyspace import DELETE_BATCH_SIZE, prefix_pattern

logger = logging.getLogger(__name__)

try:
    import redis
    from redis.exceptions import AuthenticationError, RedisError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis client is required but not installed. "
        "Install with: pip install 'redis>=5.0.0' or add 'redis' to your dependencies."
    ) from e


class RedisCacheAdapter(CacheAdapter):
    """
    Redis cache backend over a single redis-py connection.

    Notes:
    - connect() opens the connection eagerly with PING; AUTH and SELECT are
      performed by the client during that handshake.
    - No reconnect is attempted after close().
    """

    name = "redis"

    def __init__(self, client: redis.Redis | None = None) -> None:
        """
        Initialize the adapter.

        Args:
            client: Optional pre-built client (testing or DI); connect() then
                only verifies it with PING.
        """
        super().__init__()
        self._client = client

    @property
    def client(self) -> redis.Redis | None:
        """Underlying redis-py client for operations outside the cache contract."""
        return self._client

    # ------------ Lifecycle ------------

    def connect(self, config: RedisCacheConfig) -> None:
        if self._connected:
            return

        owns_client = self._client is None
        try:
            # single_connection_client connects (AUTH, SELECT) in the constructor
            if owns_client:
                self._client = redis.Redis(
                    host=config.host,
                    port=config.port,
                    db=config.db,
                    password=config.password or None,
                    socket_timeout=config.timeout or None,
                    socket_connect_timeout=config.timeout or None,
                    single_connection_client=True,
                )
            self._client.ping()
        except AuthenticationError as e:
            self._discard_client(owns_client)
            logger.error(
                "Redis authentication rejected for %s:%s",
                config.host,
                config.port,
                extra={"host": config.host, "port": config.port, "db": config.db},
            )
            raise CacheConnectionError(
                f"Redis authentication rejected: {e}",
                details={"host": config.host, "port": config.port},
            ) from e
        except Exception as e:
            self._discard_client(owns_client)
            logger.error(
                "Failed to connect to Redis at %s:%s: %s",
                config.host,
                config.port,
                e,
                extra={"host": config.host, "port": config.port, "error": str(e)},
            )
            raise CacheConnectionError(
                f"Cannot connect to Redis server: {e}",
                details={"host": config.host, "port": config.port, "error": str(e)},
            ) from e

        self._connected = True
        logger.info(
            "Connected to Redis at %s:%s (db %s)",
            config.host,
            config.port,
            config.db,
            extra={"host": config.host, "port": config.port, "db": config.db},
        )

    def _discard_client(self, owns_client: bool) -> None:
        """Drop a client built by a failed connect(); injected clients are left alone."""
        if not owns_client or self._client is None:
            return
        try:
            self._client.close()
        except RedisError as e:
            logger.debug("Error closing Redis client after failed connect: %s", e, extra={"error": str(e)})
        self._client = None

    def close(self) -> bool:
        if not self._connected:
            return True
        self._connected = False
        try:
            self._client.close()
        except RedisError as e:
            logger.warning("Error closing Redis client: %s", e, extra={"error": str(e)})
            return False
        logger.info("Closed Redis cache backend")
        return True

    # ------------ Primitives ------------

    def fetch(self, key: str) -> CacheResult:
        if not key:
            return CacheResult.miss()
        if not self._connected:
            return NOT_CONNECTED

        try:
            raw = self._client.get(key)
        except RedisError as e:
            return CacheResult.failure(e)

        if raw is None:
            return CacheResult.miss()
        if raw == codec.FALSE_PAYLOAD:
            return CacheResult.hit(False)

        decoded = codec.decode(raw)
        if not decoded.ok:
            return CacheResult.miss()
        return CacheResult.hit(decoded.value)

    def store(self, key: str, value: Any, expire: int = 0) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        try:
            payload = codec.encode(value)
            if expire > 0:
                done = self._client.set(key, payload, ex=expire)
            else:
                done = self._client.set(key, payload)
        except (CacheSerializationError, RedisError) as e:
            return CacheResult.failure(e)

        return CacheResult.success() if done else CacheResult.failure("SET was not acknowledged")

    def remove(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        try:
            deleted = self._client.delete(key)
        except RedisError as e:
            return CacheResult.failure(e)
        return CacheResult.success() if deleted else CacheResult.miss()

    def contains(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        try:
            found = self._client.exists(key)
        except RedisError as e:
            return CacheResult.failure(e)
        return CacheResult.hit() if found else CacheResult.miss()

    def purge(self, prefix: str = "") -> CacheResult:
        # Global flush is never allowed through the cache layer
        if not prefix:
            return CacheResult.failure("refusing to flush without a key prefix")
        if not self._connected:
            return NOT_CONNECTED

        try:
            keys = list(self._client.scan_iter(match=prefix_pattern(prefix), count=DELETE_BATCH_SIZE))
            deleted = 0
            for i in range(0, len(keys), DELETE_BATCH_SIZE):
                deleted += int(self._client.delete(*keys[i : i + DELETE_BATCH_SIZE]))
        except RedisError as e:
            return CacheResult.failure(e)

        logger.info("Flushed %d Redis key(s) with prefix '%s'", deleted, prefix, extra={"prefix": prefix})
        return CacheResult.success()
