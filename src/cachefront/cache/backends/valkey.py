"""
cachefront - Valkey Cache Backend

Valkey cache implementation configured by connection URI.

Same behavior as the Redis backend, built over valkey-py. Client replies are
unwrapped through _payload() before they are interpreted, and every operation
checks the connection state first so a disconnected adapter answers with a
miss/False instead of raising.

Requires: valkey>=6.0
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote_plus

from ...config.schemas import ValkeyCacheConfig
from ...errors import CacheConnectionError, CacheSerializationError
from .. import codec
from ..interface import NOT_CONNECTED, CacheAdapter, CacheResult
from .keyspace import DELETE_BATCH_SIZE, prefix_pattern

logger = logging.getLogger(__name__)

try:
    import valkey
    from valkey.exceptions import ConnectionError as ValkeyConnectionError
    from valkey.exceptions import ValkeyError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Valkey client is required but not installed. "
        "Install with: pip install 'valkey>=6.0.0' or add 'valkey' to your dependencies."
    ) from e

OK_MARKER = "OK"


def _payload(response: Any) -> Any:
    """Unwrap a client reply into a plain value."""
    payload = getattr(response, "payload", response)
    if isinstance(payload, bytes):
        return payload.decode("utf-8", errors="replace")
    return payload


class ValkeyCacheAdapter(CacheAdapter):
    """Valkey cache backend over a URI-configured valkey-py client."""

    name = "valkey"

    def __init__(self, client: valkey.Valkey | None = None) -> None:
        super().__init__()
        self._client = client

    @property
    def client(self) -> valkey.Valkey | None:
        """Underlying valkey-py client. Using it ties the call site to Valkey."""
        return self._client

    def is_connected(self) -> bool:
        return self._connected

    @staticmethod
    def build_uri(config: ValkeyCacheConfig) -> str:
        """
        Connection URI for a config.

        A configured uri is returned verbatim; otherwise one is assembled as
        scheme://[default:password@]host:port[/db].
        """
        if config.uri:
            return config.uri

        uri = f"{config.scheme}://"
        if config.password:
            uri += f"default:{quote_plus(config.password)}@"
        uri += f"{config.host}:{config.port}"
        if config.db > 0:
            uri += f"/{config.db}"
        return uri

    # ------------ Lifecycle ------------

    def connect(self, config: ValkeyCacheConfig) -> None:
        if self._connected:
            return

        owns_client = self._client is None
        try:
            if owns_client:
                options: dict[str, Any] = {}
                if config.timeout > 0:
                    options["socket_timeout"] = config.timeout
                    options["socket_connect_timeout"] = config.timeout
                self._client = valkey.Valkey.from_url(self.build_uri(config), **options)

            self._client.ping()
        except ValkeyConnectionError as e:
            self._discard_client(owns_client)
            self._connected = False
            logger.error(
                "Failed to connect to Valkey at %s:%s: %s",
                config.host,
                config.port,
                e,
                extra={"host": config.host, "port": config.port, "uri_configured": bool(config.uri)},
            )
            raise CacheConnectionError(
                f"Valkey connection failed: {e}",
                details={"host": config.host, "port": config.port, "error": str(e)},
            ) from e
        except Exception as e:
            self._discard_client(owns_client)
            self._connected = False
            logger.error(
                "Valkey connection failed: %s",
                e,
                extra={"host": config.host, "port": config.port, "error": str(e)},
                exc_info=True,
            )
            raise CacheConnectionError(
                f"Valkey connection failed: {e}",
                details={"host": config.host, "port": config.port, "error": str(e)},
            ) from e

        self._connected = True
        logger.info("Connected to Valkey", extra={"host": config.host, "port": config.port, "db": config.db})

    def _discard_client(self, owns_client: bool) -> None:
        """Drop a client built by a failed connect(); injected clients are left alone."""
        if not owns_client or self._client is None:
            return
        try:
            self._client.close()
        except ValkeyError as e:
            logger.debug("Error closing Valkey client after failed connect: %s", e, extra={"error": str(e)})
        self._client = None

    def close(self) -> bool:
        if not self._connected:
            return True
        self._connected = False
        try:
            if self._client is not None:
                self._client.close()
        except Exception as e:
            logger.warning("Error closing Valkey client: %s", e, extra={"error": str(e)})
            return False
        logger.info("Closed Valkey cache backend")
        return True

    # ------------ Primitives ------------

    def fetch(self, key: str) -> CacheResult:
        if not key:
            return CacheResult.miss()
        if not self._connected:
            return NOT_CONNECTED

        try:
            raw = self._client.get(key)
        except ValkeyError as e:
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
                reply = _payload(self._client.setex(key, expire, payload))
            else:
                reply = _payload(self._client.set(key, payload))
        except (CacheSerializationError, ValkeyError) as e:
            return CacheResult.failure(e)

        if reply is True or reply == OK_MARKER:
            return CacheResult.success()
        return CacheResult.failure(f"unexpected SET reply: {reply!r}")

    def remove(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        try:
            deleted = _payload(self._client.delete(key))
        except ValkeyError as e:
            return CacheResult.failure(e)
        return CacheResult.success() if deleted > 0 else CacheResult.miss()

    def contains(self, key: str) -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED

        try:
            found = _payload(self._client.exists(key))
        except ValkeyError as e:
            return CacheResult.failure(e)
        return CacheResult.hit() if found > 0 else CacheResult.miss()

    def purge(self, prefix: str = "") -> CacheResult:
        if not self._connected:
            return NOT_CONNECTED
        if not prefix:
            return CacheResult.failure("refusing to flush without a key prefix")

        try:
            keys = list(self._client.scan_iter(match=prefix_pattern(prefix), count=DELETE_BATCH_SIZE))
            deleted = 0
            for i in range(0, len(keys), DELETE_BATCH_SIZE):
                deleted += _payload(self._client.delete(*keys[i : i + DELETE_BATCH_SIZE]))
        except ValkeyError as e:
            return CacheResult.failure(e)

        logger.info("Flushed %d Valkey key(s) with prefix '%s'", deleted, prefix, extra={"prefix": prefix})
        return CacheResult.success()
