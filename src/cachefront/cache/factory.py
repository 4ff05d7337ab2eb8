"""
cachefront - Adapter Factory

Maps a backend selector to a concrete adapter class.

Key points:
- The set of backends is closed (CacheBackend enum); every member has an
  adapter implementing the full CacheAdapter contract.
- Local is imported eagerly; Redis and Valkey are imported on selection so
  their client libraries are only needed when used.
- A missing client library is a configuration error, not a connection error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from ..config.schemas import BaseCacheConfig, CacheBackend, config_model_for
from ..errors import ConfigurationError
from .backends.local import LocalCacheAdapter
from .interface import CacheAdapter

logger = logging.getLogger(__name__)

# Distribution that provides each backend's native client
_REQUIRED_PACKAGES: dict[CacheBackend, str] = {
    CacheBackend.REDIS: "redis>=5.0.0",
    CacheBackend.VALKEY: "valkey>=6.0.0",
}


def parse_backend(backend: str | CacheBackend) -> CacheBackend:
    """
    Resolve a selector name such as "Redis" or "local" to a CacheBackend.

    Raises:
        ConfigurationError: If the name is not a known backend
    """
    if isinstance(backend, CacheBackend):
        return backend
    try:
        return CacheBackend(backend)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown cache backend: {backend}",
            details={"backend": str(backend), "supported": [b.value for b in CacheBackend]},
        ) from e


def _import_redis_adapter() -> type[CacheAdapter]:
    from .backends.redis import RedisCacheAdapter

    return RedisCacheAdapter


def _import_valkey_adapter() -> type[CacheAdapter]:
    from .backends.valkey import ValkeyCacheAdapter

    return ValkeyCacheAdapter


def resolve_adapter(backend: str | CacheBackend) -> type[CacheAdapter]:
    """
    Return the adapter class for a backend.

    Raises:
        ConfigurationError: If the backend is unknown or its client library is unavailable
    """
    selected = parse_backend(backend)

    if selected is CacheBackend.LOCAL:
        return LocalCacheAdapter

    try:
        if selected is CacheBackend.REDIS:
            return _import_redis_adapter()
        if selected is CacheBackend.VALKEY:
            return _import_valkey_adapter()
    except ImportError as e:
        package = _REQUIRED_PACKAGES[selected]
        logger.error(
            "%s backend selected but its client is not installed",
            selected.value,
            extra={"package": package, "error": str(e)},
        )
        raise ConfigurationError(
            f"{selected.value} backend selected but its client is unavailable. "
            f"Install with: pip install '{package}'",
            details={"package": package, "error": str(e), "backend": selected.value},
        ) from e

    raise ConfigurationError(  # pragma: no cover
        f"No adapter registered for backend: {selected.value}",
        details={"backend": selected.value},
    )


def build_config(backend: CacheBackend, config: Mapping[str, Any] | BaseModel | None) -> BaseCacheConfig:
    """
    Validate a configuration bundle into the backend's config model.

    Raises:
        ConfigurationError: If the bundle is empty or invalid
    """
    model = config_model_for(backend)

    if isinstance(config, model):
        return config
    if isinstance(config, BaseModel):
        config = config.model_dump()

    if not config:
        raise ConfigurationError(
            "Cache configuration is required",
            details={"backend": backend.value},
        )

    try:
        return model.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid {backend.value} cache configuration",
            details={"backend": backend.value, "validation_errors": e.errors(include_input=False)},
        ) from e


def create_adapter(backend: str | CacheBackend) -> CacheAdapter:
    """Instantiate an unconnected adapter for a backend."""
    return resolve_adapter(backend)()
