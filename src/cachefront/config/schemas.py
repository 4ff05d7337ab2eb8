"""
cachefront - Configuration Schemas

Typed configuration models using Pydantic for validation and type safety.
One model per cache backend; a model is validated once at construction and
is immutable afterwards.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PREFIX = "typecho_"


class CacheBackend(str, Enum):
    """Supported cache backends."""

    LOCAL = "local"
    REDIS = "redis"
    VALKEY = "valkey"

    @classmethod
    def _missing_(cls, value: object) -> "CacheBackend | None":
        # Accept selector names regardless of case ("Redis", "LOCAL", ...)
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class BaseCacheConfig(BaseModel):
    """Options shared by every backend."""

    prefix: str = Field(default=DEFAULT_PREFIX, description="Key namespace prepended to every logical key")

    model_config = ConfigDict(frozen=True, extra="ignore")


class LocalCacheConfig(BaseCacheConfig):
    """File cache configuration."""

    path: str | None = Field(default=None, description="Cache directory (default: <cwd>/usr/cache)")
    extension: str = Field(default=".cache", description="Cache file suffix")

    @field_validator("extension")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Always store the extension with exactly one leading dot."""
        stripped = v.strip(".")
        if not stripped:
            raise ValueError("extension must not be empty")
        return "." + stripped


class RedisCacheConfig(BaseCacheConfig):
    """Redis connection configuration."""

    host: str = Field(description="Redis host")
    port: int = Field(ge=1, le=65535, description="Redis port")
    timeout: float = Field(default=0, ge=0, description="Socket timeout in seconds (0 = no timeout)")
    password: str | None = Field(default=None, description="AUTH password")
    db: int = Field(default=0, ge=0, description="Database index")


class ValkeyCacheConfig(BaseCacheConfig):
    """Valkey connection configuration, either a full URI or its components."""

    uri: str | None = Field(default=None, description="Full connection URI, used verbatim when set")
    scheme: str = Field(default="redis", description="URI scheme (redis or rediss)")
    host: str = Field(default="127.0.0.1", description="Valkey host")
    port: int = Field(default=6379, ge=1, le=65535, description="Valkey port")
    timeout: float = Field(default=0, ge=0, description="Socket timeout in seconds (0 = no timeout)")
    password: str | None = Field(default=None, description="Password for the default user")
    db: int = Field(default=0, ge=0, description="Database index")


_CONFIG_MODELS: dict[CacheBackend, type[BaseCacheConfig]] = {
    CacheBackend.LOCAL: LocalCacheConfig,
    CacheBackend.REDIS: RedisCacheConfig,
    CacheBackend.VALKEY: ValkeyCacheConfig,
}


def config_model_for(backend: CacheBackend) -> type[BaseCacheConfig]:
    """Return the configuration model class for a backend."""
    return _CONFIG_MODELS[backend]


class CacheSettings(BaseModel):
    """Root configuration: which backend to use and its raw options."""

    backend: CacheBackend = Field(default=CacheBackend.REDIS, description="Cache backend to use")
    options: dict[str, Any] = Field(default_factory=dict, description="Backend options")

    model_config = ConfigDict(frozen=True)
