"""
cachefront - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config
from .schemas import (
    DEFAULT_PREFIX,
    BaseCacheConfig,
    CacheBackend,
    CacheSettings,
    LocalCacheConfig,
    RedisCacheConfig,
    ValkeyCacheConfig,
    config_model_for,
)

__all__ = [
    "DEFAULT_PREFIX",
    "BaseCacheConfig",
    "CacheBackend",
    "CacheSettings",
    "LocalCacheConfig",
    "RedisCacheConfig",
    "ValkeyCacheConfig",
    "config_model_for",
    "get_config",
    "load_config",
    "reload_config",
]
