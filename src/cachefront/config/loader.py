"""
cachefront - Configuration Loader

Loads and validates cache configuration from environment variables and .env files.
Provides a singleton settings instance for the host process.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import CacheSettings

logger = logging.getLogger(__name__)

_config_instance: CacheSettings | None = None

# Environment variable -> option name
_ENV_OPTIONS: dict[str, str] = {
    "CACHE_PREFIX": "prefix",
    "CACHE_PATH": "path",
    "CACHE_EXTENSION": "extension",
    "CACHE_HOST": "host",
    "CACHE_PORT": "port",
    "CACHE_TIMEOUT": "timeout",
    "CACHE_PASSWORD": "password",
    "CACHE_DB": "db",
    "CACHE_URI": "uri",
    "CACHE_SCHEME": "scheme",
}


def _options_from_env() -> dict[str, Any]:
    """Collect the CACHE_* options that are actually set."""
    options: dict[str, Any] = {}
    for env_name, option in _ENV_OPTIONS.items():
        value = os.getenv(env_name)
        if value is not None and value != "":
            options[option] = value
    return options


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> CacheSettings:
    """
    Load cache settings from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in current directory)
        reload: Force reload even if settings already loaded

    Returns:
        Validated CacheSettings instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict: dict[str, Any] = {
        "backend": os.getenv("CACHE_BACKEND", "redis").strip().lower(),
        "options": _options_from_env(),
    }

    try:
        _config_instance = CacheSettings(**config_dict)
    except ValidationError as e:
        logger.error(
            "Cache configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors()},
        )
        raise ConfigurationError(
            "Cache configuration validation failed. Check your CACHE_* environment variables.",
            details={"validation_errors": e.errors()},
        ) from e

    logger.info(
        "Cache configuration loaded (backend: %s)",
        _config_instance.backend.value,
        extra={"backend": _config_instance.backend.value, "options": sorted(config_dict["options"])},
    )
    return _config_instance


def get_config() -> CacheSettings:
    """Get the current settings, loading them on first access."""
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> CacheSettings:
    """Force reload settings."""
    return load_config(env_file=env_file, reload=True)
