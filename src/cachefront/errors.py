"""
cachefront - Core Error Types

Defines the exception hierarchy for the cache layer.
All exceptions inherit from CacheFrontError for consistent error handling.

Two tiers:
- Configuration and connection errors are raised at construction/connect time.
- Per-key operation failures are never raised; adapters report them through
  CacheResult and the public API flattens them into a default/False.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for structured error reporting."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    INITIALIZATION_FAILED = "INITIALIZATION_FAILED"
    NOT_INITIALIZED = "NOT_INITIALIZED"
    SERIALIZATION_FAILED = "SERIALIZATION_FAILED"
    CACHE_FAILURE = "CACHE_FAILURE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class CacheFrontError(Exception):
    """Base exception for all cachefront errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a plain dictionary."""
        return {
            "error": self.__class__.__name__,
            "code": extract_error_code(self).value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(CacheFrontError):
    """Raised when configuration is invalid, missing or names an unusable backend."""


class CacheError(CacheFrontError):
    """Base exception for cache-related errors."""


class CacheConnectionError(CacheError):
    """Raised when a cache backend cannot be connected to."""


class CacheInitializationError(CacheConnectionError):
    """Raised when a local cache directory cannot be created or written."""


class NotInitializedError(CacheError):
    """Raised when the default cache is requested before one was registered."""

    def __init__(self, message: str = "Cache is not initialized"):
        super().__init__(message)


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded for storage."""


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        ErrorCode for the exception
    """
    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    if isinstance(error, CacheInitializationError):
        return ErrorCode.INITIALIZATION_FAILED

    if isinstance(error, CacheConnectionError):
        return ErrorCode.CONNECTION_FAILED

    if isinstance(error, NotInitializedError):
        return ErrorCode.NOT_INITIALIZED

    if isinstance(error, CacheSerializationError):
        return ErrorCode.SERIALIZATION_FAILED

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    return ErrorCode.UNKNOWN_ERROR
