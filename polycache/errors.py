"""
polycache — Core Error Types

Defines the exception hierarchy for the cache abstraction.
All exceptions inherit from PolycacheError for consistent error handling.

Taxonomy:
- InvalidArgumentError / InvalidKeyError: caller input rejected by the facade
  before any backend is touched
- BackendFailureError: the storage medium is unavailable or reported failure
- ConfigurationError: invalid or missing configuration
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for structured error reporting."""

    # Input validation errors
    INVALID_KEY = "INVALID_KEY"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Backend errors
    BACKEND_FAILURE = "BACKEND_FAILURE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PolycacheError(Exception):
    """Base exception for all polycache errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for logs or API responses."""
        return {
            "error": self.__class__.__name__,
            "error_code": extract_error_code(self).value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PolycacheError):
    """Raised when configuration is invalid or missing."""

    pass


class CacheError(PolycacheError):
    """Base exception for cache-related errors."""

    pass


class InvalidArgumentError(CacheError):
    """Raised when an argument passed to a cache operation is unusable."""

    pass


class InvalidKeyError(InvalidArgumentError):
    """Raised when a key is empty, not a string, or contains a forbidden character."""

    def __init__(self, key: Any, character: str | None = None, message: str | None = None):
        if message is None:
            if character is not None:
                message = f"Invalid character found in the key: {character}"
            else:
                message = "Invalid key: key length is 0"
        super().__init__(message, {"key": key, "character": character})
        self.key = key
        self.character = character


class InvalidKeysError(InvalidArgumentError):
    """Raised when a bulk operation receives keys it cannot iterate over."""

    def __init__(self, keys: Any):
        super().__init__("Cannot iterate over keys", {"type": type(keys).__name__})


class InvalidValuesError(InvalidArgumentError):
    """Raised when a bulk write receives something other than a key/value mapping."""

    def __init__(self, values: Any):
        super().__init__("Cannot iterate over values", {"type": type(values).__name__})


class BackendFailureError(CacheError):
    """Raised when a cache backend is unavailable or fails an operation."""

    def __init__(self, backend: str, message: str, details: dict[str, Any] | None = None):
        error_details = {"backend": backend}
        error_details.update(details or {})
        super().__init__(message, error_details)
        self.backend = backend


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, InvalidKeyError):
        return ErrorCode.INVALID_KEY

    if isinstance(error, InvalidArgumentError):
        return ErrorCode.INVALID_ARGUMENT

    if isinstance(error, BackendFailureError):
        return ErrorCode.BACKEND_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR
