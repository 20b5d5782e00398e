"""
Elastic Cache - Error Types

Defines the exception hierarchy for the Elasticsearch-backed cache.
All exceptions inherit from ElasticCacheError for consistent error handling.

Lookup outcomes are kept distinct so callers can tell apart:
- CacheNotFoundError: the key does not exist
- CacheExpiredError: the key exists but is past its age limit
- CacheOperationError: the backend could not be asked (query or transport failure)
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes attached to structured log records."""

    CACHE_MISS = "CACHE_MISS"
    CACHE_EXPIRED = "CACHE_EXPIRED"
    CACHE_SERIALIZATION = "CACHE_SERIALIZATION"
    CACHE_QUERY_FAILED = "CACHE_QUERY_FAILED"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    CACHE_FAILURE = "CACHE_FAILURE"


class ElasticCacheError(Exception):
    """Base exception for all Elastic Cache errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code


class ConfigurationError(ElasticCacheError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class CacheError(ElasticCacheError):
    """Base exception for cache-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, status_code: int = 500):
        super().__init__(message, details, status_code=status_code)


class CacheNotFoundError(CacheError):
    """Raised when no document exists for the requested key."""

    def __init__(self, key: str):
        super().__init__("Not found", {"key": key}, status_code=404)
        self.key = key


class CacheExpiredError(CacheError):
    """Raised when a document exists but is older than the configured age limit."""

    def __init__(self, key: str, age_seconds: float | None = None):
        details: dict[str, Any] = {"key": key}
        if age_seconds is not None:
            details["age_seconds"] = age_seconds
        super().__init__("Cache expired", details, status_code=404)
        self.key = key


class CacheSerializationError(CacheError):
    """Raised when an entry cannot be encoded to, or decoded from, a document."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class CacheOperationError(CacheError):
    """Raised when a backend operation fails."""

    pass


class CacheQueryError(CacheOperationError):
    """Raised when Elasticsearch rejects a request with a structured error."""

    def __init__(
        self,
        status: int | str,
        error_type: str | None = None,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        message = f"[{status}] {error_type}: {reason}"
        error_details = details or {}
        error_details.update({"status": status, "type": error_type, "reason": reason})
        super().__init__(message, error_details, status_code=status if isinstance(status, int) else 502)
        self.error_type = error_type
        self.reason = reason


class CacheConnectionError(CacheOperationError):
    """Raised when the cache backend cannot be reached."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None):
        message = f"Failed to connect to cache backend: {backend}"
        super().__init__(message, details, status_code=503)


def extract_error_code(error: CacheError) -> ErrorCode:
    """
    Map a cache error to its ErrorCode.

    Args:
        error: Cache error to categorize

    Returns:
        Matching ErrorCode, CACHE_FAILURE for other backend failures
    """
    if isinstance(error, CacheNotFoundError):
        return ErrorCode.CACHE_MISS

    if isinstance(error, CacheExpiredError):
        return ErrorCode.CACHE_EXPIRED

    if isinstance(error, CacheSerializationError):
        return ErrorCode.CACHE_SERIALIZATION

    if isinstance(error, CacheQueryError):
        return ErrorCode.CACHE_QUERY_FAILED

    if isinstance(error, CacheConnectionError):
        return ErrorCode.CACHE_UNAVAILABLE

    return ErrorCode.CACHE_FAILURE
