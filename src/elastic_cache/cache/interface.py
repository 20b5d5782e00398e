"""
Elastic Cache - Cache Interface

Defines the abstract interface a pluggable cache backend must implement.
"""

from abc import ABC, abstractmethod
from typing import Any


class CacheInterface(ABC):
    """
    Abstract base class for cache backends.

    Lookups raise rather than return sentinels: a missing key raises
    CacheNotFoundError, a stale key raises CacheExpiredError, and a backend
    failure raises CacheOperationError. ``is_valid`` folds all of these
    into a boolean.
    """

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value, fully replacing any previous entry under the key.

        Args:
            key: Cache key
            value: Opaque string payload

        Raises:
            CacheSerializationError: If the entry cannot be encoded
            CacheOperationError: If the backend write fails
        """

    @abstractmethod
    async def get(self, key: str) -> str:
        """
        Retrieve the value stored under a key.

        Args:
            key: Cache key

        Returns:
            The stored value

        Raises:
            CacheNotFoundError: If no entry exists
            CacheExpiredError: If the entry is past its age limit
            CacheOperationError: If the backend lookup fails
        """

    @abstractmethod
    async def is_valid(self, key: str) -> bool:
        """
        Check whether a key holds a live, non-empty value.

        Args:
            key: Cache key

        Returns:
            True if ``get`` would succeed with a non-empty value
        """

    @abstractmethod
    async def clear(self, key: str) -> None:
        """Remove the entry stored under a key."""

    @abstractmethod
    async def clear_prefix(self, prefix: str) -> None:
        """Remove every entry whose key starts with ``prefix``."""

    @abstractmethod
    async def clear_all(self) -> None:
        """Remove every entry."""

    @abstractmethod
    async def ensure_index(self) -> bool:
        """
        Prepare backend storage before first use.

        Returns:
            True if storage was created by this call
        """

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, expired, ...)
        """

    @abstractmethod
    async def close(self) -> None:
        """
        Close the cache backend and release resources.

        Should be called during graceful shutdown.
        """
