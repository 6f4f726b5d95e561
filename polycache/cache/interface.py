"""
polycache — Backend Interface

Defines the raw contract every storage backend implements. Backends take
already-validated keys and already-normalized TTLs; validation and default
handling live in the facade.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any


class BackendAdapter(ABC):
    """
    Abstract base class for cache backends.

    Runtime failures of the storage medium are raised as BackendFailureError.
    A miss is never an error: raw_get reports it through its found flag.
    """

    name: str = "abstract"

    @abstractmethod
    def raw_get(self, key: str) -> tuple[Any, bool]:
        """
        Retrieve a value.

        Args:
            key: Cache key

        Returns:
            (value, True) if found and not expired, (None, False) otherwise
        """
        pass

    @abstractmethod
    def raw_set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """
        Store a value.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Positive = seconds to live, 0 = no expiry, negative = already expired

        Returns:
            True if stored successfully, False otherwise
        """
        pass

    @abstractmethod
    def raw_delete(self, key: str) -> None:
        """Delete a key. Deleting an absent key is not an error."""
        pass

    @abstractmethod
    def raw_exists(self, key: str) -> bool:
        """Return True if the key exists and is not expired."""
        pass

    @abstractmethod
    def raw_clear(self) -> None:
        """Remove every entry in the backend's clear scope."""
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get backend statistics."""
        return {"backend": self.name}

    def close(self) -> None:
        """Release resources held by the backend."""
        pass

    def raw_get_many(self, keys: Sequence[str]) -> dict[str, Any] | None:
        """
        Retrieve multiple values.

        Default implementation calls raw_get() for each key.
        Backends can override for fewer round-trips.

        Args:
            keys: Cache keys

        Returns:
            Mapping of found keys to values (missing keys omitted), or None if
            the backend failed as a whole
        """
        result = {}
        for key in keys:
            value, found = self.raw_get(key)
            if found:
                result[key] = value
        return result

    def raw_set_many(self, items: Mapping[str, Any], ttl_seconds: int) -> bool:
        """
        Store multiple values with one TTL.

        Default implementation calls raw_set() for each item and keeps going
        after an individual failure, so a batch can be partially written.

        Returns:
            True if every item was stored
        """
        success = True
        for key, value in items.items():
            if not self.raw_set(key, value, ttl_seconds):
                success = False
        return success

    def raw_delete_many(self, keys: Sequence[str]) -> None:
        """
        Delete multiple keys.

        Default implementation calls raw_delete() for each key.
        """
        for key in keys:
            self.raw_delete(key)
