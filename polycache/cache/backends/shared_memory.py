"""
polycache — Shared-Memory Backend

Cache shared by every process on the host that opens the same directory.
Storage is a diskcache.Cache: SQLite with memory-mapped pages, so reads from
concurrent processes hit shared memory rather than the file system.

Notes:
- TTL 0 means the entry never expires; a negative TTL writes an entry that is
  already expired.
- Expiry is enforced by the store itself on read and culled on write.
- clear() empties the whole shared store, not just the keys this cache wrote.

Requires: diskcache>=5.6

Example:
    backend = SharedMemoryBackend(directory="/dev/shm/polycache")
    backend.raw_set("greeting", {"msg": "hello"}, 60)
    value, found = backend.raw_get("greeting")
"""

from __future__ import annotations

import logging
import pickle
import sqlite3
from typing import Any

from ...errors import BackendFailureError, InvalidKeyError
from ..interface import BackendAdapter
from ..keys import find_forbidden_character

logger = logging.getLogger(__name__)

try:
    import diskcache
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "diskcache is required for the shared-memory backend but is not installed. "
        "Install with: pip install 'diskcache>=5.6'"
    ) from e

_MISSING = object()

# Errors diskcache surfaces when the shared store cannot be read or written
_STORE_ERRORS = (sqlite3.Error, OSError, diskcache.Timeout)

# Raised while pickling a value the store cannot hold
_PICKLE_ERRORS = (TypeError, pickle.PicklingError, AttributeError)


class SharedMemoryBackend(BackendAdapter):
    """
    Shared-memory cache backend on top of diskcache.

    Entries are pickled by the store, so values come back as independent copies.
    """

    name = "shared_memory"

    def __init__(
        self,
        directory: str | None = None,
        timeout: float = 60.0,
        store: Any | None = None,
    ) -> None:
        """
        Initialize shared-memory cache backend.

        Args:
            directory: Directory backing the shared store (a temp dir when None)
            timeout: SQLite busy timeout in seconds
            store: Pre-built diskcache.Cache to use instead of opening one

        Raises:
            BackendFailureError: If the store cannot be opened
        """
        if store is not None:
            self._store = store
        else:
            try:
                self._store = diskcache.Cache(directory=directory, timeout=timeout)
            except _STORE_ERRORS as e:
                logger.error(
                    "Failed to open shared-memory cache at %s: %s",
                    directory,
                    e,
                    extra={"directory": directory, "error": str(e)},
                )
                raise BackendFailureError(
                    self.name,
                    f"Failed to open shared-memory cache: {e}",
                    {"directory": directory},
                ) from e

        self.directory = self._store.directory
        logger.debug("Shared-memory cache opened at %s", self.directory)

    def _failure(self, operation: str, key: str | None, error: Exception) -> BackendFailureError:
        logger.error(
            "Shared-memory cache %s failed for key '%s': %s",
            operation,
            key,
            error,
            extra={"operation": operation, "key": key, "directory": self.directory, "error": str(error)},
        )
        return BackendFailureError(
            self.name,
            f"Shared-memory cache {operation} failed: {error}",
            {"operation": operation, "key": key},
        )

    def raw_get(self, key: str) -> tuple[Any, bool]:
        """Fetch a value with a found flag."""
        try:
            value = self._store.get(key, default=_MISSING)
        except _STORE_ERRORS as e:
            raise self._failure("get", key, e) from e

        if value is _MISSING:
            return None, False
        return value, True

    def raw_set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Store a value; 0 never expires."""
        # Checked again here for callers that reach the backend directly
        char = find_forbidden_character(key)
        if char is not None:
            raise InvalidKeyError(key, character=char)

        expire = None if ttl_seconds == 0 else ttl_seconds
        try:
            return bool(self._store.set(key, value, expire=expire))
        except _STORE_ERRORS as e:
            raise self._failure("set", key, e) from e
        except _PICKLE_ERRORS as e:
            logger.error(
                "Failed to serialize value for key '%s': %s",
                key,
                e,
                extra={"key": key, "value_type": type(value).__name__, "error": str(e)},
            )
            return False

    def raw_delete(self, key: str) -> None:
        """Delete a key."""
        try:
            self._store.delete(key)
        except _STORE_ERRORS as e:
            raise self._failure("delete", key, e) from e

    def raw_exists(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        try:
            return key in self._store
        except _STORE_ERRORS as e:
            raise self._failure("exists", key, e) from e

    def raw_clear(self) -> None:
        """
        Clear the entire shared store.

        Every process and every cache instance opened on the same directory
        loses all of its entries.
        """
        try:
            removed = self._store.clear()
        except _STORE_ERRORS as e:
            raise self._failure("clear", None, e) from e
        logger.info(
            "Cleared %s entries from shared-memory cache at %s",
            removed,
            self.directory,
            extra={"backend": self.name, "directory": self.directory},
        )

    def get_stats(self) -> dict[str, Any]:
        """Return store size and location."""
        stats: dict[str, Any] = {"backend": self.name, "directory": self.directory}
        try:
            stats["size"] = len(self._store)
            stats["volume_bytes"] = self._store.volume()
        except _STORE_ERRORS as e:
            logger.warning("Failed to read shared-memory cache stats: %s", e, extra={"error": str(e)})
        return stats

    def close(self) -> None:
        """Close this process's handle on the shared store."""
        self._store.close()
        logger.debug("Shared-memory cache closed at %s", self.directory)
