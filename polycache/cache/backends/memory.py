"""
polycache — In-Process Memory Backend

Dictionary-backed cache living in the current process. Its lifespan is the
owning object, or the caller's session when constructed with a CacheSession.

Values are deep-copied on the way in and on the way out, so mutating a
stored object or a returned object never changes what the cache holds.
Expiry is lazy: an expired entry stays in the dict until a read observes it.
"""

import copy
import logging
import time
from typing import Any

from ...errors import ConfigurationError
from ..interface import BackendAdapter
from ..session import CacheSession
from ..ttl import expiry_timestamp

logger = logging.getLogger(__name__)

SESSION_SLOT = "__LOCAL_MEMORY_CACHE__"


class InMemoryBackend(BackendAdapter):
    """
    In-process cache backend with lazy TTL expiry.

    Features:
    - Copy-on-write and copy-on-read of stored values
    - Per-key TTL checked when the entry is next read
    - Optional session-scoped storage shared by every cache on that session
    """

    name = "memory"

    def __init__(
        self,
        persist_in_session: bool = False,
        session: CacheSession | None = None,
    ):
        """
        Initialize memory cache backend.

        Args:
            persist_in_session: Keep entries in the session instead of this object
            session: Session handle; required when persist_in_session is True

        Raises:
            ConfigurationError: If session persistence is requested without a session
        """
        self.persist_in_session = persist_in_session

        # Cache storage: key -> (value, expiry_timestamp | None)
        self._store: dict[str, tuple[Any, float | None]]
        if persist_in_session:
            if session is None:
                raise ConfigurationError(
                    "persist_in_session requires a CacheSession",
                    details={"backend": self.name},
                )
            self._store = session.slot(SESSION_SLOT)
            logger.debug("Memory cache bound to session '%s'", session.session_id)
        else:
            self._store = {}

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._expirations = 0

    @staticmethod
    def _is_expired(expiry: float | None) -> bool:
        """Check if entry is expired."""
        if expiry is None:
            return False
        return time.time() >= expiry

    def _expire(self, key: str) -> None:
        del self._store[key]
        self._expirations += 1
        logger.debug("Expired key from memory cache: %s", key)

    def raw_get(self, key: str) -> tuple[Any, bool]:
        """Retrieve a copy of the stored value."""
        entry = self._store.get(key)
        if entry is None:
            self._misses += 1
            return None, False

        value, expiry = entry
        if self._is_expired(expiry):
            self._expire(key)
            self._misses += 1
            return None, False

        self._hits += 1
        return copy.deepcopy(value), True

    def raw_set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Store a copy of the value; values that cannot be copied are not stored."""
        try:
            stored = copy.deepcopy(value)
        except (TypeError, copy.Error) as e:
            logger.error(
                "Failed to copy value for key '%s': %s",
                key,
                e,
                extra={"key": key, "value_type": type(value).__name__, "error": str(e)},
            )
            return False

        self._store[key] = (stored, expiry_timestamp(ttl_seconds))
        self._sets += 1
        return True

    def raw_delete(self, key: str) -> None:
        """Delete key from cache."""
        if self._store.pop(key, None) is not None:
            self._deletes += 1

    def raw_exists(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        entry = self._store.get(key)
        if entry is None:
            return False

        if self._is_expired(entry[1]):
            self._expire(key)
            return False

        return True

    def raw_clear(self) -> None:
        """Clear all entries, keeping the session alias intact."""
        size = len(self._store)
        self._store.clear()
        logger.info("Cleared %d entries from memory cache", size, extra={"backend": self.name})

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "backend": self.name,
            "size": len(self._store),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
            "expirations": self._expirations,
            "persist_in_session": self.persist_in_session,
        }

    def close(self) -> None:
        """Close cache and release resources."""
        # Nothing to release; session-scoped data belongs to the session
        logger.debug("Memory cache backend closed")
