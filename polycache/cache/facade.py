"""
polycache — Cache Facade

The backend-independent cache contract. Every operation validates keys and
arguments before a backend is touched, normalizes TTLs, and maps backend
results onto the same default-value and error semantics whichever backend
is configured.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import TracebackType
from typing import Any

from ..errors import BackendFailureError, InvalidKeysError, InvalidValuesError, extract_error_code
from .interface import BackendAdapter
from .keys import create_key, create_key_from_sequence, validate_key
from .ttl import Ttl, normalize_ttl

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 86400  # one day


def _key_list(keys: Any) -> list[str]:
    # A str is iterable but is never a collection of keys
    if isinstance(keys, (str, bytes)) or not isinstance(keys, Iterable):
        raise InvalidKeysError(keys)
    return [validate_key(key) for key in keys]


class Cache:
    """
    Uniform cache over a single backend chosen at construction.

    Example:
        cache = Cache(InMemoryBackend(), default_ttl=3600)
        cache.set("user~1", {"name": "Ann"})
        cache.get("user~1")  # {'name': 'Ann'}
    """

    def __init__(
        self,
        backend: BackendAdapter,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        strict_bulk_get: bool = False,
    ):
        """
        Args:
            backend: Storage backend; every call is dispatched to it
            default_ttl: Seconds used when an operation gets no TTL (0 = never expire)
            strict_bulk_get: Raise BackendFailureError when get_multiple fails
                as a whole instead of returning an empty mapping
        """
        self._backend = backend
        self._default_ttl = default_ttl
        self.strict_bulk_get = strict_bulk_get

    @property
    def backend(self) -> BackendAdapter:
        return self._backend

    @property
    def default_ttl(self) -> int:
        return self._default_ttl

    # ------------ Keys ------------

    @staticmethod
    def create_key(*parts: Any) -> str:
        """Build a composite key; see keys.create_key."""
        return create_key(*parts)

    @staticmethod
    def create_key_from_sequence(parts: Iterable[Any]) -> str:
        """Join a flat sequence into a key; see keys.create_key_from_sequence."""
        return create_key_from_sequence(parts)

    # ------------ Single-key operations ------------

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get the value stored under ``key``.

        Returns:
            The value, or ``default`` if the key is absent or expired

        Raises:
            InvalidKeyError: If the key is invalid
            BackendFailureError: If the backend fails
        """
        value, found = self._backend.raw_get(validate_key(key))
        return value if found else default

    def set(self, key: str, value: Any, ttl: Ttl = None) -> bool:
        """
        Store ``value`` under ``key``.

        Args:
            key: Cache key
            value: Value to store
            ttl: Seconds to live (0 = persist indefinitely, negative = expire
                immediately), a timedelta/relativedelta, or None for the default

        Returns:
            True on success, False if the backend failed the write
            or could not store the value unchanged (uncopyable or unpicklable
            objects; on the remote backend, anything JSON would not return
            as an equal value)

        Raises:
            InvalidKeyError: If the key is invalid
            InvalidArgumentError: If the TTL has an unsupported type
        """
        key = validate_key(key)
        ttl_seconds = normalize_ttl(ttl, self._default_ttl)
        try:
            return self._backend.raw_set(key, value, ttl_seconds)
        except BackendFailureError as e:
            logger.warning(
                "Cache write failed for key '%s': %s",
                key,
                e.message,
                extra={
                    "key": key,
                    "backend": self._backend.name,
                    "ttl": ttl_seconds,
                    "error_code": extract_error_code(e).value,
                },
            )
            return False

    def delete(self, key: str) -> None:
        """Delete ``key``. Deleting an absent key is not an error."""
        self._backend.raw_delete(validate_key(key))

    def has(self, key: str) -> bool:
        """
        Return True if ``key`` is present and not expired.

        Advisory only: another process or request can delete or replace the
        entry between this call and a following get()/set(). Do not use it
        as a guard for a read-then-act sequence; it is mainly useful when
        the cached values are themselves booleans or None.
        """
        return self._backend.raw_exists(validate_key(key))

    def clear(self) -> None:
        """
        Remove every entry in the backend's clear scope.

        For the shared-memory backend this is the whole shared store; for the
        remote backend without a namespace it is the whole database.
        """
        self._backend.raw_clear()

    def delete_all(self) -> None:
        """Alias for clear()."""
        self.clear()

    # ------------ Bulk operations ------------

    def get_multiple(self, keys: Iterable[str], default: Any = None) -> dict[str, Any]:
        """
        Get several keys at once.

        Returns:
            Mapping of every requested key to its value or ``default``. If the
            backend fails as a whole, an empty mapping (unless strict_bulk_get)

        Raises:
            InvalidKeysError: If ``keys`` is not an iterable collection
            InvalidKeyError: If any key is invalid
        """
        key_list = _key_list(keys)
        found = self._backend.raw_get_many(key_list)
        if found is None:
            if self.strict_bulk_get:
                raise BackendFailureError(
                    self._backend.name,
                    "Bulk get failed",
                    {"key_count": len(key_list)},
                )
            logger.warning(
                "Bulk get failed, returning empty result",
                extra={"backend": self._backend.name, "key_count": len(key_list)},
            )
            return {}

        return {key: found[key] if key in found else default for key in key_list}

    def set_multiple(self, values: Mapping[str, Any], ttl: Ttl = None) -> bool:
        """
        Store several key/value pairs with one TTL.

        All keys are validated before anything is written. The batch is not
        atomic: on failure some keys may have been stored.

        Returns:
            True if every pair was stored

        Raises:
            InvalidValuesError: If ``values`` is not a mapping
            InvalidKeyError: If any key is invalid
        """
        if not isinstance(values, Mapping):
            raise InvalidValuesError(values)

        items = {validate_key(key): value for key, value in values.items()}
        ttl_seconds = normalize_ttl(ttl, self._default_ttl)
        try:
            return self._backend.raw_set_many(items, ttl_seconds)
        except BackendFailureError as e:
            logger.warning(
                "Bulk cache write failed: %s",
                e.message,
                extra={
                    "backend": self._backend.name,
                    "key_count": len(items),
                    "ttl": ttl_seconds,
                    "error_code": extract_error_code(e).value,
                },
            )
            return False

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """
        Delete several keys. Absent keys are ignored.

        Returns:
            Always True

        Raises:
            InvalidKeysError: If ``keys`` is not an iterable collection
            InvalidKeyError: If any key is invalid
        """
        self._backend.raw_delete_many(_key_list(keys))
        return True

    # ------------ Lifecycle ------------

    def get_stats(self) -> dict[str, Any]:
        """Return backend statistics plus the default TTL."""
        stats = self._backend.get_stats()
        stats["default_ttl"] = self._default_ttl
        return stats

    def close(self) -> None:
        """Close the backend."""
        self._backend.close()

    def __enter__(self) -> Cache:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
