"""
polycache — Cache Module

One cache contract over interchangeable backends.

- facade.py: Cache, the public get/set/delete/has/clear contract
- factory.py: builds a Cache for the configured backend
- interface.py: raw contract every backend implements
- keys.py / ttl.py: key validation and TTL normalization
- backends/: in-process, shared-memory and remote implementations

Usage:
    from polycache.cache import create_cache

    cache = create_cache()
    cache.set("key", "value", ttl=3600)
    value = cache.get("key")
"""

from .facade import DEFAULT_TTL_SECONDS, Cache
from .factory import (
    close_all_caches,
    create_cache,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import BackendAdapter
from .keys import FORBIDDEN_CHARACTERS, KEY_DELIMITER, create_key, create_key_from_sequence, validate_key
from .session import CacheSession
from .ttl import normalize_ttl

__all__ = [
    # Facade
    "Cache",
    "DEFAULT_TTL_SECONDS",
    # Factory functions
    "create_cache",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Backend contract
    "BackendAdapter",
    "CacheSession",
    # Keys and TTL
    "FORBIDDEN_CHARACTERS",
    "KEY_DELIMITER",
    "create_key",
    "create_key_from_sequence",
    "validate_key",
    "normalize_ttl",
]
