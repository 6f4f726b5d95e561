"""
polycache — Uniform Key-Value Cache

A single get/set/delete/has contract, with bulk variants, TTL expiry and full
clear, over an in-process dict, a host-wide shared-memory store, or a remote
Redis server.
"""

__version__ = "1.0.0"

from .cache import Cache, CacheSession, create_cache, create_key, get_cache, validate_key
from .errors import (
    BackendFailureError,
    CacheError,
    ConfigurationError,
    InvalidArgumentError,
    InvalidKeyError,
    InvalidKeysError,
    InvalidValuesError,
    PolycacheError,
)
from .log import configure_logging

__all__ = [
    "Cache",
    "CacheSession",
    "create_cache",
    "get_cache",
    "create_key",
    "validate_key",
    "configure_logging",
    "PolycacheError",
    "CacheError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidKeyError",
    "InvalidKeysError",
    "InvalidValuesError",
    "BackendFailureError",
]
