"""
polycache — Cache Factory

Canonical factory for creating cache instances based on configuration.

Key points:
- The backend is chosen once, here, from CacheConfig.backend
  (memory | shared_memory | remote); the resulting Cache never re-decides
- Backends that need a third-party client are imported lazily
- There is no fallback: if the selected backend is unavailable, creation fails

Examples:
    from polycache.cache.factory import create_cache, get_cache

    # Uses env-configured backend (memory by default)
    cache = create_cache()

    # Or explicitly supply a CacheConfig (e.g., for tests)
    from polycache.config import CacheBackend, CacheConfig
    cfg = CacheConfig(backend=CacheBackend.MEMORY, default_ttl_seconds=600)
    mem_cache = create_cache(cfg, name="test")

    # Remote backend via env:
    #   CACHE_BACKEND=remote CACHE_REMOTE_HOST=cache.internal CACHE_REMOTE_PORT=6379
"""

from __future__ import annotations

import logging

from ..config import CacheBackend, CacheConfig, get_config
from ..errors import BackendFailureError, ConfigurationError, extract_error_code
from .backends.memory import (
    InMemoryBackend,  # Import memory eagerly (always available)
)
from .facade import Cache
from .interface import BackendAdapter
from .session import CacheSession

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, Cache] = {}


def _create_memory_backend(config: CacheConfig, session: CacheSession | None) -> BackendAdapter:
    """Internal helper to construct a memory cache backend."""
    return InMemoryBackend(persist_in_session=config.persist_in_session, session=session)


def _create_shared_memory_backend(config: CacheConfig) -> BackendAdapter:
    """Internal helper to construct a shared-memory backend with lazy import."""
    try:
        from .backends.shared_memory import SharedMemoryBackend
    except ImportError as e:
        logger.error(
            "Shared-memory backend selected but diskcache is not installed",
            extra={"package": "diskcache>=5.6", "error": str(e)},
        )
        raise BackendFailureError(
            CacheBackend.SHARED_MEMORY.value,
            "Shared-memory backend selected but diskcache is unavailable. "
            "Install with: pip install 'diskcache>=5.6'",
            {"package": "diskcache>=5.6", "error": str(e)},
        ) from e

    return SharedMemoryBackend(directory=config.shared_memory_directory)


def _create_remote_backend(config: CacheConfig) -> BackendAdapter:
    """Internal helper to construct a remote backend with lazy import."""
    try:
        from .backends.remote import RemoteBackend
    except ImportError as e:
        logger.error(
            "Remote backend selected but redis client is not installed",
            extra={"package": "redis>=5.0.0", "error": str(e)},
        )
        raise BackendFailureError(
            CacheBackend.REMOTE.value,
            "Remote backend selected but redis client is unavailable. "
            "Install with: pip install 'redis>=5.0.0'",
            {"package": "redis>=5.0.0", "error": str(e)},
        ) from e

    return RemoteBackend(
        host=config.remote_host,
        port=config.remote_port,
        db=config.remote_db,
        socket_timeout=config.remote_socket_timeout,
        namespace=config.namespace,
    )


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
    session: CacheSession | None = None,
) -> Cache:
    """
    Create a cache instance based on configuration.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Cache instance name (for multiple cache instances)
        session: Session handle for a memory cache kept in the session

    Returns:
        Configured Cache instance

    Raises:
        ConfigurationError: If the configuration is invalid
        BackendFailureError: If the selected backend is unavailable
    """
    # Return existing instance if already created
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    backend_name = CacheBackend(config.backend)
    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        backend_name.value,
        extra={"cache_name": name, "backend": backend_name.value},
    )

    try:
        if backend_name == CacheBackend.MEMORY:
            backend = _create_memory_backend(config, session)
        elif backend_name == CacheBackend.SHARED_MEMORY:
            backend = _create_shared_memory_backend(config)
        elif backend_name == CacheBackend.REMOTE:
            backend = _create_remote_backend(config)
        else:  # pragma: no cover
            raise ConfigurationError(
                f"Unknown cache backend: {config.backend}",
                details={
                    "backend": str(config.backend),
                    "supported": [b.value for b in CacheBackend],
                },
            )
    except (ConfigurationError, BackendFailureError):
        # Already logged where raised
        raise
    except Exception as e:
        logger.error(
            "Unexpected error creating cache instance '%s': %s",
            name,
            e,
            extra={
                "cache_name": name,
                "backend": backend_name.value,
                "error": str(e),
                "error_code": extract_error_code(e).value,
            },
            exc_info=True,
        )
        raise BackendFailureError(
            backend_name.value,
            f"Failed to create cache instance '{name}': {e}",
            {"cache_name": name, "error": str(e)},
        ) from e

    cache = Cache(
        backend,
        default_ttl=config.default_ttl_seconds,
        strict_bulk_get=config.strict_bulk_get,
    )
    _cache_instances[name] = cache

    logger.info(
        "Cache instance '%s' created successfully",
        name,
        extra={"cache_name": name, "backend": backend_name.value},
    )
    return cache


def get_cache(name: str = "default") -> Cache:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it is created from the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


def close_all_caches() -> None:
    """
    Close all cache instances and release resources.

    Errors from individual caches are logged so the remaining ones still close.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e), "error_code": extract_error_code(e).value},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Forget all instance references without closing them.

    Warning: Only use this in testing contexts; use close_all_caches() for cleanup.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
