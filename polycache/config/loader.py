"""
polycache — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import PolycacheConfig

logger = logging.getLogger(__name__)

_config_instance: PolycacheConfig | None = None


def _cache_settings_from_env() -> dict[str, Any]:
    """Collect cache settings that are present in the environment.

    Values are passed through as strings; Pydantic coerces and validates them.
    Unset variables are omitted so the schema defaults apply.
    """
    env_map = {
        "backend": "CACHE_BACKEND",
        "default_ttl_seconds": "CACHE_DEFAULT_TTL_SECONDS",
        "strict_bulk_get": "CACHE_STRICT_BULK_GET",
        "persist_in_session": "CACHE_PERSIST_IN_SESSION",
        "shared_memory_directory": "CACHE_SHARED_MEMORY_DIRECTORY",
        "remote_host": "CACHE_REMOTE_HOST",
        "remote_port": "CACHE_REMOTE_PORT",
        "remote_db": "CACHE_REMOTE_DB",
        "remote_socket_timeout": "CACHE_REMOTE_SOCKET_TIMEOUT",
        "namespace": "CACHE_NAMESPACE",
    }
    settings: dict[str, Any] = {}
    for field_name, env_var in env_map.items():
        value = os.getenv(env_var)
        if value is not None and value != "":
            settings[field_name] = value
    return settings


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> PolycacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated PolycacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = {
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "log_format": os.getenv("LOG_FORMAT", "text").lower(),
        "cache": _cache_settings_from_env(),
    }

    try:
        _config_instance = PolycacheConfig(**config_dict)
    except ValidationError as e:
        logger.error(
            "Configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e

    logger.info(
        "Configuration loaded successfully (cache backend: %s)",
        _config_instance.cache.backend,
        extra={"cache_backend": str(_config_instance.cache.backend), "log_level": _config_instance.log_level},
    )
    return _config_instance


def get_config() -> PolycacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current PolycacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> PolycacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded PolycacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)
