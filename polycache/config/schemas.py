"""
polycache — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
All configuration is defined here and validated when loaded.
"""

import os
import tempfile
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CacheBackend(str, Enum):
    """Supported cache backends."""

    MEMORY = "memory"
    SHARED_MEMORY = "shared_memory"  # Requires diskcache
    REMOTE = "remote"  # Requires redis


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    TEXT = "text"
    JSON = "json"


def _default_shared_memory_directory() -> str:
    return os.path.join(tempfile.gettempdir(), "polycache")


class CacheConfig(BaseModel):
    """Cache configuration."""

    backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Cache backend to use")
    default_ttl_seconds: int = Field(
        default=86400,
        description="Default TTL in seconds (0 = no expiry, negative = expire immediately)",
    )
    strict_bulk_get: bool = Field(
        default=False,
        description="Raise on total backend failure in get_multiple instead of returning an empty mapping",
    )

    # In-process settings (only used when backend=memory)
    persist_in_session: bool = Field(default=False, description="Keep the memory cache in the caller's session")

    # Shared-memory settings (only used when backend=shared_memory)
    shared_memory_directory: str = Field(
        default_factory=_default_shared_memory_directory,
        description="Directory backing the shared cache; every process opening it shares entries",
    )

    # Remote settings (only used when backend=remote)
    remote_host: str = Field(default="localhost", description="Remote key-value server host")
    remote_port: int = Field(default=6379, ge=1, le=65535, description="Remote key-value server port")
    remote_db: int = Field(default=0, ge=0, description="Remote database index")
    remote_socket_timeout: int = Field(default=5, ge=1, description="Remote socket timeout in seconds")
    namespace: str | None = Field(default=None, description="Optional key prefix for the remote backend")


class PolycacheConfig(BaseModel):
    """Root configuration for polycache."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.TEXT, description="Logging output format")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
