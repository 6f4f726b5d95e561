"""
polycache — Configuration Loader Tests
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from polycache.config import CacheBackend, CacheConfig, get_config, load_config, reload_config
from polycache.config import loader as loader_module
from polycache.errors import ConfigurationError

CACHE_ENV_VARS = (
    "CACHE_BACKEND",
    "CACHE_DEFAULT_TTL_SECONDS",
    "CACHE_STRICT_BULK_GET",
    "CACHE_PERSIST_IN_SESSION",
    "CACHE_SHARED_MEMORY_DIRECTORY",
    "CACHE_REMOTE_HOST",
    "CACHE_REMOTE_PORT",
    "CACHE_REMOTE_DB",
    "CACHE_REMOTE_SOCKET_TIMEOUT",
    "CACHE_NAMESPACE",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """Isolate each test from the process environment and the config singleton."""
    for name in CACHE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(loader_module, "_config_instance", None)
    yield


class TestCacheConfig:
    """Schema defaults."""

    def test_defaults(self) -> None:
        config = CacheConfig()
        assert config.backend == CacheBackend.MEMORY
        assert config.default_ttl_seconds == 86400
        assert config.persist_in_session is False
        assert config.strict_bulk_get is False
        assert config.remote_host == "localhost"
        assert config.remote_port == 6379
        assert config.namespace is None
        assert config.shared_memory_directory.endswith("polycache")

    def test_zero_and_negative_default_ttl_allowed(self) -> None:
        assert CacheConfig(default_ttl_seconds=0).default_ttl_seconds == 0
        assert CacheConfig(default_ttl_seconds=-1).default_ttl_seconds == -1

    def test_port_range_validated(self) -> None:
        with pytest.raises(ValueError):
            CacheConfig(remote_port=70000)


class TestLoadConfig:
    """Loading from the environment and .env files."""

    def test_defaults_without_environment(self) -> None:
        config = load_config()
        assert config.cache.backend == CacheBackend.MEMORY
        assert config.log_format == "text"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_BACKEND", "remote")
        monkeypatch.setenv("CACHE_REMOTE_HOST", "cache.internal")
        monkeypatch.setenv("CACHE_REMOTE_PORT", "6380")
        monkeypatch.setenv("CACHE_DEFAULT_TTL_SECONDS", "600")
        monkeypatch.setenv("CACHE_STRICT_BULK_GET", "true")
        monkeypatch.setenv("CACHE_NAMESPACE", "app")

        cache = load_config().cache

        assert cache.backend == CacheBackend.REMOTE
        assert cache.remote_host == "cache.internal"
        assert cache.remote_port == 6380
        assert cache.default_ttl_seconds == 600
        assert cache.strict_bulk_get is True
        assert cache.namespace == "app"

    def test_reads_env_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # load_dotenv writes to os.environ; register the vars so they are restored
        monkeypatch.setenv("CACHE_BACKEND", "memory")
        monkeypatch.setenv("CACHE_SHARED_MEMORY_DIRECTORY", str(tmp_path))
        env_file = tmp_path / "custom.env"
        env_file.write_text("CACHE_BACKEND=shared_memory\nCACHE_SHARED_MEMORY_DIRECTORY=/dev/shm/pc\n")

        cache = load_config(env_file=str(env_file)).cache

        assert cache.backend == CacheBackend.SHARED_MEMORY
        assert cache.shared_memory_directory == "/dev/shm/pc"

    def test_invalid_values_raise_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_BACKEND", "carrier-pigeon")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config()
        assert "validation_errors" in exc_info.value.details

    def test_non_numeric_ttl_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CACHE_DEFAULT_TTL_SECONDS", "a day")

        with pytest.raises(ConfigurationError):
            load_config()

    def test_singleton_and_reload(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_config()
        assert get_config() is first

        monkeypatch.setenv("CACHE_DEFAULT_TTL_SECONDS", "5")
        assert load_config() is first

        reloaded = reload_config()
        assert reloaded is not first
        assert reloaded.cache.default_ttl_seconds == 5
