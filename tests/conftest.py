"""
polycache — Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import fnmatch
import os
import socket
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

# Set test environment
os.environ["LOG_LEVEL"] = "DEBUG"


def is_redis_available() -> bool:
    """Check if a Redis server is available for testing."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("localhost", 6379))
        sock.close()
        return result == 0
    except OSError:
        return False


class FakePipeline:
    """Queues commands and replays them against a FakeRedisClient."""

    def __init__(self, client: "FakeRedisClient") -> None:
        self._client = client
        self._commands: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def set(self, *args: Any, **kwargs: Any) -> "FakePipeline":
        self._commands.append(("set", args, kwargs))
        return self

    def delete(self, *args: Any) -> "FakePipeline":
        self._commands.append(("delete", args, {}))
        return self

    def execute(self) -> list[Any]:
        results = [getattr(self._client, name)(*args, **kwargs) for name, args, kwargs in self._commands]
        self._commands = []
        return results


class FakeRedisClient:
    """
    Dict-backed stand-in for the subset of redis.Redis the remote backend uses.

    Records the ``ex`` passed with each SET so tests can assert on TTL handling.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int | None] = {}
        self.closed = False

    def ping(self) -> bool:
        return True

    def get(self, name: str) -> str | None:
        return self.data.get(name)

    def set(self, name: str, value: str, ex: int | None = None) -> bool:
        self.data[name] = value
        self.expiry[name] = ex
        return True

    def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                self.expiry.pop(name, None)
                removed += 1
        return removed

    def exists(self, *names: str) -> int:
        return sum(1 for name in names if name in self.data)

    def mget(self, keys: list[str]) -> list[str | None]:
        return [self.data.get(k) for k in keys]

    def flushdb(self) -> bool:
        self.data.clear()
        self.expiry.clear()
        return True

    def scan_iter(self, match: str = "*", count: int | None = None) -> Generator[str, None, None]:
        for name in list(self.data):
            if fnmatch.fnmatchcase(name, match):
                yield name

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    def info(self, section: str | None = None) -> dict[str, Any]:
        return {"redis_version": "7.2.0"}

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_redis() -> FakeRedisClient:
    """Fresh in-memory Redis stand-in."""
    return FakeRedisClient()


@pytest.fixture
def shared_memory_dir(tmp_path: Path) -> str:
    """Directory for an isolated shared-memory store."""
    directory = tmp_path / "shared"
    directory.mkdir()
    return str(directory)


@pytest.fixture
def sample_cache_data() -> dict[str, Any]:
    """Sample data for cache testing."""
    return {
        "simple_string": "hello",
        "simple_int": 42,
        "simple_float": 3.14,
        "simple_bool": True,
        "simple_none": None,
        "complex_dict": {
            "nested": {
                "key": "value",
                "number": 123,
                "list": [1, 2, 3],
            }
        },
        "complex_list": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
    }


@pytest.fixture
def mock_env_remote(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for the remote cache backend."""
    if not is_redis_available():
        pytest.skip("Redis not available")
    monkeypatch.setenv("CACHE_BACKEND", "remote")
    monkeypatch.setenv("CACHE_REMOTE_HOST", "localhost")
    monkeypatch.setenv("CACHE_REMOTE_PORT", "6379")
    monkeypatch.setenv("CACHE_REMOTE_DB", "15")
    monkeypatch.setenv("CACHE_NAMESPACE", "polycache-test")


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for the memory cache backend."""
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_DEFAULT_TTL_SECONDS", "3600")


@pytest.fixture(autouse=True)
def reset_cache_factory() -> Generator[None, None, None]:
    """Reset cache factory after each test to prevent state leakage."""
    yield
    from polycache.cache.factory import reset_cache_factory

    reset_cache_factory()
