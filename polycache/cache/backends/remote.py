"""
polycache — Remote Backend

Redis cache backend with:
- One client constructed (and checked with PING) at construction time
- JSON serialization for values; a value JSON would hand back changed
  (tuple, non-string dict key) is rejected and set() returns False
- Per-key TTL via SET EX (0 -> no expiry, negative -> key removed)
- Optional namespace prefixing; clear() then only removes that namespace
- Batch operations with MGET, a non-transactional pipeline, and variadic DEL

Every call is a blocking round-trip. There is no retry or reconnect logic
here; redis errors are raised as BackendFailureError.

Requires: redis>=5.0

Example:
    backend = RemoteBackend(host="localhost", port=6379, namespace="app")
    backend.raw_set("greeting", {"msg": "hello"}, 60)
    value, found = backend.raw_get("greeting")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ...errors import BackendFailureError
from ..interface import BackendAdapter

logger = logging.getLogger(__name__)

try:
    import redis
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis client is required for the remote backend but is not installed. "
        "Install with: pip install 'redis>=5.0.0'"
    ) from e

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6379

_BATCH_SIZE = 1000


class RemoteBackend(BackendAdapter):
    """
    Remote key-value server backend.

    Notes:
    - Values are stored as UTF-8 JSON strings, so anything json.dumps rejects
      cannot be cached here.
    - Without a namespace, clear() flushes the whole selected database.
    """

    name = "remote"

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        db: int = 0,
        socket_timeout: int = 5,
        namespace: str | None = None,
        client: Any | None = None,
    ) -> None:
        """
        Initialize remote cache backend.

        Args:
            host: Server host
            port: Server port
            db: Database index
            socket_timeout: Socket timeout in seconds
            namespace: Optional prefix for all keys
            client: Pre-built redis.Redis-compatible client to use instead

        Raises:
            BackendFailureError: If the server cannot be reached
        """
        self.host = host
        self.port = port
        self.namespace = namespace.strip() if namespace and namespace.strip() else None
        self._hits = 0
        self._misses = 0

        if client is not None:
            self._client = client
        else:
            self._client = redis.Redis(
                host=host,
                port=port,
                db=db,
                socket_timeout=socket_timeout,
                decode_responses=True,
            )

        try:
            self._client.ping()
        except redis.RedisError as e:
            logger.error(
                "Failed to connect to remote cache at %s:%s: %s",
                host,
                port,
                e,
                extra={"host": host, "port": port, "error": str(e)},
            )
            raise BackendFailureError(
                self.name,
                f"Failed to connect to remote cache at {host}:{port}: {e}",
                {"host": host, "port": port},
            ) from e

        logger.info(
            "Connected to remote cache at %s:%s",
            host,
            port,
            extra={"host": host, "port": port, "namespace": self.namespace},
        )

    # ------------ Helpers ------------

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        if self.namespace is None:
            return key
        return f"{self.namespace}:{key}"

    @staticmethod
    def _to_json(value: Any) -> str:
        """
        Serialize value to JSON string.

        Raises:
            TypeError: If the value is not JSON serializable
            ValueError: If JSON would hand back a different value (tuples,
                non-string dict keys)
        """
        payload = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        if json.loads(payload) != value:
            raise ValueError(f"{type(value).__name__} value does not survive JSON encoding unchanged")
        return payload

    @staticmethod
    def _from_json(data: str | bytes) -> Any:
        """Deserialize JSON string to Python object."""
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return json.loads(data)
        except ValueError as e:
            # Written by something other than this backend; hand back the raw string
            logger.warning(
                "Failed to decode JSON from cache, returning raw data: %s",
                e,
                extra={"data_preview": data[:100], "error": str(e)},
            )
            return data

    def _failure(self, operation: str, error: Exception, **details: Any) -> BackendFailureError:
        logger.error(
            "Remote cache %s failed: %s",
            operation,
            error,
            extra={"operation": operation, "namespace": self.namespace, "error": str(error), **details},
        )
        return BackendFailureError(
            self.name,
            f"Remote cache {operation} failed: {error}",
            {"operation": operation, **details},
        )

    # ------------ Core Interface ------------

    def raw_get(self, key: str) -> tuple[Any, bool]:
        """Retrieve a value by key."""
        try:
            data = self._client.get(self._make_key(key))
        except redis.RedisError as e:
            raise self._failure("get", e, key=key) from e

        if data is None:
            self._misses += 1
            return None, False

        self._hits += 1
        return self._from_json(data), True

    def raw_set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Store a value with a TTL."""
        try:
            payload = self._to_json(value)
        except (TypeError, ValueError) as e:
            logger.error(
                "Failed to serialize value for key '%s': %s",
                key,
                e,
                extra={"key": key, "value_type": type(value).__name__, "error": str(e)},
            )
            return False

        ns_key = self._make_key(key)
        try:
            if ttl_seconds < 0:
                # Written and expired in the same instant
                self._client.delete(ns_key)
                return True
            ex = ttl_seconds if ttl_seconds > 0 else None
            # redis-py returns True or 'OK' depending on decode_responses
            return bool(self._client.set(ns_key, payload, ex=ex))
        except redis.RedisError as e:
            raise self._failure("set", e, key=key, ttl=ttl_seconds) from e

    def raw_delete(self, key: str) -> None:
        """Delete a single key."""
        try:
            self._client.delete(self._make_key(key))
        except redis.RedisError as e:
            raise self._failure("delete", e, key=key) from e

    def raw_exists(self, key: str) -> bool:
        """Check if a key exists."""
        try:
            return bool(self._client.exists(self._make_key(key)))
        except redis.RedisError as e:
            raise self._failure("exists", e, key=key) from e

    def raw_clear(self) -> None:
        """
        Clear entries.

        With a namespace: SCAN match "<namespace>:*" and DEL in batches.
        Without one: FLUSHDB on the selected database.
        """
        try:
            if self.namespace is None:
                self._client.flushdb()
                logger.info("Flushed remote cache database", extra={"backend": self.name})
                return

            total_deleted = 0
            batch: list[str] = []
            for ns_key in self._client.scan_iter(match=f"{self.namespace}:*", count=_BATCH_SIZE):
                batch.append(ns_key)
                if len(batch) >= _BATCH_SIZE:
                    total_deleted += int(self._client.delete(*batch))
                    batch = []
            if batch:
                total_deleted += int(self._client.delete(*batch))
        except redis.RedisError as e:
            raise self._failure("clear", e) from e

        logger.info(
            "Cleared %d keys from namespace '%s'",
            total_deleted,
            self.namespace,
            extra={"backend": self.name, "namespace": self.namespace},
        )

    def get_stats(self) -> dict[str, Any]:
        """Return hit/miss counters and basic server info."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": self.name,
            "host": self.host,
            "port": self.port,
            "namespace": self.namespace,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "connected": False,
        }

        try:
            stats["connected"] = bool(self._client.ping())
            info = self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
        except redis.RedisError as e:
            # INFO may be restricted; keep the local counters
            logger.warning("Failed to get remote cache INFO: %s", e, extra={"error": str(e)})

        return stats

    def close(self) -> None:
        """Close the client and release its connections."""
        try:
            self._client.close()
            logger.info("Closed remote cache backend at %s:%s", self.host, self.port)
        except redis.RedisError as e:
            logger.warning("Error closing remote cache client: %s", e, extra={"error": str(e)})

    # ------------ Batch operations ------------

    def raw_get_many(self, keys: Sequence[str]) -> dict[str, Any] | None:
        """
        Retrieve multiple values in one round-trip using MGET.

        Missing keys are omitted. Returns None when the round-trip fails.
        """
        if not keys:
            return {}

        try:
            values = self._client.mget([self._make_key(k) for k in keys])
        except redis.RedisError as e:
            logger.error(
                "Failed to get multiple keys from remote cache: %s",
                e,
                extra={"key_count": len(keys), "namespace": self.namespace, "error": str(e)},
            )
            return None

        result: dict[str, Any] = {}
        # MGET preserves order
        for key, raw in zip(keys, values, strict=False):
            if raw is None:
                self._misses += 1
                continue
            self._hits += 1
            result[key] = self._from_json(raw)
        return result

    def raw_set_many(self, items: Mapping[str, Any], ttl_seconds: int) -> bool:
        """
        Store multiple values using a pipeline with one TTL for all items.

        The pipeline is not a transaction: some keys can be written while
        others fail. Values that cannot be serialized are skipped.
        """
        if not items:
            return True

        success = True
        pipe = self._client.pipeline(transaction=False)
        queued = 0
        for key, value in items.items():
            try:
                payload = self._to_json(value)
            except (TypeError, ValueError) as e:
                logger.error(
                    "Failed to serialize value for key '%s': %s",
                    key,
                    e,
                    extra={"key": key, "value_type": type(value).__name__, "error": str(e)},
                )
                success = False
                continue

            ns_key = self._make_key(key)
            if ttl_seconds < 0:
                pipe.delete(ns_key)
            else:
                pipe.set(ns_key, payload, ex=ttl_seconds if ttl_seconds > 0 else None)
            queued += 1

        if not queued:
            return success

        try:
            results = pipe.execute()
        except redis.RedisError as e:
            raise self._failure("set_many", e, key_count=len(items), ttl=ttl_seconds) from e

        if ttl_seconds >= 0 and not all(r in (True, "OK", b"OK") for r in results):
            success = False
        return success

    def raw_delete_many(self, keys: Sequence[str]) -> None:
        """Delete multiple keys with chunked variadic DEL."""
        ns_keys = [self._make_key(k) for k in keys]
        try:
            for i in range(0, len(ns_keys), _BATCH_SIZE):
                self._client.delete(*ns_keys[i : i + _BATCH_SIZE])
        except redis.RedisError as e:
            raise self._failure("delete_many", e, key_count=len(ns_keys)) from e
