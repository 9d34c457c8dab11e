"""
Redis Session Store
===================

Redis/Valkey implementation of KeyValueStore.

Each session is one string key holding codec bytes:

    SET {prefix}{session_id} <codec bytes> EX <ttl>

Design Principles:
------------------
1. **No transactions**: plain GET/SET/DEL, nothing else is assumed of the
   server, so any Redis-compatible backend works
2. **Connection Pooling**: redis-py pool, timeouts from RedisConfig
3. **Result Monad**: redis exceptions are mapped to StoreError at this edge

Thread Safety:
--------------
- Connection pool is safe for concurrent tasks (redis-py internal locking)
- Instance methods are stateless except for pool reference and metrics

Algorithmic Complexity:
-----------------------
| Operation    | Time     | Notes                      |
|--------------|----------|----------------------------|
| get          | O(1)     | plus codec decode          |
| set          | O(1)     | plus codec encode          |
| delete       | O(1)     |                            |
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import redis.asyncio as aioredis
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from sessionmerge.core import constants as C
from sessionmerge.core.errors import DecodeError, StoreError
from sessionmerge.core.types import Document, Err, Ok, Result
from sessionmerge.storage.codec import Codec, JsonCodec
from sessionmerge.storage.config import RedisConfig, RedisMode


BACKEND_NAME: str = "redis"


# =============================================================================
# METRICS COLLECTOR
# =============================================================================

@dataclass(slots=True)
class RedisMetrics:
    """
    Nanosecond-precision counters for Redis operations.

    Plain increments; safe within a single event loop.
    """
    get_count: int = 0
    set_count: int = 0
    delete_count: int = 0

    get_latency_sum_ns: int = 0
    set_latency_sum_ns: int = 0

    connection_errors: int = 0
    timeout_errors: int = 0
    decode_errors: int = 0

    def record_get(self, latency_ns: int) -> None:
        self.get_count += 1
        self.get_latency_sum_ns += latency_ns

    def record_set(self, latency_ns: int) -> None:
        self.set_count += 1
        self.set_latency_sum_ns += latency_ns

    def get_avg_get_latency_ms(self) -> float:
        if self.get_count == 0:
            return 0.0
        return (self.get_latency_sum_ns / self.get_count) / C.NS_PER_MS

    def get_avg_set_latency_ms(self) -> float:
        if self.set_count == 0:
            return 0.0
        return (self.set_latency_sum_ns / self.set_count) / C.NS_PER_MS


# =============================================================================
# REDIS KEY-VALUE STORE
# =============================================================================

class RedisKeyValueStore:
    """
    KeyValueStore over a redis.asyncio client.

    Either call `connect()` to build a client from RedisConfig, or pass a
    ready client (anything with async get/set/delete/ping/aclose).

    Example:
        >>> store = RedisKeyValueStore(RedisConfig(host="redis.example.com"))
        >>> await store.connect()
        >>> await store.set("session_abc", {"user": 7}, ttl_seconds=3600)
        >>> await store.close()
    """

    __slots__ = (
        "_config",
        "_codec",
        "_pool",
        "_metrics",
        "_connected",
    )

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        codec: Optional[Codec] = None,
        client: Optional[Any] = None,
    ) -> None:
        """
        Args:
            config: Connection configuration (used by connect()).
            codec: Document <-> bytes codec. Defaults to JsonCodec.
            client: Pre-built async client; marks the store connected.
        """
        self._config = config or RedisConfig()
        self._codec: Codec = codec or JsonCodec()
        self._pool: Optional[Any] = client
        self._metrics = RedisMetrics()
        self._connected = client is not None

    @property
    def metrics(self) -> RedisMetrics:
        return self._metrics

    @property
    def is_connected(self) -> bool:
        return self._connected

    # -------------------------------------------------------------------------
    # CONNECTION MANAGEMENT
    # -------------------------------------------------------------------------

    async def connect(self) -> Result[None, StoreError]:
        """
        Establish connection pool to Redis and verify it with PING.

        Returns:
            Ok(None) on success, Err(StoreError) on failure.
        """
        try:
            kwargs = self._config.get_connection_kwargs()

            if self._config.mode == RedisMode.CLUSTER:
                from redis.asyncio.cluster import RedisCluster
                self._pool = RedisCluster(**kwargs)
            elif self._config.mode == RedisMode.SENTINEL:
                from redis.asyncio.sentinel import Sentinel
                sentinel = Sentinel(
                    list(self._config.sentinel_hosts),
                    socket_timeout=self._config.socket_timeout_ms / 1000,
                )
                kwargs.pop("host")
                kwargs.pop("port")
                self._pool = sentinel.master_for(
                    self._config.sentinel_master,
                    redis_class=aioredis.Redis,
                    **kwargs,
                )
            else:
                self._pool = aioredis.Redis(**kwargs)

            await self._pool.ping()

            self._connected = True
            return Ok(None)

        except RedisError as e:
            self._metrics.connection_errors += 1
            return Err(StoreError.connection_failed(
                f"{BACKEND_NAME}://{self._config.host}:{self._config.port}", cause=e,
            ))

    async def close(self) -> None:
        """
        Close the connection pool.

        Safe to call multiple times.
        """
        if self._pool is not None:
            await self._pool.aclose()
            self._pool = None
        self._connected = False

    async def health_check(self) -> Result[Dict[str, Any], StoreError]:
        """Ping the server and report client-side metrics."""
        if not self._connected or self._pool is None:
            return Err(StoreError.not_connected(BACKEND_NAME))

        try:
            await self._pool.ping()
        except RedisError as e:
            self._metrics.connection_errors += 1
            return Err(StoreError.connection_failed(BACKEND_NAME, cause=e))

        return Ok({
            "connected": True,
            "codec": self._codec.name,
            "metrics": {
                "get_count": self._metrics.get_count,
                "set_count": self._metrics.set_count,
                "delete_count": self._metrics.delete_count,
                "avg_get_latency_ms": self._metrics.get_avg_get_latency_ms(),
                "avg_set_latency_ms": self._metrics.get_avg_set_latency_ms(),
            },
        })

    # -------------------------------------------------------------------------
    # KeyValueStore Implementation
    # -------------------------------------------------------------------------

    def _map_error(self, operation: str, key: str, error: RedisError) -> StoreError:
        if isinstance(error, RedisTimeoutError):
            self._metrics.timeout_errors += 1
            return StoreError.timeout(operation, key, cause=error)
        if isinstance(error, RedisConnectionError):
            self._metrics.connection_errors += 1
            return StoreError.connection_failed(BACKEND_NAME, cause=error).with_context(
                operation=operation, key=key,
            )
        return StoreError.backend_failure(operation, key, cause=error)

    async def get(
        self,
        key: str,
    ) -> Result[Optional[Any], Union[StoreError, DecodeError]]:
        """
        Fetch and decode the value under key.

        Returns:
            Ok(None) if the key does not exist (or has expired).
        """
        if not self._connected or self._pool is None:
            return Err(StoreError.not_connected(BACKEND_NAME))

        start_ns = time.perf_counter_ns()
        try:
            raw = await self._pool.get(key)
        except RedisError as e:
            return Err(self._map_error("get", key, e))
        self._metrics.record_get(time.perf_counter_ns() - start_ns)

        if raw is None:
            return Ok(None)

        decoded = self._codec.deserialize(bytes(raw))
        if decoded.is_err():
            self._metrics.decode_errors += 1
        return decoded

    async def set(
        self,
        key: str,
        document: Document,
        ttl_seconds: int,
    ) -> Result[None, Union[StoreError, DecodeError]]:
        """Encode and store document, reapplying the TTL."""
        if not self._connected or self._pool is None:
            return Err(StoreError.not_connected(BACKEND_NAME))

        encoded = self._codec.serialize(document)
        if encoded.is_err():
            return encoded

        start_ns = time.perf_counter_ns()
        try:
            if ttl_seconds > 0:
                await self._pool.set(key, encoded.unwrap(), ex=ttl_seconds)
            else:
                await self._pool.set(key, encoded.unwrap())
        except RedisError as e:
            return Err(self._map_error("set", key, e))
        self._metrics.record_set(time.perf_counter_ns() - start_ns)

        return Ok(None)

    async def delete(self, key: str) -> Result[bool, StoreError]:
        if not self._connected or self._pool is None:
            return Err(StoreError.not_connected(BACKEND_NAME))

        try:
            deleted_count = await self._pool.delete(key)
        except RedisError as e:
            return Err(self._map_error("delete", key, e))
        self._metrics.delete_count += 1

        return Ok(deleted_count > 0)
