"""
Storage Module: Key-Value Backends and Codecs
=============================================

Provides:
- KeyValueStore protocol (get/set/delete with TTL, Result-returning)
- Codecs turning Documents into backend bytes (JSON, MessagePack, LZ4)
- In-memory backend for development/testing
- Redis backend for shared deployments
- Factory function for backend selection

Design Principles:
-----------------
1. **Backend Agnostic**: Same interface for in-memory and production
2. **Injection over inheritance**: the engine receives a store; stores
   receive a codec
3. **Result Monad**: No exceptions for control flow

Example:
    >>> store = create_store()                                    # in-memory
    >>> store = create_store(BackendType.REDIS, RedisConfig(host="redis.prod"))
    >>> await store.connect()
"""

from __future__ import annotations

from typing import Optional, Union

from sessionmerge.storage.protocols import KeyValueStore
from sessionmerge.storage.codec import (
    Codec,
    JsonCodec,
    MsgpackCodec,
    create_codec,
)
from sessionmerge.storage.backends import InMemoryKeyValueStore
from sessionmerge.storage.redis_store import RedisKeyValueStore, RedisMetrics
from sessionmerge.storage.config import BackendType, RedisConfig, RedisMode


def create_store(
    backend: BackendType = BackendType.IN_MEMORY,
    redis_config: Optional[RedisConfig] = None,
    codec: Optional[Codec] = None,
) -> Union[InMemoryKeyValueStore, RedisKeyValueStore]:
    """
    Create a key-value store for the given backend.

    A Redis store is returned unconnected; call `await store.connect()`.

    Args:
        backend: Which adapter to build.
        redis_config: Connection settings (REDIS only).
        codec: Codec for the stored bytes. The in-memory store defaults to
            deep copies when None; Redis defaults to JsonCodec.
    """
    if backend == BackendType.REDIS:
        return RedisKeyValueStore(config=redis_config, codec=codec)
    return InMemoryKeyValueStore(codec=codec)


__all__ = [
    "KeyValueStore",
    "Codec",
    "JsonCodec",
    "MsgpackCodec",
    "create_codec",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "RedisMetrics",
    "BackendType",
    "RedisConfig",
    "RedisMode",
    "create_store",
]
