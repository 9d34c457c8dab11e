"""
Test doubles and helpers shared across the suite.
"""

from __future__ import annotations

from typing import Any, Optional


from sessionmerge.core.errors import StoreError
from sessionmerge.core.types import Document, Err, Result
from sessionmerge.storage.backends import InMemoryKeyValueStore
from sessionmerge.storage.codec import JsonCodec


class RecordingStore:
    """
    KeyValueStore double around an InMemoryKeyValueStore.

    Records every call and can be told to fail:
    - get_failures: queue of booleans consumed one per get(); True -> Err
    - fail_set / fail_delete: every set()/delete() returns Err
    - raise_on_get / raise_on_set: the call raises instead of returning
    """

    def __init__(self, inner: Optional[InMemoryKeyValueStore] = None) -> None:
        self.inner = inner or InMemoryKeyValueStore(codec=JsonCodec())
        self.calls: list[tuple[str, str]] = []
        self.get_failures: list[bool] = []
        self.fail_set = False
        self.fail_delete = False
        self.raise_on_get = False
        self.raise_on_set = False
        self.last_ttl: Optional[int] = None

    def count(self, operation: Optional[str] = None) -> int:
        if operation is None:
            return len(self.calls)
        return sum(1 for op, _ in self.calls if op == operation)

    async def get(self, key: str) -> Result[Any, Any]:
        self.calls.append(("get", key))
        if self.raise_on_get:
            raise ConnectionResetError("backend went away")
        if self.get_failures and self.get_failures.pop(0):
            return Err(StoreError.timeout("get", key))
        return await self.inner.get(key)

    async def set(self, key: str, document: Document, ttl_seconds: int) -> Result[None, Any]:
        self.calls.append(("set", key))
        self.last_ttl = ttl_seconds
        if self.raise_on_set:
            raise ConnectionResetError("backend went away")
        if self.fail_set:
            return Err(StoreError.backend_failure("set", key))
        return await self.inner.set(key, document, ttl_seconds)

    async def delete(self, key: str) -> Result[bool, Any]:
        self.calls.append(("delete", key))
        if self.fail_delete:
            return Err(StoreError.backend_failure("delete", key))
        return await self.inner.delete(key)


async def seed(memory_store: InMemoryKeyValueStore, session_id: str, document: Document) -> None:
    """Put a session straight into the backend, bypassing any engine."""
    result = await memory_store.set(f"session_{session_id}", document, 3600)
    assert result.is_ok()


async def stored(memory_store: InMemoryKeyValueStore, session_id: str) -> Any:
    """Read a session straight from the backend."""
    result = await memory_store.get(f"session_{session_id}")
    assert result.is_ok()
    return result.unwrap()


class FakeRedis:
    """Minimal async stand-in for redis.asyncio.Redis."""

    def __init__(self):
        self.data = {}
        self.expiry = {}
        self.fail_with = None
        self.closed = False

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def ping(self):
        self._maybe_fail()
        return True

    async def get(self, key):
        self._maybe_fail()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._maybe_fail()
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, key):
        self._maybe_fail()
        return 1 if self.data.pop(key, None) is not None else 0

    async def aclose(self):
        self.closed = True
