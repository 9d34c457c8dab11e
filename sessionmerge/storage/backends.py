"""
In-Memory Key-Value Backend: Development and Testing Implementation
===================================================================

Provides a KeyValueStore with Redis-like semantics inside one process:
- get/set/delete with per-key TTL
- Values isolated from callers (codec bytes or deep copies)

Design Principles:
    - Full protocol compliance for seamless production swap
    - Safe for concurrent tasks via an asyncio lock
    - Optional latency simulation to widen race windows in tests

Performance Characteristics:
    - Get/Set/Delete: O(1) average case plus copy/codec cost
"""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from sessionmerge.core.errors import DecodeError, StoreError
from sessionmerge.core.types import Document, Ok, Result
from sessionmerge.storage.codec import Codec


# =============================================================================
# STORED RECORD
# =============================================================================
@dataclass
class StoredRecord:
    """Internal record: stored value plus optional expiry."""
    value: Any
    ttl_expires_at: Optional[datetime] = None

    def is_expired(self) -> bool:
        """Check if record has expired based on TTL."""
        if self.ttl_expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.ttl_expires_at


# =============================================================================
# IN-MEMORY KEY-VALUE STORE
# =============================================================================
class InMemoryKeyValueStore:
    """
    In-process KeyValueStore.

    With a codec, values are held as encoded bytes, so the codec is
    exercised exactly as a network backend would exercise it. Without
    one, values are deep-copied on the way in and out. Either way no two
    callers ever share a mutable Document.

    Example:
        store = InMemoryKeyValueStore(codec=JsonCodec())
        await store.set("session_abc", {"cart": [1, 2]}, ttl_seconds=3600)
        result = await store.get("session_abc")
    """

    __slots__ = (
        "_data",
        "_lock",
        "_codec",
    )

    def __init__(
        self,
        codec: Optional[Codec] = None,
    ) -> None:
        """
        Args:
            codec: Store encoded bytes instead of deep copies
        """
        self._data: Dict[str, StoredRecord] = {}
        self._lock = asyncio.Lock()
        self._codec = codec

    # -------------------------------------------------------------------------
    # KeyValueStore Implementation
    # -------------------------------------------------------------------------

    async def get(
        self,
        key: str,
    ) -> Result[Optional[Any], Union[StoreError, DecodeError]]:
        async with self._lock:
            record = self._data.get(key)
            if record is None:
                return Ok(None)
            if record.is_expired():
                del self._data[key]
                return Ok(None)
            stored = record.value

        if self._codec is not None:
            return self._codec.deserialize(stored)
        return Ok(copy.deepcopy(stored))

    async def set(
        self,
        key: str,
        document: Document,
        ttl_seconds: int,
    ) -> Result[None, Union[StoreError, DecodeError]]:
        if self._codec is not None:
            encoded = self._codec.serialize(document)
            if encoded.is_err():
                return encoded
            value: Any = encoded.unwrap()
        else:
            value = copy.deepcopy(document)

        expires_at = None
        if ttl_seconds > 0:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)

        async with self._lock:
            self._data[key] = StoredRecord(value=value, ttl_expires_at=expires_at)
        return Ok(None)

    async def delete(self, key: str) -> Result[bool, StoreError]:
        async with self._lock:
            record = self._data.pop(key, None)
        return Ok(record is not None and not record.is_expired())

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    async def put_raw(self, key: str, value: Any) -> None:
        """Store a value verbatim, bypassing the codec (for tests)."""
        async with self._lock:
            self._data[key] = StoredRecord(value=value)

    async def get_ttl(self, key: str) -> Optional[int]:
        """Remaining TTL in seconds, or None for no expiry / missing key."""
        async with self._lock:
            record = self._data.get(key)
            if record is None or record.ttl_expires_at is None:
                return None
            remaining = (record.ttl_expires_at - datetime.now(timezone.utc)).total_seconds()
            return max(0, int(remaining))

    async def clear(self) -> None:
        """Clear all data (for testing)."""
        async with self._lock:
            self._data.clear()

    async def count(self) -> int:
        """Number of live (unexpired) records."""
        async with self._lock:
            return sum(1 for record in self._data.values() if not record.is_expired())

    async def cleanup_expired(self) -> int:
        """Remove all expired records. Returns count removed."""
        async with self._lock:
            expired_keys = [k for k, v in self._data.items() if v.is_expired()]
            for key in expired_keys:
                del self._data[key]
            return len(expired_keys)
