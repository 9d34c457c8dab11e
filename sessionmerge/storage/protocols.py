"""
Key-Value Store Protocol
========================

The only surface through which sessions touch shared state. Structural
subtyping (PEP 544): any object with these three coroutines is a store,
no base class required. Backends are chosen by injection, one adapter per
backend.

Design Principles:
    - Zero-exception control flow via Result[T, E] monad
    - Async-first for non-blocking I/O
    - No cross-operation atomicity: get and set are independent calls
    - TTL is reapplied on every successful set
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Optional, Protocol, Union, runtime_checkable

from sessionmerge.core.errors import DecodeError, StoreError
from sessionmerge.core.types import Document, Result


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Async get/set/delete of one opaque document per string key.

    Example:
        class MyStore:
            async def get(self, key: str) -> Result[Optional[Any], StoreError | DecodeError]:
                ...
    """

    @abstractmethod
    async def get(
        self,
        key: str,
    ) -> Result[Optional[Any], Union[StoreError, DecodeError]]:
        """
        Retrieve the document stored under key.

        Returns:
            Ok(value): Stored value. Normally a Document, but callers must
                check: the backend may hold anything.
            Ok(None): Key absent or expired.
            Err(StoreError): Backend failure.
            Err(DecodeError): Stored bytes could not be decoded.
        """
        ...

    @abstractmethod
    async def set(
        self,
        key: str,
        document: Document,
        ttl_seconds: int,
    ) -> Result[None, Union[StoreError, DecodeError]]:
        """
        Store document under key, replacing any previous value.

        Args:
            ttl_seconds: Expiry from now; <= 0 means no expiry.
        """
        ...

    @abstractmethod
    async def delete(
        self,
        key: str,
    ) -> Result[bool, StoreError]:
        """
        Delete key.

        Returns:
            Ok(True) if a value was removed, Ok(False) if key was absent.
        """
        ...
