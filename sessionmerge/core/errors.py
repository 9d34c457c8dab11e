"""
Error Hierarchy for Session Merge

Three failure families cross the engine's seams:
- DecodeError: a blob or stored payload is not a well-formed Document
- StoreError: the key-value backend failed a get/set/delete
- ResolverError: a conflict resolver raised while merging one key

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause for root cause analysis
- Timestamp and error id for correlating log lines

Errors travel inside Err values; the engine never lets one escape Read or
Write.

Usage:
    result = await store.get(key)
    match result:
        case Ok(None):
            start_empty()
        case Ok(document):
            use(document)
        case Err(StoreError() as error):
            degrade(error)
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Codec / boundary decode errors
    - 2xxx: Store errors
    - 3xxx: Resolver errors
    """

    # Decode errors (1xxx)
    DECODE_MALFORMED_PAYLOAD = 1001
    DECODE_NOT_A_DOCUMENT = 1002
    DECODE_ENCODE_FAILED = 1003

    # Store errors (2xxx)
    STORE_CONNECTION_FAILED = 2001
    STORE_TIMEOUT = 2002
    STORE_NOT_CONNECTED = 2003
    STORE_BACKEND_FAILURE = 2004

    # Resolver errors (3xxx)
    RESOLVER_FAILED = 3001


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class SessionMergeError(Exception):
    """
    Base class for all session merge errors.

    Provides common infrastructure for error handling:
    - Unique error ID for log correlation
    - Error code for programmatic handling
    - Timestamp (nanoseconds since epoch)
    - Cause for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp_nanos: int = field(default_factory=time.time_ns)
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Initialize Exception base class with message
        super().__init__(self.message)

    def with_context(self, **kwargs: Any) -> SessionMergeError:
        """Add context to error (returns new instance of the same class)."""
        return dataclasses.replace(self, context={**self.context, **kwargs})

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for logging."""
        data: dict[str, Any] = {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp_nanos": self.timestamp_nanos,
            "context": self.context,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# DECODE ERRORS
# =============================================================================
@dataclass
class DecodeError(SessionMergeError):
    """Payload could not be turned into (or out of) a Document."""

    @classmethod
    def malformed(
        cls,
        source: str,
        cause: Optional[BaseException] = None,
    ) -> DecodeError:
        """Bytes or text could not be parsed."""
        return cls(
            code=ErrorCode.DECODE_MALFORMED_PAYLOAD,
            message=f"Malformed {source} payload",
            cause=cause,
            context={"source": source},
        )

    @classmethod
    def not_a_document(cls, source: str, actual_type: str) -> DecodeError:
        """Payload parsed but is not a mapping of string keys."""
        return cls(
            code=ErrorCode.DECODE_NOT_A_DOCUMENT,
            message=f"{source} payload is a {actual_type}, expected a document",
            context={"source": source, "actual_type": actual_type},
        )

    @classmethod
    def encode_failed(
        cls,
        source: str,
        cause: Optional[BaseException] = None,
    ) -> DecodeError:
        """Document holds a value the format cannot represent."""
        return cls(
            code=ErrorCode.DECODE_ENCODE_FAILED,
            message=f"Document cannot be encoded as {source}",
            cause=cause,
            context={"source": source},
        )


# =============================================================================
# STORE ERRORS
# =============================================================================
@dataclass
class StoreError(SessionMergeError):
    """Backend get/set/delete failure."""

    @classmethod
    def connection_failed(
        cls,
        backend: str,
        cause: Optional[BaseException] = None,
    ) -> StoreError:
        return cls(
            code=ErrorCode.STORE_CONNECTION_FAILED,
            message=f"Connection to {backend} failed",
            cause=cause,
            context={"backend": backend},
        )

    @classmethod
    def timeout(
        cls,
        operation: str,
        key: str,
        cause: Optional[BaseException] = None,
    ) -> StoreError:
        return cls(
            code=ErrorCode.STORE_TIMEOUT,
            message=f"Store operation '{operation}' timed out for key '{key}'",
            cause=cause,
            context={"operation": operation, "key": key},
        )

    @classmethod
    def not_connected(cls, backend: str) -> StoreError:
        return cls(
            code=ErrorCode.STORE_NOT_CONNECTED,
            message=f"{backend} store is not connected",
            context={"backend": backend},
        )

    @classmethod
    def backend_failure(
        cls,
        operation: str,
        key: str,
        cause: Optional[BaseException] = None,
    ) -> StoreError:
        """Any other backend failure, including a store that raised."""
        detail = f": {cause}" if cause is not None else ""
        return cls(
            code=ErrorCode.STORE_BACKEND_FAILURE,
            message=f"Store operation '{operation}' failed for key '{key}'{detail}",
            cause=cause,
            context={"operation": operation, "key": key},
        )


# =============================================================================
# RESOLVER ERRORS
# =============================================================================
@dataclass
class ResolverError(SessionMergeError):
    """Conflict resolver raised while merging a single key."""

    @classmethod
    def failed(cls, key: str, cause: BaseException) -> ResolverError:
        return cls(
            code=ErrorCode.RESOLVER_FAILED,
            message=f"Conflict resolver failed for key '{key}': {cause}",
            cause=cause,
            context={"key": key},
        )
