"""
Core Type Definitions for Session Merge

Implements the Result/Either monad used at every store, codec and
boundary seam, plus the Document vocabulary shared by the merge engine.

Design Principles:
- Backends report failure through Err values, not exceptions
- A missing key and an explicit null are never conflated (see Marker)
- Documents are plain dicts; equality is structural (see merge.diff)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    TypeVar,
    Union,
)

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result monad.

    Immutable container for a successful computation result.
    """

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Extract value. Safe to call after is_ok() check."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind for chaining fallible operations."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result monad.

    Carries the error value (usually a SessionMergeError subclass).
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, with error context
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return default value on error."""
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        """Propagate error through monadic chain."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# DOCUMENT VOCABULARY
# =============================================================================
Document = dict[str, Any]


class Marker(Enum):
    """
    Sentinel values that are never stored.

    ABSENT:  the key does not exist on that side of a merge.
    REMOVED: the key is to be deleted from the merged document.
    """

    ABSENT = "absent"
    REMOVED = "removed"

    def __repr__(self) -> str:
        return f"<{self.name}>"


ABSENT = Marker.ABSENT
REMOVED = Marker.REMOVED


def is_document(value: Any) -> bool:
    """True if value is a well-formed Document (dict with string keys)."""
    if not isinstance(value, dict):
        return False
    return all(isinstance(k, str) for k in value)
