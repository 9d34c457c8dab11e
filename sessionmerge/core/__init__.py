"""
Core Module: Types, Errors, Configuration

Provides:
- Result monad (Ok/Err) and the Document vocabulary
- Error hierarchy (DecodeError, StoreError, ResolverError)
- Frozen configuration dataclasses
"""

from sessionmerge.core.types import (
    Result,
    Ok,
    Err,
    Document,
    Marker,
    ABSENT,
    REMOVED,
    is_document,
)
from sessionmerge.core.errors import (
    ErrorCode,
    SessionMergeError,
    DecodeError,
    StoreError,
    ResolverError,
)
from sessionmerge.core.config import (
    SessionConfig,
    CodecConfig,
    ObservabilityConfig,
    SessionMergeConfig,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Document",
    "Marker",
    "ABSENT",
    "REMOVED",
    "is_document",
    "ErrorCode",
    "SessionMergeError",
    "DecodeError",
    "StoreError",
    "ResolverError",
    "SessionConfig",
    "CodecConfig",
    "ObservabilityConfig",
    "SessionMergeConfig",
]
