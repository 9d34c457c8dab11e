"""
Session Merge: Lock-Free Session Synchronization over Key-Value Stores

Many independent request handlers read and write the same short-lived
session document in a shared backend (Redis, in-memory). Instead of
locking, each request:

- snapshots the session when it starts
- diffs its final state against that snapshot
- re-fetches the stored session and applies only its own changes
- resolves per-key conflicts with a pluggable policy

Unrelated concurrent edits survive; conflicting ones go to the resolver
(last writer wins by default). Convergence is best-effort and per key:
there are no multi-key transactions.
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from sessionmerge.core.types import (
    Result,
    Ok,
    Err,
    Document,
    ABSENT,
    REMOVED,
)
from sessionmerge.core.errors import (
    SessionMergeError,
    DecodeError,
    StoreError,
    ResolverError,
)
from sessionmerge.core.config import SessionConfig, SessionMergeConfig

from sessionmerge.storage import (
    KeyValueStore,
    Codec,
    JsonCodec,
    MsgpackCodec,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    BackendType,
    RedisConfig,
    create_store,
)

from sessionmerge.merge import (
    SessionMergeEngine,
    ConflictResolver,
    KeyedResolver,
    last_writer_wins,
    external_wins,
    accumulate_numeric,
    union_lists,
)

from sessionmerge.host import (
    SessionHandler,
    JsonBoundaryFormat,
    create_handler,
)

__all__ = [
    "__version__",
    # Result monad and markers
    "Result",
    "Ok",
    "Err",
    "Document",
    "ABSENT",
    "REMOVED",
    # Errors
    "SessionMergeError",
    "DecodeError",
    "StoreError",
    "ResolverError",
    # Config
    "SessionConfig",
    "SessionMergeConfig",
    # Storage
    "KeyValueStore",
    "Codec",
    "JsonCodec",
    "MsgpackCodec",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "BackendType",
    "RedisConfig",
    "create_store",
    # Merge
    "SessionMergeEngine",
    "ConflictResolver",
    "KeyedResolver",
    "last_writer_wins",
    "external_wins",
    "accumulate_numeric",
    "union_lists",
    # Host
    "SessionHandler",
    "JsonBoundaryFormat",
    "create_handler",
]
