"""
Merge Module: The Session Merge Algorithm

Provides:
- SessionMergeEngine: per-request read/write with three-way merge
- ConflictResolver policies: last-writer-wins (default) and friends
- deep_equal / compute_changes: structural diffing of Documents
"""

from sessionmerge.merge.diff import (
    ChangeSet,
    deep_equal,
    compute_changes,
)
from sessionmerge.merge.resolver import (
    ConflictResolver,
    KeyedResolver,
    last_writer_wins,
    external_wins,
    accumulate_numeric,
    union_lists,
)
from sessionmerge.merge.engine import (
    EngineStats,
    SessionMergeEngine,
)

__all__ = [
    "ChangeSet",
    "deep_equal",
    "compute_changes",
    "ConflictResolver",
    "KeyedResolver",
    "last_writer_wins",
    "external_wins",
    "accumulate_numeric",
    "union_lists",
    "EngineStats",
    "SessionMergeEngine",
]
