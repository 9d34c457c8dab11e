"""
Document Diffing: Deep Equality and ChangeSets

A ChangeSet maps each key a request touched to its new value, or to
REMOVED when the request dropped the key. Keys the request left alone
never appear, which is what gives the merge its field-level isolation.

Equality is structural over JSON-comparable values:
- bool is distinct from int/float (True != 1)
- int and float compare numerically (1 == 1.0)
- lists and tuples compare element-wise
- mappings compare by key set, then value by value
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sessionmerge.core.types import Document, REMOVED

ChangeSet = dict[str, Any]


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality for JSON-comparable values and markers."""
    if a is b:
        return True

    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b

    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b

    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[k], b[k]) for k in a)

    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))

    return type(a) is type(b) and a == b


def compute_changes(snapshot: Document, final_state: Document) -> ChangeSet:
    """
    Diff the request's final state against its snapshot.

    A key mapped to REMOVED in final_state counts as omitted.

    Complexity: O(n) in the total size of both documents.
    """
    changes: ChangeSet = {}

    for key, value in final_state.items():
        if value is REMOVED:
            continue
        if key not in snapshot or not deep_equal(snapshot[key], value):
            changes[key] = value

    for key in snapshot:
        if final_state.get(key, REMOVED) is REMOVED:
            changes[key] = REMOVED

    return changes
