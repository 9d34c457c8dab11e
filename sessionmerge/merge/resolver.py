"""
Conflict Resolution Policies

A conflict exists for a key when the request changed it AND the value in
the store no longer equals the value the request started from. The
resolver decides the merged value from the three versions:

    resolver(key, initial, new, external) -> merged

- initial:  value in the request's snapshot, or ABSENT
- new:      value the request wants, or REMOVED
- external: value currently in the store, or ABSENT

Returning REMOVED deletes the key. Resolvers must be pure: the engine may
call them in any key order, and a resolver that raises only costs its own
key (the engine falls back to `new`).

Policies:
- last_writer_wins: the writing request's value (default)
- external_wins:    keep whatever the store holds
- accumulate_numeric: apply the request's delta on top of the store value
- union_lists:      merge list additions/removals from both sides
- KeyedResolver:    per-key / per-prefix dispatch to the above
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Protocol, runtime_checkable

from sessionmerge.core.types import ABSENT, REMOVED
from sessionmerge.merge.diff import deep_equal


@runtime_checkable
class ConflictResolver(Protocol):
    def __call__(self, key: str, initial: Any, new: Any, external: Any) -> Any:
        ...


def last_writer_wins(key: str, initial: Any, new: Any, external: Any) -> Any:
    """Default policy: the request's own value overrides the concurrent edit."""
    return new


def external_wins(key: str, initial: Any, new: Any, external: Any) -> Any:
    """Concurrent edit overrides the request's value."""
    return REMOVED if external is ABSENT else external


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def accumulate_numeric(key: str, initial: Any, new: Any, external: Any) -> Any:
    """
    Counter semantics: external + (new - initial).

    A missing initial or external counts as 0. Any non-numeric side
    (including removal) defers to last-writer-wins.
    """
    base = 0 if initial is ABSENT else initial
    current = 0 if external is ABSENT else external
    if not (_is_number(new) and _is_number(base) and _is_number(current)):
        return new
    return current + (new - base)


def _contains(items: list[Any], value: Any) -> bool:
    return any(deep_equal(item, value) for item in items)


def union_lists(key: str, initial: Any, new: Any, external: Any) -> Any:
    """
    Set-like list merge, order preserving.

    Items the request removed (present in initial, missing from new) are
    dropped from external; items the request added are appended. Non-list
    values defer to last-writer-wins.
    """
    if not isinstance(new, list):
        return new

    base = initial if isinstance(initial, list) else []
    if external is ABSENT:
        current: list[Any] = []
    elif isinstance(external, list):
        current = external
    else:
        return new

    removed = [item for item in base if not _contains(new, item)]

    merged = [item for item in current if not _contains(removed, item)]
    for item in new:
        if not _contains(merged, item):
            merged.append(item)
    return merged


class KeyedResolver:
    """
    Dispatch conflicts to a resolver chosen by key.

    Exact key registrations win over prefix registrations; among prefixes
    the longest match wins. Unmatched keys go to the fallback.

    Example:
        resolver = KeyedResolver(
            {"page_views": accumulate_numeric},
            prefixes={"cart_": union_lists},
        )
    """

    __slots__ = ("_exact", "_prefixes", "_fallback")

    def __init__(
        self,
        resolvers: Optional[Mapping[str, ConflictResolver]] = None,
        prefixes: Optional[Mapping[str, ConflictResolver]] = None,
        fallback: ConflictResolver = last_writer_wins,
    ) -> None:
        self._exact: dict[str, ConflictResolver] = dict(resolvers or {})
        self._prefixes: dict[str, ConflictResolver] = dict(prefixes or {})
        self._fallback = fallback

    def register(self, key: str, resolver: ConflictResolver) -> None:
        self._exact[key] = resolver

    def register_prefix(self, prefix: str, resolver: ConflictResolver) -> None:
        self._prefixes[prefix] = resolver

    def resolver_for(self, key: str) -> ConflictResolver:
        if key in self._exact:
            return self._exact[key]
        matches = [p for p in self._prefixes if key.startswith(p)]
        if matches:
            return self._prefixes[max(matches, key=len)]
        return self._fallback

    def __call__(self, key: str, initial: Any, new: Any, external: Any) -> Any:
        return self.resolver_for(key)(key, initial, new, external)
