"""
Session Merge Engine: Snapshot / Diff / Re-fetch / Merge / Store

One engine instance serves one request:

    read(id)                 capture Snapshot S from the store
    ... host mutates its copy of the session ...
    write(id, final)         ChangeSet C = diff(final, S)
                             External X = fresh store.get
                             for k in C: three-way merge S[k], C[k], X[k]
                             store.set(X)

Only keys in C are written, so concurrent requests editing different keys
of the same session both survive. When the same key was edited elsewhere
(X[k] != S[k]) the injected ConflictResolver decides.

Failure policy (availability over consistency):
    read:  store failure    -> empty snapshot, engine becomes read-only
           malformed value  -> empty snapshot
    write: read-only        -> success, store untouched
           bad final state  -> failure, nothing written
           re-fetch failure -> merge onto the snapshot instead
           resolver raised  -> request's value wins for that key
           final set failed -> failure
Neither read nor write ever raises; every recovered failure is logged.

Known limitation: a write landing between our re-fetch and our set is
overwritten. Closing that window needs compare-and-swap, which plain
get/set backends do not offer.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from sessionmerge.core.config import SessionConfig
from sessionmerge.core.errors import (
    DecodeError,
    ResolverError,
    SessionMergeError,
    StoreError,
)
from sessionmerge.core.types import (
    ABSENT,
    REMOVED,
    Document,
    Err,
    Result,
    is_document,
)
from sessionmerge.merge.diff import ChangeSet, compute_changes, deep_equal
from sessionmerge.merge.resolver import ConflictResolver, last_writer_wins
from sessionmerge.observability.logging import StructuredLogger
from sessionmerge.storage.protocols import KeyValueStore


# =============================================================================
# ENGINE STATISTICS
# =============================================================================
@dataclass(slots=True)
class EngineStats:
    """Per-request counters."""
    reads: int = 0
    read_failures: int = 0
    malformed_reads: int = 0
    writes: int = 0
    noop_writes: int = 0
    skipped_writes: int = 0
    conflicts: int = 0
    resolver_failures: int = 0
    refetch_fallbacks: int = 0
    store_failures: int = 0


# =============================================================================
# SESSION MERGE ENGINE
# =============================================================================
class SessionMergeEngine:
    """
    Per-request merge engine over a KeyValueStore.

    Example:
        engine = SessionMergeEngine(store, resolver=KeyedResolver(...))
        session = await engine.read("abc")
        session["cart"].append(42)
        ok = await engine.write("abc", session)
    """

    __slots__ = (
        "_store",
        "_resolver",
        "_config",
        "_log",
        "_snapshot",
        "_read_only",
        "_stats",
    )

    def __init__(
        self,
        store: KeyValueStore,
        resolver: Optional[ConflictResolver] = None,
        config: Optional[SessionConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._store = store
        self._resolver: ConflictResolver = resolver or last_writer_wins
        self._config = config or SessionConfig()
        self._log = logger or StructuredLogger("sessionmerge.engine")
        self._snapshot: Optional[Document] = None
        self._read_only = self._config.read_only
        self._stats = EngineStats()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def read_only(self) -> bool:
        return self._read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        self._read_only = value

    @property
    def snapshot(self) -> Optional[Document]:
        """Copy of the snapshot captured by read(), or None before read()."""
        return copy.deepcopy(self._snapshot)

    @property
    def stats(self) -> EngineStats:
        return self._stats

    def key_for(self, session_id: str) -> str:
        return f"{self._config.prefix}{session_id}"

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    async def read(self, session_id: str) -> Document:
        """
        Capture the snapshot for this request.

        Returns a copy of the snapshot; the caller may mutate it freely.
        """
        key = self.key_for(session_id)
        self._stats.reads += 1

        with self._log.context(session_key=key):
            result = await self._guarded("get", key, lambda: self._store.get(key))
            snapshot: Document = {}

            if result.is_err():
                error = result.error
                if isinstance(error, DecodeError):
                    self._stats.malformed_reads += 1
                    self._report(self._log.warning, "Stored session undecodable, starting empty", error)
                else:
                    self._stats.read_failures += 1
                    self._read_only = True
                    self._report(self._log.warning, "Session read failed, request is read-only", error)
            else:
                value = result.unwrap()
                if is_document(value):
                    snapshot = copy.deepcopy(value)
                elif value is not None:
                    self._stats.malformed_reads += 1
                    error = DecodeError.not_a_document("stored session", type(value).__name__)
                    self._report(self._log.warning, "Stored session malformed, starting empty", error)

            self._snapshot = snapshot
            return copy.deepcopy(snapshot)

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    async def write(self, session_id: str, final_state: Document) -> bool:
        """
        Merge this request's changes into the stored session.

        Returns:
            True if stored (or nothing needed storing), False if the final
            state was not a Document or the final store call failed.
        """
        key = self.key_for(session_id)

        with self._log.context(session_key=key):
            if self._read_only:
                self._stats.skipped_writes += 1
                self._log.debug("Session is read-only, write skipped")
                return True

            if not is_document(final_state):
                error = DecodeError.not_a_document("final state", type(final_state).__name__)
                self._report(self._log.error, "Write aborted", error)
                return False

            snapshot = self._snapshot if self._snapshot is not None else {}
            changes = compute_changes(snapshot, final_state)
            if not changes:
                self._stats.noop_writes += 1
                return True

            self._stats.writes += 1
            external = await self._fetch_external(key, snapshot)
            merged = self._merge(snapshot, changes, external)

            result = await self._guarded(
                "set", key,
                lambda: self._store.set(key, merged, self._config.ttl_seconds),
            )
            if result.is_err():
                self._stats.store_failures += 1
                self._report(self._log.error, "Session store failed, changes lost", result.error)
                return False

            self._log.debug("Session merged", changed_keys=sorted(changes))
            return True

    async def _fetch_external(self, key: str, snapshot: Document) -> Document:
        """Latest committed state, or a copy of the snapshot if unavailable."""
        result = await self._guarded("get", key, lambda: self._store.get(key))

        if result.is_err():
            self._stats.refetch_fallbacks += 1
            self._report(self._log.warning, "Re-fetch failed, merging onto snapshot", result.error)
            return copy.deepcopy(snapshot)

        value = result.unwrap()
        if value is None:
            return {}
        if not is_document(value):
            self._stats.refetch_fallbacks += 1
            error = DecodeError.not_a_document("stored session", type(value).__name__)
            self._report(self._log.warning, "Re-fetched session malformed, merging onto snapshot", error)
            return copy.deepcopy(snapshot)
        return copy.deepcopy(value)

    def _merge(self, snapshot: Document, changes: ChangeSet, external: Document) -> Document:
        """Apply changes to external in place, key by key."""
        for k, change in changes.items():
            initial = snapshot.get(k, ABSENT)
            current = external.get(k, ABSENT)

            if deep_equal(current, initial):
                value = change
            else:
                self._stats.conflicts += 1
                value = self._resolve(k, initial, change, current)

            if value is REMOVED or value is ABSENT:
                external.pop(k, None)
            else:
                external[k] = copy.deepcopy(value)
        return external

    def _resolve(self, key: str, initial: Any, new: Any, external: Any) -> Any:
        try:
            return self._resolver(key, initial, new, external)
        except Exception as e:
            self._stats.resolver_failures += 1
            error = ResolverError.failed(key, e)
            self._report(self._log.warning, "Conflict resolver failed, new value wins", error)
            return new

    # -------------------------------------------------------------------------
    # Destroy
    # -------------------------------------------------------------------------

    async def destroy(self, session_id: str) -> bool:
        """Delete the stored session. Returns False on store failure."""
        key = self.key_for(session_id)

        with self._log.context(session_key=key):
            result = await self._guarded("delete", key, lambda: self._store.delete(key))
            if result.is_err():
                self._stats.store_failures += 1
                self._report(self._log.error, "Session destroy failed", result.error)
                return False
            return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _guarded(
        self,
        operation: str,
        key: str,
        call: Callable[[], Awaitable[Result[Any, Any]]],
    ) -> Result[Any, Any]:
        """Run a store call, turning a raised exception into Err(StoreError)."""
        try:
            return await call()
        except Exception as e:
            return Err(StoreError.backend_failure(operation, key, cause=e))

    def _report(
        self,
        log: Callable[..., None],
        message: str,
        error: SessionMergeError,
    ) -> None:
        log(
            f"{message}: {error}",
            error_code=error.code.name,
            error_id=error.error_id,
        )
