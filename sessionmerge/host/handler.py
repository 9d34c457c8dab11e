"""
Session Handler: Host Lifecycle Adapter

Thin shell a host request pipeline drives, one instance per request:

    open -> read -> (host works on the session) -> write -> close

open/close/gc are inert (the backend expires sessions by TTL). read and
write translate between the host's blob format and Documents and
delegate the merge to SessionMergeEngine.
"""

from __future__ import annotations

from typing import Optional, Union

from sessionmerge.core.config import SessionMergeConfig
from sessionmerge.host.boundary import BoundaryFormat, JsonBoundaryFormat
from sessionmerge.merge.engine import SessionMergeEngine
from sessionmerge.merge.resolver import ConflictResolver
from sessionmerge.observability.logging import StructuredLogger
from sessionmerge.storage import create_codec, create_store
from sessionmerge.storage.protocols import KeyValueStore


class SessionHandler:
    """
    Host-facing session handler.

    Example:
        handler = create_handler(config, store=store)
        blob = await handler.read("abc")
        ...
        ok = await handler.write("abc", new_blob)
    """

    __slots__ = ("_engine", "_boundary", "_log")

    def __init__(
        self,
        engine: SessionMergeEngine,
        boundary: Optional[BoundaryFormat] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._engine = engine
        self._boundary = boundary or JsonBoundaryFormat()
        self._log = logger or StructuredLogger("sessionmerge.handler")

    @property
    def engine(self) -> SessionMergeEngine:
        return self._engine

    @property
    def read_only(self) -> bool:
        return self._engine.read_only

    @read_only.setter
    def read_only(self, value: bool) -> None:
        self._engine.read_only = value

    # -------------------------------------------------------------------------
    # Lifecycle hooks (inert)
    # -------------------------------------------------------------------------

    async def open(self, save_path: str, name: str) -> bool:
        return True

    async def close(self) -> bool:
        return True

    async def gc(self, max_lifetime: int) -> bool:
        """Backend TTL already expires idle sessions."""
        return True

    # -------------------------------------------------------------------------
    # Session data
    # -------------------------------------------------------------------------

    async def read(self, session_id: str) -> str:
        """Encoded snapshot. Never fails; worst case an empty session."""
        document = await self._engine.read(session_id)
        encoded = self._boundary.encode(document)
        if encoded.is_ok():
            return encoded.unwrap()

        error = encoded.error
        self._log.error(
            f"Session not representable in host format, serving empty session: {error}",
            session_key=self._engine.key_for(session_id),
            error_code=error.code.name,
            error_id=error.error_id,
        )
        # Host never sees a partial session, so nothing of it may be written back
        self._engine.read_only = True
        return self._boundary.encode({}).unwrap_or("")

    async def write(self, session_id: str, data: Union[str, bytes]) -> bool:
        if self._engine.read_only:
            return True

        decoded = self._boundary.decode(data)
        if decoded.is_err():
            error = decoded.error
            self._log.error(
                f"Session write aborted, undecodable data: {error}",
                session_key=self._engine.key_for(session_id),
                error_code=error.code.name,
                error_id=error.error_id,
            )
            return False

        return await self._engine.write(session_id, decoded.unwrap())

    async def destroy(self, session_id: str) -> bool:
        return await self._engine.destroy(session_id)


def create_handler(
    config: Optional[SessionMergeConfig] = None,
    store: Optional[KeyValueStore] = None,
    resolver: Optional[ConflictResolver] = None,
    boundary: Optional[BoundaryFormat] = None,
    logger: Optional[StructuredLogger] = None,
) -> SessionHandler:
    """
    Build a handler for one request.

    Pass a shared, already-connected store; when omitted, a store is built
    from configuration (a Redis store must still be connected by the
    caller before use, so omitting it is mainly for in-memory setups).
    """
    config = config or SessionMergeConfig()
    if store is None:
        store = create_store(
            config.backend,
            redis_config=config.redis,
            codec=create_codec(config.codec),
        )
    engine = SessionMergeEngine(
        store,
        resolver=resolver,
        config=config.session,
        logger=logger,
    )
    return SessionHandler(engine, boundary=boundary, logger=logger)
