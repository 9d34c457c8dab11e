#!/usr/bin/env python3
"""
Session Merge demo

Two requests read the same session, change different keys and a shared
counter concurrently, then write back. The merged session keeps both
requests' edits.

Usage:
    python -m sessionmerge

    # Against Redis
    SESSIONMERGE_BACKEND=redis REDIS_HOST=localhost python -m sessionmerge
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

from sessionmerge.core.config import SessionMergeConfig
from sessionmerge.core.types import Document
from sessionmerge.host.handler import create_handler
from sessionmerge.merge.resolver import KeyedResolver, accumulate_numeric, union_lists
from sessionmerge.observability.logging import LogLevel, setup_logging
from sessionmerge.storage import RedisKeyValueStore, create_codec, create_store
from sessionmerge.storage.protocols import KeyValueStore


async def run_demo(
    config: Optional[SessionMergeConfig] = None,
    store: Optional[KeyValueStore] = None,
    session_id: str = "demo",
) -> Document:
    """
    Run two interleaved requests against one session.

    Returns:
        The merged session as stored after both writes.
    """
    config = config or SessionMergeConfig()
    owns_store = store is None
    if store is None:
        store = create_store(
            config.backend,
            redis_config=config.redis,
            codec=create_codec(config.codec),
        )

    if isinstance(store, RedisKeyValueStore) and not store.is_connected:
        connected = await store.connect()
        if connected.is_err():
            raise RuntimeError(f"Redis unavailable: {connected.error}")

    resolver = KeyedResolver({"visits": accumulate_numeric}, prefixes={"tags": union_lists})

    seed = create_handler(config, store=store, resolver=resolver)
    await seed.read(session_id)
    await seed.write(session_id, '{"user":"ada","visits":1,"tags":["new"]}')

    first = create_handler(config, store=store, resolver=resolver)
    second = create_handler(config, store=store, resolver=resolver)

    await first.read(session_id)
    await second.read(session_id)

    await first.write(session_id, '{"user":"ada","visits":2,"tags":["new","beta"],"theme":"dark"}')
    await second.write(session_id, '{"user":"ada","visits":2,"tags":["new","admin"],"lang":"en"}')

    final = create_handler(config, store=store, resolver=resolver)
    merged = await final.engine.read(session_id)

    print(f"first request stats:  {first.engine.stats}")
    print(f"second request stats: {second.engine.stats}")
    print(f"merged session:       {merged}")

    if owns_store and isinstance(store, RedisKeyValueStore):
        await store.close()
    return merged


async def main() -> None:
    config_result = SessionMergeConfig.from_env()
    if config_result.is_err():
        print(f"Configuration error: {config_result.error}")
        sys.exit(1)

    config = config_result.unwrap()
    validation = config.validate()
    if validation.is_err():
        print(f"Validation error: {validation.error}")
        sys.exit(1)

    setup_logging(
        LogLevel.from_name(config.observability.log_level),
        json_output=config.observability.log_json,
    )
    await run_demo(config)


def run() -> None:
    """Synchronous entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
