"""
Shared fixtures: backing store, recording store double, engine factory.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import pytest

from sessionmerge.core.config import SessionConfig
from sessionmerge.merge.engine import SessionMergeEngine
from sessionmerge.merge.resolver import ConflictResolver
from sessionmerge.storage.backends import InMemoryKeyValueStore
from sessionmerge.storage.codec import JsonCodec
from sessionmerge.tests.support import RecordingStore


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(codec=JsonCodec())


@pytest.fixture
def store(memory_store: InMemoryKeyValueStore) -> RecordingStore:
    return RecordingStore(memory_store)


@pytest.fixture
def make_engine(store: RecordingStore) -> Callable[..., SessionMergeEngine]:
    """Engine factory bound to the shared recording store."""

    def _make(
        resolver: Optional[ConflictResolver] = None,
        config: Optional[SessionConfig] = None,
        target: Optional[Any] = None,
    ) -> SessionMergeEngine:
        return SessionMergeEngine(target or store, resolver=resolver, config=config)

    return _make
