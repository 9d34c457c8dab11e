"""
End-to-end: the bundled demo against in-process backends.
"""

from sessionmerge.__main__ import run_demo
from sessionmerge.core.config import SessionMergeConfig
from sessionmerge.storage import BackendType, InMemoryKeyValueStore, JsonCodec, RedisKeyValueStore
from sessionmerge.storage import redis_store as redis_store_module
from sessionmerge.tests.support import FakeRedis

EXPECTED = {
    "user": "ada",
    "visits": 3,
    "tags": ["new", "beta", "admin"],
    "theme": "dark",
    "lang": "en",
}


async def test_demo_merges_both_requests(capsys):
    merged = await run_demo(store=InMemoryKeyValueStore(codec=JsonCodec()))

    assert merged == EXPECTED
    assert "merged session" in capsys.readouterr().out


async def test_demo_default_config():
    merged = await run_demo(session_id="other")
    assert merged["visits"] == 3


async def test_demo_leaves_caller_store_open():
    client = FakeRedis()
    store = RedisKeyValueStore(client=client)

    assert await run_demo(store=store) == EXPECTED
    assert store.is_connected
    assert not client.closed


async def test_demo_closes_store_it_built(monkeypatch):
    built = []

    def factory(**kwargs):
        built.append(FakeRedis())
        return built[-1]

    monkeypatch.setattr(redis_store_module.aioredis, "Redis", factory)

    assert await run_demo(SessionMergeConfig(backend=BackendType.REDIS)) == EXPECTED
    assert built[0].closed
