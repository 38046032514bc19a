"""Tests for the Redis vector store against an in-process fake client."""

import math

import pytest

from agentmemory.errors import DimensionMismatchError
from agentmemory.providers.vector_stores import RedisStore
from agentmemory.providers.vector_stores import redis as redis_module


def _b(value):
    if isinstance(value, bytes):
        return value
    return str(value).encode()


class FakeRedis:
    """The subset of ``redis.asyncio.Redis`` the store uses, returning bytes."""

    def __init__(self):
        self.data = {}
        self.closed = False

    async def ping(self):
        return True

    async def zscore(self, key, member):
        return self.data.get(key, {}).get(_b(member))

    async def incr(self, key):
        value = int(self.data.get(key, b"0")) + 1
        self.data[key] = _b(value)
        return value

    async def zadd(self, key, mapping):
        zset = self.data.setdefault(key, {})
        for member, score in mapping.items():
            zset[_b(member)] = float(score)

    async def zrange(self, key, start, end):
        zset = self.data.get(key, {})
        members = sorted(zset, key=zset.get)
        return members[start:] if end == -1 else members[start:end + 1]

    async def zrem(self, key, member):
        self.data.get(key, {}).pop(_b(member), None)

    async def zcard(self, key):
        return len(self.data.get(key, {}))

    async def hset(self, key, mapping):
        record = self.data.setdefault(key, {})
        for field, value in mapping.items():
            record[_b(field)] = _b(value)

    async def hgetall(self, key):
        return dict(self.data.get(key, {}))

    async def hget(self, key, field):
        return self.data.get(key, {}).get(_b(field))

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = _b(value)

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
async def redis_store(fake_redis):
    s = RedisStore({"collection_name": "test", "dimension": 2}, client=fake_redis)
    await s.initialize()
    yield s
    await s.shutdown()


class TestRedisStore:
    """Tests that the Redis backend matches reference semantics."""

    async def test_ranking(self, redis_store):
        await redis_store.insert(
            [[1.0, 0.0], [0.0, 1.0], [1.0, 1.0], [0.0, 0.0]],
            ["a", "b", "c", "zero"],
            [{}, {}, {}, {}],
        )

        hits = await redis_store.search([1.0, 0.0], limit=4)

        assert [h.id for h in hits] == ["a", "c", "b", "zero"]
        assert hits[1].score == pytest.approx(math.sqrt(0.5))
        assert math.isnan(hits[3].score)

    async def test_upsert_keeps_position(self, redis_store):
        await redis_store.insert([[1.0, 0.0], [1.0, 0.0]], ["a", "b"], [{"v": 1}, {}])
        await redis_store.insert([[1.0, 0.0]], ["a"], [{"v": 2}])

        results, count = await redis_store.list()
        assert [r.id for r in results] == ["a", "b"]
        assert results[0].payload == {"v": 2}

    async def test_filters(self, redis_store):
        await redis_store.insert(
            [[1.0, 0.0], [1.0, 0.0]],
            ["a", "b"],
            [{"user_id": "u1"}, {"user_id": "u2"}],
        )
        hits = await redis_store.search([1.0, 0.0], filters={"user_id": "u2"})
        assert [h.id for h in hits] == ["b"]

    async def test_dimension_mismatch_writes_nothing(self, redis_store):
        with pytest.raises(DimensionMismatchError):
            await redis_store.insert([[1.0, 0.0], [1.0]], ["a", "b"], [{}, {}])
        assert await redis_store.list() == ([], 0)

    async def test_get_update_delete(self, redis_store):
        await redis_store.insert([[1.0, 0.0]], ["a"], [{"v": 1}])
        await redis_store.update("a", [0.0, 1.0], {"v": 2})
        assert (await redis_store.get("a")).payload == {"v": 2}

        await redis_store.delete("a")
        await redis_store.delete("a")
        assert await redis_store.get("a") is None

    async def test_delete_col(self, redis_store, fake_redis):
        await redis_store.insert([[1.0, 0.0]], ["a"], [{}])
        await redis_store.set_user_id("alice")

        await redis_store.delete_col()

        assert fake_redis.data == {}

    async def test_user_id(self, redis_store):
        generated = await redis_store.get_user_id()
        assert await redis_store.get_user_id() == generated

        await redis_store.set_user_id("alice")
        assert await redis_store.get_user_id() == "alice"

    async def test_collections_use_separate_keys(self, fake_redis):
        notes = RedisStore({"collection_name": "notes", "dimension": 2}, client=fake_redis)
        facts = RedisStore({"collection_name": "facts", "dimension": 2}, client=fake_redis)

        await notes.insert([[1.0, 0.0]], ["a"], [{}])

        assert await facts.get("a") is None
        assert await facts.list() == ([], 0)

    async def test_injected_client_not_closed(self, fake_redis):
        s = RedisStore({"dimension": 2}, client=fake_redis)
        await s.initialize()
        await s.shutdown()
        assert not fake_redis.closed

    async def test_connects_from_url(self, monkeypatch, fake_redis):
        """Test that a store without a client opens one from redis_url and owns it."""
        urls = []

        def from_url(url):
            urls.append(url)
            return fake_redis

        monkeypatch.setattr(redis_module.aioredis, "from_url", from_url)
        s = RedisStore({"dimension": 2, "redis_url": "redis://cache:6379/2"})
        await s.initialize()
        await s.shutdown()

        assert urls == ["redis://cache:6379/2"]
        assert fake_redis.closed
