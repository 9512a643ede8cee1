import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from mpwatch.main import app
from mpwatch.services.cache.cache_keys import search_key
from mpwatch.services.cache.redis_cache import RedisCache
from mpwatch.services.documents.local_source import LocalDocumentSource

client = TestClient(app)


class FakeRedis:
    def __init__(self, fail: bool = False):
        self.kv = {}
        self.fail = fail

    async def get(self, k):
        if self.fail:
            raise RedisConnectionError("down")
        return self.kv.get(k)

    async def set(self, k, v, ex=None):
        if self.fail:
            raise RedisConnectionError("down")
        self.kv[k] = v

    async def ping(self):
        if self.fail:
            raise RedisConnectionError("down")
        return True


@pytest.mark.asyncio
async def test_json_roundtrip_through_redis():
    cache = RedisCache(FakeRedis())

    await cache.set_json("k", {"title": "Océan"}, ttl=60)
    hit = await cache.get_json("k")

    assert hit.hit is True
    assert hit.value == {"title": "Océan"}
    assert (await cache.get_json("other")).hit is False


@pytest.mark.asyncio
async def test_redis_errors_are_misses():
    cache = RedisCache(FakeRedis(fail=True))

    await cache.set_json("k", [1, 2], ttl=60)

    assert (await cache.get_json("k")).hit is False
    assert await cache.ping() is False


@pytest.mark.asyncio
async def test_corrupt_entry_is_a_miss():
    redis = FakeRedis()
    redis.kv["k"] = b"\xff not json"

    assert (await RedisCache(redis).get_json("k")).hit is False


def test_search_key_ignores_whitespace_and_filter_order():
    assert search_key(" pet  bottles ", 1, 10, ["b", "a"]) == search_key("pet bottles", 1, 10, ["a", "b"])
    assert search_key("pet", 1, 10, None) != search_key("pet", 2, 10, None)


def test_health_reports_services():
    app.state.document_source = LocalDocumentSource()
    app.state.cache = RedisCache(FakeRedis())

    r = client.get("/health")

    assert r.status_code == 200
    assert r.json() == {"status": "ok", "document_source": "LocalDocumentSource", "cache": True}
