import fakeredis.aioredis
import pytest

from catalog.data.repositories import RedisCache


@pytest.mark.asyncio
async def test_set_get_and_ttl(cache):
    assert await cache.set("problem:1", '{"id": 1}', 600) is True

    assert await cache.get("problem:1") == '{"id": 1}'
    assert await cache.exists("problem:1") is True
    assert 0 < await cache.ttl("problem:1") <= 600


@pytest.mark.asyncio
async def test_missing_key(cache):
    assert await cache.get("problem:404") is None
    assert await cache.exists("problem:404") is False
    assert await cache.ttl("problem:404") is None


@pytest.mark.asyncio
async def test_ttl_unknown_for_persistent_key(cache, fake_redis):
    await fake_redis.set("problem:1", "{}")

    assert await cache.ttl("problem:1") is None


@pytest.mark.asyncio
async def test_delete_keys(cache):
    await cache.set("problem:1", "{}", 600)
    await cache.set("problem:two-sum", "{}", 600)

    assert await cache.delete("problem:1", "problem:two-sum") is True
    assert await cache.exists("problem:1") is False
    assert await cache.exists("problem:two-sum") is False
    assert await cache.delete() is True


@pytest.mark.asyncio
async def test_delete_pattern_only_touches_matching_keys(cache):
    for index in range(1200):
        await cache.set(f"problems:search:q{index}", "[]", 300)
    await cache.set("problems:stats", "{}", 600)
    await cache.set("problem:1", "{}", 600)

    assert await cache.delete_pattern("problems:*") is True

    assert await cache.exists("problems:search:q0") is False
    assert await cache.exists("problems:search:q1199") is False
    assert await cache.exists("problems:stats") is False
    assert await cache.exists("problem:1") is True


@pytest.mark.asyncio
async def test_failing_redis_degrades_to_miss(broken_cache):
    assert await broken_cache.get("problem:1") is None
    assert await broken_cache.set("problem:1", "{}", 600) is False
    assert await broken_cache.delete("problem:1") is False
    assert await broken_cache.delete_pattern("problems:*") is False
    assert await broken_cache.exists("problem:1") is False
    assert await broken_cache.ttl("problem:1") is None
    assert await broken_cache.ping() is False


@pytest.mark.asyncio
async def test_unconnected_cache_is_a_no_op():
    cache = RedisCache()

    assert await cache.get("problem:1") is None
    assert await cache.set("problem:1", "{}", 600) is False
    assert await cache.delete("problem:1") is False
    assert await cache.delete_pattern("problems:*") is False
    assert await cache.ping() is False


@pytest.mark.asyncio
async def test_close_releases_client():
    cache = RedisCache(client=fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer()))

    await cache.close()

    assert cache.redis is None
