# Set environment variable to indicate we're running tests
import os

os.environ["TESTING"] = "True"

from unittest.mock import AsyncMock, MagicMock

import fakeredis.aioredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from catalog.business.services import ProblemService
from catalog.config import logger
from catalog.data.repositories import (
    ProblemRepository,
    RedisCache,
    get_redis_cache,
    get_session_factory,
)
from catalog.main import app


# SQLite file database per test; every repository call opens its own connection
@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def repository(session_factory):
    return ProblemRepository(session_factory)


@pytest_asyncio.fixture
async def fake_redis():
    client = fakeredis.aioredis.FakeRedis(
        server=fakeredis.FakeServer(), decode_responses=True
    )
    yield client
    await client.aclose()


@pytest.fixture
def cache(fake_redis):
    return RedisCache(client=fake_redis)


@pytest.fixture
def broken_redis():
    """A Redis client whose every command fails as if the server were down."""
    redis_instance = MagicMock()
    error = RedisConnectionError("Connection refused")
    for command in ("get", "set", "delete", "exists", "ttl", "ping", "aclose"):
        setattr(redis_instance, command, AsyncMock(side_effect=error))
    redis_instance.scan_iter = MagicMock(side_effect=error)
    return redis_instance


@pytest.fixture
def broken_cache(broken_redis):
    return RedisCache(client=broken_redis)


@pytest.fixture
def service(repository, cache):
    return ProblemService(repository, cache)


@pytest.fixture
def uncached_service(repository, broken_cache):
    return ProblemService(repository, broken_cache)


@pytest_asyncio.fixture
async def client(session_factory, cache):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_redis_cache] = lambda: cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    # Remove the overrides after the test
    app.dependency_overrides.clear()


# Disable logging during tests
@pytest.fixture(autouse=True)
def disable_logging():
    logger.disabled = True
    yield
    logger.disabled = False
