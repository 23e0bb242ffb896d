from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from catalog.data.repositories import RedisCache, get_redis_cache, get_session_factory, ping_db

health_router = APIRouter(tags=["health"])


@health_router.get("/health", summary="Service health")
async def health(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    cache: RedisCache = Depends(get_redis_cache),
):
    """The cache is optional: losing it degrades the service but does not fail it."""
    database_ok = await ping_db(session_factory)
    cache_ok = await cache.ping()
    if not database_ok:
        status = "unhealthy"
    elif not cache_ok:
        status = "degraded"
    else:
        status = "ok"
    return {"status": status, "database": database_ok, "cache": cache_ok}
