from catalog.data.repositories.redis import RedisCache, redis_cache


def get_redis_cache() -> RedisCache:
    """Get the process-wide RedisCache instance."""
    if redis_cache is None:
        raise RuntimeError("RedisCache is not initialized")
    return redis_cache
