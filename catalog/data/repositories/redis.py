from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from catalog.config import Config, logger

cache_logger = logger.getChild("cache")

SCAN_BATCH_SIZE = 500


class RedisCache:
    """Best-effort Redis cache.

    Every operation swallows Redis failures: reads degrade to a miss and
    writes or deletes report False. Callers never see a Redis exception.
    """

    def __init__(self, client: Optional[Redis] = None):
        self.redis = client

    async def connect(self) -> bool:
        if self.redis is None:
            self.redis = Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=Config.REDIS_DB,
                password=Config.REDIS_PASSWORD,
                decode_responses=True,
            )
        return await self.ping()

    async def close(self) -> None:
        if self.redis is not None:
            try:
                await self.redis.aclose()
            except RedisError as e:
                cache_logger.warning(f"Redis close failed: {e}")
            self.redis = None

    async def ping(self) -> bool:
        if self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            cache_logger.warning(f"Redis ping failed: {e}")
            return False

    async def get(self, key: str) -> Optional[str]:
        if self.redis is None:
            return None
        try:
            return await self.redis.get(key)
        except (RedisError, UnicodeDecodeError) as e:
            cache_logger.warning(f"Redis GET {key} failed: {e}")
            return None

    async def set(self, key: str, value: str, ttl: int) -> bool:
        if self.redis is None:
            return False
        try:
            await self.redis.set(name=key, value=value, ex=ttl)
            return True
        except RedisError as e:
            cache_logger.warning(f"Redis SET {key} failed: {e}")
            return False

    async def delete(self, *keys: str) -> bool:
        if not keys:
            return True
        if self.redis is None:
            return False
        try:
            await self.redis.delete(*keys)
            return True
        except RedisError as e:
            cache_logger.warning(f"Redis DEL {', '.join(keys)} failed: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> bool:
        """Deletes every key matching a glob pattern, scanning incrementally."""
        if self.redis is None:
            return False
        try:
            batch = []
            async for key in self.redis.scan_iter(match=pattern, count=SCAN_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= SCAN_BATCH_SIZE:
                    await self.redis.delete(*batch)
                    batch = []
            if batch:
                await self.redis.delete(*batch)
            return True
        except RedisError as e:
            cache_logger.warning(f"Redis DELETE PATTERN {pattern} failed: {e}")
            return False

    async def exists(self, key: str) -> bool:
        if self.redis is None:
            return False
        try:
            return await self.redis.exists(key) == 1
        except RedisError as e:
            cache_logger.warning(f"Redis EXISTS {key} failed: {e}")
            return False

    async def ttl(self, key: str) -> Optional[int]:
        """Seconds until the key expires, or None when missing, persistent or unknown."""
        if self.redis is None:
            return None
        try:
            remaining = await self.redis.ttl(key)
        except RedisError as e:
            cache_logger.warning(f"Redis TTL {key} failed: {e}")
            return None
        return remaining if remaining >= 0 else None


redis_cache = RedisCache()
