from typing import List, Optional

from catalog.business.services.cache_keys import CacheKeys
from catalog.config import logger
from catalog.data.repositories.redis import RedisCache
from catalog.data.schemas import ProblemResponse

invalidation_logger = logger.getChild("cache_invalidation")


class ProblemCacheInvalidator:
    """Purges cache entries made stale by a committed problem write.

    Called after the store commit and awaited before the write returns.
    Failed purges are logged and not retried; affected entries then live
    until their TTL.
    """

    def __init__(self, cache: RedisCache):
        self.cache = cache

    async def problem_created(self, problem: ProblemResponse) -> bool:
        # A new id/slug has no single-record entry yet; only listings can be stale.
        return await self._purge(problem.id, [])

    async def problem_updated(
        self, problem: ProblemResponse, previous_slug: Optional[str] = None
    ) -> bool:
        keys = [
            CacheKeys.problem_by_id(problem.id),
            CacheKeys.problem_by_slug(problem.title_slug),
        ]
        if previous_slug and previous_slug != problem.title_slug:
            keys.append(CacheKeys.problem_by_slug(previous_slug))
        return await self._purge(problem.id, keys)

    async def problem_deleted(self, problem: ProblemResponse) -> bool:
        keys = [
            CacheKeys.problem_by_id(problem.id),
            CacheKeys.problem_by_slug(problem.title_slug),
        ]
        return await self._purge(problem.id, keys)

    async def _purge(self, problem_id: int, keys: List[str]) -> bool:
        records_purged = await self.cache.delete(*keys)
        listings_purged = await self.cache.delete_pattern(CacheKeys.listings_pattern())
        if not (records_purged and listings_purged):
            invalidation_logger.error(
                f"Cache invalidation incomplete for problem {problem_id}; "
                f"stale entries may be served until TTL expiry (keys: {keys})"
            )
            return False
        invalidation_logger.debug(f"Invalidated cache for problem {problem_id}: {keys}")
        return True
