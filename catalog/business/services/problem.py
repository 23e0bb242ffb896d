import asyncio
import math
from typing import Awaitable, Callable, List, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from catalog.business.services.cache_keys import CacheKeys
from catalog.business.services.invalidation import ProblemCacheInvalidator
from catalog.config import Config, logger
from catalog.data.repositories.problem import ProblemRepository
from catalog.data.repositories.redis import RedisCache
from catalog.data.schemas import (
    Difficulty,
    IdentifierKind,
    PaginatedProblems,
    Pagination,
    ProblemCreate,
    ProblemFilters,
    ProblemIdentifier,
    ProblemResponse,
    ProblemStatistics,
    ProblemUpdate,
)
from catalog.errors import ValidationException

problem_logger = logger.getChild("problem")

T = TypeVar("T")

PROBLEM_ADAPTER = TypeAdapter(ProblemResponse)
PROBLEM_LIST_ADAPTER = TypeAdapter(List[ProblemResponse])
PAGE_ADAPTER = TypeAdapter(PaginatedProblems)
STATS_ADAPTER = TypeAdapter(ProblemStatistics)


class ProblemService:
    """Read-through cache over the problem store.

    Reads consult Redis first and fall back to the store on a miss, caching
    the result. Writes go to the store, then purge stale cache entries before
    returning. Cache failures only cost latency; store failures propagate.
    """

    def __init__(
        self,
        repository: ProblemRepository,
        cache: RedisCache,
        invalidator: Optional[ProblemCacheInvalidator] = None,
    ):
        self.repository = repository
        self.cache = cache
        self.invalidator = invalidator or ProblemCacheInvalidator(cache)

    async def _read_through(
        self,
        key: str,
        adapter: TypeAdapter,
        ttl: int,
        loader: Callable[[], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                value = adapter.validate_json(cached)
                problem_logger.debug(f"Cache hit: {key}")
                return value
            except ValidationError as e:
                problem_logger.warning(f"Discarding malformed cache entry {key}: {e}")

        problem_logger.debug(f"Cache miss: {key}")
        value = await loader()
        if value is not None:
            await self.cache.set(key, adapter.dump_json(value).decode(), ttl)
        return value

    async def get_problems(
        self,
        page: int = 1,
        limit: int = Config.DEFAULT_PAGE_LIMIT,
        filters: Optional[ProblemFilters] = None,
    ) -> PaginatedProblems:
        """Returns one page of problems matching the filters, with pagination metadata."""
        if page < 1:
            raise ValidationException(detail="Page must be greater than 0")
        if limit < 1 or limit > Config.MAX_PAGE_LIMIT:
            raise ValidationException(
                detail=f"Limit must be between 1 and {Config.MAX_PAGE_LIMIT}"
            )
        filters = filters or ProblemFilters()

        async def load() -> PaginatedProblems:
            problems, total = await asyncio.gather(
                self.repository.find_page(filters, (page - 1) * limit, limit),
                self.repository.count(filters),
            )
            return PaginatedProblems(
                data=problems,
                pagination=Pagination(
                    page=page,
                    limit=limit,
                    total=total,
                    total_pages=math.ceil(total / limit),
                ),
            )

        return await self._read_through(
            CacheKeys.page(page, limit, filters), PAGE_ADAPTER, CacheKeys.TTL_PAGE, load
        )

    async def get_problem(self, identifier: ProblemIdentifier) -> Optional[ProblemResponse]:
        """Looks a problem up by id or slug. Not-found results are never cached."""

        async def load() -> Optional[ProblemResponse]:
            if identifier.kind is IdentifierKind.ID:
                return await self.repository.find_by_id(int(identifier.value))
            return await self.repository.find_by_slug(str(identifier.value))

        return await self._read_through(
            CacheKeys.problem(identifier), PROBLEM_ADAPTER, CacheKeys.TTL_PROBLEM, load
        )

    async def get_problems_by_difficulty(self, difficulty: Difficulty) -> List[ProblemResponse]:
        return await self._read_through(
            CacheKeys.by_difficulty(difficulty),
            PROBLEM_LIST_ADAPTER,
            CacheKeys.TTL_LISTING,
            lambda: self.repository.find_by_difficulty(difficulty),
        )

    async def get_problems_by_topic(self, topic: str) -> List[ProblemResponse]:
        if not topic or not topic.strip():
            raise ValidationException(detail="Topic is required")
        return await self._read_through(
            CacheKeys.by_topic(topic),
            PROBLEM_LIST_ADAPTER,
            CacheKeys.TTL_LISTING,
            lambda: self.repository.find_by_topic(topic),
        )

    async def search_problems(self, query: str) -> List[ProblemResponse]:
        """Title/slug search capped at the configured result limit, most liked first."""
        if not query or not query.strip():
            raise ValidationException(detail="Search query is required")
        query = query.strip()
        return await self._read_through(
            CacheKeys.search(query),
            PROBLEM_LIST_ADAPTER,
            CacheKeys.TTL_SEARCH,
            lambda: self.repository.search(query, Config.SEARCH_RESULT_LIMIT),
        )

    async def get_statistics(self) -> ProblemStatistics:
        return await self._read_through(
            CacheKeys.STATS,
            STATS_ADAPTER,
            CacheKeys.TTL_STATS,
            self.repository.aggregate_statistics,
        )

    async def create_problem(self, data: ProblemCreate) -> ProblemResponse:
        problem = await self.repository.create(data)
        await self.invalidator.problem_created(problem)
        problem_logger.info(f"Problem {problem.id} ({problem.title_slug}) created")
        return problem

    async def update_problem(
        self, problem_id: int, data: ProblemUpdate
    ) -> Optional[ProblemResponse]:
        """Updates a problem and purges both its old and new slug entries."""
        existing = await self.repository.find_by_id(problem_id)
        if existing is None:
            return None

        problem = await self.repository.update(problem_id, data)
        if problem is None:
            # Deleted between the lookup and the update.
            await self.invalidator.problem_deleted(existing)
            return None

        await self.invalidator.problem_updated(problem, previous_slug=existing.title_slug)
        problem_logger.info(f"Problem {problem_id} updated")
        return problem

    async def delete_problem(self, problem_id: int) -> bool:
        problem = await self.repository.find_by_id(problem_id)
        if problem is None:
            return False

        deleted = await self.repository.delete(problem_id)
        if deleted:
            await self.invalidator.problem_deleted(problem)
            problem_logger.info(f"Problem {problem_id} deleted")
        return deleted
