from fastapi import Depends
from sqlalchemy.ext.asyncio import async_sessionmaker

from catalog.business.services.problem import ProblemService
from catalog.data.repositories import (
    ProblemRepository,
    RedisCache,
    get_redis_cache,
    get_session_factory,
)


def get_problem_repository(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> ProblemRepository:
    return ProblemRepository(session_factory)


def get_problem_service(
    repository: ProblemRepository = Depends(get_problem_repository),
    cache: RedisCache = Depends(get_redis_cache),
) -> ProblemService:
    return ProblemService(repository, cache)
