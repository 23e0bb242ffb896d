import json
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import String, cast, func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import col, select

from catalog.config import Config, logger
from catalog.data.schemas import (
    Difficulty,
    DifficultyStats,
    Problem,
    ProblemCreate,
    ProblemFilters,
    ProblemResponse,
    ProblemStatistics,
    ProblemUpdate,
)
from catalog.data.schemas.base import utcnow
from catalog.errors import ConflictException, DatabaseException

problem_logger = logger.getChild("problem_repository")

# Columns an update may not blank out.
NON_NULLABLE_FIELDS = {
    "title",
    "title_slug",
    "difficulty",
    "paid_only",
    "category",
    "topics",
    "hints",
    "likes",
    "dislikes",
}


def _has_topic(topic: str):
    # Topics are a JSON array; match the encoded element including its quotes.
    return cast(col(Problem.topics), String).contains(json.dumps(topic), autoescape=True)


def _matches_search(query: str):
    return or_(
        col(Problem.title).icontains(query, autoescape=True),
        col(Problem.title_slug).icontains(query, autoescape=True),
    )


def _filter_conditions(filters: Optional[ProblemFilters]) -> list:
    conditions = []
    if filters is None:
        return conditions
    if filters.difficulty:
        conditions.append(col(Problem.difficulty) == filters.difficulty.value)
    if filters.topic:
        conditions.append(_has_topic(filters.topic))
    if filters.search:
        conditions.append(_matches_search(filters.search))
    return conditions


def _to_responses(problems: Sequence[Problem]) -> List[ProblemResponse]:
    return [ProblemResponse.model_validate(problem) for problem in problems]


class ProblemRepository:
    """Persistent store adapter for problems.

    Every call opens its own session so independent reads can run concurrently.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def find_page(
        self, filters: Optional[ProblemFilters], offset: int, limit: int
    ) -> List[ProblemResponse]:
        """Returns one page of problems matching the filters, ordered by id."""
        try:
            async with self._session_factory() as session:
                statement = (
                    select(Problem)
                    .where(*_filter_conditions(filters))
                    .order_by(col(Problem.id).asc())
                    .offset(offset)
                    .limit(limit)
                )
                problems = (await session.exec(statement)).all()
                problem_logger.debug(
                    f"Fetched {len(problems)} problems, offset: {offset}, limit: {limit}"
                )
                return _to_responses(problems)
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to list problems: {str(e)}")
            raise DatabaseException(detail="Failed to list problems")

    async def count(self, filters: Optional[ProblemFilters] = None) -> int:
        try:
            async with self._session_factory() as session:
                statement = (
                    select(func.count())
                    .select_from(Problem)
                    .where(*_filter_conditions(filters))
                )
                return (await session.exec(statement)).one()
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to count problems: {str(e)}")
            raise DatabaseException(detail="Failed to count problems")

    async def find_by_id(self, problem_id: int) -> Optional[ProblemResponse]:
        try:
            async with self._session_factory() as session:
                problem = await session.get(Problem, problem_id)
                if problem is None:
                    return None
                return ProblemResponse.model_validate(problem)
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to fetch problem {problem_id}: {str(e)}")
            raise DatabaseException(detail=f"Failed to fetch problem {problem_id}")

    async def find_by_slug(self, slug: str) -> Optional[ProblemResponse]:
        try:
            async with self._session_factory() as session:
                statement = select(Problem).where(col(Problem.title_slug) == slug)
                problem = (await session.exec(statement)).first()
                if problem is None:
                    return None
                return ProblemResponse.model_validate(problem)
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to fetch problem '{slug}': {str(e)}")
            raise DatabaseException(detail=f"Failed to fetch problem '{slug}'")

    async def find_by_ids(self, problem_ids: Sequence[int]) -> List[ProblemResponse]:
        """Batch lookup for per-request loaders; missing ids are skipped, result ordered by id.

        Not used by the REST routes. It backs batched problem resolution for
        clients that fetch many problems per request.
        """
        if not problem_ids:
            return []
        try:
            async with self._session_factory() as session:
                statement = (
                    select(Problem)
                    .where(col(Problem.id).in_(list(problem_ids)))
                    .order_by(col(Problem.id).asc())
                )
                return _to_responses((await session.exec(statement)).all())
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to fetch problems by ids: {str(e)}")
            raise DatabaseException(detail="Failed to fetch problems")

    async def find_by_difficulty(self, difficulty: Difficulty) -> List[ProblemResponse]:
        return await self._find_all(
            [col(Problem.difficulty) == difficulty.value], f"difficulty {difficulty.value}"
        )

    async def find_by_topic(self, topic: str) -> List[ProblemResponse]:
        """Exact topic membership; a blank topic matches nothing."""
        if not topic.strip():
            return []
        return await self._find_all([_has_topic(topic)], f"topic '{topic}'")

    async def _find_all(self, conditions: list, description: str) -> List[ProblemResponse]:
        try:
            async with self._session_factory() as session:
                statement = (
                    select(Problem)
                    .where(*conditions)
                    .order_by(col(Problem.id).asc())
                )
                return _to_responses((await session.exec(statement)).all())
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to list problems for {description}: {str(e)}")
            raise DatabaseException(detail="Failed to list problems")

    async def search(
        self, query: str, limit: int = Config.SEARCH_RESULT_LIMIT
    ) -> List[ProblemResponse]:
        """Case-insensitive title/slug search, most liked first."""
        try:
            async with self._session_factory() as session:
                statement = (
                    select(Problem)
                    .where(_matches_search(query))
                    .order_by(col(Problem.likes).desc(), col(Problem.id).asc())
                    .limit(limit)
                )
                return _to_responses((await session.exec(statement)).all())
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to search problems for '{query}': {str(e)}")
            raise DatabaseException(detail="Failed to search problems")

    async def create(self, data: ProblemCreate) -> ProblemResponse:
        values = data.model_dump(mode="json")
        try:
            async with self._session_factory() as session:
                problem = Problem(**values)
                session.add(problem)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    problem_logger.warning(
                        f"Duplicate problem '{data.title_slug}': {str(e.orig)}"
                    )
                    raise ConflictException(
                        detail=f"Problem '{data.title_slug}' already exists"
                    )
                await session.refresh(problem)
                problem_logger.info(f"Created problem with ID: {problem.id}")
                return ProblemResponse.model_validate(problem)
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to create problem: {str(e)}")
            raise DatabaseException(detail="Failed to create problem")

    async def update(
        self, problem_id: int, data: ProblemUpdate
    ) -> Optional[ProblemResponse]:
        """Applies a partial update; returns None when the problem does not exist."""
        values: Dict[str, Any] = {
            field: value
            for field, value in data.model_dump(exclude_unset=True, mode="json").items()
            if value is not None or field not in NON_NULLABLE_FIELDS
        }
        try:
            async with self._session_factory() as session:
                problem = await session.get(Problem, problem_id)
                if problem is None:
                    return None

                for field, value in values.items():
                    setattr(problem, field, value)
                problem.updated_at = utcnow()
                session.add(problem)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    problem_logger.warning(
                        f"Update of problem {problem_id} violates uniqueness: {str(e.orig)}"
                    )
                    raise ConflictException(
                        detail=f"Problem with slug '{values.get('title_slug')}' already exists"
                    )
                await session.refresh(problem)
                problem_logger.info(f"Updated problem with ID: {problem_id}")
                return ProblemResponse.model_validate(problem)
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to update problem {problem_id}: {str(e)}")
            raise DatabaseException(detail=f"Failed to update problem {problem_id}")

    async def delete(self, problem_id: int) -> bool:
        try:
            async with self._session_factory() as session:
                problem = await session.get(Problem, problem_id)
                if problem is None:
                    return False
                await session.delete(problem)
                await session.commit()
                problem_logger.info(f"Deleted problem with ID: {problem_id}")
                return True
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to delete problem {problem_id}: {str(e)}")
            raise DatabaseException(detail=f"Failed to delete problem {problem_id}")

    async def aggregate_statistics(self) -> ProblemStatistics:
        """Counts problems per difficulty and collects the distinct topic set."""
        try:
            async with self._session_factory() as session:
                by_difficulty = (
                    await session.exec(
                        select(col(Problem.difficulty), func.count()).group_by(
                            col(Problem.difficulty)
                        )
                    )
                ).all()
                topic_lists = (await session.exec(select(col(Problem.topics)))).all()
        except SQLAlchemyError as e:
            problem_logger.error(f"Failed to aggregate statistics: {str(e)}")
            raise DatabaseException(detail="Failed to aggregate problem statistics")

        counts = {difficulty: count for difficulty, count in by_difficulty}
        topics = sorted({topic for topic_list in topic_lists for topic in topic_list or []})
        return ProblemStatistics(
            total=sum(counts.values()),
            by_difficulty=DifficultyStats(
                easy=counts.get(Difficulty.EASY.value, 0),
                medium=counts.get(Difficulty.MEDIUM.value, 0),
                hard=counts.get(Difficulty.HARD.value, 0),
            ),
            total_topics=len(topics),
            topics=topics,
        )
