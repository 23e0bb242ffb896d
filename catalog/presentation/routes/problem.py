from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from catalog.business.services import ProblemService, get_problem_service
from catalog.config import Config, logger
from catalog.data.schemas import (
    Difficulty,
    PaginatedProblems,
    ProblemCreate,
    ProblemFilters,
    ProblemIdentifier,
    ProblemResponse,
    ProblemStatistics,
    ProblemUpdate,
)
from catalog.errors import ResourceNotFoundException

problem_logger = logger.getChild("problem_routes")
problem_router = APIRouter(prefix="/problems", tags=["problems"])


@problem_router.get(
    "/",
    response_model=PaginatedProblems,
    summary="List problems",
    description="Lists problems with pagination, optionally filtered by difficulty, topic or search text.",
)
async def list_problems(
    page: int = Query(1, ge=1),
    limit: int = Query(Config.DEFAULT_PAGE_LIMIT, ge=1, le=Config.MAX_PAGE_LIMIT),
    difficulty: Optional[Difficulty] = None,
    topic: Optional[str] = None,
    search: Optional[str] = None,
    service: ProblemService = Depends(get_problem_service),
):
    filters = ProblemFilters(difficulty=difficulty, topic=topic, search=search)
    problem_logger.info(f"Listing problems page: {page}, limit: {limit}, filters: {filters}")
    return await service.get_problems(page, limit, filters)


@problem_router.get(
    "/search",
    response_model=List[ProblemResponse],
    summary="Search problems",
    description="Case-insensitive search over titles and slugs, most liked first.",
)
async def search_problems(
    q: str = Query(..., min_length=1, max_length=100),
    service: ProblemService = Depends(get_problem_service),
):
    return await service.search_problems(q)


@problem_router.get(
    "/stats",
    response_model=ProblemStatistics,
    summary="Problem statistics",
)
async def get_statistics(service: ProblemService = Depends(get_problem_service)):
    return await service.get_statistics()


@problem_router.get(
    "/difficulty/{difficulty}",
    response_model=List[ProblemResponse],
    summary="List problems by difficulty",
)
async def list_problems_by_difficulty(
    difficulty: Difficulty,
    service: ProblemService = Depends(get_problem_service),
):
    return await service.get_problems_by_difficulty(difficulty)


@problem_router.get(
    "/topic/{topic}",
    response_model=List[ProblemResponse],
    summary="List problems by topic",
)
async def list_problems_by_topic(
    topic: str,
    service: ProblemService = Depends(get_problem_service),
):
    return await service.get_problems_by_topic(topic)


@problem_router.get(
    "/{identifier}",
    response_model=ProblemResponse,
    summary="Get a problem",
    description="Retrieves a problem by its numeric ID or its title slug.",
)
async def get_problem(
    identifier: str,
    service: ProblemService = Depends(get_problem_service),
):
    problem = await service.get_problem(ProblemIdentifier.parse(identifier))
    if problem is None:
        raise ResourceNotFoundException(detail=f"Problem {identifier} not found")
    return problem


@problem_router.post(
    "/",
    response_model=ProblemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a problem",
)
async def create_problem(
    problem_data: ProblemCreate,
    service: ProblemService = Depends(get_problem_service),
):
    problem_logger.info(f"Creating problem '{problem_data.title_slug}'")
    return await service.create_problem(problem_data)


@problem_router.put(
    "/{problem_id}",
    response_model=ProblemResponse,
    summary="Update a problem",
)
async def update_problem(
    problem_id: int,
    problem_update: ProblemUpdate,
    service: ProblemService = Depends(get_problem_service),
):
    problem_logger.info(f"Updating problem ID: {problem_id}")
    problem = await service.update_problem(problem_id, problem_update)
    if problem is None:
        raise ResourceNotFoundException(detail=f"Problem {problem_id} not found")
    return problem


@problem_router.delete(
    "/{problem_id}",
    summary="Delete a problem",
)
async def delete_problem(
    problem_id: int,
    service: ProblemService = Depends(get_problem_service),
):
    problem_logger.info(f"Deleting problem ID: {problem_id}")
    if not await service.delete_problem(problem_id):
        raise ResourceNotFoundException(detail=f"Problem {problem_id} not found")
    return {"message": f"Problem {problem_id} deleted successfully"}
