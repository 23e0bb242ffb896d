from .base import TimestampedModel
from .enums import Difficulty
from .identifier import IdentifierKind, ProblemIdentifier
from .problem import (
    DifficultyStats,
    PaginatedProblems,
    Pagination,
    Problem,
    ProblemCreate,
    ProblemFilters,
    ProblemResponse,
    ProblemStatistics,
    ProblemUpdate,
)

__all__ = [
    "TimestampedModel",
    "Difficulty",
    "IdentifierKind",
    "ProblemIdentifier",
    "Problem",
    "ProblemCreate",
    "ProblemUpdate",
    "ProblemResponse",
    "ProblemFilters",
    "Pagination",
    "PaginatedProblems",
    "DifficultyStats",
    "ProblemStatistics",
]
