from .cache_keys import CacheKeys
from .dependency import get_problem_repository, get_problem_service
from .invalidation import ProblemCacheInvalidator
from .problem import ProblemService

__all__ = [
    "CacheKeys",
    "ProblemCacheInvalidator",
    "ProblemService",
    "get_problem_repository",
    "get_problem_service",
]
