from .health import health_router
from .problem import problem_router

__all__ = [
    "health_router",
    "problem_router",
]
