from .database import close_db, get_session_factory, init_db, ping_db
from .problem import ProblemRepository
from .redis import RedisCache, redis_cache
from .redis_dependency import get_redis_cache

__all__ = [
    "init_db",
    "close_db",
    "ping_db",
    "get_session_factory",
    "ProblemRepository",
    "RedisCache",
    "redis_cache",
    "get_redis_cache",
]
