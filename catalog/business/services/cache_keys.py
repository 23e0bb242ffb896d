"""
Cache key and TTL definitions for the problem catalog.

Single-record keys live under ``problem:``; every listing, search and
statistics key lives under ``problems:`` so a write can purge them all with
one pattern.
"""

import json
from typing import Optional

from catalog.config import Config
from catalog.data.schemas import Difficulty, ProblemFilters, ProblemIdentifier


def normalize_search(query: str) -> str:
    """Search is case-insensitive, so queries differing only in case share a key."""
    return query.strip().lower()


class CacheKeys:
    PREFIX_PROBLEM = "problem"
    PREFIX_PROBLEMS = "problems"

    STATS = "problems:stats"

    TTL_PAGE = Config.CACHE_PAGE_TTL
    TTL_PROBLEM = Config.CACHE_PROBLEM_TTL
    TTL_LISTING = Config.CACHE_LISTING_TTL
    TTL_SEARCH = Config.CACHE_SEARCH_TTL
    TTL_STATS = Config.CACHE_STATS_TTL

    @staticmethod
    def canonical_filters(filters: Optional[ProblemFilters]) -> dict:
        if filters is None:
            return {}
        canonical = filters.model_dump(mode="json", exclude_none=True)
        if "search" in canonical:
            canonical["search"] = normalize_search(canonical["search"])
        return canonical

    @classmethod
    def page(cls, page: int, limit: int, filters: Optional[ProblemFilters] = None) -> str:
        shape = {"page": page, "limit": limit, "filters": cls.canonical_filters(filters)}
        return "problems:page:" + json.dumps(shape, sort_keys=True, separators=(",", ":"))

    @staticmethod
    def problem(identifier: ProblemIdentifier) -> str:
        return f"problem:{identifier.value}"

    @classmethod
    def problem_by_id(cls, problem_id: int) -> str:
        return cls.problem(ProblemIdentifier.by_id(problem_id))

    @classmethod
    def problem_by_slug(cls, slug: str) -> str:
        return cls.problem(ProblemIdentifier.by_slug(slug))

    @staticmethod
    def by_difficulty(difficulty: Difficulty) -> str:
        return f"problems:difficulty:{difficulty.value}"

    @staticmethod
    def by_topic(topic: str) -> str:
        return f"problems:topic:{topic}"

    @staticmethod
    def search(query: str) -> str:
        return f"problems:search:{normalize_search(query)}"

    @staticmethod
    def listings_pattern() -> str:
        """Pattern matching every listing, search and statistics key."""
        return "problems:*"
