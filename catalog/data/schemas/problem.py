from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import Field as PydanticField
from sqlalchemy import JSON, Column, String
from sqlmodel import Field

from catalog.data.schemas.base import TimestampedModel
from catalog.data.schemas.enums import Difficulty

SLUG_PATTERN = r"^[a-z0-9-]+$"


class Problem(TimestampedModel, table=True):
    """
    Represents a coding-interview problem in the catalog.
    Topics and hints are stored as JSON arrays; topics carry set semantics.
    """

    __tablename__ = "problems"

    id: Optional[int] = Field(default=None, primary_key=True)
    frontend_question_id: Optional[str] = Field(default=None)
    title: str = Field(nullable=False)
    title_slug: str = Field(nullable=False, unique=True, index=True)
    difficulty: Difficulty = Field(sa_column=Column(String(16), nullable=False, index=True))
    paid_only: bool = Field(default=False)

    url: Optional[str] = Field(default=None)
    description_url: Optional[str] = Field(default=None)
    solution_url: Optional[str] = Field(default=None)
    solution_code_url: Optional[str] = Field(default=None)

    description: Optional[str] = Field(default=None)
    solution: Optional[str] = Field(default=None)
    solution_code_python: Optional[str] = Field(default=None)
    solution_code_java: Optional[str] = Field(default=None)
    solution_code_cpp: Optional[str] = Field(default=None)

    category: str = Field(default="Algorithms")
    acceptance_rate: Optional[float] = Field(default=None)

    topics: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    hints: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    likes: int = Field(default=0, nullable=False)
    dislikes: int = Field(default=0, nullable=False)

    total_accepted: Optional[str] = Field(default=None)
    total_submission: Optional[str] = Field(default=None)
    similar_questions: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))


class ProblemBase(BaseModel):
    frontend_question_id: Optional[str] = None
    title: str = PydanticField(min_length=1, max_length=200)
    title_slug: str = PydanticField(min_length=1, max_length=200, pattern=SLUG_PATTERN)
    difficulty: Difficulty
    paid_only: bool = False
    url: Optional[str] = None
    description_url: Optional[str] = None
    solution_url: Optional[str] = None
    solution_code_url: Optional[str] = None
    description: Optional[str] = None
    solution: Optional[str] = None
    solution_code_python: Optional[str] = None
    solution_code_java: Optional[str] = None
    solution_code_cpp: Optional[str] = None
    category: str = "Algorithms"
    acceptance_rate: Optional[float] = PydanticField(default=None, ge=0, le=100)
    topics: List[str] = PydanticField(default_factory=list)
    hints: List[str] = PydanticField(default_factory=list)
    likes: int = PydanticField(default=0, ge=0)
    dislikes: int = PydanticField(default=0, ge=0)
    total_accepted: Optional[str] = None
    total_submission: Optional[str] = None
    similar_questions: Optional[Any] = None

    @field_validator("topics")
    @classmethod
    def dedupe_topics(cls, topics: List[str]) -> List[str]:
        return list(dict.fromkeys(topics))


class ProblemCreate(ProblemBase):
    """Ids are always assigned by the store; an `id` in the payload is ignored."""


class ProblemUpdate(BaseModel):
    frontend_question_id: Optional[str] = None
    title: Optional[str] = PydanticField(default=None, min_length=1, max_length=200)
    title_slug: Optional[str] = PydanticField(
        default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN
    )
    difficulty: Optional[Difficulty] = None
    paid_only: Optional[bool] = None
    url: Optional[str] = None
    description_url: Optional[str] = None
    solution_url: Optional[str] = None
    solution_code_url: Optional[str] = None
    description: Optional[str] = None
    solution: Optional[str] = None
    solution_code_python: Optional[str] = None
    solution_code_java: Optional[str] = None
    solution_code_cpp: Optional[str] = None
    category: Optional[str] = None
    acceptance_rate: Optional[float] = PydanticField(default=None, ge=0, le=100)
    topics: Optional[List[str]] = None
    hints: Optional[List[str]] = None
    likes: Optional[int] = PydanticField(default=None, ge=0)
    dislikes: Optional[int] = PydanticField(default=None, ge=0)
    total_accepted: Optional[str] = None
    total_submission: Optional[str] = None
    similar_questions: Optional[Any] = None

    @field_validator("topics")
    @classmethod
    def dedupe_topics(cls, topics: Optional[List[str]]) -> Optional[List[str]]:
        if topics is None:
            return None
        return list(dict.fromkeys(topics))


class ProblemResponse(ProblemBase):
    id: int
    title: str
    title_slug: str
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class ProblemFilters(BaseModel):
    """Optional predicates narrowing a paginated problem listing."""

    difficulty: Optional[Difficulty] = None
    topic: Optional[str] = None
    search: Optional[str] = None

    @field_validator("topic", "search", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedProblems(BaseModel):
    data: List[ProblemResponse]
    pagination: Pagination


class DifficultyStats(BaseModel):
    easy: int = 0
    medium: int = 0
    hard: int = 0


class ProblemStatistics(BaseModel):
    total: int
    by_difficulty: DifficultyStats
    total_topics: int
    topics: List[str]
