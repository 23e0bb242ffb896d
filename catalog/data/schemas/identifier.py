from dataclasses import dataclass
from enum import Enum
from typing import Union


class IdentifierKind(str, Enum):
    ID = "id"
    SLUG = "slug"


@dataclass(frozen=True)
class ProblemIdentifier:
    """A problem reference: either its numeric id or its title slug.

    Both address the same record but are looked up and cached separately.
    """

    kind: IdentifierKind
    value: Union[int, str]

    @classmethod
    def by_id(cls, problem_id: int) -> "ProblemIdentifier":
        return cls(kind=IdentifierKind.ID, value=int(problem_id))

    @classmethod
    def by_slug(cls, slug: str) -> "ProblemIdentifier":
        return cls(kind=IdentifierKind.SLUG, value=slug)

    @classmethod
    def parse(cls, raw: str) -> "ProblemIdentifier":
        """All-digit text is an id, anything else is a slug."""
        raw = raw.strip()
        if raw.isascii() and raw.isdigit():
            return cls.by_id(int(raw))
        return cls.by_slug(raw)

    def __str__(self) -> str:
        return str(self.value)
