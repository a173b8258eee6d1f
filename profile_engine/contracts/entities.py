"""
Entity Contracts

Canonical shapes for cultural categories and graph provider entities.
All types are frozen; they are created per resolution call and never
mutated afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class Category(Enum):
    """The five preference categories collected at onboarding."""
    MUSIC = "music"
    MOVIES = "movies"
    FOOD = "food"
    TRAVEL = "travel"
    BOOKS = "books"

    @classmethod
    def parse(cls, value: "str | Category") -> Category:
        """Accept an enum member or its (case-insensitive) string value."""
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown category {value!r} (expected one of: {valid})")


ALL_CATEGORIES: Tuple[Category, ...] = tuple(Category)


def clamp_unit(value: float) -> float:
    """Clamp a float into [0, 1]."""
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class ResolvedEntity:
    """
    A graph provider entity in canonical form.

    INVARIANTS:
    - id is never empty
    - popularity, when present, lies in [0, 1]
    """
    id: str
    name: str
    category: Category
    popularity: Optional[float] = None
    types: Tuple[str, ...] = ()
    country: Optional[str] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("ResolvedEntity id must be a non-empty string")
        if self.popularity is not None:
            object.__setattr__(self, 'popularity', clamp_unit(float(self.popularity)))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.value,
            'popularity': self.popularity,
            'types': list(self.types),
            'location': {'country': self.country} if self.country else None,
            'tags': sorted(self.tags),
        }


@dataclass(frozen=True)
class RecommendedEntity:
    """One cross-category recommendation returned by the graph provider."""
    id: str
    score: float
    name: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("RecommendedEntity id must be a non-empty string")
        object.__setattr__(self, 'score', clamp_unit(float(self.score)))
