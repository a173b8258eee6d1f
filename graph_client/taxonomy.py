"""
Category ↔ provider entity-type taxonomy.

The graph provider classifies entities with ``urn:entity:*`` type tags.
These tables map the five preference categories onto those tags and back.
"""

from __future__ import annotations
from typing import Dict, Optional, Sequence, Tuple

from profile_engine.contracts.entities import Category


CATEGORY_TYPE_MAP: Dict[Category, str] = {
    Category.MUSIC: "urn:entity:artist",
    Category.MOVIES: "urn:entity:movie",
    Category.FOOD: "urn:entity:place",
    Category.TRAVEL: "urn:entity:destination",
    Category.BOOKS: "urn:entity:book",
}

# Types tried in order when a recommendation request has too little signal
RECOMMENDATION_FALLBACK_TYPES: Dict[Category, Tuple[str, ...]] = {
    Category.MUSIC: ("urn:entity:artist", "urn:entity:album"),
    Category.MOVIES: ("urn:entity:movie", "urn:entity:tv_show", "urn:entity:director"),
    Category.FOOD: ("urn:entity:place", "urn:entity:locality", "urn:entity:brand"),
    Category.TRAVEL: ("urn:entity:destination", "urn:entity:place", "urn:entity:locality"),
    Category.BOOKS: ("urn:entity:book", "urn:entity:author"),
}

TYPE_CATEGORY_MAP: Dict[str, Category] = {
    "urn:entity:artist": Category.MUSIC,
    "urn:entity:album": Category.MUSIC,
    "urn:entity:movie": Category.MOVIES,
    "urn:entity:tv_show": Category.MOVIES,
    "urn:entity:director": Category.MOVIES,
    "urn:entity:actor": Category.MOVIES,
    "urn:entity:videogame": Category.MOVIES,
    "urn:entity:place": Category.FOOD,
    "urn:entity:brand": Category.FOOD,
    "urn:entity:destination": Category.TRAVEL,
    "urn:entity:locality": Category.TRAVEL,
    "urn:entity:book": Category.BOOKS,
    "urn:entity:author": Category.BOOKS,
    "urn:entity:podcast": Category.BOOKS,
}


def category_from_types(types: Sequence[str]) -> Optional[Category]:
    """First provider type with a known category, or None."""
    for entity_type in types:
        category = TYPE_CATEGORY_MAP.get(entity_type)
        if category is not None:
            return category
    return None


def category_mapping_used() -> Tuple[Tuple[str, str], ...]:
    """Category → type pairs in canonical order, for diagnostics."""
    return tuple((category.value, entity_type) for category, entity_type in CATEGORY_TYPE_MAP.items())
