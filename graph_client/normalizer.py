"""
Raw Entity Normalizer
=====================

The single place where loosely-typed provider JSON becomes a
ResolvedEntity or RecommendedEntity.

KNOWN SHAPE VARIANTS:
- ``entity_id`` or ``id`` as the identifier
- tags as plain strings or as tag objects (``name``, ``tag_id``, ``id``)
- popularity as a number, a numeric string, or missing
- location as an object with an optional ``country``
- types and tags as a list, a single value, or a malformed scalar (ignored)

GUARANTEES:
- Every raw item yields exactly one entity or None (never raises)
- popularity is clamped to [0, 1]
- category always lies in the five-category enum
"""

from __future__ import annotations
import logging
from typing import Any, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from profile_engine.contracts.entities import (
    Category,
    RecommendedEntity,
    ResolvedEntity,
    clamp_unit,
)

from .taxonomy import category_from_types

logger = logging.getLogger(__name__)


def _entity_id(raw: Mapping[str, Any]) -> Optional[str]:
    value = raw.get("entity_id") or raw.get("id")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _popularity(raw: Mapping[str, Any]) -> Optional[float]:
    value = raw.get("popularity")
    if value is None or isinstance(value, bool):
        return None
    try:
        return clamp_unit(float(value))
    except (TypeError, ValueError):
        return None


def _as_items(value: Any) -> Tuple[Any, ...]:
    """List-valued field as a tuple. A lone string or object counts as one item."""
    if not value:
        return ()
    if isinstance(value, (str, Mapping)):
        return (value,)
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(value)
    return ()


def _types(raw: Mapping[str, Any]) -> Tuple[str, ...]:
    return tuple(t for t in _as_items(raw.get("types")) if isinstance(t, str) and t)


def _country(raw: Mapping[str, Any]) -> Optional[str]:
    location = raw.get("location")
    if not isinstance(location, Mapping):
        return None
    country = location.get("country")
    if not country:
        return None
    return str(country).strip() or None


def _tag_text(tag: Any) -> Optional[str]:
    if isinstance(tag, str):
        text = tag
    elif isinstance(tag, Mapping):
        text = tag.get("name") or tag.get("tag_id") or tag.get("id")
    else:
        return None
    if text is None:
        return None
    text = str(text).strip()
    return text or None


def normalize_tags(tags: Any) -> FrozenSet[str]:
    """Plain-text tag set from strings or tag objects."""
    texts = (_tag_text(tag) for tag in _as_items(tags))
    return frozenset(text for text in texts if text)


def normalize_entity(
    raw: Any,
    fallback_category: Category
) -> Optional[ResolvedEntity]:
    """
    Canonical RawEntity → ResolvedEntity.

    Returns None for payloads without a usable identifier.
    """
    if not isinstance(raw, Mapping):
        return None

    entity_id = _entity_id(raw)
    if entity_id is None:
        logger.debug("Dropping provider entity without id: %r", raw.get("name"))
        return None

    types = _types(raw)
    return ResolvedEntity(
        id=entity_id,
        name=str(raw.get("name") or "").strip(),
        category=category_from_types(types) or fallback_category,
        popularity=_popularity(raw),
        types=types,
        country=_country(raw),
        tags=normalize_tags(raw.get("tags")),
    )


def normalize_entities(
    raw_items: Iterable[Any],
    fallback_category: Category
) -> List[ResolvedEntity]:
    entities = []
    for raw in raw_items or ():
        entity = normalize_entity(raw, fallback_category)
        if entity is not None:
            entities.append(entity)
    return entities


def normalize_recommendation(raw: Any) -> Optional[RecommendedEntity]:
    """
    Canonical raw recommendation → RecommendedEntity.

    Score is the query affinity when the provider reports one,
    otherwise the entity popularity.
    """
    if not isinstance(raw, Mapping):
        return None
    entity_id = _entity_id(raw)
    if entity_id is None:
        return None

    score: Optional[float] = None
    query = raw.get("query")
    if isinstance(query, Mapping) and query.get("affinity") is not None:
        try:
            score = clamp_unit(float(query["affinity"]))
        except (TypeError, ValueError):
            score = None
    if score is None:
        score = _popularity(raw) or 0.0

    return RecommendedEntity(
        id=entity_id,
        score=score,
        name=str(raw.get("name") or "").strip(),
    )
