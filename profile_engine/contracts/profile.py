"""
Profile Contracts

Immutable data structures flowing through one aggregation run:

    PreferenceSet → ResolutionOutcome (per item) → EntityMapping
                  → Connection (per category pair) → CulturalProfile

BOUNDARY ENFORCEMENT:
=====================
- PreferenceSet is validated once, at construction, and never mutated
- CulturalProfile is created once per run and owned by its caller
- to_dict() produces the camelCase JSON shape consumed downstream
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import hashlib
import json

from .entities import ALL_CATEGORIES, Category, ResolvedEntity


MAX_ITEMS_PER_CATEGORY = 5

EntityMapping = Dict[Category, Tuple[ResolvedEntity, ...]]


# =============================================================================
# INPUT
# =============================================================================

@dataclass(frozen=True)
class PreferenceSet:
    """
    Free-text preferences per category.

    INVARIANTS:
    - every category is present (possibly empty), in canonical order
    - each category holds 0..5 items
    - each item is non-empty trimmed text
    """
    entries: Tuple[Tuple[Category, Tuple[str, ...]], ...]

    def __post_init__(self):
        seen = set()
        for category, items in self.entries:
            if category in seen:
                raise ValueError(f"Duplicate category: {category.value}")
            seen.add(category)
            if len(items) > MAX_ITEMS_PER_CATEGORY:
                raise ValueError(
                    f"Category {category.value} has {len(items)} items "
                    f"(maximum {MAX_ITEMS_PER_CATEGORY})"
                )
            for item in items:
                if not isinstance(item, str) or not item or item != item.strip():
                    raise ValueError(
                        f"Preference items must be non-empty trimmed text: {item!r}"
                    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[str]]) -> PreferenceSet:
        """
        Build from a ``{category: [items]}`` mapping.

        Items are trimmed. Unknown or repeated categories (keys are
        case-insensitive), blank items and oversized categories raise
        ValueError.
        """
        if not isinstance(data, Mapping):
            raise ValueError("Preferences must be a mapping of category to items")

        parsed: Dict[Category, Tuple[str, ...]] = {}
        for key, raw_items in data.items():
            category = Category.parse(key)
            if category in parsed:
                raise ValueError(f"Duplicate category: {category.value}")
            if isinstance(raw_items, str) or not isinstance(raw_items, Sequence):
                raise ValueError(f"Items for {category.value} must be a list of strings")
            items = []
            for raw in raw_items:
                if not isinstance(raw, str) or not raw.strip():
                    raise ValueError(f"Blank preference in {category.value}")
                items.append(raw.strip())
            parsed[category] = tuple(items)

        return cls(entries=tuple(
            (category, parsed.get(category, ())) for category in ALL_CATEGORIES
        ))

    def get(self, category: Category) -> Tuple[str, ...]:
        for entry_category, items in self.entries:
            if entry_category == category:
                return items
        return ()

    def items(self) -> Iterator[Tuple[Category, Tuple[str, ...]]]:
        return iter(self.entries)

    @property
    def populated_categories(self) -> Tuple[Category, ...]:
        return tuple(category for category, items in self.entries if items)

    @property
    def total_items(self) -> int:
        return sum(len(items) for _, items in self.entries)

    def to_dict(self) -> Dict[str, List[str]]:
        return {category.value: list(items) for category, items in self.entries}

    def content_hash(self) -> str:
        """SHA-256 of the canonical JSON form."""
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(canonical.encode('utf-8')).hexdigest()


# =============================================================================
# RESOLUTION
# =============================================================================

class ResolutionStatus(Enum):
    """Outcome of resolving one preference string."""
    MATCHED = "matched"
    MISSED = "missed"
    PROVIDER_UNAVAILABLE = "provider_unavailable"


@dataclass(frozen=True)
class ResolutionOutcome:
    """
    Per-item resolution record.

    Kept for every input string so unresolved preferences stay visible
    instead of silently disappearing from the profile.
    """
    query: str
    category: Category
    status: ResolutionStatus
    entity: Optional[ResolvedEntity] = None
    relevance: Optional[float] = None
    calls_attempted: int = 0
    calls_failed: int = 0
    used_fallback: bool = False

    def __post_init__(self):
        if self.status == ResolutionStatus.MATCHED and self.entity is None:
            raise ValueError("MATCHED outcome must carry an entity")
        if self.status != ResolutionStatus.MATCHED and self.entity is not None:
            raise ValueError("Only MATCHED outcomes carry an entity")

    @property
    def matched(self) -> bool:
        return self.status == ResolutionStatus.MATCHED

    def to_dict(self) -> dict:
        return {
            'query': self.query,
            'category': self.category.value,
            'status': self.status.value,
            'entityId': self.entity.id if self.entity else None,
            'entityName': self.entity.name if self.entity else None,
            'relevance': round(self.relevance, 4) if self.relevance is not None else None,
            'usedFallback': self.used_fallback,
        }


# =============================================================================
# CONNECTIONS
# =============================================================================

@dataclass(frozen=True)
class Connection:
    """
    Cross-domain connection between two categories.

    INVARIANTS:
    - domain1 != domain2
    - strength in [0, 1]
    """
    domain1: Category
    domain2: Category
    strength: float
    explanation: str
    related_entity_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.domain1 == self.domain2:
            raise ValueError("Connection domains must differ")
        if not 0.0 <= self.strength <= 1.0:
            raise ValueError(f"Connection strength out of range: {self.strength}")

    def to_dict(self) -> dict:
        return {
            'domain1': self.domain1.value,
            'domain2': self.domain2.value,
            'strength': round(self.strength, 4),
            'explanation': self.explanation,
            'relatedEntityIds': list(self.related_entity_ids),
        }


# =============================================================================
# PROFILE
# =============================================================================

@dataclass(frozen=True)
class DiversityBreakdown:
    """The six capped sub-scores that sum to the diversity score."""
    domain_coverage: float = 0.0
    recognition: float = 0.0
    popularity_diversity: float = 0.0
    type_diversity: float = 0.0
    geographic: float = 0.0
    balance: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.domain_coverage + self.recognition + self.popularity_diversity
            + self.type_diversity + self.geographic + self.balance
        )

    def to_dict(self) -> dict:
        return {
            'domainCoverage': round(self.domain_coverage, 2),
            'recognition': round(self.recognition, 2),
            'popularityDiversity': round(self.popularity_diversity, 2),
            'typeDiversity': round(self.type_diversity, 2),
            'geographic': round(self.geographic, 2),
            'balance': round(self.balance, 2),
        }


@dataclass(frozen=True)
class ProfileInsights:
    """Diagnostic record attached to every profile (``qlooInsights``)."""
    entity_mapping: Tuple[Tuple[Category, Tuple[ResolvedEntity, ...]], ...] = ()
    total_entities_found: int = 0
    total_input_preferences: int = 0
    match_rate: float = 0.0
    domains_with_entities: Tuple[Category, ...] = ()
    category_mapping_used: Tuple[Tuple[str, str], ...] = ()
    diversity_breakdown: Optional[DiversityBreakdown] = None
    resolution_outcomes: Tuple[ResolutionOutcome, ...] = ()
    provider_calls_attempted: int = 0
    provider_calls_failed: int = 0
    error: Optional[str] = None

    def entities_for(self, category: Category) -> Tuple[ResolvedEntity, ...]:
        for entry_category, entities in self.entity_mapping:
            if entry_category == category:
                return entities
        return ()

    def to_dict(self) -> dict:
        data = {
            'entityCounts': {
                category.value: len(entities) for category, entities in self.entity_mapping
            },
            'entityMapping': {
                category.value: [entity.to_dict() for entity in entities]
                for category, entities in self.entity_mapping
            },
            'totalEntitiesFound': self.total_entities_found,
            'totalInputPreferences': self.total_input_preferences,
            'matchRate': round(self.match_rate, 4),
            'domainsWithEntities': [category.value for category in self.domains_with_entities],
            'categoryMappingUsed': dict(self.category_mapping_used),
            'diversityBreakdown': (
                self.diversity_breakdown.to_dict() if self.diversity_breakdown else None
            ),
            'resolutionOutcomes': [outcome.to_dict() for outcome in self.resolution_outcomes],
            'providerCalls': {
                'attempted': self.provider_calls_attempted,
                'failed': self.provider_calls_failed,
            },
        }
        if self.error is not None:
            data['error'] = self.error
        return data


@dataclass(frozen=True)
class CulturalProfile:
    """
    Aggregate root handed to narrative generation.

    INVARIANTS:
    - diversity_score and cultural_depth are integers in [0, 100]
    - every connection has strength above the aggregation threshold
    """
    themes: Tuple[str, ...]
    connections: Tuple[Connection, ...]
    patterns: Tuple[str, ...]
    diversity_score: int
    cultural_depth: int
    insights: ProfileInsights = field(default_factory=ProfileInsights)

    def __post_init__(self):
        for name in ('diversity_score', 'cultural_depth'):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if not 0 <= value <= 100:
                raise ValueError(f"{name} out of range: {value}")

    @property
    def is_degraded(self) -> bool:
        return self.insights.error is not None

    def to_dict(self) -> dict:
        return {
            'themes': list(self.themes),
            'connections': [connection.to_dict() for connection in self.connections],
            'patterns': list(self.patterns),
            'diversityScore': self.diversity_score,
            'culturalDepth': self.cultural_depth,
            'qlooInsights': self.insights.to_dict(),
        }
