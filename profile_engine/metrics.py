"""
Profile Metrics
===============

Rule-based themes, patterns and scores derived from one EntityMapping.

Every function here is pure. Thresholds are fixed constants calibrated
against the largest possible preference set (5 categories x 5 items).

DIVERSITY SCORE (0-100, sum of capped sub-scores):
==================================================
    domain coverage      categories / 5 * 25                 ≤ 25
    recognition          min(25, entities / 20 * 25)         ≤ 25
    popularity spread    min(20, spread * 10 + mean * 10)    ≤ 20
    type diversity       min(15, distinct types * 1.5)       ≤ 15
    geography            min(10, distinct countries * 2.5)   ≤ 10
    balance              (1 - norm. count variance) * 5      ≤ 5
"""

from __future__ import annotations
import math
from typing import Dict, List, Mapping, Sequence, Set, Tuple

import numpy as np

from .contracts.entities import ALL_CATEGORIES, Category, ResolvedEntity
from .contracts.profile import DiversityBreakdown


# Recognition volume (total resolved entities)
VOLUME_TIERS: Tuple[Tuple[int, str], ...] = (
    (20, "Comprehensive Cultural Intelligence"),
    (12, "Broad Cultural Recognition"),
    (6, "Established Cultural Footprint"),
    (1, "Emerging Cultural Signature"),
)

# Domain coverage (categories with at least one entity)
COVERAGE_TIERS: Tuple[Tuple[int, str], ...] = (
    (5, "Renaissance Cultural Explorer"),
    (3, "Multi-Domain Enthusiast"),
    (2, "Dual-Domain Connector"),
    (1, "Focused Cultural Specialist"),
)

DEEP_SPECIALIZATION = 4
DEVELOPING_SPECIALIZATION = 2

MAINSTREAM_POPULARITY = 0.8
BALANCED_POPULARITY = 0.5

GLOBAL_COUNTRIES = 4
CROSS_CULTURAL_COUNTRIES = 2

CLOSING_PATTERN = "Preferences validated against the cultural knowledge graph"


# =============================================================================
# AGGREGATES
# =============================================================================

def all_entities(mapping: Mapping[Category, Sequence[ResolvedEntity]]) -> List[ResolvedEntity]:
    return [entity for category in ALL_CATEGORIES for entity in mapping.get(category, ())]


def populated(mapping: Mapping[Category, Sequence[ResolvedEntity]]) -> List[Category]:
    """Categories with at least one resolved entity, in canonical order."""
    return [category for category in ALL_CATEGORIES if mapping.get(category)]


def popularities(entities: Sequence[ResolvedEntity]) -> List[float]:
    return [e.popularity for e in entities if e.popularity is not None]


def distinct_countries(entities: Sequence[ResolvedEntity]) -> Set[str]:
    return {e.country for e in entities if e.country}


def distinct_types(entities: Sequence[ResolvedEntity]) -> Set[str]:
    return {t for e in entities for t in e.types}


def popularity_spread(values: Sequence[float]) -> float:
    """min(1, sqrt(population variance)); 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return min(1.0, math.sqrt(float(np.var(values))))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# THEMES
# =============================================================================

def extract_themes(mapping: Mapping[Category, Sequence[ResolvedEntity]]) -> List[str]:
    """
    Ordered themes: volume, coverage, specialization, popularity tier,
    geography. Each rule contributes zero or one theme.
    """
    entities = all_entities(mapping)
    themes: List[str] = []

    total = len(entities)
    for threshold, theme in VOLUME_TIERS:
        if total >= threshold:
            themes.append(theme)
            break

    coverage = len(populated(mapping))
    for threshold, theme in COVERAGE_TIERS:
        if coverage >= threshold:
            themes.append(theme)
            break

    if entities:
        # Ties resolve to the first category in canonical order
        top_category = max(ALL_CATEGORIES, key=lambda c: len(mapping.get(c, ())))
        top_count = len(mapping.get(top_category, ()))
        label = top_category.value.capitalize()
        if top_count >= DEEP_SPECIALIZATION:
            themes.append(f"Deep {label} Expertise")
        elif top_count >= DEVELOPING_SPECIALIZATION:
            themes.append(f"Developing {label} Expertise")

    values = popularities(entities)
    if values:
        mean = sum(values) / len(values)
        if mean >= MAINSTREAM_POPULARITY:
            themes.append("Mainstream Culture Connoisseur")
        elif mean >= BALANCED_POPULARITY:
            themes.append("Balanced Mainstream and Niche Taste")
        elif mean > 0:
            themes.append("Underground Culture Curator")

    countries = len(distinct_countries(entities))
    if countries >= GLOBAL_COUNTRIES:
        themes.append("Global Cultural Citizen")
    elif countries >= CROSS_CULTURAL_COUNTRIES:
        themes.append("Cross-Cultural Explorer")

    return themes


# =============================================================================
# PATTERNS
# =============================================================================

def extract_patterns(
    mapping: Mapping[Category, Sequence[ResolvedEntity]],
    total_input_preferences: int
) -> List[str]:
    """Ordered patterns; always ends with the provider-validation note."""
    entities = all_entities(mapping)
    patterns: List[str] = []

    rate = match_rate(len(entities), total_input_preferences)
    if rate >= 0.8:
        patterns.append("Highly recognizable cultural preferences")
    elif rate >= 0.5:
        patterns.append("Mix of well-known and distinctive preferences")
    elif rate > 0:
        patterns.append("Distinctive preferences beyond the mainstream catalogue")
    else:
        patterns.append("Highly individual preferences outside the cultural graph")

    coverage = len(populated(mapping))
    if coverage >= 4:
        patterns.append("Multi-domain cultural coherence")
    elif coverage >= 2:
        patterns.append("Cross-domain cultural curiosity")
    else:
        patterns.append("Concentrated cultural expertise")

    types = len(distinct_types(entities))
    if types >= 8:
        patterns.append("Wide variety of cultural forms")
    elif types >= 4:
        patterns.append("Several distinct cultural forms")

    values = popularities(entities)
    spread = popularity_spread(values)
    if spread >= 0.3:
        patterns.append("Wide range from mainstream to niche")
    elif len(values) >= 2 and spread <= 0.1:
        patterns.append("Consistent popularity level across choices")

    if len(distinct_countries(entities)) >= 3:
        patterns.append("Internationally sourced cultural influences")

    patterns.append(CLOSING_PATTERN)
    return patterns


def match_rate(total_found: int, total_inputs: int) -> float:
    if total_inputs <= 0:
        return 0.0
    return min(1.0, total_found / total_inputs)


# =============================================================================
# SCORES
# =============================================================================

def compute_diversity(
    mapping: Mapping[Category, Sequence[ResolvedEntity]]
) -> Tuple[DiversityBreakdown, int]:
    """Diversity sub-scores and their rounded total in [0, 100]."""
    entities = all_entities(mapping)
    if not entities:
        # Nothing resolved scores nothing, balance included
        return DiversityBreakdown(), 0

    coverage = len(populated(mapping)) / len(ALL_CATEGORIES) * 25
    recognition = min(25.0, len(entities) / 20 * 25)

    values = popularities(entities)
    if values:
        mean = sum(values) / len(values)
        popularity = min(20.0, popularity_spread(values) * 10 + mean * 10)
    else:
        popularity = 0.0

    types = min(15.0, len(distinct_types(entities)) * 1.5)
    geographic = min(10.0, len(distinct_countries(entities)) * 2.5)

    counts = [len(mapping.get(category, ())) for category in ALL_CATEGORIES]
    balance = (1 - min(1.0, float(np.var(counts)) / 10)) * 5

    breakdown = DiversityBreakdown(
        domain_coverage=coverage,
        recognition=recognition,
        popularity_diversity=popularity,
        type_diversity=types,
        geographic=geographic,
        balance=balance,
    )
    return breakdown, round_half_up(breakdown.total)


def compute_cultural_depth(preference_counts: Dict[Category, int]) -> int:
    """Average items per active category, scaled by 20, capped at 100."""
    active = [count for count in preference_counts.values() if count > 0]
    if not active:
        return 0
    return min(100, round_half_up(sum(active) / len(active) * 20))
