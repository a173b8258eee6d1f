"""
Connection Analyzer
===================

Computes how strongly two preference categories are linked.

PATHS:
======
1. Provider signal: cross-category recommendations seeded by the first
   group's entities, targeting the second category.
2. Heuristic similarity: used when the provider returns nothing or the
   recommendation call fails. Weighted popularity, geography and tag
   overlap plus a fixed base, floored.
3. Placeholder: both entity groups empty, nothing to compare.

The heuristic weights are an uncalibrated approximation (see
SimilarityWeights). Callers should rely on the strength bounds, not on
exact values.
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable, List, Optional, Sequence, Set

from graph_client.base import GraphProvider

from .config import AnalyzerConfig, SimilarityWeights
from .contracts.entities import Category, RecommendedEntity, ResolvedEntity, clamp_unit
from .contracts.errors import ProviderError
from .contracts.profile import Connection

logger = logging.getLogger(__name__)


# =============================================================================
# SIMILARITY SIGNALS
# =============================================================================

def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Jaccard overlap; 0 when either set is empty."""
    if not a or not b:
        return 0.0
    return len(a & b) / len(a | b)


def average_popularity(entities: Sequence[ResolvedEntity]) -> float:
    """Mean popularity, counting missing popularity as 0."""
    if not entities:
        return 0.0
    return sum(e.popularity or 0.0 for e in entities) / len(entities)


def popularity_similarity(
    entities1: Sequence[ResolvedEntity],
    entities2: Sequence[ResolvedEntity]
) -> float:
    return clamp_unit(1.0 - abs(average_popularity(entities1) - average_popularity(entities2)))


def _countries(entities: Iterable[ResolvedEntity]) -> Set[str]:
    return {e.country for e in entities if e.country}


def _tags(entities: Iterable[ResolvedEntity]) -> Set[str]:
    tags: Set[str] = set()
    for entity in entities:
        tags.update(tag.lower() for tag in entity.tags)
    return tags


def heuristic_similarity(
    entities1: Sequence[ResolvedEntity],
    entities2: Sequence[ResolvedEntity],
    weights: Optional[SimilarityWeights] = None
) -> float:
    """
    Weighted similarity of two entity groups, in [floor, 1].
    """
    weights = weights or SimilarityWeights()
    total = (
        popularity_similarity(entities1, entities2) * weights.popularity
        + jaccard(_countries(entities1), _countries(entities2)) * weights.location
        + jaccard(_tags(entities1), _tags(entities2)) * weights.tags
        + weights.base
    )
    return clamp_unit(max(weights.floor, total))


def _ids(entities: Iterable[ResolvedEntity]) -> List[str]:
    return [e.id for e in entities]


# =============================================================================
# ANALYZER
# =============================================================================

@dataclass(frozen=True)
class PairAnalysis:
    connection: Connection
    calls_attempted: int = 0
    calls_failed: int = 0


class ConnectionAnalyzer:
    """
    Pairwise category connection analysis.

    GUARANTEES:
    - analyze() never raises a ProviderError
    - every returned Connection has strength in (0, 1]
    """

    def __init__(
        self,
        provider: GraphProvider,
        config: Optional[AnalyzerConfig] = None
    ):
        self._provider = provider
        self._config = config or AnalyzerConfig()

    async def analyze(
        self,
        domain1: Category,
        domain2: Category,
        entities1: Sequence[ResolvedEntity],
        entities2: Sequence[ResolvedEntity]
    ) -> Connection:
        result = await self.analyze_pair(domain1, domain2, entities1, entities2)
        return result.connection

    async def analyze_pair(
        self,
        domain1: Category,
        domain2: Category,
        entities1: Sequence[ResolvedEntity],
        entities2: Sequence[ResolvedEntity]
    ) -> PairAnalysis:
        """analyze() plus the provider call accounting for this pair."""
        if not entities1 and not entities2:
            return PairAnalysis(self._placeholder(domain1, domain2))

        recommendations: List[RecommendedEntity] = []
        calls_attempted = calls_failed = 0
        seeds = _ids(entities1)
        if seeds:
            calls_attempted = 1
            try:
                recommendations = await self._provider.recommend(
                    seeds, domain2, self._config.recommendation_limit
                )
            except ProviderError as e:
                calls_failed = 1
                logger.warning(
                    "Recommendations %s -> %s failed, using similarity heuristic: %s",
                    domain1.value, domain2.value, e
                )
            # Pace consecutive calls issued from the same slot
            await asyncio.sleep(self._config.pacing_delay_seconds)

        if recommendations:
            connection = self._from_recommendations(domain1, domain2, entities1, recommendations)
        else:
            connection = self._from_similarity(domain1, domain2, entities1, entities2)
        return PairAnalysis(connection, calls_attempted, calls_failed)

    def _from_recommendations(
        self,
        domain1: Category,
        domain2: Category,
        entities1: Sequence[ResolvedEntity],
        recommendations: Sequence[RecommendedEntity]
    ) -> Connection:
        limit = self._config.recommendation_limit
        returned = recommendations[:limit]
        count_ratio = len(returned) / limit
        average_score = sum(r.score for r in returned) / len(returned)
        strength = min(
            self._config.max_strength,
            count_ratio * self._config.count_weight + average_score * self._config.score_weight,
        )
        related = list(dict.fromkeys(_ids(entities1) + [r.id for r in returned]))
        return Connection(
            domain1=domain1,
            domain2=domain2,
            strength=clamp_unit(strength),
            explanation=(
                f"The cultural graph identified {len(returned)} thematic "
                f"{domain2.value} recommendation(s) seeded by your {domain1.value} "
                f"preferences, a direct connection between the two domains."
            ),
            related_entity_ids=tuple(related),
        )

    def _from_similarity(
        self,
        domain1: Category,
        domain2: Category,
        entities1: Sequence[ResolvedEntity],
        entities2: Sequence[ResolvedEntity]
    ) -> Connection:
        strength = heuristic_similarity(entities1, entities2, self._config.weights)
        related = list(dict.fromkeys(_ids(entities1) + _ids(entities2)))
        return Connection(
            domain1=domain1,
            domain2=domain2,
            strength=strength,
            explanation=(
                f"Connection between {domain1.value} and {domain2.value} inferred "
                f"from cross-domain similarity in popularity, geography and tags."
            ),
            related_entity_ids=tuple(related),
        )

    def _placeholder(self, domain1: Category, domain2: Category) -> Connection:
        return Connection(
            domain1=domain1,
            domain2=domain2,
            strength=self._config.placeholder_strength,
            explanation=(
                f"A potential connection between {domain1.value} and "
                f"{domain2.value}; not enough resolved entities to measure it."
            ),
        )
