"""
Profile Aggregator
==================

Orchestrates one aggregation run:

    PreferenceSet
        → resolve every item         (categories concurrently, items serially)
        ── stage barrier ──
        → analyze every category pair (pairs concurrently)
        → themes, patterns, diversity, depth
        → CulturalProfile

FAILURE SEMANTICS:
==================
- A run never raises to its caller (cancellation excepted). Any
  failure, including every graph call failing, yields a degraded but
  valid profile carrying ``qlooInsights.error``.
- All-or-nothing: when one stage fails, sibling tasks are cancelled and
  nothing partial is returned as authoritative.
"""

from __future__ import annotations
import asyncio
import logging
from itertools import combinations
from typing import Awaitable, Dict, List, Optional, Sequence, Tuple, TypeVar

from graph_client.taxonomy import category_mapping_used

from .config import AggregatorConfig
from .connections import ConnectionAnalyzer, PairAnalysis
from .contracts.entities import ALL_CATEGORIES, Category, ResolvedEntity
from .contracts.errors import ProviderUnauthorized
from .contracts.profile import (
    Connection,
    CulturalProfile,
    EntityMapping,
    PreferenceSet,
    ProfileInsights,
    ResolutionOutcome,
)
from .metrics import (
    compute_cultural_depth,
    compute_diversity,
    extract_patterns,
    extract_themes,
    match_rate,
    populated,
)
from .resolver import EntityResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEGRADED_THEMES = ("Cultural Explorer",)
DEGRADED_PATTERNS = ("Developing cultural interests",)
DEGRADED_DIVERSITY = 50
DEGRADED_DEPTH = 25


class GraphUnreachable(Exception):
    """Every graph provider call in the run failed."""


async def _gather_all(aws: Sequence[Awaitable[T]]) -> List[T]:
    """
    Await all, cancelling the rest as soon as one fails.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class ProfileAggregator:
    """
    Builds a CulturalProfile from a PreferenceSet.

    Stateless between runs: one instance may serve concurrent aggregations.
    """

    def __init__(
        self,
        resolver: EntityResolver,
        analyzer: ConnectionAnalyzer,
        config: Optional[AggregatorConfig] = None,
        pacing_delay_seconds: float = 0.05
    ):
        self._resolver = resolver
        self._analyzer = analyzer
        self._config = config or AggregatorConfig()
        self._pacing_delay = pacing_delay_seconds

    async def aggregate(self, preferences: PreferenceSet) -> CulturalProfile:
        outcomes: List[ResolutionOutcome] = []
        try:
            outcomes = await self._resolve_all(preferences)
            self._check_reachable(outcomes)
            mapping = self._mapping(outcomes)
            analyses = await self._analyze_pairs(mapping)
            return self._build(preferences, mapping, outcomes, analyses)
        except ProviderUnauthorized as e:
            logger.error("Graph provider rejected credentials; returning degraded profile: %s", e)
            return self._degraded(preferences, outcomes, f"Graph provider rejected credentials: {e}")
        except GraphUnreachable as e:
            logger.error("Graph provider unreachable; returning degraded profile: %s", e)
            return self._degraded(preferences, outcomes, str(e))
        except Exception as e:
            logger.exception("Profile aggregation failed; returning degraded profile")
            return self._degraded(preferences, outcomes, f"Profile aggregation failed: {e}")

    # =========================================================================
    # STAGE 1: RESOLUTION
    # =========================================================================

    async def _resolve_all(self, preferences: PreferenceSet) -> List[ResolutionOutcome]:
        semaphore = asyncio.Semaphore(self._config.max_concurrent_categories)

        async def resolve_category(category: Category, items: Tuple[str, ...]) -> List[ResolutionOutcome]:
            async with semaphore:
                results = []
                for index, item in enumerate(items):
                    if index:
                        await asyncio.sleep(self._pacing_delay)
                    results.append(await self._resolver.resolve_with_outcome(item, category))
                return results

        per_category = await _gather_all([
            resolve_category(category, items)
            for category, items in preferences.items() if items
        ])
        return [outcome for outcomes in per_category for outcome in outcomes]

    @staticmethod
    def _mapping(outcomes: Sequence[ResolutionOutcome]) -> EntityMapping:
        grouped: Dict[Category, List[ResolvedEntity]] = {c: [] for c in ALL_CATEGORIES}
        for outcome in outcomes:
            if outcome.entity is not None:
                grouped[outcome.category].append(outcome.entity)
        return {category: tuple(entities) for category, entities in grouped.items()}

    # =========================================================================
    # STAGE 2: CONNECTIONS
    # =========================================================================

    async def _analyze_pairs(self, mapping: EntityMapping) -> List[PairAnalysis]:
        semaphore = asyncio.Semaphore(self._config.max_concurrent_pairs)

        async def analyze(domain1: Category, domain2: Category) -> PairAnalysis:
            async with semaphore:
                return await self._analyzer.analyze_pair(
                    domain1, domain2, mapping[domain1], mapping[domain2]
                )

        return await _gather_all([
            analyze(domain1, domain2)
            for domain1, domain2 in combinations(populated(mapping), 2)
        ])

    @staticmethod
    def _check_reachable(outcomes: Sequence[ResolutionOutcome]) -> None:
        # Pairs exist only after some search succeeded, so resolution calls decide
        attempted = sum(o.calls_attempted for o in outcomes)
        failed = sum(o.calls_failed for o in outcomes)
        if attempted and failed == attempted:
            raise GraphUnreachable(
                f"Cultural graph provider unreachable: all {attempted} calls failed"
            )

    # =========================================================================
    # PACKAGING
    # =========================================================================

    def _build(
        self,
        preferences: PreferenceSet,
        mapping: EntityMapping,
        outcomes: Sequence[ResolutionOutcome],
        analyses: Sequence[PairAnalysis]
    ) -> CulturalProfile:
        connections: List[Connection] = [
            a.connection for a in analyses
            if a.connection.strength > self._config.connection_threshold
        ]
        total_inputs = preferences.total_items
        total_found = sum(len(entities) for entities in mapping.values())
        breakdown, diversity = compute_diversity(mapping)
        depth = compute_cultural_depth({c: len(items) for c, items in preferences.items()})

        insights = ProfileInsights(
            entity_mapping=tuple((c, mapping[c]) for c in ALL_CATEGORIES),
            total_entities_found=total_found,
            total_input_preferences=total_inputs,
            match_rate=match_rate(total_found, total_inputs),
            domains_with_entities=tuple(populated(mapping)),
            category_mapping_used=category_mapping_used(),
            diversity_breakdown=breakdown,
            resolution_outcomes=tuple(outcomes),
            provider_calls_attempted=(
                sum(o.calls_attempted for o in outcomes) + sum(a.calls_attempted for a in analyses)
            ),
            provider_calls_failed=(
                sum(o.calls_failed for o in outcomes) + sum(a.calls_failed for a in analyses)
            ),
        )

        logger.info(
            "Aggregated profile: %d/%d preferences matched, %d connections, diversity %d",
            total_found, total_inputs, len(connections), diversity
        )
        return CulturalProfile(
            themes=tuple(extract_themes(mapping)),
            connections=tuple(connections),
            patterns=tuple(extract_patterns(mapping, total_inputs)),
            diversity_score=diversity,
            cultural_depth=depth,
            insights=insights,
        )

    @staticmethod
    def _degraded(
        preferences: PreferenceSet,
        outcomes: Sequence[ResolutionOutcome],
        error: str
    ) -> CulturalProfile:
        insights = ProfileInsights(
            total_input_preferences=preferences.total_items,
            category_mapping_used=category_mapping_used(),
            resolution_outcomes=tuple(outcomes),
            provider_calls_attempted=sum(o.calls_attempted for o in outcomes),
            provider_calls_failed=sum(o.calls_failed for o in outcomes),
            error=error,
        )
        return CulturalProfile(
            themes=DEGRADED_THEMES,
            connections=(),
            patterns=DEGRADED_PATTERNS,
            diversity_score=DEGRADED_DIVERSITY,
            cultural_depth=DEGRADED_DEPTH,
            insights=insights,
        )
