"""
Cultural Intelligence Engine
============================

Single point of integration for callers (HTTP surface, scripts, tests).

    config → graph client → resolver → analyzer → aggregator
           → narrative provider → gateway
           → profile cache

USAGE:
======
```python
engine = CulturalIntelligenceEngine.from_config(EngineConfig.from_env())
profile = await engine.analyze({"music": ["Billie Eilish"], "movies": ["Parasite"]})
narrative = await engine.narrate(preferences, profile)
await engine.aclose()
```

GUARANTEES:
===========
1. analyze() always returns a profile (possibly degraded)
2. Narrative methods raise NarrativeError subclasses on failure
3. Only complete, non-degraded profiles are cached
"""

from __future__ import annotations
import logging
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from graph_client.base import GraphProvider
from graph_client.client import QlooGraphClient
from graph_client.normalizer import normalize_entities
from narrative.contracts import CulturalNarrative
from narrative.gateway import NarrativeGateway
from narrative.providers.base import NarrativeProvider
from narrative.providers.openai_chat import OpenAIChatProvider

from .aggregator import ProfileAggregator
from .cache import ProfileCache
from .config import EngineConfig
from .connections import ConnectionAnalyzer
from .contracts.entities import Category, ResolvedEntity
from .contracts.errors import ConfigurationError
from .contracts.profile import CulturalProfile, PreferenceSet
from .relevance import score_entity
from .resolver import EntityResolver

logger = logging.getLogger(__name__)

Preferences = Union[PreferenceSet, Mapping[str, Sequence[str]]]


def as_preference_set(preferences: Preferences) -> PreferenceSet:
    if isinstance(preferences, PreferenceSet):
        return preferences
    return PreferenceSet.from_dict(preferences)


class CulturalIntelligenceEngine:
    """Façade over aggregation, narrative generation and caching."""

    def __init__(
        self,
        graph: GraphProvider,
        narrator: NarrativeProvider,
        config: Optional[EngineConfig] = None,
        cache: Optional[ProfileCache] = None
    ):
        self._config = config or EngineConfig()
        self._graph = graph
        self._narrator = narrator
        self._resolver = EntityResolver(graph, self._config.resolver)
        self._analyzer = ConnectionAnalyzer(graph, self._config.analyzer)
        self._aggregator = ProfileAggregator(
            self._resolver,
            self._analyzer,
            self._config.aggregator,
            pacing_delay_seconds=self._config.resolver.pacing_delay_seconds,
        )
        timeout = self._config.narrative.timeout_seconds if self._config.narrative else 60.0
        self._gateway = NarrativeGateway(narrator, timeout_seconds=timeout)
        self._cache = cache or ProfileCache(self._config.cache)

    @classmethod
    def from_config(cls, config: EngineConfig) -> CulturalIntelligenceEngine:
        """Build the engine with the HTTP graph client and OpenAI provider."""
        if config.graph is None:
            raise ConfigurationError("Graph provider configuration is missing")
        if config.narrative is None:
            raise ConfigurationError("Narrative generator configuration is missing")
        return cls(
            graph=QlooGraphClient(config.graph),
            narrator=OpenAIChatProvider(config.narrative),
            config=config,
        )

    @property
    def cache(self) -> ProfileCache:
        return self._cache

    async def aclose(self) -> None:
        await self._graph.aclose()
        await self._narrator.aclose()

    # =========================================================================
    # AGGREGATION
    # =========================================================================

    async def analyze(self, preferences: Preferences) -> CulturalProfile:
        """Aggregated profile, served from cache when available."""
        preference_set = as_preference_set(preferences)
        cached = self._cache.get(preference_set)
        if cached is not None:
            return cached

        profile = await self._aggregator.aggregate(preference_set)
        if profile.is_degraded:
            logger.warning("Degraded profile not cached: %s", profile.insights.error)
        else:
            self._cache.put(preference_set, profile)
        return profile

    async def search(
        self,
        query: str,
        category: Category,
        limit: int = 8
    ) -> List[Tuple[ResolvedEntity, float]]:
        """
        Entities for a free-text query, ranked by relevance then popularity.

        Provider errors propagate.
        """
        raw = await self._graph.search(query, category, limit)
        entities = normalize_entities(raw, category)
        scored = [(entity, score_entity(entity, query)) for entity in entities]
        scored.sort(key=lambda pair: (pair[1], pair[0].popularity or 0.0), reverse=True)
        return scored

    # =========================================================================
    # NARRATIVE
    # =========================================================================

    async def narrate(
        self,
        preferences: Preferences,
        profile: Optional[CulturalProfile] = None
    ) -> CulturalNarrative:
        preference_set = as_preference_set(preferences)
        profile = profile or await self.analyze(preference_set)
        return await self._gateway.request_narrative(preference_set, profile)

    async def discoveries(
        self,
        narrative: CulturalNarrative,
        preferences: Preferences,
        profile: Optional[CulturalProfile] = None
    ) -> List[str]:
        preference_set = as_preference_set(preferences)
        profile = profile or await self.analyze(preference_set)
        return await self._gateway.request_discoveries(narrative, preference_set, profile)

    async def growth_challenges(
        self,
        preferences: Preferences,
        narrative: CulturalNarrative,
        profile: Optional[CulturalProfile] = None
    ) -> List[str]:
        preference_set = as_preference_set(preferences)
        profile = profile or await self.analyze(preference_set)
        return await self._gateway.request_growth_challenges(preference_set, profile, narrative)

    async def evolution(
        self,
        preferences: Preferences,
        profile: Optional[CulturalProfile] = None
    ) -> List[str]:
        preference_set = as_preference_set(preferences)
        profile = profile or await self.analyze(preference_set)
        return await self._gateway.request_evolution_predictions(preference_set, profile)
