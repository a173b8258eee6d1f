"""
Test Doubles

In-memory graph provider and entity factories. No network access.
"""

from __future__ import annotations
import asyncio
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from graph_client.base import GraphProvider, RawEntity
from narrative.contracts import CulturalNarrative
from profile_engine.config import (
    AggregatorConfig,
    AnalyzerConfig,
    EngineConfig,
    ResolverConfig,
)
from profile_engine.contracts.entities import (
    ALL_CATEGORIES,
    Category,
    RecommendedEntity,
    ResolvedEntity,
)
from profile_engine.contracts.errors import ProviderUnavailable
from profile_engine.contracts.profile import (
    Connection,
    CulturalProfile,
    DiversityBreakdown,
    PreferenceSet,
    ProfileInsights,
)


FAST_RESOLVER = ResolverConfig(pacing_delay_seconds=0.0)
FAST_ANALYZER = AnalyzerConfig(pacing_delay_seconds=0.0)


def fast_engine_config() -> EngineConfig:
    return EngineConfig(
        resolver=FAST_RESOLVER,
        analyzer=FAST_ANALYZER,
        aggregator=AggregatorConfig(),
    )


def raw_entity(
    entity_id: str,
    name: str,
    popularity: Optional[float] = None,
    types: Sequence[str] = (),
    country: Optional[str] = None,
    tags: Sequence[str] = ()
) -> dict:
    """Provider-shaped entity payload."""
    raw = {
        "entity_id": entity_id,
        "name": name,
        "types": list(types),
        "tags": [{"name": tag, "tag_id": f"urn:tag:{tag}"} for tag in tags],
    }
    if popularity is not None:
        raw["popularity"] = popularity
    if country is not None:
        raw["location"] = {"country": country}
    return raw


def make_entity(
    entity_id: str,
    name: str = "",
    category: Category = Category.MUSIC,
    popularity: Optional[float] = None,
    types: Tuple[str, ...] = (),
    country: Optional[str] = None,
    tags: Iterable[str] = ()
) -> ResolvedEntity:
    return ResolvedEntity(
        id=entity_id,
        name=name or entity_id,
        category=category,
        popularity=popularity,
        types=types,
        country=country,
        tags=frozenset(tags),
    )


class FakeGraphProvider(GraphProvider):
    """
    Catalog-backed provider.

    Search results are looked up by lowercased query text. Errors can be
    injected for every call or for specific queries.
    """

    def __init__(
        self,
        catalog: Optional[Dict[str, List[RawEntity]]] = None,
        recommendations: Optional[Dict[Category, List[RecommendedEntity]]] = None,
        search_error: Optional[Exception] = None,
        recommend_error: Optional[Exception] = None,
        failing_queries: Iterable[str] = ()
    ):
        self._catalog = {k.lower(): list(v) for k, v in (catalog or {}).items()}
        self._recommendations = dict(recommendations or {})
        self._search_error = search_error
        self._recommend_error = recommend_error
        self._failing_queries: Set[str] = {q.lower() for q in failing_queries}
        self.search_calls: List[Tuple[str, Optional[Category], int]] = []
        self.recommend_calls: List[Tuple[Tuple[str, ...], Optional[Category], int]] = []
        self.closed = False

    async def search(
        self,
        query: str,
        category: Optional[Category] = None,
        limit: int = 8
    ) -> List[RawEntity]:
        self.search_calls.append((query, category, limit))
        if self._search_error is not None:
            raise self._search_error
        if query.lower() in self._failing_queries:
            raise ProviderUnavailable(f"injected failure for {query!r}")
        return [dict(raw) for raw in self._catalog.get(query.lower(), [])][:limit]

    async def recommend(
        self,
        seed_entity_ids: Sequence[str],
        target_category: Optional[Category] = None,
        limit: int = 5
    ) -> List[RecommendedEntity]:
        self.recommend_calls.append((tuple(seed_entity_ids), target_category, limit))
        if self._recommend_error is not None:
            raise self._recommend_error
        return list(self._recommendations.get(target_category, []))[:limit]

    async def aclose(self) -> None:
        self.closed = True


class BlockingGraphProvider(GraphProvider):
    """
    Provider whose calls never complete until cancelled.

    Construct inside a running event loop.
    """

    def __init__(self):
        self.started = asyncio.Event()

    async def search(self, query, category=None, limit=8):
        self.started.set()
        await asyncio.Event().wait()
        return []

    async def recommend(self, seed_entity_ids, target_category=None, limit=5):
        await asyncio.Event().wait()
        return []


# =============================================================================
# PROFILE AND NARRATIVE FACTORIES
# =============================================================================

NARRATIVE_PAYLOAD = {
    "title": "The Curious Cartographer",
    "story": "A listener who maps the world through sound and film.",
    "insights": ["Gravitates to introspective pop", "Drawn to Korean cinema"],
    "personality": "Curious and open to new experiences.",
    "culturalDNA": "Connects intimate pop with social thrillers.",
    "recommendations": ["Watch Burning", "Listen to Phoebe Bridgers"],
    "culturalBlindSpots": ["Classical music"],
    "diversityScore": 35,
}


def sample_profile(error: Optional[str] = None) -> CulturalProfile:
    """Two-category profile with one similarity connection."""
    billie = make_entity(
        "b1", "Billie Eilish", Category.MUSIC, 0.95, ("urn:entity:artist",), "US", {"pop"}
    )
    parasite = make_entity(
        "m1", "Parasite", Category.MOVIES, 0.9, ("urn:entity:movie",), "KR", {"thriller"}
    )
    mapping = {Category.MUSIC: (billie,), Category.MOVIES: (parasite,)}
    insights = ProfileInsights(
        entity_mapping=tuple((c, mapping.get(c, ())) for c in ALL_CATEGORIES),
        total_entities_found=2,
        total_input_preferences=2,
        match_rate=1.0,
        domains_with_entities=(Category.MUSIC, Category.MOVIES),
        diversity_breakdown=DiversityBreakdown(10.0, 2.5, 9.5, 3.0, 5.0, 4.88),
        provider_calls_attempted=8,
        error=error,
    )
    return CulturalProfile(
        themes=("Emerging Cultural Signature", "Dual-Domain Connector"),
        connections=(Connection(
            Category.MUSIC, Category.MOVIES, 0.48,
            "Connection between music and movies inferred from cross-domain "
            "similarity in popularity, geography and tags.",
            ("b1", "m1"),
        ),),
        patterns=("Highly recognizable cultural preferences", "Cross-domain cultural curiosity"),
        diversity_score=35,
        cultural_depth=20,
        insights=insights,
    )


def sample_preferences() -> PreferenceSet:
    return PreferenceSet.from_dict({"music": ["Billie Eilish"], "movies": ["Parasite"]})


def sample_narrative() -> CulturalNarrative:
    return CulturalNarrative.model_validate(NARRATIVE_PAYLOAD)
