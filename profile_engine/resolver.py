"""
Entity Resolver
===============

Turns one free-text preference string into zero-or-one graph entity.

STRATEGY:
=========
1. Search query variations in order (bounded by max_attempts)
2. Score every result against the ORIGINAL query
3. Stop early once enough high-confidence candidates exist
4. Nothing above threshold → genre keyword search, then
   "popular <category>" search, with a lower threshold
5. Best candidate by (relevance, popularity), or a miss

BACKPRESSURE:
=============
- Fixed pacing delay between consecutive provider calls
- Hard cap on variation attempts
- Circuit breaker: after N consecutive transport failures the
  resolution stops and reports PROVIDER_UNAVAILABLE
"""

from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from graph_client.base import GraphProvider
from graph_client.normalizer import normalize_entities

from .config import ResolverConfig
from .contracts.entities import Category, ResolvedEntity
from .contracts.errors import ProviderError
from .contracts.profile import ResolutionOutcome, ResolutionStatus
from .relevance import score_entity

logger = logging.getLogger(__name__)


GENRE_KEYWORDS: Dict[Category, Tuple[str, ...]] = {
    Category.MUSIC: (
        "pop", "rock", "jazz", "hip hop", "rap", "indie", "electronic",
        "classical", "country", "r&b", "soul", "folk", "metal", "punk", "blues",
    ),
    Category.MOVIES: (
        "drama", "comedy", "thriller", "horror", "documentary", "animation",
        "anime", "sci-fi", "science fiction", "romance", "action", "fantasy",
    ),
    Category.FOOD: (
        "sushi", "ramen", "pizza", "tacos", "bbq", "vegan", "vegetarian",
        "street food", "italian", "japanese", "mexican", "thai", "indian",
        "ethiopian", "french", "korean",
    ),
    Category.TRAVEL: (
        "beach", "mountain", "hiking", "city", "island", "national park",
        "museum", "festival", "backpacking", "road trip", "safari",
    ),
    Category.BOOKS: (
        "fiction", "non-fiction", "poetry", "fantasy", "mystery", "romance",
        "science fiction", "biography", "history", "philosophy", "thriller",
    ),
}


def generate_query_variations(query: str) -> List[str]:
    """
    Ordered, de-duplicated search variations.

    Original, lowercase, title case; each word (len > 1) in original,
    lowercase and title case; every two-word combination.
    """
    query = query.strip()
    if not query:
        return []

    variations = [query, query.lower(), query.title()]
    words = [word for word in query.split() if len(word) > 1]
    for word in words:
        variations.extend([word, word.lower(), word.title()])
    for first, second in combinations(words, 2):
        variations.append(f"{first} {second}")

    return list(dict.fromkeys(v for v in variations if v))


def genre_keywords_for(query: str, category: Category) -> List[str]:
    """Category genre keywords that occur in the query."""
    lowered = f" {query.lower()} "
    return [
        keyword for keyword in GENRE_KEYWORDS.get(category, ())
        if f" {keyword} " in lowered
    ]


@dataclass
class _Candidate:
    entity: ResolvedEntity
    relevance: float


class _CircuitOpen(Exception):
    """Internal signal: too many consecutive transport failures."""


class EntityResolver:
    """
    Resolves preference strings against a GraphProvider.

    One instance may serve many concurrent resolutions; all per-call
    state lives in the call.
    """

    def __init__(
        self,
        provider: GraphProvider,
        config: Optional[ResolverConfig] = None
    ):
        self._provider = provider
        self._config = config or ResolverConfig()

    async def resolve(
        self,
        query: str,
        category: Category,
        max_attempts: Optional[int] = None
    ) -> Optional[ResolvedEntity]:
        """Best-matching entity for the query, or None."""
        outcome = await self.resolve_with_outcome(query, category, max_attempts)
        return outcome.entity

    async def resolve_with_outcome(
        self,
        query: str,
        category: Category,
        max_attempts: Optional[int] = None
    ) -> ResolutionOutcome:
        """Resolve and report how the resolution went."""
        run = _ResolutionRun(self._provider, self._config, query.strip(), category)
        attempts = max_attempts if max_attempts is not None else self._config.max_attempts

        try:
            await run.search_variations(attempts)
            used_fallback = False
            if not run.candidates:
                used_fallback = True
                await run.search_fallbacks()
        except _CircuitOpen:
            logger.warning(
                "Graph provider failing for %r (%s): %d consecutive errors, "
                "skipping remaining searches",
                query, category.value, run.consecutive_failures
            )
            return ResolutionOutcome(
                query=query,
                category=category,
                status=ResolutionStatus.PROVIDER_UNAVAILABLE,
                calls_attempted=run.calls_attempted,
                calls_failed=run.calls_failed,
            )

        best = run.best()
        if best is None:
            logger.info("No graph entity matched %r (%s)", query, category.value)
            status = (
                ResolutionStatus.PROVIDER_UNAVAILABLE
                if run.calls_attempted and run.calls_failed == run.calls_attempted
                else ResolutionStatus.MISSED
            )
            return ResolutionOutcome(
                query=query,
                category=category,
                status=status,
                calls_attempted=run.calls_attempted,
                calls_failed=run.calls_failed,
                used_fallback=used_fallback,
            )

        return ResolutionOutcome(
            query=query,
            category=category,
            status=ResolutionStatus.MATCHED,
            entity=best.entity,
            relevance=best.relevance,
            calls_attempted=run.calls_attempted,
            calls_failed=run.calls_failed,
            used_fallback=used_fallback,
        )


class _ResolutionRun:
    """State of a single resolve() call."""

    def __init__(
        self,
        provider: GraphProvider,
        config: ResolverConfig,
        query: str,
        category: Category
    ):
        self._provider = provider
        self._config = config
        self.query = query
        self.category = category
        self.candidates: Dict[str, _Candidate] = {}
        self.calls_attempted = 0
        self.calls_failed = 0
        self.consecutive_failures = 0

    async def search_variations(self, max_attempts: int) -> None:
        for variation in generate_query_variations(self.query)[:max(0, max_attempts)]:
            await self._search(variation, self._config.min_relevance)
            if self._high_confidence_count() >= self._config.early_stop_count:
                break

    async def search_fallbacks(self) -> None:
        keywords = genre_keywords_for(self.query, self.category)
        for keyword in keywords[:self._config.max_genre_searches]:
            await self._search(keyword, self._config.fallback_min_relevance)
        if self.candidates:
            return
        await self._search(f"popular {self.category.value}", self._config.fallback_min_relevance)

    def best(self) -> Optional[_Candidate]:
        if not self.candidates:
            return None
        ranked = sorted(
            self.candidates.values(),
            key=lambda c: (c.relevance, c.entity.popularity or 0.0),
            reverse=True,
        )
        return ranked[0]

    def _high_confidence_count(self) -> int:
        return sum(
            1 for c in self.candidates.values()
            if c.relevance > self._config.high_confidence
        )

    async def _search(self, text: str, threshold: float) -> None:
        if self.calls_attempted:
            await asyncio.sleep(self._config.pacing_delay_seconds)
        self.calls_attempted += 1

        try:
            raw_results = await self._provider.search(
                text, self.category, self._config.search_limit
            )
        except ProviderError as e:
            self.calls_failed += 1
            self.consecutive_failures += 1
            logger.warning("Search %r failed: %s", text, e)
            if self.consecutive_failures >= self._config.circuit_breaker_threshold:
                raise _CircuitOpen()
            return

        self.consecutive_failures = 0
        for entity in normalize_entities(raw_results, self.category):
            relevance = score_entity(entity, self.query)
            if relevance < threshold:
                continue
            existing = self.candidates.get(entity.id)
            if existing is None or relevance > existing.relevance:
                self.candidates[entity.id] = _Candidate(entity, relevance)


def resolved_entities(outcomes: Sequence[ResolutionOutcome]) -> Tuple[ResolvedEntity, ...]:
    """Matched entities in input order."""
    return tuple(o.entity for o in outcomes if o.entity is not None)
