"""
Graph Provider Abstraction
==========================

Narrow contract for the external cultural graph. The engine depends on
this interface only; the HTTP client and the test doubles implement it.

FAILURE CONTRACT:
=================
- Zero results is a normal return value (empty list), never an error
- HTTP 401            → ProviderUnauthorized
- HTTP 429            → ProviderRateLimited
- network / 5xx / 4xx → ProviderUnavailable
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Sequence

from profile_engine.contracts.entities import Category, RecommendedEntity

RawEntity = Mapping[str, Any]


class GraphProvider(ABC):
    """Cultural graph search and recommendation provider."""

    @abstractmethod
    async def search(
        self,
        query: str,
        category: Optional[Category] = None,
        limit: int = 8
    ) -> List[RawEntity]:
        """
        Search entities by free text, optionally filtered by category.

        Returns raw provider payloads, best match first. Callers
        normalize them with graph_client.normalizer.
        """

    @abstractmethod
    async def recommend(
        self,
        seed_entity_ids: Sequence[str],
        target_category: Optional[Category] = None,
        limit: int = 5
    ) -> List[RecommendedEntity]:
        """Cross-category recommendations seeded by entity ids."""

    async def similar(self, entity_id: str, limit: int = 5) -> List[RawEntity]:
        """Entities similar to one entity. Optional capability."""
        return []

    async def aclose(self) -> None:
        """Release network resources."""
