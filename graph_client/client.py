"""
Qloo Graph Client

Async HTTP client for the cultural graph provider.

PRINCIPLES:
===========
1. Every failure is typed (see graph_client.base)
2. Zero results is a value, not an error
3. Credentials come from GraphClientConfig, never from module state
4. Raw payloads are returned untouched by search(); normalization
   happens in graph_client.normalizer
"""

from __future__ import annotations
import logging
from typing import Any, List, Optional, Sequence, Tuple

import httpx

from profile_engine.config import GraphClientConfig
from profile_engine.contracts.entities import Category, RecommendedEntity
from profile_engine.contracts.errors import (
    ProviderRateLimited,
    ProviderUnauthorized,
    ProviderUnavailable,
)

from .base import GraphProvider, RawEntity
from .normalizer import normalize_recommendation
from .taxonomy import CATEGORY_TYPE_MAP, RECOMMENDATION_FALLBACK_TYPES

logger = logging.getLogger(__name__)

QueryParams = List[Tuple[str, str]]


class QlooGraphClient(GraphProvider):
    """
    Graph provider backed by the Qloo HTTP API.

    GUARANTEES:
    ===========
    1. One network call per search (two when a filtered search is
       rejected with 403 and retried without the type filter)
    2. Recommendation types are tried in fallback order; the first
       non-empty answer wins
    3. HTTP status is mapped to a typed error before any body is parsed
    """

    def __init__(
        self,
        config: GraphClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url.rstrip("/"),
            timeout=config.timeout_seconds,
            transport=transport,
            headers={
                "X-API-Key": config.api_key,
                "Accept": "application/json",
                "User-Agent": config.user_agent,
            },
        )

    async def __aenter__(self) -> QlooGraphClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # SEARCH
    # =========================================================================

    async def search(
        self,
        query: str,
        category: Optional[Category] = None,
        limit: int = 8
    ) -> List[RawEntity]:
        params: QueryParams = [("q", query.strip()), ("limit", str(limit))]
        entity_type = CATEGORY_TYPE_MAP.get(category) if category else None

        if entity_type:
            response = await self._get("/search", params + [("filter.type", entity_type)])
            if response.status_code == 403:
                logger.warning(
                    "Search for %r rejected with type filter %s; retrying unfiltered",
                    query, entity_type
                )
                response = await self._get("/search", params)
        else:
            response = await self._get("/search", params)

        self._raise_for_status(response, f"search {query!r}")
        return self._results(response)

    # =========================================================================
    # RECOMMENDATIONS
    # =========================================================================

    async def recommend(
        self,
        seed_entity_ids: Sequence[str],
        target_category: Optional[Category] = None,
        limit: int = 5
    ) -> List[RecommendedEntity]:
        seeds = list(dict.fromkeys(s for s in seed_entity_ids if s))
        if not seeds:
            return []

        if target_category is not None:
            types_to_try: Sequence[Optional[str]] = RECOMMENDATION_FALLBACK_TYPES[target_category]
        else:
            types_to_try = (None,)

        for entity_type in types_to_try:
            params: QueryParams = []
            if entity_type:
                params.append(("type", entity_type))
            params.extend(("entity_ids", seed) for seed in seeds)
            params.extend([("take", str(limit)), ("sort_by", "affinity"), ("page", "1")])

            response = await self._get("/recommendations", params)

            if response.status_code in (401, 429) or response.status_code >= 500:
                self._raise_for_status(response, "recommendations")

            if response.status_code >= 400:
                # Insufficient signal for this type; try the next one
                logger.info(
                    "No recommendation signal for type %s (HTTP %s): %s",
                    entity_type, response.status_code, response.text[:200]
                )
                continue

            recommendations = []
            for raw in self._results(response):
                recommendation = normalize_recommendation(raw)
                if recommendation is not None:
                    recommendations.append(recommendation)
            if recommendations:
                return recommendations[:limit]

        return []

    # =========================================================================
    # SIMILAR ENTITIES
    # =========================================================================

    async def similar(self, entity_id: str, limit: int = 5) -> List[RawEntity]:
        response = await self._get(f"/similar/{entity_id}", [("limit", str(limit))])
        self._raise_for_status(response, f"similar {entity_id}")
        return self._results(response)

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _get(self, path: str, params: QueryParams) -> httpx.Response:
        try:
            return await self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise ProviderUnavailable(f"Graph provider timed out on {path}: {e}")
        except httpx.HTTPError as e:
            raise ProviderUnavailable(f"Graph provider unreachable on {path}: {e}")

    @staticmethod
    def _raise_for_status(response: httpx.Response, context: str) -> None:
        status = response.status_code
        if status < 400:
            return
        detail = response.text[:200]
        if status == 401:
            raise ProviderUnauthorized(
                f"Graph provider rejected credentials during {context} (HTTP 401)"
            )
        if status == 429:
            raise ProviderRateLimited(f"Graph provider rate limited {context}: {detail}")
        raise ProviderUnavailable(
            f"Graph provider error during {context}: HTTP {status} {detail}",
            status_code=status,
        )

    @staticmethod
    def _results(response: httpx.Response) -> List[Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderUnavailable(f"Graph provider returned malformed JSON: {e}")

        results = data.get("results") if isinstance(data, dict) else None
        # Some endpoints nest entities one level deeper
        if isinstance(results, dict):
            results = results.get("entities")
        if not isinstance(results, list):
            return []
        return results
