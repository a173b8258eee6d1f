"""
Engine Configuration
====================

One dataclass per component, composed into EngineConfig.

Provider credentials are external configuration. They are passed
explicitly into client constructors; nothing here is read at import time.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Optional
import os

from dotenv import load_dotenv

from .contracts.errors import ConfigurationError


@dataclass(frozen=True)
class GraphClientConfig:
    """Connection settings for the cultural graph provider."""
    base_url: str
    api_key: str
    timeout_seconds: float = 15.0
    user_agent: str = "CulturalProfileEngine/1.0"

    def __post_init__(self):
        if not self.base_url:
            raise ConfigurationError("Graph provider base URL is not configured (QLOO_API_URL)")
        if not self.api_key:
            raise ConfigurationError("Graph provider API key is not configured (QLOO_API_KEY)")


@dataclass(frozen=True)
class NarrativeConfig:
    """Connection settings for the narrative generator."""
    api_key: str
    model: str = "gpt-4o"
    timeout_seconds: float = 60.0

    def __post_init__(self):
        if not self.api_key:
            raise ConfigurationError("Narrative generator API key is not configured (OPENAI_API_KEY)")


@dataclass(frozen=True)
class ResolverConfig:
    """Entity Resolver limits and thresholds."""
    max_attempts: int = 5
    search_limit: int = 8
    min_relevance: float = 0.15
    fallback_min_relevance: float = 0.05
    high_confidence: float = 0.5
    early_stop_count: int = 3
    pacing_delay_seconds: float = 0.05
    circuit_breaker_threshold: int = 3
    max_genre_searches: int = 2


@dataclass(frozen=True)
class SimilarityWeights:
    """
    Weights of the heuristic similarity used when the provider has no
    recommendation signal for a category pair. An uncalibrated
    approximation; tune freely.
    """
    popularity: float = 0.4
    location: float = 0.3
    tags: float = 0.2
    base: float = 0.1
    floor: float = 0.1


@dataclass(frozen=True)
class AnalyzerConfig:
    """Connection Analyzer parameters."""
    recommendation_limit: int = 5
    max_strength: float = 0.95
    count_weight: float = 0.7
    score_weight: float = 0.3
    placeholder_strength: float = 0.2
    pacing_delay_seconds: float = 0.05
    weights: SimilarityWeights = field(default_factory=SimilarityWeights)


@dataclass(frozen=True)
class AggregatorConfig:
    """Profile Aggregator thresholds and concurrency bounds."""
    connection_threshold: float = 0.1
    max_concurrent_categories: int = 3
    max_concurrent_pairs: int = 2


@dataclass(frozen=True)
class CacheConfig:
    """Time-boxed profile cache."""
    ttl_seconds: float = 24 * 60 * 60
    max_entries: int = 256


@dataclass
class EngineConfig:
    """Unified configuration for the whole engine."""
    graph: Optional[GraphClientConfig] = None
    narrative: Optional[NarrativeConfig] = None
    resolver: ResolverConfig = None
    analyzer: AnalyzerConfig = None
    aggregator: AggregatorConfig = None
    cache: CacheConfig = None
    log_level: str = "INFO"

    def __post_init__(self):
        self.resolver = self.resolver or ResolverConfig()
        self.analyzer = self.analyzer or AnalyzerConfig()
        self.aggregator = self.aggregator or AggregatorConfig()
        self.cache = self.cache or CacheConfig()

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True
    ) -> EngineConfig:
        """
        Build configuration from environment variables.

        Raises ConfigurationError when graph or narrative credentials
        are missing. Nothing defaults to an empty key.
        """
        if environ is None:
            if load_env_file:
                load_dotenv()
            environ = os.environ

        graph = GraphClientConfig(
            base_url=environ.get("QLOO_API_URL", ""),
            api_key=environ.get("QLOO_API_KEY", ""),
            timeout_seconds=_float(environ, "QLOO_TIMEOUT_SECONDS", 15.0),
        )
        narrative = NarrativeConfig(
            api_key=environ.get("OPENAI_API_KEY", ""),
            model=environ.get("OPENAI_MODEL", "gpt-4o"),
            timeout_seconds=_float(environ, "OPENAI_TIMEOUT_SECONDS", 60.0),
        )
        cache = CacheConfig(
            ttl_seconds=_float(environ, "PROFILE_CACHE_TTL_SECONDS", CacheConfig.ttl_seconds),
        )
        return cls(
            graph=graph,
            narrative=narrative,
            cache=cache,
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )


def _float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
