"""
Cultural Profile Engine

ARCHITECTURAL BOUNDARY:
=======================
Core of the system: resolves free-text preferences against the cultural
graph, analyzes cross-domain connections and aggregates a CulturalProfile.

DIRECTION OF DEPENDENCY:
========================
profile_engine → graph_client, narrative
graph_client, narrative → profile_engine.contracts only

Only contracts and configuration are imported here. Components that
depend on graph_client or narrative are imported from their modules:

    from profile_engine.engine import CulturalIntelligenceEngine
    from profile_engine.aggregator import ProfileAggregator
"""

from .config import (
    AggregatorConfig,
    AnalyzerConfig,
    CacheConfig,
    EngineConfig,
    GraphClientConfig,
    NarrativeConfig,
    ResolverConfig,
    SimilarityWeights,
)
from .contracts import (
    ALL_CATEGORIES,
    Category,
    ConfigurationError,
    Connection,
    CulturalEngineError,
    CulturalProfile,
    NarrativeFormatError,
    NarrativeProviderError,
    PreferenceSet,
    ProviderRateLimited,
    ProviderUnauthorized,
    ProviderUnavailable,
    ResolutionOutcome,
    ResolutionStatus,
    ResolvedEntity,
)
from .relevance import score_relevance

__version__ = "1.0.0"

__all__ = [
    'EngineConfig', 'GraphClientConfig', 'NarrativeConfig', 'ResolverConfig',
    'AnalyzerConfig', 'SimilarityWeights', 'AggregatorConfig', 'CacheConfig',
    'ALL_CATEGORIES', 'Category', 'ResolvedEntity', 'PreferenceSet',
    'ResolutionOutcome', 'ResolutionStatus', 'Connection', 'CulturalProfile',
    'CulturalEngineError', 'ConfigurationError', 'ProviderUnauthorized',
    'ProviderUnavailable', 'ProviderRateLimited',
    'NarrativeFormatError', 'NarrativeProviderError',
    'score_relevance',
]
