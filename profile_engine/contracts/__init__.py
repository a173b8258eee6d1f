"""
Profile Engine Contracts

Shared, immutable types and the error taxonomy. Imported by every layer
(graph_client, narrative, profile_engine); imports nothing from them.
"""

from .entities import (
    ALL_CATEGORIES,
    Category,
    RecommendedEntity,
    ResolvedEntity,
    clamp_unit,
)
from .errors import (
    ConfigurationError,
    CulturalEngineError,
    NarrativeError,
    NarrativeFormatError,
    NarrativeProviderError,
    ProviderError,
    ProviderRateLimited,
    ProviderUnauthorized,
    ProviderUnavailable,
)
from .profile import (
    MAX_ITEMS_PER_CATEGORY,
    Connection,
    CulturalProfile,
    DiversityBreakdown,
    EntityMapping,
    PreferenceSet,
    ProfileInsights,
    ResolutionOutcome,
    ResolutionStatus,
)

__all__ = [
    # Entities
    'ALL_CATEGORIES', 'Category', 'RecommendedEntity', 'ResolvedEntity', 'clamp_unit',
    # Errors
    'CulturalEngineError', 'ConfigurationError', 'ProviderUnauthorized',
    'ProviderError', 'ProviderUnavailable', 'ProviderRateLimited',
    'NarrativeError', 'NarrativeProviderError', 'NarrativeFormatError',
    # Profile
    'MAX_ITEMS_PER_CATEGORY', 'PreferenceSet', 'ResolutionStatus', 'ResolutionOutcome',
    'Connection', 'DiversityBreakdown', 'ProfileInsights', 'CulturalProfile',
    'EntityMapping',
]
