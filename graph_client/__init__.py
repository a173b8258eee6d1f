"""
Cultural Graph Client Package

ARCHITECTURAL BOUNDARY:
=======================
This package is the ONLY code that talks to the cultural graph provider.
The profile engine sees the GraphProvider contract and normalized
entities, never raw HTTP.

Available providers:
- QlooGraphClient: httpx-based client for the Qloo API
"""

from .base import GraphProvider, RawEntity
from .client import QlooGraphClient
from .normalizer import (
    normalize_entities,
    normalize_entity,
    normalize_recommendation,
    normalize_tags,
)
from .taxonomy import (
    CATEGORY_TYPE_MAP,
    RECOMMENDATION_FALLBACK_TYPES,
    TYPE_CATEGORY_MAP,
    category_from_types,
    category_mapping_used,
)

__all__ = [
    'GraphProvider', 'RawEntity', 'QlooGraphClient',
    'normalize_entity', 'normalize_entities', 'normalize_recommendation', 'normalize_tags',
    'CATEGORY_TYPE_MAP', 'RECOMMENDATION_FALLBACK_TYPES', 'TYPE_CATEGORY_MAP',
    'category_from_types', 'category_mapping_used',
]
