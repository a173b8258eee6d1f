"""
Narrative Package

ARCHITECTURAL BOUNDARY:
=======================
Turns an aggregated CulturalProfile into generator requests and
validates what comes back. Depends on profile_engine.contracts only.

Failures are typed (NarrativeProviderError, NarrativeFormatError) and
always propagate; no fallback narrative exists.
"""

from .contracts import (
    ChallengeResponse,
    CulturalNarrative,
    DiscoveryResponse,
    EvolutionResponse,
    NarrativeError,
    NarrativeFormatError,
    NarrativeProviderError,
)
from .gateway import NarrativeGateway
from .prompts import CanonicalPrompt, PromptTemplates
from .providers import (
    InvocationParams,
    MockNarrativeProvider,
    NarrativeProvider,
    OpenAIChatProvider,
    ProviderErrorCode,
    ProviderResponse,
)

__all__ = [
    'CulturalNarrative', 'DiscoveryResponse', 'ChallengeResponse', 'EvolutionResponse',
    'NarrativeError', 'NarrativeFormatError', 'NarrativeProviderError',
    'NarrativeGateway', 'CanonicalPrompt', 'PromptTemplates',
    'NarrativeProvider', 'ProviderResponse', 'ProviderErrorCode', 'InvocationParams',
    'MockNarrativeProvider', 'OpenAIChatProvider',
]
