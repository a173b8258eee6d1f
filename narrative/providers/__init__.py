"""
Narrative Providers Package
===========================

Available providers:
- MockNarrativeProvider: Deterministic mock for testing
- OpenAIChatProvider: OpenAI chat completions
"""

from .base import (
    InvocationParams,
    NarrativeProvider,
    ProviderErrorCode,
    ProviderResponse,
)
from .mock import MockNarrativeProvider
from .openai_chat import OpenAIChatProvider

__all__ = [
    'NarrativeProvider',
    'ProviderResponse',
    'ProviderErrorCode',
    'InvocationParams',
    'MockNarrativeProvider',
    'OpenAIChatProvider',
]
