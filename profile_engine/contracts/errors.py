"""
Error Taxonomy
==============

Typed failures for the cultural profile engine.

PROPAGATION POLICY:
===================
- Graph provider failures (ProviderError) are absorbed by the Resolver
  and the Connection Analyzer and surface only as degraded data.
- Narrative failures (NarrativeError) always propagate to the caller.
  A fabricated narrative is never returned in their place.
- ConfigurationError is fatal and raised immediately.

A preference string that matches nothing is NOT an error. It is recorded
as ResolutionStatus.MISSED on its ResolutionOutcome.
"""

from __future__ import annotations
from typing import Optional


class CulturalEngineError(Exception):
    """Base class for every engine failure."""


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationError(CulturalEngineError):
    """Required provider configuration is absent or rejected."""


class ProviderUnauthorized(ConfigurationError):
    """Graph provider rejected the configured API key (HTTP 401)."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


# =============================================================================
# GRAPH PROVIDER (recoverable)
# =============================================================================

class ProviderError(CulturalEngineError):
    """
    Graph provider call failed.

    Recoverable: callers skip the attempt or fall back to heuristics.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderUnavailable(ProviderError):
    """Network failure, timeout or non-2xx response."""


class ProviderRateLimited(ProviderError):
    """Provider rejected the call with HTTP 429."""

    def __init__(self, message: str, status_code: int = 429):
        super().__init__(message, status_code)


# =============================================================================
# NARRATIVE GENERATOR (never absorbed)
# =============================================================================

class NarrativeError(CulturalEngineError):
    """Base class for narrative generation failures."""


class NarrativeProviderError(NarrativeError):
    """Generator unreachable or returned a non-2xx status."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class NarrativeFormatError(NarrativeError):
    """Generator responded, but the payload is not the expected shape."""

    def __init__(self, message: str, raw_content: Optional[str] = None):
        super().__init__(message)
        self.raw_content = raw_content
