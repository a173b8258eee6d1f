"""
Narrative Provider Abstraction Layer
====================================

Abstract interface for the language-model narrative generator.

BOUNDARY ENFORCEMENT:
- Providers are stateless invocation handlers
- One attempt per invocation; no hidden retries
- Failures are explicit, never silent
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProviderErrorCode(Enum):
    """Explicit failure codes for generator invocations."""
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    INVALID_RESPONSE = "invalid_response"
    CONTENT_FILTERED = "content_filtered"
    API_ERROR = "api_error"
    NETWORK_ERROR = "network_error"


@dataclass(frozen=True)
class ProviderResponse:
    """
    Immutable response from the generator.

    INVARIANT: Either (success=True, content set) or (success=False, error set)
    """
    success: bool
    content: Optional[str] = None

    # Failure info (only set if success=False)
    error_code: Optional[ProviderErrorCode] = None
    error_message: Optional[str] = None

    provider_id: str = ""
    model_id: str = ""
    latency_ms: float = 0.0

    def __post_init__(self):
        if self.success and self.content is None:
            raise ValueError("Successful response must have content")
        if not self.success and self.error_code is None:
            raise ValueError("Failed response must have error_code")


@dataclass(frozen=True)
class InvocationParams:
    """Sampling and transport parameters for one invocation."""
    temperature: float = 0.8
    max_tokens: int = 1000
    timeout_seconds: float = 60.0
    json_response: bool = True


class NarrativeProvider(ABC):
    """
    Abstract narrative generator.

    EXPLICIT FAILURE STATES:
    - TIMEOUT: Invocation exceeded timeout_seconds
    - RATE_LIMITED: Provider rejected due to rate limits
    - INVALID_RESPONSE: Empty or unusable completion
    - CONTENT_FILTERED: Completion blocked by safety filter
    - API_ERROR: Provider returned error status
    - NETWORK_ERROR: Connection failed
    """

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        params: InvocationParams
    ) -> ProviderResponse:
        """
        Single-turn completion returning raw JSON text.

        MUST return ProviderResponse, never raise exceptions.
        """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique provider identifier."""

    async def aclose(self) -> None:
        """Release network resources."""
