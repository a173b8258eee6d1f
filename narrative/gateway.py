"""
Narrative Gateway
=================

Thin adapter between an aggregated CulturalProfile and the external
narrative generator.

GUARANTEES:
===========
1. Exactly one generator attempt per request
2. Every response is parsed and validated before it is returned
3. A narrative is either fully typed or an exception is raised.
   No placeholder content is ever substituted.

EXPLICIT FAILURE STATES:
- Generator down / rate limited / timed out → NarrativeProviderError
- Generator answered with unusable content   → NarrativeFormatError
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from profile_engine.contracts.errors import NarrativeFormatError, NarrativeProviderError
from profile_engine.contracts.profile import CulturalProfile, PreferenceSet

from .contracts import (
    ChallengeResponse,
    CulturalNarrative,
    DiscoveryResponse,
    EvolutionResponse,
)
from .prompts import (
    CHALLENGES,
    DISCOVERIES,
    EVOLUTION,
    MAX_CHALLENGES,
    MAX_DISCOVERIES,
    MAX_PREDICTIONS,
    NARRATIVE,
    TASK_SAMPLING,
    CanonicalPrompt,
)
from .providers.base import (
    InvocationParams,
    NarrativeProvider,
    ProviderErrorCode,
)

logger = logging.getLogger(__name__)


class NarrativeGateway:
    """Requests and validates narrative generator output."""

    def __init__(
        self,
        provider: NarrativeProvider,
        timeout_seconds: float = 60.0
    ):
        self._provider = provider
        self._timeout_seconds = timeout_seconds

    async def request_narrative(
        self,
        preferences: PreferenceSet,
        profile: CulturalProfile
    ) -> CulturalNarrative:
        prompt = CanonicalPrompt.create(NARRATIVE, preferences, profile)
        return await self._invoke(prompt, CulturalNarrative)

    async def request_discoveries(
        self,
        narrative: CulturalNarrative,
        preferences: PreferenceSet,
        profile: CulturalProfile
    ) -> List[str]:
        prompt = CanonicalPrompt.create(DISCOVERIES, preferences, profile, narrative)
        response = await self._invoke(prompt, DiscoveryResponse)
        return list(response.recommendations[:MAX_DISCOVERIES])

    async def request_growth_challenges(
        self,
        preferences: PreferenceSet,
        profile: CulturalProfile,
        narrative: CulturalNarrative
    ) -> List[str]:
        prompt = CanonicalPrompt.create(CHALLENGES, preferences, profile, narrative)
        response = await self._invoke(prompt, ChallengeResponse)
        return list(response.challenges[:MAX_CHALLENGES])

    async def request_evolution_predictions(
        self,
        preferences: PreferenceSet,
        profile: CulturalProfile
    ) -> List[str]:
        prompt = CanonicalPrompt.create(EVOLUTION, preferences, profile)
        response = await self._invoke(prompt, EvolutionResponse)
        return list(response.predictions[:MAX_PREDICTIONS])

    # =========================================================================
    # INVOCATION
    # =========================================================================

    def _params(self, task_type: str) -> InvocationParams:
        temperature, max_tokens = TASK_SAMPLING[task_type]
        return InvocationParams(
            temperature=temperature,
            max_tokens=max_tokens,
            timeout_seconds=self._timeout_seconds,
        )

    async def _invoke(self, prompt: CanonicalPrompt, model: Type[BaseModel]) -> Any:
        response = await self._provider.complete(
            prompt.prompt_text, self._params(prompt.task_type)
        )

        if not response.success:
            message = (
                f"{prompt.task_type} generation failed "
                f"({response.error_code.value}): {response.error_message}"
            )
            logger.error(message)
            if response.error_code == ProviderErrorCode.INVALID_RESPONSE:
                raise NarrativeFormatError(message, raw_content=response.content)
            raise NarrativeProviderError(message, error_code=response.error_code.value)

        payload = self._parse_json(prompt.task_type, response.content)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.error(
                "%s response failed validation (prompt %s): %d error(s)",
                prompt.task_type, prompt.prompt_hash[:12], e.error_count()
            )
            raise NarrativeFormatError(
                f"{prompt.task_type} response does not match the expected shape: {e}",
                raw_content=response.content,
            )

    @staticmethod
    def _parse_json(task_type: str, content: Optional[str]) -> Dict[str, Any]:
        try:
            payload = json.loads(content or "")
        except json.JSONDecodeError as e:
            logger.error("%s response is not valid JSON: %s", task_type, e)
            raise NarrativeFormatError(
                f"{task_type} response is not valid JSON: {e}", raw_content=content
            )
        if not isinstance(payload, dict):
            raise NarrativeFormatError(
                f"{task_type} response must be a JSON object", raw_content=content
            )
        return payload
