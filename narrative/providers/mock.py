"""
Mock Narrative Provider
=======================

Deterministic stand-in for the narrative generator.

GUARANTEES:
- Same prompt → identical response
- Explicit failure modes can be triggered
- No network access
"""

from __future__ import annotations
import hashlib
import json
from typing import Dict, List, Optional, Tuple

from .base import (
    InvocationParams,
    NarrativeProvider,
    ProviderErrorCode,
    ProviderResponse,
)


def task_of(prompt: str) -> str:
    """Task type from the prompt's ``TASK:`` header line."""
    first_line = prompt.split("\n", 1)[0]
    if first_line.startswith("TASK:"):
        return first_line[len("TASK:"):].strip()
    return ""


class MockNarrativeProvider(NarrativeProvider):
    """
    Deterministic mock provider.

    Args:
        failure_mode: If set, all invocations fail with this error
        responses: Raw content per task type, overriding the canned output
    """

    def __init__(
        self,
        failure_mode: Optional[ProviderErrorCode] = None,
        responses: Optional[Dict[str, str]] = None
    ):
        self._failure_mode = failure_mode
        self._responses = dict(responses or {})
        self.calls: List[Tuple[str, InvocationParams]] = []

    @property
    def provider_id(self) -> str:
        return "mock"

    async def complete(
        self,
        prompt: str,
        params: InvocationParams
    ) -> ProviderResponse:
        self.calls.append((prompt, params))

        if self._failure_mode is not None:
            return ProviderResponse(
                success=False,
                error_code=self._failure_mode,
                error_message=f"Mock provider configured to fail: {self._failure_mode.value}",
                provider_id=self.provider_id,
                model_id="mock-deterministic-v1",
            )

        task = task_of(prompt)
        content = self._responses.get(task)
        if content is None:
            content = json.dumps(self._canned(task, prompt))
        return ProviderResponse(
            success=True,
            content=content,
            provider_id=self.provider_id,
            model_id="mock-deterministic-v1",
        )

    @staticmethod
    def _canned(task: str, prompt: str) -> dict:
        tag = hashlib.sha256(prompt.encode()).hexdigest()[:8]
        if task == "cultural_narrative":
            return {
                "title": "The Curious Cartographer",
                "story": f"A mock narrative for profile {tag}.",
                "insights": ["Mock insight one", "Mock insight two"],
                "personality": "Curious and open to new experiences.",
                "culturalDNA": "Connects familiar favourites with new discoveries.",
                "recommendations": ["Mock recommendation"],
                "evolutionPredictions": ["Mock prediction"],
                "culturalBlindSpots": ["Mock blind spot"],
            }
        if task == "discovery_recommendations":
            return {"recommendations": [f"Mock discovery {i} ({tag})" for i in range(1, 7)]}
        if task == "growth_challenges":
            return {"challenges": [f"Mock challenge {i} ({tag})" for i in range(1, 5)]}
        if task == "evolution_predictions":
            return {"predictions": [f"Mock prediction {i} ({tag})" for i in range(1, 5)]}
        return {}
