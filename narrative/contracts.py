"""
Narrative Contracts
===================

Strictly-typed shapes of the narrative generator's JSON responses.

BOUNDARY ENFORCEMENT:
- Models are strict: no coercion of numbers to strings or back
- Required fields must be present and non-empty
- A response that does not validate is a NarrativeFormatError upstream,
  never a partially-filled object
"""

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from profile_engine.contracts.errors import (
    NarrativeError,
    NarrativeFormatError,
    NarrativeProviderError,
)


class _StrictModel(BaseModel):
    model_config = ConfigDict(
        strict=True,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class CulturalNarrative(_StrictModel):
    """Narrative identity report synthesized from a CulturalProfile."""
    title: str = Field(min_length=1)
    story: str = Field(min_length=1)
    insights: List[str]
    personality: str = Field(min_length=1)
    cultural_dna: str = Field(alias="culturalDNA", min_length=1)
    recommendations: List[str]
    evolution_predictions: Optional[List[str]] = Field(default=None, alias="evolutionPredictions")
    cultural_blind_spots: Optional[List[str]] = Field(default=None, alias="culturalBlindSpots")
    diversity_score: Optional[int] = Field(default=None, alias="diversityScore", ge=0, le=100)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class DiscoveryResponse(_StrictModel):
    recommendations: List[str] = Field(min_length=1)


class ChallengeResponse(_StrictModel):
    challenges: List[str] = Field(min_length=1)


class EvolutionResponse(_StrictModel):
    predictions: List[str] = Field(min_length=1)


__all__ = [
    'CulturalNarrative', 'DiscoveryResponse', 'ChallengeResponse', 'EvolutionResponse',
    'NarrativeError', 'NarrativeFormatError', 'NarrativeProviderError',
]
