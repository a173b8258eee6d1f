"""Strict narrative response models."""

import pytest
from pydantic import ValidationError

from narrative.contracts import CulturalNarrative, DiscoveryResponse
from narrative.providers.base import ProviderErrorCode, ProviderResponse

from fakes import NARRATIVE_PAYLOAD


class TestCulturalNarrative:

    def test_serializes_with_aliases(self):
        data = CulturalNarrative.model_validate(NARRATIVE_PAYLOAD).to_dict()

        assert data["culturalDNA"] == NARRATIVE_PAYLOAD["culturalDNA"]
        assert data["diversityScore"] == 35
        assert "evolutionPredictions" not in data

    def test_whitespace_stripped_and_extras_ignored(self):
        payload = dict(NARRATIVE_PAYLOAD, title="  The Wanderer  ", mood="sunny")
        narrative = CulturalNarrative.model_validate(payload)

        assert narrative.title == "The Wanderer"
        assert "mood" not in narrative.to_dict()

    def test_blank_required_text_rejected(self):
        with pytest.raises(ValidationError):
            CulturalNarrative.model_validate(dict(NARRATIVE_PAYLOAD, story="   "))

    def test_frozen(self):
        narrative = CulturalNarrative.model_validate(NARRATIVE_PAYLOAD)
        with pytest.raises(ValidationError):
            narrative.title = "Changed"


def test_discovery_list_must_not_be_empty():
    with pytest.raises(ValidationError):
        DiscoveryResponse.model_validate({"recommendations": []})


class TestProviderResponse:

    def test_success_requires_content(self):
        with pytest.raises(ValueError):
            ProviderResponse(success=True)

    def test_failure_requires_code(self):
        with pytest.raises(ValueError):
            ProviderResponse(success=False, error_message="boom")

    def test_failure(self):
        response = ProviderResponse(success=False, error_code=ProviderErrorCode.TIMEOUT)
        assert response.content is None
