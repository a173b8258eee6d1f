"""
HTTP API Tests

Routes and error mapping of the FastAPI surface, with an injected
engine backed by in-memory providers.
"""

from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from narrative.providers.base import ProviderErrorCode
from narrative.providers.mock import MockNarrativeProvider
from profile_engine.api.server import create_app
from profile_engine.contracts.errors import ProviderUnauthorized, ProviderUnavailable
from profile_engine.engine import CulturalIntelligenceEngine

from fakes import NARRATIVE_PAYLOAD, FakeGraphProvider, fast_engine_config

SCENARIO_A = {"music": ["Billie Eilish"], "movies": ["Parasite"]}


@pytest.fixture
def client_for():
    with ExitStack() as stack:

        def build(graph, narrator=None):
            engine = CulturalIntelligenceEngine(
                graph=graph,
                narrator=narrator or MockNarrativeProvider(),
                config=fast_engine_config(),
            )
            return stack.enter_context(TestClient(create_app(engine)))

        yield build


@pytest.fixture
def client(client_for, scenario_a_provider):
    return client_for(scenario_a_provider)


class TestHealth:

    def test_online(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "online"
        assert body["cache"]["totalEntries"] == 0


class TestSearch:

    def test_ranked_results(self, client):
        response = client.get("/api/search", params={"q": "Billie Eilish", "category": "music"})

        assert response.status_code == 200
        body = response.json()
        assert body["category"] == "music"
        assert body["results"][0]["id"] == "b1"
        assert body["results"][0]["relevance"] == 1.0

    def test_unknown_category(self, client):
        response = client.get("/api/search", params={"q": "x", "category": "podcasts"})
        assert response.status_code == 400

    def test_blank_query(self, client):
        response = client.get("/api/search", params={"q": "   ", "category": "music"})
        assert response.status_code == 400

    def test_provider_error(self, client_for):
        client = client_for(FakeGraphProvider(search_error=ProviderUnavailable("down")))
        response = client.get("/api/search", params={"q": "x", "category": "music"})

        assert response.status_code == 502
        assert response.json()["error"] == "graph_provider_error"

    def test_rejected_credentials(self, client_for):
        client = client_for(FakeGraphProvider(search_error=ProviderUnauthorized("bad key")))
        response = client.get("/api/search", params={"q": "x", "category": "music"})

        assert response.status_code == 500
        assert response.json()["error"] == "configuration_error"


class TestCulturalProfile:

    def test_profile(self, client):
        response = client.post("/api/analysis/cultural-profile", json={"preferences": SCENARIO_A})

        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["diversityScore"] == 35
        assert profile["qlooInsights"]["matchRate"] == 1.0
        assert len(profile["connections"]) == 1

    @pytest.mark.parametrize("preferences", [
        {},
        {"music": []},
        {"podcasts": ["Serial"]},
        {"music": ["  "]},
        {"music": ["a", "b", "c", "d", "e", "f"]},
    ])
    def test_invalid_preferences(self, client, preferences):
        response = client.post("/api/analysis/cultural-profile", json={"preferences": preferences})
        assert response.status_code == 400

    def test_degraded_profile_still_returned(self, client_for):
        client = client_for(FakeGraphProvider(search_error=ProviderUnavailable("down")))
        response = client.post("/api/analysis/cultural-profile", json={"preferences": SCENARIO_A})

        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["qlooInsights"]["error"].startswith("Cultural graph provider unreachable")
        assert profile["diversityScore"] == 50


class TestNarrative:

    def test_narrative_with_profile(self, client):
        response = client.post("/api/narrative", json={"preferences": SCENARIO_A})

        assert response.status_code == 200
        body = response.json()
        assert body["narrative"]["title"] == "The Curious Cartographer"
        assert "culturalDNA" in body["narrative"]
        assert body["profile"]["culturalDepth"] == 20

    def test_generator_failure(self, client_for, scenario_a_provider):
        client = client_for(
            scenario_a_provider, MockNarrativeProvider(failure_mode=ProviderErrorCode.TIMEOUT)
        )
        response = client.post("/api/narrative", json={"preferences": SCENARIO_A})

        assert response.status_code == 502
        assert response.json()["error"] == "narrative_provider_error"
        assert response.json()["code"] == "timeout"

    def test_unusable_generator_output(self, client_for, scenario_a_provider):
        client = client_for(
            scenario_a_provider,
            MockNarrativeProvider(responses={"cultural_narrative": "not json"}),
        )
        response = client.post("/api/narrative", json={"preferences": SCENARIO_A})

        assert response.status_code == 502
        assert response.json()["error"] == "narrative_format_error"


class TestFollowUps:

    def test_discoveries(self, client):
        response = client.post(
            "/api/discoveries",
            json={"preferences": SCENARIO_A, "narrative": NARRATIVE_PAYLOAD},
        )
        assert response.status_code == 200
        assert len(response.json()["recommendations"]) == 6

    def test_challenges(self, client):
        response = client.post(
            "/api/challenges",
            json={"preferences": SCENARIO_A, "narrative": NARRATIVE_PAYLOAD},
        )
        assert response.status_code == 200
        assert len(response.json()["challenges"]) == 4

    def test_evolution(self, client):
        response = client.post("/api/evolution", json={"preferences": SCENARIO_A})
        assert response.status_code == 200
        assert len(response.json()["predictions"]) == 4

    def test_invalid_narrative_body(self, client):
        response = client.post(
            "/api/discoveries",
            json={"preferences": SCENARIO_A, "narrative": {"title": "Only a title"}},
        )
        assert response.status_code == 400

    def test_profile_reused_from_cache(self, client, scenario_a_provider):
        client.post("/api/analysis/cultural-profile", json={"preferences": SCENARIO_A})
        calls = len(scenario_a_provider.search_calls)
        client.post("/api/evolution", json={"preferences": SCENARIO_A})

        assert len(scenario_a_provider.search_calls) == calls
