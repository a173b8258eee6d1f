"""Shared fixtures."""

import pytest

from profile_engine.contracts.errors import ProviderUnavailable
from profile_engine.contracts.profile import PreferenceSet

from fakes import FakeGraphProvider, raw_entity

ARTIST = "urn:entity:artist"
MOVIE = "urn:entity:movie"


@pytest.fixture
def scenario_a_preferences():
    return PreferenceSet.from_dict({"music": ["Billie Eilish"], "movies": ["Parasite"]})


@pytest.fixture
def scenario_a_provider():
    """Two popular entities with no shared country or tags, no recommendations."""
    return FakeGraphProvider(catalog={
        "billie eilish": [
            raw_entity("b1", "Billie Eilish", 0.95, [ARTIST], "US", ["pop"]),
        ],
        "parasite": [
            raw_entity("m1", "Parasite", 0.9, [MOVIE], "KR", ["thriller"]),
        ],
    })


@pytest.fixture
def unreachable_provider():
    return FakeGraphProvider(search_error=ProviderUnavailable("connection refused"))
