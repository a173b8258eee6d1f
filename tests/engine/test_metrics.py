"""
Profile Metrics Tests

Theme and pattern tiers, diversity sub-scores and cultural depth.
"""

import pytest
from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from profile_engine.contracts.entities import ALL_CATEGORIES, Category
from profile_engine.metrics import (
    CLOSING_PATTERN,
    compute_cultural_depth,
    compute_diversity,
    extract_patterns,
    extract_themes,
    match_rate,
    popularity_spread,
)

from fakes import make_entity

MUSIC, MOVIES, FOOD, TRAVEL, BOOKS = ALL_CATEGORIES


def entities(category, count, popularity=None, country=None, types=None):
    return tuple(
        make_entity(
            f"{category.value}-{i}",
            category=category,
            popularity=popularity,
            country=country,
            types=types if types is not None else (f"urn:entity:{category.value}",),
        )
        for i in range(count)
    )


def scenario_a_mapping():
    return {
        MUSIC: (make_entity("b1", "Billie Eilish", MUSIC, 0.95, ("urn:entity:artist",), "US"),),
        MOVIES: (make_entity("m1", "Parasite", MOVIES, 0.9, ("urn:entity:movie",), "KR"),),
    }


def full_mapping():
    return {
        category: tuple(
            make_entity(
                f"{category.value}-{i}",
                category=category,
                popularity=0.5,
                types=(f"urn:entity:{category.value}-{i}",),
            )
            for i in range(5)
        )
        for category in ALL_CATEGORIES
    }


# =============================================================================
# THEMES
# =============================================================================

class TestThemes:

    def test_full_profile_reaches_top_tiers(self):
        themes = extract_themes(full_mapping())
        assert themes[0] == "Comprehensive Cultural Intelligence"
        assert themes[1] == "Renaissance Cultural Explorer"
        assert "Deep Music Expertise" in themes
        assert "Balanced Mainstream and Niche Taste" in themes

    def test_single_entity(self):
        mapping = {MUSIC: entities(MUSIC, 1, popularity=0.9)}
        assert extract_themes(mapping) == [
            "Emerging Cultural Signature",
            "Focused Cultural Specialist",
            "Mainstream Culture Connoisseur",
        ]

    def test_volume_tiers(self):
        assert extract_themes({MUSIC: entities(MUSIC, 5), MOVIES: entities(MOVIES, 1)})[0] == \
            "Established Cultural Footprint"
        mapping = {c: entities(c, 3) for c in (MUSIC, MOVIES, FOOD, TRAVEL)}
        assert extract_themes(mapping)[0] == "Broad Cultural Recognition"

    def test_specialization_tie_goes_to_canonical_order(self):
        mapping = {MOVIES: entities(MOVIES, 2), MUSIC: entities(MUSIC, 2)}
        themes = extract_themes(mapping)
        assert "Developing Music Expertise" in themes
        assert "Dual-Domain Connector" in themes

    def test_popularity_tiers(self):
        assert "Underground Culture Curator" in extract_themes({MUSIC: entities(MUSIC, 2, 0.2)})
        plain = extract_themes({MUSIC: entities(MUSIC, 2)})
        assert not any("Curator" in t or "Connoisseur" in t or "Balanced" in t for t in plain)

    def test_geography_tiers(self):
        mapping = {
            MUSIC: (make_entity("a", country="US"), make_entity("b", country="KR")),
        }
        assert "Cross-Cultural Explorer" in extract_themes(mapping)

        mapping = {
            MUSIC: tuple(make_entity(c, country=c) for c in ("US", "KR", "FR", "BR")),
        }
        assert "Global Cultural Citizen" in extract_themes(mapping)

    def test_empty_mapping_has_no_themes(self):
        assert extract_themes({}) == []


# =============================================================================
# PATTERNS
# =============================================================================

class TestPatterns:

    def test_single_category(self):
        mapping = {MUSIC: entities(MUSIC, 1, popularity=0.9)}
        assert extract_patterns(mapping, 1) == [
            "Highly recognizable cultural preferences",
            "Concentrated cultural expertise",
            CLOSING_PATTERN,
        ]

    def test_match_rate_tiers(self):
        one = {MUSIC: entities(MUSIC, 1)}
        two = {MUSIC: entities(MUSIC, 2)}
        assert extract_patterns(two, 3)[0] == "Mix of well-known and distinctive preferences"
        assert extract_patterns(one, 3)[0] == "Distinctive preferences beyond the mainstream catalogue"
        assert extract_patterns({}, 3)[0] == "Highly individual preferences outside the cultural graph"

    def test_coverage_tiers(self):
        two = {MUSIC: entities(MUSIC, 1), MOVIES: entities(MOVIES, 1)}
        assert "Cross-domain cultural curiosity" in extract_patterns(two, 2)
        assert "Multi-domain cultural coherence" in extract_patterns(full_mapping(), 25)

    def test_type_variety(self):
        assert "Wide variety of cultural forms" in extract_patterns(full_mapping(), 25)
        four = {MUSIC: tuple(make_entity(f"e{i}", types=(f"t{i}",)) for i in range(4))}
        assert "Several distinct cultural forms" in extract_patterns(four, 4)

    def test_popularity_spread(self):
        wide = {MUSIC: (make_entity("a", popularity=0.1), make_entity("b", popularity=0.9))}
        assert "Wide range from mainstream to niche" in extract_patterns(wide, 2)

        steady = {MUSIC: (make_entity("a", popularity=0.5), make_entity("b", popularity=0.55))}
        assert "Consistent popularity level across choices" in extract_patterns(steady, 2)

    def test_international_sources(self):
        mapping = {MUSIC: tuple(make_entity(c, country=c) for c in ("US", "KR", "FR"))}
        assert "Internationally sourced cultural influences" in extract_patterns(mapping, 3)

    def test_always_ends_with_closing_pattern(self):
        assert extract_patterns({}, 0)[-1] == CLOSING_PATTERN
        assert extract_patterns(full_mapping(), 25)[-1] == CLOSING_PATTERN


class TestMatchRate:

    def test_no_inputs(self):
        assert match_rate(0, 0) == 0.0

    def test_capped_at_one(self):
        assert match_rate(4, 3) == 1.0
        assert match_rate(1, 3) == pytest.approx(1 / 3)


def test_spread_needs_two_values():
    assert popularity_spread([0.7]) == 0.0
    assert popularity_spread([0.1, 0.9]) == pytest.approx(0.4)


# =============================================================================
# DIVERSITY
# =============================================================================

class TestDiversity:

    def test_two_category_example(self):
        breakdown, score = compute_diversity(scenario_a_mapping())

        assert breakdown.domain_coverage == pytest.approx(10.0)
        assert breakdown.recognition == pytest.approx(2.5)
        assert breakdown.popularity_diversity == pytest.approx(9.5)
        assert breakdown.type_diversity == pytest.approx(3.0)
        assert breakdown.geographic == pytest.approx(5.0)
        assert breakdown.balance == pytest.approx(4.88)
        assert score == 35

    def test_full_coverage(self):
        breakdown, score = compute_diversity(full_mapping())

        assert breakdown.domain_coverage == 25.0
        assert breakdown.recognition == 25.0
        assert breakdown.type_diversity == 15.0
        assert breakdown.balance == pytest.approx(5.0)
        assert score == 75

    def test_single_category_minimum_coverage(self):
        breakdown, _ = compute_diversity({MUSIC: entities(MUSIC, 1)})
        assert breakdown.domain_coverage == pytest.approx(5.0)

    def test_missing_popularity_contributes_nothing(self):
        breakdown, _ = compute_diversity({MUSIC: entities(MUSIC, 2)})
        assert breakdown.popularity_diversity == 0.0

    def test_empty_mapping(self):
        breakdown, score = compute_diversity({})
        assert score == 0
        assert breakdown.total == 0.0


class TestCulturalDepth:

    def test_average_items_per_active_category(self):
        assert compute_cultural_depth({MUSIC: 2, MOVIES: 3}) == 50
        assert compute_cultural_depth({MUSIC: 1, MOVIES: 2}) == 30

    def test_full_categories(self):
        assert compute_cultural_depth({c: 5 for c in ALL_CATEGORIES}) == 100

    def test_empty_categories_ignored(self):
        assert compute_cultural_depth({MUSIC: 1, MOVIES: 0, BOOKS: 0}) == 20

    def test_no_input(self):
        assert compute_cultural_depth({}) == 0
        assert compute_cultural_depth({MUSIC: 0}) == 0


# =============================================================================
# PROPERTIES
# =============================================================================

@composite
def entity_mappings(draw):
    mapping = {}
    for category in ALL_CATEGORIES:
        count = draw(st.integers(min_value=0, max_value=5))
        mapping[category] = tuple(
            make_entity(
                f"{category.value}-{i}",
                category=category,
                popularity=draw(st.one_of(st.none(), st.floats(min_value=0.0, max_value=1.0))),
                types=tuple(draw(st.lists(st.sampled_from("abcdefghijklmnop"), max_size=3))),
                country=draw(st.one_of(st.none(), st.sampled_from(["US", "KR", "FR", "BR", "JP", "NG"]))),
            )
            for i in range(count)
        )
    return mapping


@given(entity_mappings())
def test_diversity_sub_scores_within_caps(mapping):
    breakdown, score = compute_diversity(mapping)

    assert 0 <= score <= 100
    assert 0 <= breakdown.domain_coverage <= 25
    assert 0 <= breakdown.recognition <= 25
    assert 0 <= breakdown.popularity_diversity <= 20
    assert 0 <= breakdown.type_diversity <= 15
    assert 0 <= breakdown.geographic <= 10
    assert 0 <= breakdown.balance <= 5


@given(st.dictionaries(st.sampled_from(ALL_CATEGORIES), st.integers(min_value=0, max_value=5)))
def test_cultural_depth_within_range(counts):
    assert 0 <= compute_cultural_depth(counts) <= 100


@given(entity_mappings())
def test_patterns_end_with_closing_pattern(mapping):
    total = sum(len(v) for v in mapping.values())
    assert extract_patterns(mapping, total)[-1] == CLOSING_PATTERN
