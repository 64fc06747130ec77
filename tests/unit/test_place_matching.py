"""Unit tests for the place match scorer and ranking."""

import pytest

from src.models.business import Address, Business
from src.models.place import PlaceCandidate
from src.services.place_matching import (
    build_search_query,
    calculate_match_score,
    calculate_name_similarity,
    normalize_chain_name,
    rank_candidates,
)


class TestCalculateMatchScore:
    """Point rules applied in order."""

    def test_full_match_scenario(self):
        """Name, street, city, state and zip all match."""
        score = calculate_match_score(
            "Joe's Diner", "100 Main St", "Austin", "TX", "78701",
            "Joe's Diner", "100 Main St, Austin, TX 78701",
        )
        assert score == 105

    def test_identical_name_earns_at_least_fifty(self):
        score = calculate_match_score("Subway", "", "", "", "", "SUBWAY", "")
        assert score >= 50
        assert score == 50

    def test_name_comparison_is_case_insensitive(self):
        assert calculate_match_score("joe's diner", None, None, None, None, "JOE'S DINER", None) == 50

    def test_name_containment_either_direction(self):
        assert calculate_match_score("Joe's Diner", None, None, None, None, "Joe's Diner Downtown", None) == 30
        assert calculate_match_score("Joe's Diner Downtown", None, None, None, None, "Joe's Diner", None) == 30

    def test_word_overlap_counts_words_longer_than_three(self):
        # "cafe" and "veterans" overlap; "the" is too short to count
        score = calculate_match_score(
            "The Veterans Cafe", None, None, None, None, "Cafe for Veterans", None
        )
        assert score == 20

    def test_word_overlap_matches_inside_candidate_words(self):
        # "burger" appears inside "burgers"
        score = calculate_match_score(
            "Burger Barn", None, None, None, None, "Best Burgers", None
        )
        assert score == 10

    def test_zip_only_match_scores_ten(self):
        score = calculate_match_score(
            "Alpha", "1 Elm St", "Dallas", "OK", "78701",
            "Omega", "900 Oak Ave, Houston, TX 78701",
        )
        assert score == 10

    def test_state_match_scores_five(self):
        score = calculate_match_score(
            "Alpha", "", "", "TX", "", "Omega", "900 Oak Ave, Houston, TX"
        )
        assert score == 5

    def test_missing_candidate_fields_score_zero(self):
        score = calculate_match_score(
            "Joe's Diner", "100 Main St", "Austin", "TX", "78701", None, None
        )
        assert score == 0

    def test_empty_business_fields_score_zero(self):
        score = calculate_match_score(
            "", "", "", "", "", "Joe's Diner", "100 Main St, Austin, TX 78701"
        )
        assert score == 0

    def test_score_is_not_capped(self):
        score = calculate_match_score(
            "Joe's Diner", "100 Main St", "Austin", "TX", "78701",
            "Joe's Diner", "100 Main St, Austin, TX 78701",
        )
        assert score > 100


class TestRankCandidates:
    """Ranking and best-match flag."""

    def test_highest_score_first_and_flagged(self, joes_diner):
        candidates = [
            PlaceCandidate(place_id="p1", name="Other Place", formatted_address="5 Oak St, Dallas, TX"),
            PlaceCandidate(place_id="p2", name="Joe's Diner", formatted_address="100 Main St, Austin, TX 78701"),
        ]

        ranked = rank_candidates(joes_diner, candidates)

        assert [c.place_id for c in ranked] == ["p2", "p1"]
        assert ranked[0].score == 105
        assert ranked[0].is_best_match is True
        assert ranked[1].is_best_match is False

    def test_ties_keep_original_order(self, joes_diner):
        candidates = [
            PlaceCandidate(place_id="first", name="Nope", formatted_address="Austin"),
            PlaceCandidate(place_id="second", name="Nada", formatted_address="Austin"),
            PlaceCandidate(place_id="third", name="Nil", formatted_address="Austin"),
        ]

        ranked = rank_candidates(joes_diner, candidates)

        assert [c.place_id for c in ranked] == ["first", "second", "third"]
        assert all(c.score == 10 for c in ranked)

    def test_empty_list(self, joes_diner):
        assert rank_candidates(joes_diner, []) == []

    def test_inputs_are_not_mutated(self, joes_diner):
        candidate = PlaceCandidate(place_id="p1", name="Joe's Diner")
        rank_candidates(joes_diner, [candidate])
        assert candidate.score == 0
        assert candidate.is_best_match is False


class TestSearchQuery:
    def test_query_joins_name_street_city_state(self, joes_diner):
        assert build_search_query(joes_diner) == "Joe's Diner 100 Main St Austin TX"

    def test_query_skips_blank_parts(self):
        business = Business(name="Joe's Diner", address=Address(city="Austin"))
        assert build_search_query(business) == "Joe's Diner Austin"


class TestChainNameSimilarity:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("The Home Depot", "home depot"),
            ("Lowe's Inc.", "lowes"),
            ("Acme Corp", "acme"),
            ("Acme Corporation", "acme"),
        ],
    )
    def test_normalize_chain_name(self, raw, expected):
        assert normalize_chain_name(raw) == expected

    def test_exact_after_normalization(self):
        assert calculate_name_similarity("The Home Depot", "Home Depot") == 1.0

    def test_containment(self):
        assert calculate_name_similarity("Home Depot", "Home Depot Garden Center") == 0.9

    def test_word_overlap_ratio(self):
        # "grill" shared; longer name has four words
        assert calculate_name_similarity("Texas Grill", "Big Star Grill House") == 0.25

    def test_no_overlap(self):
        assert calculate_name_similarity("Walmart", "Target") == 0.0
