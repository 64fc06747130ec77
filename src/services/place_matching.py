"""Heuristic matching between business records and external places.

The point values and rule order are part of observable ranking behavior;
changing them changes which candidate admins see first.
"""

import re
from typing import Optional

from src.models.business import Business
from src.models.place import PlaceCandidate

NAME_EXACT_POINTS = 50
NAME_CONTAINS_POINTS = 30
NAME_WORD_POINTS = 10
NAME_WORD_MIN_LENGTH = 4
STREET_POINTS = 30
CITY_POINTS = 10
STATE_POINTS = 5
ZIP_POINTS = 10

_CORPORATE_SUFFIXES = (
    re.compile(r"^the\s+"),
    re.compile(r"\s+inc\.?$"),
    re.compile(r"\s+corp\.?$"),
    re.compile(r"\s+corporation$"),
)
_PUNCTUATION = re.compile(r"[^\w\s]")


def calculate_match_score(
    business_name: Optional[str],
    street: Optional[str],
    city: Optional[str],
    state: Optional[str],
    zip_code: Optional[str],
    candidate_name: Optional[str],
    candidate_address: Optional[str],
) -> int:
    """Score how well a place candidate matches a business.

    Missing values count as empty strings, and an empty value never earns
    points for its rule.
    """
    business_name = (business_name or "").lower()
    place_name = (candidate_name or "").lower()
    place_address = (candidate_address or "").lower()

    score = 0

    if business_name and place_name:
        if business_name == place_name:
            score += NAME_EXACT_POINTS
        elif place_name in business_name or business_name in place_name:
            score += NAME_CONTAINS_POINTS
        else:
            place_words = place_name.split(" ")
            for word in business_name.split(" "):
                if len(word) >= NAME_WORD_MIN_LENGTH and any(word in pw for pw in place_words):
                    score += NAME_WORD_POINTS

    if not place_address:
        return score

    for value, points in (
        (street, STREET_POINTS),
        (city, CITY_POINTS),
        (state, STATE_POINTS),
        (zip_code, ZIP_POINTS),
    ):
        value = (value or "").lower()
        if value and value in place_address:
            score += points

    return score


def score_candidate(business: Business, candidate: PlaceCandidate) -> int:
    """Score a candidate against a canonical business record."""
    return calculate_match_score(
        business.name,
        business.address.address1,
        business.address.city,
        business.address.state,
        business.address.zip_code,
        candidate.name,
        candidate.formatted_address,
    )


def rank_candidates(
    business: Business, candidates: list[PlaceCandidate]
) -> list[PlaceCandidate]:
    """Score candidates and order them best first.

    The sort is stable, so equal scores keep the order the search service
    returned. Only the first entry is flagged as best match; nothing is
    assigned automatically.
    """
    scored = [
        candidate.model_copy(
            update={"score": score_candidate(business, candidate), "is_best_match": False}
        )
        for candidate in candidates
    ]
    ranked = sorted(scored, key=lambda c: c.score, reverse=True)
    if ranked:
        ranked[0] = ranked[0].model_copy(update={"is_best_match": True})
    return ranked


def build_search_query(business: Business) -> str:
    """Text query for the place search: name, street, city and state."""
    parts = (
        business.name,
        business.address.address1,
        business.address.city,
        business.address.state,
    )
    return " ".join(part.strip() for part in parts if part and part.strip())


def normalize_chain_name(name: str) -> str:
    """Lowercase and strip a leading "the", corporate suffixes and punctuation."""
    name = name.lower()
    for pattern in _CORPORATE_SUFFIXES:
        name = pattern.sub("", name)
    return _PUNCTUATION.sub("", name).strip()


def calculate_name_similarity(chain_name: str, place_name: str) -> float:
    """Similarity in [0, 1] between a chain name and a place name."""
    chain_name = normalize_chain_name(chain_name)
    place_name = normalize_chain_name(place_name)

    if not chain_name or not place_name:
        return 0.0
    if chain_name == place_name:
        return 1.0
    if place_name in chain_name or chain_name in place_name:
        return 0.9

    chain_words = chain_name.split()
    place_words = place_name.split()
    matching = sum(1 for word in chain_words if len(word) > 2 and word in place_words)
    return matching / max(len(chain_words), len(place_words))
