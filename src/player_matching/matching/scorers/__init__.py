"""Matching factor scorers -- pure functions operating on player dicts."""

from player_matching.matching.scorers.attribute_scorers import (
    dob_match,
    nationality_match,
    position_match,
)
from player_matching.matching.scorers.club_scorer import club_similarity
from player_matching.matching.scorers.name_scorer import name_similarity

__all__ = [
    "club_similarity",
    "dob_match",
    "name_similarity",
    "nationality_match",
    "position_match",
]
