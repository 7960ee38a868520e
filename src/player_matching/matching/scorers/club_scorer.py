"""Club-name similarity scorer.

Club names are compared after dropping identity-free affixes such as
"FC" or "Calcio", using ``token_set_ratio`` so that "Bayer 04 Leverkusen"
and "Bayer Leverkusen" score as identical.
"""

from __future__ import annotations

from rapidfuzz import fuzz

from player_matching.preprocessing.normalizer import normalize_club


def club_similarity(player_a: dict, player_b: dict) -> float:
    """Compute club similarity on a 0-100 scale (0.0 if either is missing)."""
    club_a = normalize_club(player_a.get("club_name"))
    club_b = normalize_club(player_b.get("club_name"))

    if not club_a or not club_b:
        return 0.0

    return float(fuzz.token_set_ratio(club_a, club_b))
