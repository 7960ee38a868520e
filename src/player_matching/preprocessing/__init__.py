"""Player name/club/country normalization and blocking key generation."""

from player_matching.preprocessing.blocking import coerce_date, generate_blocking_keys
from player_matching.preprocessing.normalizer import (
    normalize_club,
    normalize_name,
    normalize_nationality,
    normalize_text,
    position_group,
    surname_key,
)

__all__ = [
    "coerce_date",
    "generate_blocking_keys",
    "normalize_club",
    "normalize_name",
    "normalize_nationality",
    "normalize_text",
    "position_group",
    "surname_key",
]
