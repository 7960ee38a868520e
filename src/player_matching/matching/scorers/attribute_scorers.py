"""Exact-attribute factors: birth date, nationality and position.

Each function returns ``True``/``False`` when both players carry the
attribute and ``None`` when either side lacks it, so the combiner can
apply a neutral value instead of penalising missing data.
"""

from __future__ import annotations

from player_matching.preprocessing.blocking import coerce_date
from player_matching.preprocessing.normalizer import normalize_nationality, position_group


def dob_match(player_a: dict, player_b: dict) -> bool | None:
    dob_a = coerce_date(player_a.get("date_of_birth"))
    dob_b = coerce_date(player_b.get("date_of_birth"))
    if dob_a is None or dob_b is None:
        return None
    return dob_a == dob_b


def nationality_match(player_a: dict, player_b: dict) -> bool | None:
    nat_a = normalize_nationality(player_a.get("nationality"))
    nat_b = normalize_nationality(player_b.get("nationality"))
    if not nat_a or not nat_b:
        return None
    return nat_a == nat_b


def position_match(player_a: dict, player_b: dict) -> bool | None:
    """Compare positions by line (G/D/M/F); unknown labels count as missing."""
    group_a = position_group(player_a.get("position"))
    group_b = position_group(player_b.get("position"))
    if group_a is None or group_b is None:
        return None
    return group_a == group_b
