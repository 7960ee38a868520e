"""Player-name similarity scorer using RapidFuzz.

Uses ``token_sort_ratio`` as the primary signal and blends in
``token_set_ratio`` only when the primary score falls in an ambiguous
range.  That range is where one provider carries extra given names
("Vinicius Jose Paixao de Oliveira Junior" vs "Vinicius Junior").
Names are accent-folded and case-folded first.
"""

from __future__ import annotations

from rapidfuzz import fuzz

from player_matching.matching.config import NameConfig
from player_matching.preprocessing.normalizer import normalize_name


def name_similarity(
    player_a: dict, player_b: dict, config: NameConfig | None = None
) -> float:
    """Compute name similarity between two players on a 0-100 scale.

    Returns 0.0 if either name is missing or empty.
    """
    if config is None:
        config = NameConfig()

    name_a = normalize_name(player_a.get("name"))
    name_b = normalize_name(player_b.get("name"))

    if not name_a or not name_b:
        return 0.0

    primary = fuzz.token_sort_ratio(name_a, name_b)

    if config.blend_lower <= primary <= config.blend_upper:
        secondary = fuzz.token_set_ratio(name_a, name_b)
        return config.primary_weight * primary + config.secondary_weight * secondary

    return float(primary)
