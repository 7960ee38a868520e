"""Factor combiner and confidence banding.

Combines the five matching factors into a single weighted confidence and
maps that confidence onto the auto-approve / review / discard bands.
"""

from __future__ import annotations

from dataclasses import dataclass

from player_matching.matching.config import FactorConfig, ScoringWeights, ThresholdConfig

BAND_AUTO_APPROVE = "auto_approve"
BAND_REVIEW = "review"
BAND_DISCARD = "discard"


@dataclass(frozen=True)
class FactorScores:
    """Raw factor values for one candidate pair.

    Similarities are on a 0-100 scale; the exact-attribute factors are
    ``None`` when either player lacks the attribute.
    """

    name_similarity: float
    club_similarity: float
    dob: bool | None
    nationality: bool | None
    position: bool | None


def _bool_factor(value: bool | None, neutral: float) -> float:
    if value is None:
        return neutral
    return 1.0 if value else 0.0


def combined_confidence(
    factors: FactorScores,
    weights: ScoringWeights | None = None,
    factor_config: FactorConfig | None = None,
) -> float:
    """Compute the weighted overall confidence in [0, 1].

    The weights are normalised so they always sum to 1.0, even if the
    configured weights do not.  A club similarity of exactly 0 is treated
    as "club unknown" and receives the neutral value, since transfers
    between scrapes are common.
    """
    if weights is None:
        weights = ScoringWeights()
    if factor_config is None:
        factor_config = FactorConfig()

    total_weight = weights.name + weights.dob + weights.club + weights.nationality + weights.position
    if total_weight == 0:
        return 0.0

    neutral = factor_config.missing_neutral
    club_value = factors.club_similarity / 100.0 if factors.club_similarity > 0 else neutral

    weighted = (
        weights.name * (factors.name_similarity / 100.0)
        + weights.dob * _bool_factor(factors.dob, neutral)
        + weights.club * club_value
        + weights.nationality * _bool_factor(factors.nationality, neutral)
        + weights.position * _bool_factor(factors.position, neutral)
    )

    return min(1.0, max(0.0, weighted / total_weight))


def factor_flags(factors: FactorScores, factor_config: FactorConfig | None = None) -> dict[str, bool]:
    """Turn factor values into the five boolean match flags stored per candidate."""
    if factor_config is None:
        factor_config = FactorConfig()

    return {
        "name_match": factors.name_similarity >= factor_config.name_match_threshold,
        "dob_match": bool(factors.dob),
        "club_match": factors.club_similarity >= factor_config.club_match_threshold,
        "nationality_match": bool(factors.nationality),
        "position_match": bool(factors.position),
    }


def assign_band(confidence: float, thresholds: ThresholdConfig | None = None) -> str:
    """Map a confidence onto its band.

    Returns:
        ``"auto_approve"`` if confidence >= auto_approve threshold,
        ``"review"`` if confidence >= review threshold,
        ``"discard"`` otherwise.
    """
    if thresholds is None:
        thresholds = ThresholdConfig()

    if confidence >= thresholds.auto_approve:
        return BAND_AUTO_APPROVE
    if confidence >= thresholds.review:
        return BAND_REVIEW
    return BAND_DISCARD
