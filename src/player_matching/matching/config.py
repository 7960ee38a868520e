"""Matching engine configuration with sensible defaults.

All parameters can be overridden via ``config/matching.yaml`` and, at run
time, by the ``config_settings`` row edited through ``PATCH /api/config``.
If neither exists, defaults are used.
"""

from __future__ import annotations

from pathlib import Path

import sqlalchemy as sa
import structlog
import yaml
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from player_matching.config.settings import get_settings
from player_matching.models.config_settings import ConfigSettings

logger = structlog.get_logger()


class ScoringWeights(BaseModel):
    """Relative weights for the five matching factors."""

    name: float = 0.35
    dob: float = 0.30
    club: float = 0.15
    nationality: float = 0.10
    position: float = 0.10

    @model_validator(mode="after")
    def warn_if_weights_dont_sum(self) -> "ScoringWeights":
        """Log a warning if weights do not sum to approximately 1.0."""
        total = self.name + self.dob + self.club + self.nationality + self.position
        if abs(total - 1.0) > 0.01:
            logger.warning(
                "scoring_weights_sum_mismatch",
                total=round(total, 4),
                expected=1.0,
            )
        return self


class ThresholdConfig(BaseModel):
    """Confidence band edges shared by the engine and the review workflow.

    - ``confidence >= auto_approve``: approved without review.
    - ``review <= confidence < auto_approve``: queued for a human.
    - ``confidence < review``: discarded.

    An auto-band candidate still goes to review when the player's next
    candidate scores within ``ambiguity_margin`` of it.
    """

    auto_approve: float = Field(default=0.80, ge=0.0, le=1.0)
    review: float = Field(default=0.70, ge=0.0, le=1.0)
    ambiguity_margin: float = Field(default=0.05, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_band_order(self) -> "ThresholdConfig":
        if self.review > self.auto_approve:
            raise ValueError(
                f"review threshold ({self.review}) must not exceed "
                f"auto_approve threshold ({self.auto_approve})"
            )
        return self


class FactorConfig(BaseModel):
    """Cut-offs that turn similarity scores into per-factor match flags."""

    name_match_threshold: float = 85.0
    club_match_threshold: float = 80.0
    # Factor value used when either side lacks the attribute
    missing_neutral: float = 0.5


class NameConfig(BaseModel):
    """Parameters for player-name fuzzy matching."""

    primary_weight: float = 0.7
    secondary_weight: float = 0.3
    blend_lower: float = 60.0
    blend_upper: float = 90.0


class QueueConfig(BaseModel):
    """How ambiguous cases become review queue entries."""

    max_candidates: int = Field(default=3, ge=1, le=3)
    queue_inverse: bool = False


class MatchingConfig(BaseModel):
    """Top-level matching configuration combining all sub-configs."""

    scoring: ScoringWeights = ScoringWeights()
    thresholds: ThresholdConfig = ThresholdConfig()
    factors: FactorConfig = FactorConfig()
    name: NameConfig = NameConfig()
    queue: QueueConfig = QueueConfig()


def load_matching_config(path: Path) -> MatchingConfig:
    """Load matching configuration from a YAML file.

    If the file does not exist, returns a ``MatchingConfig`` with all
    default values.  Partial overrides are supported -- only the keys
    present in the YAML file override defaults.
    """
    if not path.exists():
        return MatchingConfig()

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return MatchingConfig(**data)


def merge_config_dicts(base: dict, updates: dict) -> dict:
    """Recursively merge *updates* into *base*, only overwriting leaves."""
    merged = dict(base)
    for key, value in updates.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


async def load_stored_overrides(session: AsyncSession) -> dict:
    """Return the JSON overrides saved via the config API (``{}`` if none)."""
    result = await session.execute(sa.select(ConfigSettings).where(ConfigSettings.id == 1))
    row = result.scalar_one_or_none()
    return dict(row.config_json) if row is not None and row.config_json else {}


async def load_config_for_session(
    session: AsyncSession, yaml_path: Path | None = None
) -> MatchingConfig:
    """Resolve the effective config: YAML defaults overlaid with DB overrides."""
    if yaml_path is None:
        yaml_path = get_settings().matching_config_path

    base = load_matching_config(yaml_path)
    overrides = await load_stored_overrides(session)

    if not overrides:
        return base

    logger.info("matching_config_overrides_applied", keys=sorted(overrides))
    return MatchingConfig(**merge_config_dicts(base.model_dump(), overrides))


async def load_config_for_run(
    session_factory: async_sessionmaker[AsyncSession],
    yaml_path: Path | None = None,
) -> MatchingConfig:
    """Like ``load_config_for_session`` but opens its own short-lived session."""
    async with session_factory() as session:
        return await load_config_for_session(session, yaml_path)
