"""Pydantic request and response schemas for the Player Matching API."""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict

from player_matching.matching.config import (
    FactorConfig,
    MatchingConfig,
    NameConfig,
    QueueConfig,
    ScoringWeights,
    ThresholdConfig,
)


def _coerce_to_str(v: object) -> str | None:
    """Coerce date/time objects to ISO string for schema output."""
    if v is None:
        return None
    if isinstance(v, (dt.date, dt.datetime)):
        return v.isoformat()
    return str(v)


OptDateStr = Annotated[str | None, BeforeValidator(_coerce_to_str)]

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    size: int
    pages: int


# --- Player schemas ---


class TransfermarktPlayerSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    club_name: str = ""
    club_logo_url: str | None = None
    transfermarkt_url: str | None = None
    date_of_birth: OptDateStr = None
    nationality: str | None = None
    main_position: str | None = None
    picture_url: str | None = None
    sofascore_id: int | None = None


class SofascorePlayerSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sofascore_id: int
    name: str
    current_team_name: str | None = None
    profile_url: str | None = None
    date_of_birth: OptDateStr = None
    nationality: str | None = None
    position: str | None = None
    photo_url: str | None = None


class MatchCandidateSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tm_player_id: int
    sf_player_id: int
    name_match: bool
    dob_match: bool
    club_match: bool
    nationality_match: bool
    position_match: bool
    name_similarity_score: float | None = None
    club_similarity_score: float | None = None
    overall_confidence: float
    match_status: str
    created_at: OptDateStr = None
    updated_at: OptDateStr = None


# --- Review queue schemas ---


class QueueCandidate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slot: int
    sf_player_id: int
    confidence: float | None = None
    player: SofascorePlayerSchema | None = None  # None if the lookup failed
    detail: MatchCandidateSchema | None = None


class QueueEntrySchema(BaseModel):
    id: int
    is_inverse: bool
    tm_player_id: int | None = None
    tm_player: TransfermarktPlayerSchema | None = None
    candidates: list[QueueCandidate] = []
    created_at: OptDateStr = None


class ConfidenceBand(BaseModel):
    review: float
    auto_approve: float


class ReviewQueueResponse(BaseModel):
    items: list[QueueEntrySchema]
    total: int
    band: ConfidenceBand


class ApproveRequest(BaseModel):
    sf_player_id: int
    operator: str = "anonymous"


class RejectRequest(BaseModel):
    reason: str | None = None  # None = default reason for the entry kind
    operator: str = "anonymous"


class ReviewResult(BaseModel):
    entry_id: int
    tm_player_id: int | None = None
    reviewed: bool
    reviewed_at: OptDateStr = None
    approved_sf_player_id: int | None = None
    rejection_reason: str | None = None
    candidates_rejected: int | None = None


# --- Match list schemas ---


class MatchListItem(BaseModel):
    candidate: MatchCandidateSchema
    tm_player: TransfermarktPlayerSchema
    sf_player: SofascorePlayerSchema


class MatchListResponse(BaseModel):
    items: list[MatchListItem]
    total: int
    limit: int


class AuditLogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action_type: str
    review_entry_id: int | None
    tm_player_id: int | None
    sf_player_id: int | None
    operator: str
    details: dict | None
    created_at: str  # ISO string


# --- Dashboard schemas ---


class MatchStatusCounts(BaseModel):
    auto_approved: int = 0
    manually_approved: int = 0
    rejected: int = 0
    pending: int = 0


class QueueStats(BaseModel):
    unreviewed: int
    inverse: int
    reviewed: int


class PlayerStats(BaseModel):
    transfermarkt_total: int
    transfermarkt_linked: int
    sofascore_total: int


class DashboardStats(BaseModel):
    matches: MatchStatusCounts
    queue: QueueStats
    players: PlayerStats


# --- Configuration schemas ---


class ConfigResponse(BaseModel):
    """Full matching configuration returned by GET /api/config."""

    scoring: ScoringWeights = ScoringWeights()
    thresholds: ThresholdConfig = ThresholdConfig()
    factors: FactorConfig = FactorConfig()
    name: NameConfig = NameConfig()
    queue: QueueConfig = QueueConfig()
    updated_at: str | None = None
    updated_by: str | None = None


class ConfigUpdateRequest(BaseModel):
    """Partial update payload for PATCH /api/config.

    Sections are plain dicts so a partial section only overrides the keys
    it names; the merged result is validated as a whole.
    """

    scoring: dict | None = None
    thresholds: dict | None = None
    factors: dict | None = None
    name: dict | None = None
    queue: dict | None = None
    operator: str = "api"


def config_to_response(
    config: MatchingConfig,
    updated_at: dt.datetime | None = None,
    updated_by: str | None = None,
) -> dict:
    data = config.model_dump()
    data["updated_at"] = updated_at.isoformat() if updated_at else None
    data["updated_by"] = updated_by
    return data
