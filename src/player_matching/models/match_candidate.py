"""Scored Transfermarkt <-> SofaScore pairing (the candidate store)."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from player_matching.models.base import Base

STATUS_AUTO_APPROVED = "auto_approved"
STATUS_MANUALLY_APPROVED = "manually_approved"
STATUS_REJECTED = "rejected"
STATUS_PENDING = "pending"

MATCH_STATUSES = (
    STATUS_AUTO_APPROVED,
    STATUS_MANUALLY_APPROVED,
    STATUS_REJECTED,
    STATUS_PENDING,
)
APPROVED_STATUSES = (STATUS_AUTO_APPROVED, STATUS_MANUALLY_APPROVED)


class MatchCandidate(Base):
    """One candidate pairing with per-factor flags and an overall confidence.

    Exactly one row per ``(tm_player_id, sf_player_id)``.  A Transfermarkt
    player may have several pending rows but at most one approved row; the
    partial unique index ``uq_match_candidates_one_approved`` enforces the
    latter.  Rows are only ever updated (status transitions), never deleted.
    """

    __tablename__ = "player_matching_candidates"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    tm_player_id: Mapped[int] = mapped_column(sa.ForeignKey("players_transfermarkt.id"))
    sf_player_id: Mapped[int] = mapped_column(sa.Integer)

    # Per-factor flags
    name_match: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    dob_match: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    club_match: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    nationality_match: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    position_match: Mapped[bool] = mapped_column(sa.Boolean, default=False)

    # Similarities on a 0-100 scale
    name_similarity_score: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    club_similarity_score: Mapped[float | None] = mapped_column(sa.Float, nullable=True)

    overall_confidence: Mapped[float] = mapped_column(sa.Float)
    match_status: Mapped[str] = mapped_column(sa.String, default=STATUS_PENDING)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))
    updated_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))

    __table_args__ = (
        sa.UniqueConstraint("tm_player_id", "sf_player_id", name="uq_match_candidates_pair"),
        sa.CheckConstraint(
            "match_status IN ('auto_approved', 'manually_approved', 'rejected', 'pending')",
            name="valid_match_status",
        ),
        sa.CheckConstraint(
            "overall_confidence >= 0 AND overall_confidence <= 1",
            name="confidence_range",
        ),
        sa.Index(
            "uq_match_candidates_one_approved",
            "tm_player_id",
            unique=True,
            postgresql_where=sa.text("match_status IN ('auto_approved', 'manually_approved')"),
            sqlite_where=sa.text("match_status IN ('auto_approved', 'manually_approved')"),
        ),
        sa.Index("ix_match_candidates_status_created", "match_status", "created_at"),
    )
