"""Review queue entry: one ambiguous case awaiting a human decision."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from player_matching.models.base import Base

CANDIDATE_SLOTS = (1, 2, 3)


class ReviewQueueEntry(Base):
    """Up to three ranked SofaScore candidates for one Transfermarkt player.

    ``tm_player_id`` is ``NULL`` for inverse entries: a SofaScore player
    with no plausible Transfermarkt counterpart, carried in slot 1.

    Slot confidences never increase from slot 1 to slot 3.  Once
    ``reviewed`` flips to true the row is frozen and kept as audit history.
    """

    __tablename__ = "player_matching_review_queue"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    tm_player_id: Mapped[int | None] = mapped_column(
        sa.ForeignKey("players_transfermarkt.id"), nullable=True
    )

    candidate_1_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    candidate_1_confidence: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    candidate_2_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    candidate_2_confidence: Mapped[float | None] = mapped_column(sa.Float, nullable=True)
    candidate_3_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    candidate_3_confidence: Mapped[float | None] = mapped_column(sa.Float, nullable=True)

    # Review outcome
    reviewed: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(sa.DateTime, nullable=True)
    approved_sf_player_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(sa.String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))

    __table_args__ = (
        sa.CheckConstraint(
            "candidate_2_confidence IS NULL OR candidate_1_confidence IS NULL "
            "OR candidate_1_confidence >= candidate_2_confidence",
            name="ranked_candidates_1_2",
        ),
        sa.CheckConstraint(
            "candidate_3_confidence IS NULL OR candidate_2_confidence IS NULL "
            "OR candidate_2_confidence >= candidate_3_confidence",
            name="ranked_candidates_2_3",
        ),
        sa.Index("ix_review_queue_reviewed_confidence", "reviewed", "candidate_1_confidence"),
    )

    @property
    def is_inverse(self) -> bool:
        return self.tm_player_id is None

    def candidate_slots(self) -> list[tuple[int, int, float | None]]:
        """Return ``(slot, sf_player_id, confidence)`` for each filled slot."""
        slots = []
        for slot in CANDIDATE_SLOTS:
            sf_id = getattr(self, f"candidate_{slot}_id")
            if sf_id is not None:
                slots.append((slot, sf_id, getattr(self, f"candidate_{slot}_confidence")))
        return slots

    def candidate_ids(self) -> list[int]:
        return [sf_id for _, sf_id, _ in self.candidate_slots()]
