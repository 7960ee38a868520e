"""Audit log model for tracking review decisions."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from player_matching.models.base import Base


class AuditLog(Base):
    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    action_type: Mapped[str] = mapped_column(sa.String)  # "approve", "reject", "auto_approve"
    review_entry_id: Mapped[int | None] = mapped_column(
        sa.Integer, sa.ForeignKey("player_matching_review_queue.id", ondelete="SET NULL"), nullable=True
    )
    tm_player_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    sf_player_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    operator: Mapped[str] = mapped_column(sa.String, default="anonymous")
    details: Mapped[dict | None] = mapped_column(sa.JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        sa.Index("ix_audit_log_review_entry_id", "review_entry_id"),
        sa.Index("ix_audit_log_created_at", "created_at"),
    )
