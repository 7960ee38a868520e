from __future__ import annotations

from datetime import date, datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from player_matching.models.base import Base


class SofascorePlayer(Base):
    """A player from the SofaScore staging import (SourceB). Never written here."""

    __tablename__ = "sofascore_players_staging"

    # Natural key from SofaScore
    sofascore_id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(sa.String)
    current_team_name: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    profile_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(sa.Date, nullable=True)
    nationality: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    position: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)

    imported_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))
