"""Transfermarkt (SourceA) player record."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from player_matching.models.base import Base

if TYPE_CHECKING:
    from player_matching.models.transfermarkt_club import TransfermarktClub


class TransfermarktPlayer(Base):
    """A player scraped from Transfermarkt.

    Read-only for the matching workflow except ``sofascore_id``, the
    confirmed cross-reference into ``sofascore_players_staging``.  It stays
    ``NULL`` until a candidate is auto-approved or manually approved.
    """

    __tablename__ = "players_transfermarkt"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True)
    name: Mapped[str] = mapped_column(sa.String)
    club_id: Mapped[int | None] = mapped_column(
        sa.ForeignKey("clubs_transfermarkt.id"), nullable=True
    )
    transfermarkt_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(sa.Date, nullable=True)
    nationality: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    main_position: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    picture_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)

    # Cross-reference (the only column this service writes)
    sofascore_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))

    club: Mapped[TransfermarktClub | None] = relationship("TransfermarktClub")

    @property
    def club_name(self) -> str:
        return self.club.name if self.club is not None else ""

    @property
    def club_logo_url(self) -> str | None:
        return self.club.logo_url if self.club is not None else None
