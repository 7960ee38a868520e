from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from player_matching.models.base import Base


class TransfermarktClub(Base):
    __tablename__ = "clubs_transfermarkt"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True)
    name: Mapped[str] = mapped_column(sa.String)
    logo_url: Mapped[str | None] = mapped_column(sa.String, nullable=True)
