"""SQLAlchemy model for runtime configuration storage."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from player_matching.models.base import Base


class ConfigSettings(Base):
    """Singleton row (``id=1``) holding matching-config overrides as JSON.

    Values here take precedence over ``config/matching.yaml`` when the
    matching engine starts a run.
    """

    __tablename__ = "config_settings"

    id: Mapped[int] = mapped_column(primary_key=True, default=1)
    config_json: Mapped[dict] = mapped_column(sa.JSON, server_default="{}", default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP")
    )
    updated_by: Mapped[str] = mapped_column(sa.String(100), server_default="system")
