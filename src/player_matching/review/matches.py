"""Per-status candidate lists (auto-approved, manually approved, rejected, pending)."""

from __future__ import annotations

from dataclasses import dataclass

import sqlalchemy as sa
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.models.match_candidate import (
    MATCH_STATUSES,
    STATUS_AUTO_APPROVED,
    STATUS_PENDING,
    MatchCandidate,
)
from player_matching.models.sofascore_player import SofascorePlayer
from player_matching.models.transfermarkt_player import TransfermarktPlayer
from player_matching.review.lookups import fetch_sf_players, fetch_tm_players

logger = structlog.get_logger()


@dataclass
class EnrichedMatch:
    candidate: MatchCandidate
    tm_player: TransfermarktPlayer
    sf_player: SofascorePlayer


def _ordering(status: str) -> list:
    # Engine-written rows are listed by creation, reviewer-touched ones by last update
    if status == STATUS_AUTO_APPROVED:
        return [MatchCandidate.created_at.desc(), MatchCandidate.id.desc()]
    if status == STATUS_PENDING:
        return [MatchCandidate.overall_confidence.desc(), MatchCandidate.id]
    return [MatchCandidate.updated_at.desc(), MatchCandidate.id.desc()]


async def count_by_status(session: AsyncSession, status: str) -> int:
    """Count-only query; no rows are materialized."""
    result = await session.execute(
        sa.select(sa.func.count(MatchCandidate.id)).where(MatchCandidate.match_status == status)
    )
    return result.scalar_one()


async def load_matches_by_status(
    session: AsyncSession, status: str, limit: int = 100
) -> tuple[list[EnrichedMatch], int]:
    """Return up to ``limit`` enriched candidates with ``status`` and the true total.

    Rows whose Transfermarkt or SofaScore player cannot be found are dropped
    from the list; ``total`` still counts every row with the status.

    Raises:
        ValueError: If ``status`` is not a known match status.
    """
    if status not in MATCH_STATUSES:
        raise ValueError(f"Unknown match status: {status!r}")

    total = await count_by_status(session, status)

    result = await session.execute(
        sa.select(MatchCandidate)
        .where(MatchCandidate.match_status == status)
        .order_by(*_ordering(status))
        .limit(limit)
    )
    candidates = result.scalars().all()

    tm_players = await fetch_tm_players(session, (c.tm_player_id for c in candidates))
    sf_players = await fetch_sf_players(session, (c.sf_player_id for c in candidates))

    items: list[EnrichedMatch] = []
    dropped = 0
    for c in candidates:
        tm = tm_players.get(c.tm_player_id)
        sf = sf_players.get(c.sf_player_id)
        if tm is None or sf is None:
            dropped += 1
            continue
        items.append(EnrichedMatch(candidate=c, tm_player=tm, sf_player=sf))

    logger.debug("matches_loaded", status=status, items=len(items), total=total, dropped=dropped)
    return items, total
