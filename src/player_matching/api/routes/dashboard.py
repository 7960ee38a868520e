"""API routes for the matching dashboard."""

from __future__ import annotations

import sqlalchemy as sa
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.api.deps import get_db
from player_matching.api.schemas import (
    DashboardStats,
    MatchStatusCounts,
    PlayerStats,
    QueueStats,
)
from player_matching.models.match_candidate import MatchCandidate
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.sofascore_player import SofascorePlayer
from player_matching.models.transfermarkt_player import TransfermarktPlayer

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(db: AsyncSession = Depends(get_db)) -> DashboardStats:
    """Candidate status distribution, queue backlog, and player link coverage."""
    # 1. Candidate status distribution
    match_stmt = sa.select(
        MatchCandidate.match_status,
        sa.func.count(MatchCandidate.id).label("cnt"),
    ).group_by(MatchCandidate.match_status)
    match_rows = (await db.execute(match_stmt)).all()

    status_counts = {row.match_status: row.cnt for row in match_rows}
    matches = MatchStatusCounts(
        **{k: v for k, v in status_counts.items() if k in MatchStatusCounts.model_fields}
    )

    # 2. Review queue backlog
    queue_stmt = sa.select(
        sa.func.count(sa.case((ReviewQueueEntry.reviewed == False, 1))).label("unreviewed"),  # noqa: E712
        sa.func.count(
            sa.case(
                (
                    sa.and_(
                        ReviewQueueEntry.reviewed == False,  # noqa: E712
                        ReviewQueueEntry.tm_player_id.is_(None),
                    ),
                    1,
                )
            )
        ).label("inverse"),
        sa.func.count(sa.case((ReviewQueueEntry.reviewed == True, 1))).label("reviewed"),  # noqa: E712
    )
    queue_row = (await db.execute(queue_stmt)).one()

    queue = QueueStats(
        unreviewed=queue_row.unreviewed,
        inverse=queue_row.inverse,
        reviewed=queue_row.reviewed,
    )

    # 3. Player coverage
    tm_stmt = sa.select(
        sa.func.count(TransfermarktPlayer.id).label("total"),
        sa.func.count(TransfermarktPlayer.sofascore_id).label("linked"),
    )
    tm_row = (await db.execute(tm_stmt)).one()
    sf_total = (await db.execute(sa.select(sa.func.count(SofascorePlayer.sofascore_id)))).scalar_one()

    players = PlayerStats(
        transfermarkt_total=tm_row.total,
        transfermarkt_linked=tm_row.linked,
        sofascore_total=sf_total,
    )

    return DashboardStats(matches=matches, queue=queue, players=players)
