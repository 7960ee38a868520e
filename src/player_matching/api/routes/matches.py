"""API routes for the approved / rejected / pending candidate lists."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.api.deps import get_db
from player_matching.api.schemas import (
    MatchCandidateSchema,
    MatchListItem,
    MatchListResponse,
    SofascorePlayerSchema,
    TransfermarktPlayerSchema,
)
from player_matching.config.settings import get_settings
from player_matching.models.match_candidate import MATCH_STATUSES
from player_matching.review.matches import load_matches_by_status

router = APIRouter(prefix="/api/matches", tags=["matches"])


@router.get("/{status}", response_model=MatchListResponse)
async def list_matches(
    status: str,
    db: AsyncSession = Depends(get_db),
    limit: int | None = Query(default=None, ge=1, le=1000),
) -> MatchListResponse:
    """Most recent candidates with ``status``; ``total`` ignores ``limit``."""
    if status not in MATCH_STATUSES:
        raise HTTPException(status_code=404, detail=f"Unknown match status: {status}")
    if limit is None:
        limit = get_settings().display_limit

    items, total = await load_matches_by_status(db, status, limit)
    return MatchListResponse(
        items=[
            MatchListItem(
                candidate=MatchCandidateSchema.model_validate(m.candidate),
                tm_player=TransfermarktPlayerSchema.model_validate(m.tm_player),
                sf_player=SofascorePlayerSchema.model_validate(m.sf_player),
            )
            for m in items
        ],
        total=total,
        limit=limit,
    )
