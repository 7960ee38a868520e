"""API routes for the player matching review queue."""

from __future__ import annotations

import math

import sqlalchemy as sa
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.api.deps import get_db, get_matching_config
from player_matching.api.schemas import (
    ApproveRequest,
    AuditLogEntry,
    ConfidenceBand,
    PaginatedResponse,
    QueueCandidate,
    QueueEntrySchema,
    RejectRequest,
    ReviewQueueResponse,
    ReviewResult,
    TransfermarktPlayerSchema,
)
from player_matching.matching.config import MatchingConfig
from player_matching.models.audit_log import AuditLog
from player_matching.review.operations import approve_match, reject_entry
from player_matching.review.queue import EnrichedQueueEntry, load_review_queue

logger = structlog.get_logger()

router = APIRouter(prefix="/api/review", tags=["review"])

# Separate router for audit-log (lives at /api/audit-log, not /api/review/audit-log)
audit_router = APIRouter(prefix="/api", tags=["audit"])


def _entry_to_schema(item: EnrichedQueueEntry) -> QueueEntrySchema:
    return QueueEntrySchema(
        id=item.entry.id,
        is_inverse=item.is_inverse,
        tm_player_id=item.entry.tm_player_id,
        tm_player=(
            TransfermarktPlayerSchema.model_validate(item.tm_player)
            if item.tm_player is not None
            else None
        ),
        candidates=[QueueCandidate.model_validate(c) for c in item.candidates],
        created_at=item.entry.created_at,
    )


@router.get("/queue", response_model=ReviewQueueResponse)
async def review_queue(
    db: AsyncSession = Depends(get_db),
    config: MatchingConfig = Depends(get_matching_config),
) -> ReviewQueueResponse:
    """All unreviewed entries, highest top-candidate confidence first."""
    try:
        entries = await load_review_queue(db)
    except SQLAlchemyError as e:
        logger.error("review_queue_load_failed", error=str(e))
        raise HTTPException(status_code=503, detail=f"Failed to load review queue: {e}") from e

    return ReviewQueueResponse(
        items=[_entry_to_schema(item) for item in entries],
        total=len(entries),
        band=ConfidenceBand(
            review=config.thresholds.review,
            auto_approve=config.thresholds.auto_approve,
        ),
    )


@router.post("/queue/{entry_id}/approve", response_model=ReviewResult)
async def approve_entry(
    entry_id: int,
    request: ApproveRequest,
    db: AsyncSession = Depends(get_db),
) -> ReviewResult:
    """Link the entry's Transfermarkt player to the chosen SofaScore candidate."""
    result = await approve_match(
        session=db,
        entry_id=entry_id,
        sf_player_id=request.sf_player_id,
        operator=request.operator,
    )
    return ReviewResult(**result)


@router.post("/queue/{entry_id}/reject", response_model=ReviewResult)
async def reject_queue_entry(
    entry_id: int,
    request: RejectRequest,
    db: AsyncSession = Depends(get_db),
) -> ReviewResult:
    """Close the entry and reject every candidate of its Transfermarkt player."""
    result = await reject_entry(
        session=db,
        entry_id=entry_id,
        reason=request.reason,
        operator=request.operator,
    )
    return ReviewResult(**result)


@audit_router.get("/audit-log", response_model=PaginatedResponse[AuditLogEntry])
async def list_audit_log(
    db: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
    review_entry_id: int | None = None,
    action_type: str | None = None,
) -> PaginatedResponse[AuditLogEntry]:
    """Paginated audit log entries, filterable by review_entry_id and action_type."""
    stmt = sa.select(AuditLog)

    if review_entry_id is not None:
        stmt = stmt.where(AuditLog.review_entry_id == review_entry_id)
    if action_type is not None:
        stmt = stmt.where(AuditLog.action_type == action_type)

    stmt = stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())

    # Count total
    count_stmt = sa.select(sa.func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    # Paginate
    stmt = stmt.offset((page - 1) * size).limit(size)
    result = await db.execute(stmt)
    entries = result.scalars().all()

    items = [
        AuditLogEntry(
            id=entry.id,
            action_type=entry.action_type,
            review_entry_id=entry.review_entry_id,
            tm_player_id=entry.tm_player_id,
            sf_player_id=entry.sf_player_id,
            operator=entry.operator,
            details=entry.details,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )
        for entry in entries
    ]
    pages = math.ceil(total / size) if total > 0 else 1

    return PaginatedResponse(
        items=items, total=total, page=page, size=size, pages=pages
    )
