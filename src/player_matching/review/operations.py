"""Review operations: approve a candidate or reject a queue entry.

Each operation runs its steps in a single transaction.  The transition of
``reviewed`` from false to true is a compare-and-swap, so a second reviewer
acting on an already resolved entry gets a 409 and changes nothing.
"""

from __future__ import annotations

import datetime as dt

import sqlalchemy as sa
import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.models.audit_log import AuditLog
from player_matching.models.match_candidate import (
    APPROVED_STATUSES,
    STATUS_MANUALLY_APPROVED,
    STATUS_REJECTED,
    MatchCandidate,
)
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.transfermarkt_player import TransfermarktPlayer

logger = structlog.get_logger()

DEFAULT_REJECTION_REASON = "No suitable match found"
DEFAULT_INVERSE_REJECTION_REASON = "SofaScore player not in Transfermarkt"

STEP_PLAYER = "player"
STEP_REVIEW_QUEUE = "review queue"
STEP_MATCH_CANDIDATE = "match candidate"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC).replace(tzinfo=None)


def _step_failed(step: str, message: str) -> HTTPException:
    return HTTPException(status_code=500, detail=f"Failed to update {step}: {message}")


def _entry_state(entry: ReviewQueueEntry) -> dict:
    return {
        "entry_id": entry.id,
        "tm_player_id": entry.tm_player_id,
        "reviewed": entry.reviewed,
        "reviewed_at": entry.reviewed_at,
        "approved_sf_player_id": entry.approved_sf_player_id,
        "rejection_reason": entry.rejection_reason,
    }


async def _load_open_entry(session: AsyncSession, entry_id: int) -> ReviewQueueEntry:
    result = await session.execute(sa.select(ReviewQueueEntry).where(ReviewQueueEntry.id == entry_id))
    entry = result.scalar_one_or_none()
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Review queue entry {entry_id} not found")
    if entry.reviewed:
        raise HTTPException(status_code=409, detail=f"Review queue entry {entry_id} is already reviewed")
    return entry


async def _mark_reviewed(session: AsyncSession, entry_id: int, now: dt.datetime, **values) -> None:
    """Flip ``reviewed`` only if it is still false."""
    try:
        result = await session.execute(
            sa.update(ReviewQueueEntry)
            .where(
                ReviewQueueEntry.id == entry_id,
                ReviewQueueEntry.reviewed == False,  # noqa: E712
            )
            .values(reviewed=True, reviewed_at=now, **values)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError as e:
        raise _step_failed(STEP_REVIEW_QUEUE, str(e)) from e
    if result.rowcount == 0:
        raise HTTPException(status_code=409, detail=f"Review queue entry {entry_id} is already reviewed")


async def approve_match(
    session: AsyncSession,
    entry_id: int,
    sf_player_id: int,
    operator: str = "anonymous",
) -> dict:
    """Approve one of an entry's candidates.

    Steps, in order:
    1. Write the cross-reference onto the Transfermarkt player.
    2. Mark the queue entry reviewed with the approved id.
    3. Mark the candidate row ``manually_approved``.

    All work is done within a single transaction; a failing step rolls back
    the earlier ones.  A missing player or candidate row is a 404, an
    existing link on either side or another approved row for the player is
    a 409, and a database error is a 500 naming the step.

    Returns:
        The resolved entry state, re-read inside the transaction.
    """
    log = logger.bind(entry_id=entry_id, sf_player_id=sf_player_id, operator=operator)

    async with session.begin():
        entry = await _load_open_entry(session, entry_id)
        if entry.is_inverse:
            raise HTTPException(
                status_code=422,
                detail="Inverse entries have no Transfermarkt player to link; reject instead",
            )
        if sf_player_id not in entry.candidate_ids():
            raise HTTPException(
                status_code=422,
                detail=f"SofaScore player {sf_player_id} is not a candidate of entry {entry_id}",
            )
        tm_player_id = entry.tm_player_id
        now = _utcnow()

        # 1. Cross-reference (only if unlinked or already pointing at this player)
        try:
            tm_player = await session.get(TransfermarktPlayer, tm_player_id)
            if tm_player is None:
                raise HTTPException(status_code=404, detail=f"Transfermarkt player {tm_player_id} not found")
            if tm_player.sofascore_id is not None and tm_player.sofascore_id != sf_player_id:
                raise HTTPException(
                    status_code=409,
                    detail=f"Transfermarkt player {tm_player_id} is already linked to {tm_player.sofascore_id}",
                )
            other_link = await session.scalar(
                sa.select(TransfermarktPlayer.id).where(
                    TransfermarktPlayer.sofascore_id == sf_player_id,
                    TransfermarktPlayer.id != tm_player_id,
                )
            )
            if other_link is not None:
                raise HTTPException(
                    status_code=409,
                    detail=f"SofaScore player {sf_player_id} is already linked to Transfermarkt player {other_link}",
                )
            other_approved = await session.scalar(
                sa.select(MatchCandidate.sf_player_id).where(
                    MatchCandidate.tm_player_id == tm_player_id,
                    MatchCandidate.sf_player_id != sf_player_id,
                    MatchCandidate.match_status.in_(APPROVED_STATUSES),
                )
            )
            if other_approved is not None:
                raise HTTPException(
                    status_code=409,
                    detail=f"Transfermarkt player {tm_player_id} already has an approved match ({other_approved})",
                )
            result = await session.execute(
                sa.update(TransfermarktPlayer)
                .where(
                    TransfermarktPlayer.id == tm_player_id,
                    sa.or_(
                        TransfermarktPlayer.sofascore_id.is_(None),
                        TransfermarktPlayer.sofascore_id == sf_player_id,
                    ),
                )
                .values(sofascore_id=sf_player_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            raise _step_failed(STEP_PLAYER, str(e)) from e
        if result.rowcount == 0:
            raise HTTPException(
                status_code=409,
                detail=f"Transfermarkt player {tm_player_id} was linked concurrently",
            )

        # 2. Queue entry
        await _mark_reviewed(session, entry_id, now, approved_sf_player_id=sf_player_id)

        # 3. Candidate row
        try:
            result = await session.execute(
                sa.update(MatchCandidate)
                .where(
                    MatchCandidate.tm_player_id == tm_player_id,
                    MatchCandidate.sf_player_id == sf_player_id,
                )
                .values(match_status=STATUS_MANUALLY_APPROVED, updated_at=now)
                .execution_options(synchronize_session=False)
            )
        except IntegrityError as e:
            # One approved row per Transfermarkt player
            raise HTTPException(
                status_code=409,
                detail=f"Transfermarkt player {tm_player_id} already has an approved match",
            ) from e
        except SQLAlchemyError as e:
            raise _step_failed(STEP_MATCH_CANDIDATE, str(e)) from e
        if result.rowcount == 0:
            raise HTTPException(
                status_code=404,
                detail=f"Match candidate ({tm_player_id}, {sf_player_id}) not found",
            )

        confidence = next(conf for _, sf_id, conf in entry.candidate_slots() if sf_id == sf_player_id)
        session.add(
            AuditLog(
                action_type="approve",
                review_entry_id=entry_id,
                tm_player_id=tm_player_id,
                sf_player_id=sf_player_id,
                operator=operator,
                details={"confidence": confidence},
            )
        )
        await session.flush()
        await session.refresh(entry)
        state = _entry_state(entry)

    log.info("match_approved", tm_player_id=tm_player_id)
    return state


async def reject_entry(
    session: AsyncSession,
    entry_id: int,
    reason: str | None = None,
    operator: str = "anonymous",
) -> dict:
    """Reject every candidate of an entry.

    Marks the entry reviewed with ``reason`` (a default is used when blank)
    and moves every candidate row of the entry's Transfermarkt player to
    ``rejected``, whichever slot it occupied.  Inverse entries have no
    candidate rows to close.

    All work is done within a single transaction.

    Returns:
        The resolved entry state plus ``candidates_rejected``.
    """
    log = logger.bind(entry_id=entry_id, operator=operator)

    async with session.begin():
        entry = await _load_open_entry(session, entry_id)
        if reason is None or not reason.strip():
            reason = DEFAULT_INVERSE_REJECTION_REASON if entry.is_inverse else DEFAULT_REJECTION_REASON
        else:
            reason = reason.strip()
        now = _utcnow()

        # 1. Queue entry
        await _mark_reviewed(session, entry_id, now, rejection_reason=reason)

        # 2. Every candidate row for the Transfermarkt player
        rejected = 0
        if not entry.is_inverse:
            try:
                result = await session.execute(
                    sa.update(MatchCandidate)
                    .where(MatchCandidate.tm_player_id == entry.tm_player_id)
                    .values(match_status=STATUS_REJECTED, updated_at=now)
                    .execution_options(synchronize_session=False)
                )
            except SQLAlchemyError as e:
                raise _step_failed(STEP_MATCH_CANDIDATE, str(e)) from e
            rejected = result.rowcount

        session.add(
            AuditLog(
                action_type="reject",
                review_entry_id=entry_id,
                tm_player_id=entry.tm_player_id,
                sf_player_id=entry.candidate_1_id if entry.is_inverse else None,
                operator=operator,
                details={"reason": reason, "candidates_rejected": rejected},
            )
        )
        await session.flush()
        await session.refresh(entry)
        state = _entry_state(entry)
        state["candidates_rejected"] = rejected

    log.info("entry_rejected", tm_player_id=entry.tm_player_id, candidates_rejected=rejected)
    return state
