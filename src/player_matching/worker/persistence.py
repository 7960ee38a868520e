"""Loading players for a matching run and persisting its review plan.

Provides three core functions:
- ``load_players_as_dicts``: Load the still-unlinked players of both sources
  as pipeline-compatible dicts.
- ``load_rejected_pairs``: Pairs a reviewer already rejected, which a new
  run must not propose again.
- ``persist_review_plan``: Write candidate rows, auto-approvals and queue
  entries for one run.  Candidate rows are never deleted and existing
  queue entries are never modified.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from player_matching.matching.pipeline import CandidateRecord, PipelineResult, QueueEntryPlan
from player_matching.models.audit_log import AuditLog
from player_matching.models.match_candidate import (
    STATUS_AUTO_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    MatchCandidate,
)
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.sofascore_player import SofascorePlayer
from player_matching.models.transfermarkt_player import TransfermarktPlayer

ENGINE_OPERATOR = "matching-engine"


@dataclass
class PersistStats:
    candidates_written: int = 0
    auto_approved: int = 0
    queue_entries: int = 0
    inverse_entries: int = 0


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC).replace(tzinfo=None)


async def load_players_as_dicts(session: AsyncSession) -> tuple[list[dict], list[dict]]:
    """Load players that still need matching.

    Excluded are Transfermarkt players that already carry a cross-reference
    or wait in an unreviewed queue entry, and SofaScore players that are
    already linked, sit in any inverse entry, or occupy a slot of an
    unreviewed entry.

    Returns:
        ``(tm_players, sf_players)`` as lists of dicts with ``"id"``,
        ``"name"``, ``"club_name"``, ``"date_of_birth"``, ``"nationality"``
        and ``"position"``.
    """
    queued_tm = sa.select(ReviewQueueEntry.tm_player_id).where(
        ReviewQueueEntry.reviewed == False,  # noqa: E712
        ReviewQueueEntry.tm_player_id.is_not(None),
    )
    tm_result = await session.execute(
        sa.select(TransfermarktPlayer)
        .where(
            TransfermarktPlayer.sofascore_id.is_(None),
            TransfermarktPlayer.id.not_in(queued_tm),
        )
        .options(selectinload(TransfermarktPlayer.club))
        .order_by(TransfermarktPlayer.id)
    )
    tm_players = [
        {
            "id": p.id,
            "name": p.name,
            "club_name": p.club_name,
            "date_of_birth": p.date_of_birth,
            "nationality": p.nationality,
            "position": p.main_position,
        }
        for p in tm_result.scalars().all()
    ]

    linked_sf = sa.select(TransfermarktPlayer.sofascore_id).where(
        TransfermarktPlayer.sofascore_id.is_not(None)
    )
    inverse_sf = sa.select(ReviewQueueEntry.candidate_1_id).where(
        ReviewQueueEntry.tm_player_id.is_(None),
        ReviewQueueEntry.candidate_1_id.is_not(None),
    )
    # A SofaScore player sits in at most one open entry
    queued_sf = [
        sa.select(slot).where(ReviewQueueEntry.reviewed == False, slot.is_not(None))  # noqa: E712
        for slot in (
            ReviewQueueEntry.candidate_1_id,
            ReviewQueueEntry.candidate_2_id,
            ReviewQueueEntry.candidate_3_id,
        )
    ]
    sf_result = await session.execute(
        sa.select(SofascorePlayer)
        .where(
            SofascorePlayer.sofascore_id.not_in(linked_sf),
            SofascorePlayer.sofascore_id.not_in(inverse_sf),
            *(SofascorePlayer.sofascore_id.not_in(q) for q in queued_sf),
        )
        .order_by(SofascorePlayer.sofascore_id)
    )
    sf_players = [
        {
            "id": p.sofascore_id,
            "name": p.name,
            "club_name": p.current_team_name,
            "date_of_birth": p.date_of_birth,
            "nationality": p.nationality,
            "position": p.position,
        }
        for p in sf_result.scalars().all()
    ]

    return tm_players, sf_players


async def load_rejected_pairs(session: AsyncSession) -> set[tuple[int, int]]:
    result = await session.execute(
        sa.select(MatchCandidate.tm_player_id, MatchCandidate.sf_player_id).where(
            MatchCandidate.match_status == STATUS_REJECTED
        )
    )
    return {(row.tm_player_id, row.sf_player_id) for row in result}


def _upsert_candidate(
    session: AsyncSession,
    existing: dict[tuple[int, int], MatchCandidate],
    record: CandidateRecord,
    status: str,
    now: dt.datetime,
) -> None:
    pair = (record.tm_player_id, record.sf_player_id)
    values = dict(
        name_similarity_score=record.factors.name_similarity,
        club_similarity_score=record.factors.club_similarity,
        overall_confidence=record.confidence,
        match_status=status,
        updated_at=now,
        **record.flags,
    )
    row = existing.get(pair)
    if row is None:
        row = MatchCandidate(tm_player_id=record.tm_player_id, sf_player_id=record.sf_player_id, **values)
        session.add(row)
        existing[pair] = row
    else:
        for key, value in values.items():
            setattr(row, key, value)


def _queue_entry(entry: QueueEntryPlan) -> ReviewQueueEntry:
    row = ReviewQueueEntry(tm_player_id=entry.tm_player_id, reviewed=False)
    for slot, (sf_id, confidence) in enumerate(entry.candidates, start=1):
        setattr(row, f"candidate_{slot}_id", sf_id)
        setattr(row, f"candidate_{slot}_confidence", confidence)
    return row


async def persist_review_plan(session: AsyncSession, pipeline_result: PipelineResult) -> PersistStats:
    """Write one run's plan.

    Must be called within an active ``session.begin()`` context.

    Args:
        session: Active async session (within a transaction).
        pipeline_result: The complete pipeline result.

    Returns:
        Counts of what was written.
    """
    plan = pipeline_result.plan
    stats = PersistStats()
    now = _utcnow()

    touched_tm = {c.tm_player_id for c in plan.auto_approved + plan.pending}
    existing: dict[tuple[int, int], MatchCandidate] = {}
    if touched_tm:
        result = await session.execute(
            sa.select(MatchCandidate).where(MatchCandidate.tm_player_id.in_(touched_tm))
        )
        existing = {(c.tm_player_id, c.sf_player_id): c for c in result.scalars().all()}

    # Step 1: Pending candidates behind the new queue entries
    for record in plan.pending:
        _upsert_candidate(session, existing, record, STATUS_PENDING, now)
        stats.candidates_written += 1

    # Step 2: Auto-approvals write the candidate and the cross-reference
    for record in plan.auto_approved:
        _upsert_candidate(session, existing, record, STATUS_AUTO_APPROVED, now)
        await session.execute(
            sa.update(TransfermarktPlayer)
            .where(
                TransfermarktPlayer.id == record.tm_player_id,
                TransfermarktPlayer.sofascore_id.is_(None),
            )
            .values(sofascore_id=record.sf_player_id)
            .execution_options(synchronize_session=False)
        )
        session.add(
            AuditLog(
                action_type="auto_approve",
                tm_player_id=record.tm_player_id,
                sf_player_id=record.sf_player_id,
                operator=ENGINE_OPERATOR,
                details={"overall_confidence": record.confidence},
            )
        )
        stats.candidates_written += 1
        stats.auto_approved += 1

    # Step 3: Queue entries (regular, then inverse)
    for entry in plan.queue_entries:
        session.add(_queue_entry(entry))
        stats.queue_entries += 1
    for entry in plan.inverse_entries:
        session.add(_queue_entry(entry))
        stats.inverse_entries += 1

    await session.flush()
    return stats
