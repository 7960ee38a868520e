"""Review queue loader: unreviewed entries enriched with players and candidates."""

from __future__ import annotations

from dataclasses import dataclass, field

import sqlalchemy as sa
import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from player_matching.models.match_candidate import MatchCandidate
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.sofascore_player import SofascorePlayer
from player_matching.models.transfermarkt_player import TransfermarktPlayer
from player_matching.review.lookups import (
    fetch_candidate_details,
    fetch_sf_players,
    fetch_tm_players,
)

logger = structlog.get_logger()


@dataclass
class CandidateView:
    """One ranked slot of a queue entry.

    ``player`` is ``None`` when the SofaScore row could not be found and
    ``detail`` is ``None`` when there is no candidate row for the pair
    (always the case for inverse entries).
    """

    slot: int
    sf_player_id: int
    confidence: float | None
    player: SofascorePlayer | None = None
    detail: MatchCandidate | None = None


@dataclass
class EnrichedQueueEntry:
    entry: ReviewQueueEntry
    tm_player: TransfermarktPlayer | None
    candidates: list[CandidateView] = field(default_factory=list)

    @property
    def is_inverse(self) -> bool:
        return self.entry.is_inverse


async def fetch_unreviewed_entries(session: AsyncSession) -> list[ReviewQueueEntry]:
    """Unreviewed entries, highest top-candidate confidence first, unknown last."""
    result = await session.execute(
        sa.select(ReviewQueueEntry)
        .where(ReviewQueueEntry.reviewed == False)  # noqa: E712
        .order_by(
            sa.nulls_last(ReviewQueueEntry.candidate_1_confidence.desc()),
            ReviewQueueEntry.id,
        )
    )
    return list(result.scalars().all())


async def _guarded_lookup(lookup, session: AsyncSession, keys, source: str) -> dict:
    """Run one batched lookup; a database error leaves every row of it missing."""
    try:
        return await lookup(session, keys)
    except SQLAlchemyError as e:
        logger.warning("player_lookup_failed", source=source, requested=len(keys), error=str(e))
        return {}


async def load_review_queue(session: AsyncSession) -> list[EnrichedQueueEntry]:
    """Load every unreviewed entry with its players and candidate details.

    Lookups are batched: one query per table for the whole backlog.  A
    referenced player without a row, or whose lookup fails, leaves that
    field ``None`` and is logged; the rest of the queue still loads.
    Errors fetching the entry list itself propagate to the caller.
    """
    entries = await fetch_unreviewed_entries(session)
    if not entries:
        logger.info("review_queue_loaded", entries=0)
        return []

    tm_ids = {e.tm_player_id for e in entries if e.tm_player_id is not None}
    sf_ids = {sf_id for e in entries for sf_id in e.candidate_ids()}
    pairs = {
        (e.tm_player_id, sf_id)
        for e in entries
        if e.tm_player_id is not None
        for sf_id in e.candidate_ids()
    }

    tm_players = await _guarded_lookup(fetch_tm_players, session, tm_ids, "transfermarkt")
    sf_players = await _guarded_lookup(fetch_sf_players, session, sf_ids, "sofascore")
    details = await _guarded_lookup(fetch_candidate_details, session, pairs, "match_candidates")

    enriched: list[EnrichedQueueEntry] = []
    missing = 0
    for entry in entries:
        tm_player = None
        if entry.tm_player_id is not None:
            tm_player = tm_players.get(entry.tm_player_id)
            if tm_player is None:
                missing += 1
                logger.warning(
                    "player_lookup_missing",
                    source="transfermarkt",
                    entry_id=entry.id,
                    player_id=entry.tm_player_id,
                )

        views = []
        for slot, sf_id, confidence in entry.candidate_slots():
            player = sf_players.get(sf_id)
            if player is None:
                missing += 1
                logger.warning(
                    "player_lookup_missing",
                    source="sofascore",
                    entry_id=entry.id,
                    slot=slot,
                    player_id=sf_id,
                )
            detail = details.get((entry.tm_player_id, sf_id)) if entry.tm_player_id is not None else None
            views.append(
                CandidateView(
                    slot=slot,
                    sf_player_id=sf_id,
                    confidence=confidence,
                    player=player,
                    detail=detail,
                )
            )

        enriched.append(EnrichedQueueEntry(entry=entry, tm_player=tm_player, candidates=views))

    logger.info("review_queue_loaded", entries=len(enriched), missing_players=missing)
    return enriched
