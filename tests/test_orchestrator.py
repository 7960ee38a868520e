"""Integration tests for the matching run orchestrator."""

import datetime as dt

import pytest
from sqlalchemy import func, select

from player_matching.matching.config import MatchingConfig
from player_matching.models.match_candidate import MatchCandidate
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.transfermarkt_player import TransfermarktPlayer
from player_matching.review.operations import reject_entry
from player_matching.worker.orchestrator import run_matching


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestRunMatching:
    @pytest.mark.asyncio
    async def test_full_run(self, test_session_factory, matching_seeded_db) -> None:
        stats = await run_matching(test_session_factory, MatchingConfig())

        assert stats == {
            "status": "completed",
            "tm_players": 2,
            "sf_players": 4,
            "blocked_pairs": 3,
            "auto_approved": 1,
            "queue_entries": 1,
            "inverse_entries": 0,
            "discarded": 1,
            "candidates_written": 2,
        }
        async with test_session_factory() as session:
            player = await session.get(TransfermarktPlayer, 1)
        assert player.sofascore_id == 101

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(self, test_session_factory, matching_seeded_db) -> None:
        stats = await run_matching(test_session_factory, MatchingConfig(), dry_run=True)

        assert stats["status"] == "dry_run"
        assert stats["auto_approved"] == 1
        assert "candidates_written" not in stats
        assert await _count(test_session_factory, MatchCandidate) == 0
        assert await _count(test_session_factory, ReviewQueueEntry) == 0
        async with test_session_factory() as session:
            player = await session.get(TransfermarktPlayer, 1)
        assert player.sofascore_id is None

    @pytest.mark.asyncio
    async def test_second_run_does_not_duplicate(self, test_session_factory, matching_seeded_db) -> None:
        await run_matching(test_session_factory, MatchingConfig())
        stats = await run_matching(test_session_factory, MatchingConfig())

        # Haaland is linked and Pedri waits in the queue
        assert stats["status"] == "skipped"
        assert await _count(test_session_factory, ReviewQueueEntry) == 1
        assert await _count(test_session_factory, MatchCandidate) == 2

    @pytest.mark.asyncio
    async def test_rejected_pair_not_proposed_again(self, test_session_factory, matching_seeded_db) -> None:
        await run_matching(test_session_factory, MatchingConfig())
        async with test_session_factory() as session:
            entry_id = (await session.execute(select(ReviewQueueEntry.id))).scalar_one()
        async with test_session_factory() as session:
            await reject_entry(session, entry_id, "Different player")

        stats = await run_matching(test_session_factory, MatchingConfig())

        assert stats["status"] == "completed"
        assert stats["tm_players"] == 1
        assert stats["queue_entries"] == 0
        assert stats["auto_approved"] == 0
        assert await _count(test_session_factory, ReviewQueueEntry) == 1

    @pytest.mark.asyncio
    async def test_nothing_to_match(self, test_session_factory) -> None:
        stats = await run_matching(test_session_factory, MatchingConfig())
        assert stats == {"status": "skipped", "tm_players": 0, "sf_players": 0}

    @pytest.mark.asyncio
    async def test_queued_sofascore_player_not_offered_again(
        self, test_session_factory, matching_seeded_db
    ) -> None:
        await run_matching(test_session_factory, MatchingConfig())
        async with test_session_factory() as session:
            async with session.begin():
                # Same birth date and club as TM 2, so SF 201 would be a candidate again
                session.add(
                    TransfermarktPlayer(
                        id=5,
                        name="Pedri",
                        club_id=2,
                        date_of_birth=dt.date(2002, 11, 25),
                        nationality="Spain",
                        main_position="Central Midfield",
                    )
                )

        stats = await run_matching(test_session_factory, MatchingConfig())

        assert stats["tm_players"] == 1
        assert stats["queue_entries"] == 0
        assert stats["auto_approved"] == 0
        async with test_session_factory() as session:
            entries = (
                await session.execute(
                    select(ReviewQueueEntry).where(ReviewQueueEntry.reviewed == False)  # noqa: E712
                )
            ).scalars().all()
        holding_201 = [e.tm_player_id for e in entries if 201 in e.candidate_ids()]
        assert holding_201 == [2]
        async with test_session_factory() as session:
            assert (await session.get(TransfermarktPlayer, 5)).sofascore_id is None
