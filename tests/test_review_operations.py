"""Tests for the approve / reject review operations."""

import pytest
from fastapi import HTTPException
from sqlalchemy import select

from player_matching.models.audit_log import AuditLog
from player_matching.models.match_candidate import MatchCandidate
from player_matching.models.review_queue_entry import ReviewQueueEntry
from player_matching.models.transfermarkt_player import TransfermarktPlayer
from player_matching.review.operations import (
    DEFAULT_INVERSE_REJECTION_REASON,
    DEFAULT_REJECTION_REASON,
    approve_match,
    reject_entry,
)


async def _candidate_statuses(session_factory, tm_player_id: int) -> dict[int, str]:
    async with session_factory() as session:
        result = await session.execute(
            select(MatchCandidate).where(MatchCandidate.tm_player_id == tm_player_id)
        )
        return {c.sf_player_id: c.match_status for c in result.scalars().all()}


async def _entry(session_factory, entry_id: int) -> ReviewQueueEntry:
    async with session_factory() as session:
        return await session.get(ReviewQueueEntry, entry_id)


async def _tm_player(session_factory, tm_id: int) -> TransfermarktPlayer:
    async with session_factory() as session:
        return await session.get(TransfermarktPlayer, tm_id)


class TestApprove:
    @pytest.mark.asyncio
    async def test_all_postconditions_hold(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["haaland"]
        async with test_session_factory() as session:
            result = await approve_match(session, entry_id, 102, operator="alice")

        assert result["reviewed"] is True
        assert result["approved_sf_player_id"] == 102
        assert result["reviewed_at"] is not None

        entry = await _entry(test_session_factory, entry_id)
        assert entry.reviewed is True
        assert entry.approved_sf_player_id == 102
        assert entry.rejection_reason is None

        player = await _tm_player(test_session_factory, 1)
        assert player.sofascore_id == 102

        statuses = await _candidate_statuses(test_session_factory, 1)
        assert statuses[102] == "manually_approved"
        # Other candidates are left untouched
        assert statuses[101] == "pending"
        assert statuses[103] == "pending"

    @pytest.mark.asyncio
    async def test_writes_audit_log(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["haaland"]
        async with test_session_factory() as session:
            await approve_match(session, entry_id, 101, operator="alice")

        async with test_session_factory() as session:
            logs = (await session.execute(select(AuditLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].action_type == "approve"
        assert logs[0].review_entry_id == entry_id
        assert logs[0].tm_player_id == 1
        assert logs[0].sf_player_id == 101
        assert logs[0].operator == "alice"
        assert logs[0].details == {"confidence": 0.78}

    @pytest.mark.asyncio
    async def test_second_approve_is_conflict(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["haaland"]
        async with test_session_factory() as session:
            await approve_match(session, entry_id, 101)

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, entry_id, 102)
        assert exc_info.value.status_code == 409

        # Nothing changed by the second call
        entry = await _entry(test_session_factory, entry_id)
        assert entry.approved_sf_player_id == 101
        player = await _tm_player(test_session_factory, 1)
        assert player.sofascore_id == 101
        statuses = await _candidate_statuses(test_session_factory, 1)
        assert statuses[102] == "pending"

    @pytest.mark.asyncio
    async def test_reject_after_approve_is_conflict(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["haaland"]
        async with test_session_factory() as session:
            await approve_match(session, entry_id, 101)

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await reject_entry(session, entry_id)
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_candidate_not_in_entry(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["haaland"]
        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, entry_id, 201)
        assert exc_info.value.status_code == 422

        entry = await _entry(test_session_factory, entry_id)
        assert entry.reviewed is False
        player = await _tm_player(test_session_factory, 1)
        assert player.sofascore_id is None

    @pytest.mark.asyncio
    async def test_inverse_entry_cannot_be_approved(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, review_seeded_db["inverse"], 300)
        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_entry(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, 9999, 101)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_candidate_row_rolls_back(self, test_session_factory, review_seeded_db) -> None:
        """A failing last step leaves none of the earlier writes observable."""
        entry_id = review_seeded_db["haaland"]
        async with test_session_factory() as session:
            async with session.begin():
                row = (
                    await session.execute(
                        select(MatchCandidate).where(
                            MatchCandidate.tm_player_id == 1,
                            MatchCandidate.sf_player_id == 103,
                        )
                    )
                ).scalar_one()
                await session.delete(row)

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, entry_id, 103)
        assert exc_info.value.status_code == 404
        assert "not found" in exc_info.value.detail

        entry = await _entry(test_session_factory, entry_id)
        assert entry.reviewed is False
        assert entry.approved_sf_player_id is None
        player = await _tm_player(test_session_factory, 1)
        assert player.sofascore_id is None

        async with test_session_factory() as session:
            logs = (await session.execute(select(AuditLog))).scalars().all()
        assert logs == []

    @pytest.mark.asyncio
    async def test_player_linked_elsewhere_is_conflict(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            async with session.begin():
                player = await session.get(TransfermarktPlayer, 1)
                player.sofascore_id = 555

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, review_seeded_db["haaland"], 101)
        assert exc_info.value.status_code == 409

        entry = await _entry(test_session_factory, review_seeded_db["haaland"])
        assert entry.reviewed is False

    @pytest.mark.asyncio
    async def test_missing_tm_player_is_not_found(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            async with session.begin():
                await session.delete(await session.get(TransfermarktPlayer, 1))

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, review_seeded_db["haaland"], 101)
        assert exc_info.value.status_code == 404

        entry = await _entry(test_session_factory, review_seeded_db["haaland"])
        assert entry.reviewed is False

    @pytest.mark.asyncio
    async def test_sofascore_player_linked_elsewhere_is_conflict(
        self, test_session_factory, review_seeded_db
    ) -> None:
        async with test_session_factory() as session:
            async with session.begin():
                player = await session.get(TransfermarktPlayer, 2)
                player.sofascore_id = 101

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, review_seeded_db["haaland"], 101)
        assert exc_info.value.status_code == 409

        assert (await _tm_player(test_session_factory, 1)).sofascore_id is None
        assert (await _entry(test_session_factory, review_seeded_db["haaland"])).reviewed is False

    @pytest.mark.asyncio
    async def test_other_approved_candidate_is_conflict(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            async with session.begin():
                row = (
                    await session.execute(
                        select(MatchCandidate).where(
                            MatchCandidate.tm_player_id == 1,
                            MatchCandidate.sf_player_id == 103,
                        )
                    )
                ).scalar_one()
                row.match_status = "auto_approved"

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await approve_match(session, review_seeded_db["haaland"], 101)
        assert exc_info.value.status_code == 409

        statuses = await _candidate_statuses(test_session_factory, 1)
        assert statuses == {101: "pending", 102: "pending", 103: "auto_approved"}
        assert (await _tm_player(test_session_factory, 1)).sofascore_id is None
        assert (await _entry(test_session_factory, review_seeded_db["haaland"])).reviewed is False


class TestReject:
    @pytest.mark.asyncio
    async def test_rejects_every_candidate_row(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["pedri"]
        async with test_session_factory() as session:
            result = await reject_entry(session, entry_id, "Different player", operator="bob")

        assert result["reviewed"] is True
        assert result["rejection_reason"] == "Different player"
        # 201 and 202 sit in slots, 203 does not
        assert result["candidates_rejected"] == 3

        statuses = await _candidate_statuses(test_session_factory, 2)
        assert statuses == {201: "rejected", 202: "rejected", 203: "rejected"}

        entry = await _entry(test_session_factory, entry_id)
        assert entry.reviewed is True
        assert entry.reviewed_at is not None
        assert entry.approved_sf_player_id is None

        player = await _tm_player(test_session_factory, 2)
        assert player.sofascore_id is None

    @pytest.mark.asyncio
    async def test_other_players_untouched(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            await reject_entry(session, review_seeded_db["pedri"])

        assert set((await _candidate_statuses(test_session_factory, 1)).values()) == {"pending"}
        assert (await _candidate_statuses(test_session_factory, 3)) == {900: "auto_approved"}

    @pytest.mark.asyncio
    async def test_default_reason(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            result = await reject_entry(session, review_seeded_db["pedri"], reason="   ")
        assert result["rejection_reason"] == DEFAULT_REJECTION_REASON

    @pytest.mark.asyncio
    async def test_inverse_default_reason(self, test_session_factory, review_seeded_db) -> None:
        async with test_session_factory() as session:
            result = await reject_entry(session, review_seeded_db["inverse"])

        assert result["rejection_reason"] == DEFAULT_INVERSE_REJECTION_REASON
        assert result["rejection_reason"] != DEFAULT_REJECTION_REASON
        assert result["candidates_rejected"] == 0
        assert result["tm_player_id"] is None

    @pytest.mark.asyncio
    async def test_writes_audit_log(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["inverse"]
        async with test_session_factory() as session:
            await reject_entry(session, entry_id, operator="bob")

        async with test_session_factory() as session:
            log = (await session.execute(select(AuditLog))).scalar_one()
        assert log.action_type == "reject"
        assert log.review_entry_id == entry_id
        assert log.sf_player_id == 300
        assert log.operator == "bob"
        assert log.details["reason"] == DEFAULT_INVERSE_REJECTION_REASON

    @pytest.mark.asyncio
    async def test_second_reject_is_conflict(self, test_session_factory, review_seeded_db) -> None:
        entry_id = review_seeded_db["pedri"]
        async with test_session_factory() as session:
            await reject_entry(session, entry_id, "first")

        async with test_session_factory() as session:
            with pytest.raises(HTTPException) as exc_info:
                await reject_entry(session, entry_id, "second")
        assert exc_info.value.status_code == 409

        entry = await _entry(test_session_factory, entry_id)
        assert entry.rejection_reason == "first"
