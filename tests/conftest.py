"""Shared test fixtures."""

import datetime as dt

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from player_matching.api.app import app
from player_matching.api.deps import get_db
from player_matching.models import (
    Base,
    MatchCandidate,
    ReviewQueueEntry,
    SofascorePlayer,
    TransfermarktClub,
    TransfermarktPlayer,
)


@pytest.fixture
def tm_player_dict() -> dict:
    """A Transfermarkt player in pipeline dict form."""
    return {
        "id": 1,
        "name": "Erling Haaland",
        "club_name": "Manchester City",
        "date_of_birth": dt.date(2000, 7, 21),
        "nationality": "Norway",
        "position": "Centre-Forward",
    }


@pytest.fixture
def sf_player_dict() -> dict:
    """The same player as SofaScore lists him."""
    return {
        "id": 101,
        "name": "Erling Haaland",
        "club_name": "Manchester City FC",
        "date_of_birth": dt.date(2000, 7, 21),
        "nationality": "Norway",
        "position": "F",
    }


@pytest.fixture
async def test_engine():
    """Create an async SQLite in-memory engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
async def api_client(test_engine, test_session_factory):
    """Async HTTP client hitting the FastAPI app with test DB."""

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def _candidate(tm_id: int, sf_id: int, confidence: float, status: str = "pending", **flags) -> MatchCandidate:
    return MatchCandidate(
        tm_player_id=tm_id,
        sf_player_id=sf_id,
        name_match=flags.get("name_match", True),
        dob_match=flags.get("dob_match", True),
        club_match=flags.get("club_match", False),
        nationality_match=flags.get("nationality_match", True),
        position_match=flags.get("position_match", True),
        name_similarity_score=flags.get("name_similarity_score", 90.0),
        club_similarity_score=flags.get("club_similarity_score", 40.0),
        overall_confidence=confidence,
        match_status=status,
    )


@pytest.fixture
async def review_seeded_db(test_session_factory) -> dict:
    """Seed players, candidates and queue entries for review testing.

    Creates:
    - TM 1 Erling Haaland: entry with candidates 101 (0.78), 102 (0.74), 103 (0.71)
    - TM 2 Pedri: entry with candidates 201 (0.76), 202 (0.72); an extra
      pending row for 203 that is not in any slot
    - TM 3 Kevin De Bruyne: already linked to 900 (auto_approved, 0.95)
    - Inverse entry for SF 300 (confidence 0.0)
    - TM 4 Jude Bellingham: entry with candidate 401 of unknown confidence

    Returns:
        Dict mapping ``"haaland"``, ``"pedri"``, ``"inverse"`` and
        ``"unknown"`` to queue entry ids.
    """
    async with test_session_factory() as session:
        async with session.begin():
            session.add_all(
                [
                    TransfermarktClub(id=1, name="Manchester City", logo_url="https://img.test/mci.png"),
                    TransfermarktClub(id=2, name="FC Barcelona", logo_url="https://img.test/fcb.png"),
                    TransfermarktClub(id=3, name="Real Madrid", logo_url=None),
                ]
            )
            session.add_all(
                [
                    TransfermarktPlayer(
                        id=1,
                        name="Erling Haaland",
                        club_id=1,
                        date_of_birth=dt.date(2000, 7, 21),
                        nationality="Norway",
                        main_position="Centre-Forward",
                    ),
                    TransfermarktPlayer(
                        id=2,
                        name="Pedri",
                        club_id=2,
                        date_of_birth=dt.date(2002, 11, 25),
                        nationality="Spain",
                        main_position="Central Midfield",
                    ),
                    TransfermarktPlayer(
                        id=3,
                        name="Kevin De Bruyne",
                        club_id=1,
                        date_of_birth=dt.date(1991, 6, 28),
                        nationality="Belgium",
                        main_position="Attacking Midfield",
                        sofascore_id=900,
                    ),
                    TransfermarktPlayer(
                        id=4,
                        name="Jude Bellingham",
                        club_id=3,
                        date_of_birth=dt.date(2003, 6, 29),
                        nationality="England",
                        main_position="Attacking Midfield",
                    ),
                ]
            )
            session.add_all(
                [
                    SofascorePlayer(sofascore_id=101, name="Erling Haaland", current_team_name="Manchester City"),
                    SofascorePlayer(sofascore_id=102, name="Erling Braut Haland", current_team_name="Molde"),
                    SofascorePlayer(sofascore_id=103, name="Erik Haaland", current_team_name="Bryne"),
                    SofascorePlayer(sofascore_id=201, name="Pedri", current_team_name="Barcelona"),
                    SofascorePlayer(sofascore_id=202, name="Pedro", current_team_name="Lazio"),
                    SofascorePlayer(sofascore_id=203, name="Pedrinho", current_team_name="Shakhtar"),
                    SofascorePlayer(sofascore_id=300, name="Unknown Striker", current_team_name="Nowhere FC"),
                    SofascorePlayer(sofascore_id=401, name="Jude Bellingham", current_team_name="Real Madrid"),
                    SofascorePlayer(sofascore_id=900, name="Kevin De Bruyne", current_team_name="Manchester City"),
                ]
            )
            await session.flush()

            session.add_all(
                [
                    _candidate(1, 101, 0.78),
                    _candidate(1, 102, 0.74),
                    _candidate(1, 103, 0.71),
                    _candidate(2, 201, 0.76),
                    _candidate(2, 202, 0.72),
                    _candidate(2, 203, 0.70),
                    _candidate(3, 900, 0.95, status="auto_approved", club_match=True),
                    _candidate(4, 401, 0.73),
                ]
            )

            haaland = ReviewQueueEntry(
                tm_player_id=1,
                candidate_1_id=101,
                candidate_1_confidence=0.78,
                candidate_2_id=102,
                candidate_2_confidence=0.74,
                candidate_3_id=103,
                candidate_3_confidence=0.71,
            )
            pedri = ReviewQueueEntry(
                tm_player_id=2,
                candidate_1_id=201,
                candidate_1_confidence=0.76,
                candidate_2_id=202,
                candidate_2_confidence=0.72,
            )
            inverse = ReviewQueueEntry(
                tm_player_id=None,
                candidate_1_id=300,
                candidate_1_confidence=0.0,
            )
            unknown = ReviewQueueEntry(tm_player_id=4, candidate_1_id=401, candidate_1_confidence=None)
            # Insert out of display order so ordering is really exercised
            session.add(unknown)
            await session.flush()
            session.add_all([inverse, pedri, haaland])
            await session.flush()

            ids = {
                "haaland": haaland.id,
                "pedri": pedri.id,
                "inverse": inverse.id,
                "unknown": unknown.id,
            }

    return ids


@pytest.fixture
async def matching_seeded_db(test_session_factory) -> None:
    """Seed unlinked players for a matching run.

    Expected outcome with the default config:
    - TM 1 Erling Haaland <-> SF 101: every factor agrees, auto-approved
    - TM 1 <-> SF 103 Erik Haaland: blocked on surname, discarded
    - TM 2 Pedri <-> SF 201: birth date and club unknown on SofaScore, review
    - TM 3 / SF 900 Kevin De Bruyne: already linked, not loaded
    - SF 500: shares no blocking key with anyone
    """
    async with test_session_factory() as session:
        async with session.begin():
            session.add_all(
                [
                    TransfermarktClub(id=1, name="Manchester City"),
                    TransfermarktClub(id=2, name="FC Barcelona"),
                ]
            )
            session.add_all(
                [
                    TransfermarktPlayer(
                        id=1,
                        name="Erling Haaland",
                        club_id=1,
                        date_of_birth=dt.date(2000, 7, 21),
                        nationality="Norway",
                        main_position="Centre-Forward",
                    ),
                    TransfermarktPlayer(
                        id=2,
                        name="Pedri",
                        club_id=2,
                        date_of_birth=dt.date(2002, 11, 25),
                        nationality="Spain",
                        main_position="Central Midfield",
                    ),
                    TransfermarktPlayer(
                        id=3,
                        name="Kevin De Bruyne",
                        club_id=1,
                        date_of_birth=dt.date(1991, 6, 28),
                        nationality="Belgium",
                        main_position="Attacking Midfield",
                        sofascore_id=900,
                    ),
                ]
            )
            session.add_all(
                [
                    SofascorePlayer(
                        sofascore_id=101,
                        name="Erling Haaland",
                        current_team_name="Manchester City FC",
                        date_of_birth=dt.date(2000, 7, 21),
                        nationality="Norway",
                        position="F",
                    ),
                    SofascorePlayer(
                        sofascore_id=103,
                        name="Erik Haaland",
                        current_team_name="Bryne",
                        date_of_birth=dt.date(1998, 1, 1),
                        nationality="Norway",
                        position="D",
                    ),
                    SofascorePlayer(sofascore_id=201, name="Pedri", nationality="Spain", position="M"),
                    SofascorePlayer(sofascore_id=500, name="Unknown Striker", current_team_name="Nowhere FC"),
                    SofascorePlayer(
                        sofascore_id=900,
                        name="Kevin De Bruyne",
                        current_team_name="Manchester City",
                        date_of_birth=dt.date(1991, 6, 28),
                    ),
                ]
            )
