"""Set-based player and candidate lookups used to enrich review views.

Each function issues a single query keyed by a collected list of ids and
returns a dict for joining in memory.  Ids without a row are simply absent
from the result; callers decide how to treat them.
"""

from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from player_matching.models.match_candidate import MatchCandidate
from player_matching.models.sofascore_player import SofascorePlayer
from player_matching.models.transfermarkt_player import TransfermarktPlayer


async def fetch_tm_players(
    session: AsyncSession, ids: Iterable[int]
) -> dict[int, TransfermarktPlayer]:
    wanted = set(ids)
    if not wanted:
        return {}
    result = await session.execute(
        sa.select(TransfermarktPlayer)
        .where(TransfermarktPlayer.id.in_(wanted))
        .options(selectinload(TransfermarktPlayer.club))
    )
    return {p.id: p for p in result.scalars().all()}


async def fetch_sf_players(
    session: AsyncSession, ids: Iterable[int]
) -> dict[int, SofascorePlayer]:
    wanted = set(ids)
    if not wanted:
        return {}
    result = await session.execute(
        sa.select(SofascorePlayer).where(SofascorePlayer.sofascore_id.in_(wanted))
    )
    return {p.sofascore_id: p for p in result.scalars().all()}


async def fetch_candidate_details(
    session: AsyncSession, pairs: Iterable[tuple[int, int]]
) -> dict[tuple[int, int], MatchCandidate]:
    """Fetch candidate rows for the given ``(tm_player_id, sf_player_id)`` pairs.

    Queries the cross product of the collected ids and keeps only the
    requested pairs.
    """
    wanted = set(pairs)
    if not wanted:
        return {}
    tm_ids = {tm for tm, _ in wanted}
    sf_ids = {sf for _, sf in wanted}
    result = await session.execute(
        sa.select(MatchCandidate).where(
            MatchCandidate.tm_player_id.in_(tm_ids),
            MatchCandidate.sf_player_id.in_(sf_ids),
        )
    )
    return {
        (c.tm_player_id, c.sf_player_id): c
        for c in result.scalars().all()
        if (c.tm_player_id, c.sf_player_id) in wanted
    }
