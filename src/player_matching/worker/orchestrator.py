"""Matching run orchestrator bridging loading, matching, and persistence.

Provides the runtime logic that connects:
1. Loading unlinked players of both sources from the DB
2. Running the matching pipeline (pure function)
3. Persisting candidates, auto-approvals and review queue entries
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import async_sessionmaker

from player_matching.matching.config import MatchingConfig, load_config_for_run
from player_matching.matching.pipeline import run_matching_pipeline
from player_matching.worker.persistence import (
    load_players_as_dicts,
    load_rejected_pairs,
    persist_review_plan,
)

logger = structlog.get_logger()


async def run_matching(
    session_factory: async_sessionmaker,
    matching_config: MatchingConfig | None = None,
    dry_run: bool = False,
) -> dict:
    """Full run: load players -> match -> persist review plan.

    Args:
        session_factory: Async session factory for DB access.
        matching_config: Matching pipeline configuration.  If ``None``,
            the config is loaded from the database (or YAML fallback).
        dry_run: Score and plan without writing anything.

    Returns:
        Stats dict with status and run metrics.
    """
    if matching_config is None:
        matching_config = await load_config_for_run(session_factory)
    log = logger.bind(dry_run=dry_run)

    # Step 1: Load players that still need a counterpart
    async with session_factory() as session:
        tm_players, sf_players = await load_players_as_dicts(session)
        rejected = await load_rejected_pairs(session)
    log.info(
        "players_loaded",
        tm_players=len(tm_players),
        sf_players=len(sf_players),
        rejected_pairs=len(rejected),
    )

    if not tm_players or not sf_players:
        log.info("matching_skipped", reason="no players to match")
        return {"status": "skipped", "tm_players": len(tm_players), "sf_players": len(sf_players)}

    # Step 2: Run matching pipeline (pure function)
    pipeline_result = run_matching_pipeline(
        tm_players, sf_players, matching_config, excluded_pairs=rejected
    )
    match_result = pipeline_result.match_result
    plan = pipeline_result.plan
    log.info(
        "matching_complete",
        blocked_pairs=match_result.pair_stats.blocked_pairs,
        reduction_pct=round(match_result.pair_stats.reduction_pct, 2),
        auto_band=match_result.auto_count,
        review_band=match_result.review_count,
        discarded=match_result.discard_count,
    )

    stats = {
        "status": "completed",
        "tm_players": len(tm_players),
        "sf_players": len(sf_players),
        "blocked_pairs": match_result.pair_stats.blocked_pairs,
        "auto_approved": len(plan.auto_approved),
        "queue_entries": len(plan.queue_entries),
        "inverse_entries": len(plan.inverse_entries),
        "discarded": match_result.discard_count,
    }
    if dry_run:
        stats["status"] = "dry_run"
        log.info("dry_run_complete", **{k: v for k, v in stats.items() if k != "status"})
        return stats

    # Step 3: Persist
    async with session_factory() as session, session.begin():
        persisted = await persist_review_plan(session, pipeline_result)
    stats["candidates_written"] = persisted.candidates_written
    log.info(
        "run_persisted",
        candidates_written=persisted.candidates_written,
        auto_approved=persisted.auto_approved,
        queue_entries=persisted.queue_entries,
        inverse_entries=persisted.inverse_entries,
    )
    return stats
