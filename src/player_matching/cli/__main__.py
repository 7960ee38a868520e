"""CLI entry point: python -m player_matching.cli match"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from player_matching.config.settings import get_settings
from player_matching.db.engine import dispose_engine
from player_matching.db.session import get_session_factory
from player_matching.logging_config import configure_logging
from player_matching.matching.config import load_config_for_run
from player_matching.worker.orchestrator import run_matching


async def run_match(dry_run: bool, config_path: Path | None) -> dict:
    """Run one matching pass against the configured database."""
    log = structlog.get_logger()
    session_factory = get_session_factory()

    try:
        matching_config = await load_config_for_run(session_factory, config_path)
        log.info(
            "match_run_starting",
            dry_run=dry_run,
            auto_approve=matching_config.thresholds.auto_approve,
            review=matching_config.thresholds.review,
        )
        stats = await run_matching(session_factory, matching_config, dry_run=dry_run)
    finally:
        await dispose_engine()

    log.info("match_run_finished", **stats)
    return stats


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="player_matching.cli",
        description="Player Matching CLI",
    )
    subparsers = parser.add_subparsers(dest="command")

    match_parser = subparsers.add_parser(
        "match", help="Score unlinked players and fill the review queue"
    )
    match_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Score and plan without writing to the database",
    )
    match_parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Matching YAML config (default: PLAYER_MATCHING_MATCHING_CONFIG_PATH)",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "match":
        settings = get_settings()
        configure_logging(json_output=settings.log_json, log_level=settings.log_level)

        config_path = Path(args.config) if args.config else None
        stats = asyncio.run(run_match(args.dry_run, config_path))
        if stats.get("status") not in ("completed", "dry_run", "skipped"):
            sys.exit(1)


if __name__ == "__main__":
    main()
