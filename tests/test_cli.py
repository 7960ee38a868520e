"""Tests for the command-line entry point."""

import sys
from pathlib import Path

import pytest

from player_matching.cli import __main__ as cli


class TestMatchCommand:
    def test_dry_run_and_config_forwarded(self, monkeypatch) -> None:
        calls = []

        async def fake_run_match(dry_run: bool, config_path: Path | None) -> dict:
            calls.append((dry_run, config_path))
            return {"status": "dry_run"}

        monkeypatch.setattr(cli, "run_match", fake_run_match)
        monkeypatch.setattr(sys, "argv", ["player-matching", "match", "--dry-run", "--config", "custom.yaml"])

        cli.main()

        assert calls == [(True, Path("custom.yaml"))]

    def test_defaults(self, monkeypatch) -> None:
        calls = []

        async def fake_run_match(dry_run: bool, config_path: Path | None) -> dict:
            calls.append((dry_run, config_path))
            return {"status": "completed"}

        monkeypatch.setattr(cli, "run_match", fake_run_match)
        monkeypatch.setattr(sys, "argv", ["player-matching", "match"])

        cli.main()

        assert calls == [(False, None)]

    def test_no_command_exits(self, monkeypatch) -> None:
        monkeypatch.setattr(sys, "argv", ["player-matching"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
