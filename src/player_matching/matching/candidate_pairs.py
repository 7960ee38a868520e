"""Candidate pair generator using blocking keys.

Generates cross-source ``(tm_player_id, sf_player_id)`` pairs for players
that share at least one blocking key, deduplicated across blocking groups.
Also computes blocking reduction statistics to verify that blocking is
practical at scale.
"""

from __future__ import annotations

from dataclasses import dataclass

from player_matching.preprocessing.blocking import generate_blocking_keys


@dataclass
class CandidatePairStats:
    """Statistics about candidate pair generation.

    Attributes:
        tm_players: Number of Transfermarkt players considered.
        sf_players: Number of SofaScore players considered.
        total_possible_pairs: Cross-source pairs without blocking (naive).
        blocked_pairs: Cross-source pairs after blocking.
        reduction_pct: Percentage of pairs eliminated by blocking.
    """

    tm_players: int
    sf_players: int
    total_possible_pairs: int
    blocked_pairs: int
    reduction_pct: float


def _keys_for(player: dict) -> list[str]:
    return player.get("blocking_keys") or generate_blocking_keys(player)


def generate_candidate_pairs(
    tm_players: list[dict],
    sf_players: list[dict],
) -> tuple[list[tuple[int, int]], CandidatePairStats]:
    """Generate cross-source candidate pairs using blocking keys.

    Args:
        tm_players: Transfermarkt player dicts with ``"id"`` and the fields
            used for blocking (``"name"``, ``"date_of_birth"``), or
            precomputed ``"blocking_keys"``.
        sf_players: SofaScore player dicts in the same shape.

    Returns:
        A tuple of (sorted ``(tm_id, sf_id)`` list, blocking statistics).
    """
    sf_index: dict[str, list[int]] = {}
    for sf in sf_players:
        for key in _keys_for(sf):
            sf_index.setdefault(key, []).append(sf["id"])

    seen: set[tuple[int, int]] = set()
    for tm in tm_players:
        for key in _keys_for(tm):
            for sf_id in sf_index.get(key, ()):
                seen.add((tm["id"], sf_id))

    pairs = sorted(seen)

    total_possible = len(tm_players) * len(sf_players)
    blocked = len(pairs)
    reduction = (1 - blocked / total_possible) * 100 if total_possible > 0 else 0.0

    return pairs, CandidatePairStats(
        tm_players=len(tm_players),
        sf_players=len(sf_players),
        total_possible_pairs=total_possible,
        blocked_pairs=blocked,
        reduction_pct=reduction,
    )
