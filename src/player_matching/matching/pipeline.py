"""Matching pipeline: blocking -> factor scoring -> banding -> review plan.

All functions are PURE -- no database access.  ``worker.persistence``
turns a ``PipelineResult`` into candidate rows, queue entries and
cross-references.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from player_matching.matching.candidate_pairs import (
    CandidatePairStats,
    generate_candidate_pairs,
)
from player_matching.matching.combiner import (
    BAND_AUTO_APPROVE,
    BAND_DISCARD,
    BAND_REVIEW,
    FactorScores,
    assign_band,
    combined_confidence,
    factor_flags,
)
from player_matching.matching.config import MatchingConfig
from player_matching.matching.scorers import (
    club_similarity,
    dob_match,
    name_similarity,
    nationality_match,
    position_match,
)


@dataclass
class CandidateRecord:
    """A single scored Transfermarkt/SofaScore pairing.

    Attributes:
        tm_player_id: Transfermarkt player ID.
        sf_player_id: SofaScore player ID.
        factors: Raw factor values.
        flags: The five boolean per-factor match flags.
        confidence: Weighted overall confidence in [0, 1].
        band: One of ``"auto_approve"``, ``"review"``, ``"discard"``.
    """

    tm_player_id: int
    sf_player_id: int
    factors: FactorScores
    flags: dict[str, bool]
    confidence: float
    band: str


@dataclass
class MatchResult:
    """Aggregate scoring output.

    Attributes:
        candidates: Every scored pair (including discarded ones).
        pair_stats: Blocking statistics.
        auto_count: Pairs in the auto-approve band.
        review_count: Pairs in the review band.
        discard_count: Pairs below the review band.
    """

    candidates: list[CandidateRecord]
    pair_stats: CandidatePairStats
    auto_count: int
    review_count: int
    discard_count: int


@dataclass
class QueueEntryPlan:
    """A review queue entry to create.

    ``candidates`` holds ``(sf_player_id, confidence)`` ranked by descending
    confidence.  ``tm_player_id`` is ``None`` for inverse entries.
    """

    tm_player_id: int | None
    candidates: list[tuple[int, float]]

    @property
    def top_confidence(self) -> float | None:
        return self.candidates[0][1] if self.candidates else None


@dataclass
class ReviewPlan:
    """What the persistence layer should write for one run."""

    auto_approved: list[CandidateRecord] = field(default_factory=list)
    pending: list[CandidateRecord] = field(default_factory=list)
    queue_entries: list[QueueEntryPlan] = field(default_factory=list)
    inverse_entries: list[QueueEntryPlan] = field(default_factory=list)


@dataclass
class PipelineResult:
    match_result: MatchResult
    plan: ReviewPlan


def score_pair(tm_player: dict, sf_player: dict, config: MatchingConfig) -> CandidateRecord:
    """Score one pair.

    SofaScore dicts carry ``"position"`` and ``"club_name"`` (the current
    team); Transfermarkt dicts carry ``"main_position"`` which is mapped to
    ``"position"`` by the loader.
    """
    factors = FactorScores(
        name_similarity=round(name_similarity(tm_player, sf_player, config.name), 2),
        club_similarity=round(club_similarity(tm_player, sf_player), 2),
        dob=dob_match(tm_player, sf_player),
        nationality=nationality_match(tm_player, sf_player),
        position=position_match(tm_player, sf_player),
    )
    confidence = round(combined_confidence(factors, config.scoring, config.factors), 4)

    return CandidateRecord(
        tm_player_id=tm_player["id"],
        sf_player_id=sf_player["id"],
        factors=factors,
        flags=factor_flags(factors, config.factors),
        confidence=confidence,
        band=assign_band(confidence, config.thresholds),
    )


def score_candidates(
    tm_players: list[dict], sf_players: list[dict], config: MatchingConfig
) -> MatchResult:
    """Score all blocked candidate pairs.  PURE FUNCTION -- no DB access."""
    pairs, pair_stats = generate_candidate_pairs(tm_players, sf_players)
    tm_by_id = {p["id"]: p for p in tm_players}
    sf_by_id = {p["id"]: p for p in sf_players}

    candidates: list[CandidateRecord] = []
    counts = {BAND_AUTO_APPROVE: 0, BAND_REVIEW: 0, BAND_DISCARD: 0}

    for tm_id, sf_id in pairs:
        record = score_pair(tm_by_id[tm_id], sf_by_id[sf_id], config)
        candidates.append(record)
        counts[record.band] += 1

    return MatchResult(
        candidates=candidates,
        pair_stats=pair_stats,
        auto_count=counts[BAND_AUTO_APPROVE],
        review_count=counts[BAND_REVIEW],
        discard_count=counts[BAND_DISCARD],
    )


def plan_review(
    candidates: list[CandidateRecord],
    config: MatchingConfig,
    sf_player_ids: list[int] | None = None,
) -> ReviewPlan:
    """Decide auto-approvals and queue entries from scored candidates.

    Transfermarkt players are resolved in order of their best confidence.
    For each player, the best still-unclaimed candidate is auto-approved if
    it is in the auto-approve band and no other unclaimed candidate lies
    within ``ambiguity_margin`` of it; otherwise the top ``max_candidates``
    unclaimed candidates become one queue entry.  A
    SofaScore player is claimed by at most one approval or entry.

    If ``config.queue.queue_inverse`` is set, every SofaScore player in
    ``sf_player_ids`` with no candidate at or above the review band gets an
    inverse entry (no Transfermarkt player, confidence 0.0).
    """
    plan = ReviewPlan()
    kept = [c for c in candidates if c.band != BAND_DISCARD]

    by_tm: dict[int, list[CandidateRecord]] = {}
    for c in kept:
        by_tm.setdefault(c.tm_player_id, []).append(c)
    for group in by_tm.values():
        group.sort(key=lambda c: (-c.confidence, c.sf_player_id))

    ordered_tm = sorted(by_tm, key=lambda tm_id: (-by_tm[tm_id][0].confidence, tm_id))
    claimed: set[int] = set()

    for tm_id in ordered_tm:
        available = [c for c in by_tm[tm_id] if c.sf_player_id not in claimed]
        if not available:
            continue

        top = available[0]
        runner_up = available[1] if len(available) > 1 else None
        ambiguous = (
            runner_up is not None
            and top.confidence - runner_up.confidence < config.thresholds.ambiguity_margin
        )
        if top.band == BAND_AUTO_APPROVE and not ambiguous:
            plan.auto_approved.append(top)
            claimed.add(top.sf_player_id)
            continue

        ranked = available[: config.queue.max_candidates]
        plan.pending.extend(ranked)
        plan.queue_entries.append(
            QueueEntryPlan(
                tm_player_id=tm_id,
                candidates=[(c.sf_player_id, c.confidence) for c in ranked],
            )
        )
        claimed.update(c.sf_player_id for c in ranked)

    if config.queue.queue_inverse and sf_player_ids:
        plausible = {c.sf_player_id for c in kept}
        for sf_id in sorted(sf_player_ids):
            if sf_id not in plausible and sf_id not in claimed:
                plan.inverse_entries.append(QueueEntryPlan(tm_player_id=None, candidates=[(sf_id, 0.0)]))

    return plan


def run_matching_pipeline(
    tm_players: list[dict],
    sf_players: list[dict],
    config: MatchingConfig,
    excluded_pairs: set[tuple[int, int]] | None = None,
) -> PipelineResult:
    """Full pipeline: blocking -> scoring -> banding -> review plan.

    Pairs in ``excluded_pairs`` (typically ones a reviewer rejected) are
    scored but never planned for approval or review.

    This is a PURE FUNCTION -- no database access.
    """
    match_result = score_candidates(tm_players, sf_players, config)
    candidates = match_result.candidates
    if excluded_pairs:
        candidates = [
            c for c in candidates if (c.tm_player_id, c.sf_player_id) not in excluded_pairs
        ]
    plan = plan_review(
        candidates,
        config,
        sf_player_ids=[p["id"] for p in sf_players],
    )
    return PipelineResult(match_result=match_result, plan=plan)
