from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from ..errors import DataIntegrityError

logger = logging.getLogger(__name__)

BASE_SCORE = 100
RANK_PENALTY = 10


@dataclass(frozen=True)
class SelectionRow:
    participant_id: int
    selected_id: int
    rank: int


@dataclass(frozen=True)
class MutualMatch:
    participant1_id: int
    participant2_id: int
    rank1: int
    rank2: int

    @property
    def id(self) -> str:
        return match_key(self.participant1_id, self.participant2_id)

    @property
    def score(self) -> int:
        return compute_score(self.rank1, self.rank2)

    @property
    def tier(self) -> str:
        return score_tier(self.score)

    @property
    def participant_ids(self) -> tuple[int, int]:
        return (self.participant1_id, self.participant2_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "participant1_id": self.participant1_id,
            "participant2_id": self.participant2_id,
            "rank1": self.rank1,
            "rank2": self.rank2,
            "score": self.score,
            "tier": self.tier,
        }


def canonical_pair(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def match_key(a: int, b: int) -> str:
    low, high = canonical_pair(a, b)
    return f"{low}-{high}"


def compute_score(rank1: int, rank2: int) -> int:
    """Both ranked first scores 100; every rank step below first costs 10.

    There is no floor: a pair far down both lists can score below zero.
    """
    return BASE_SCORE - RANK_PENALTY * (rank1 + rank2)


def score_tier(score: int) -> str:
    if score >= 90:
        return "excellent"
    if score >= 70:
        return "great"
    return "good"


def match_sort_key(match: MutualMatch) -> tuple[int, int, int]:
    return (-match.score, match.participant1_id, match.participant2_id)


def sort_matches(matches: Iterable[MutualMatch]) -> list[MutualMatch]:
    return sorted(matches, key=match_sort_key)


def find_integrity_violations(
    selections: Iterable[SelectionRow],
    participant_ids: set[int],
) -> list[dict[str, Any]]:
    bad: list[dict[str, Any]] = []
    for sel in selections:
        missing = [
            field
            for field, value in (("participant_id", sel.participant_id), ("selected_id", sel.selected_id))
            if value not in participant_ids
        ]
        if missing:
            bad.append(
                {
                    "participant_id": sel.participant_id,
                    "selected_id": sel.selected_id,
                    "rank": sel.rank,
                    "missing": missing,
                }
            )
    return bad


def find_mutual_matches(
    selections: Iterable[SelectionRow],
    participant_ids: set[int] | None = None,
) -> list[MutualMatch]:
    """Return every reciprocal pair in ``selections``, best score first.

    When ``participant_ids`` is given, any selection naming an unknown
    participant aborts the whole run with ``DataIntegrityError``.
    """
    rows = list(selections)

    if participant_ids is not None:
        bad = find_integrity_violations(rows, participant_ids)
        if bad:
            logger.error("[matching] %d selection(s) reference missing participants", len(bad))
            raise DataIntegrityError(
                f"{len(bad)} selection(s) reference participants that no longer exist",
                rows=bad,
            )

    ranks: dict[tuple[int, int], int] = {}
    for sel in rows:
        if sel.participant_id == sel.selected_id:
            logger.warning("[matching] skipping self-selection participant_id=%s", sel.participant_id)
            continue
        ranks[(sel.participant_id, sel.selected_id)] = sel.rank

    matches: list[MutualMatch] = []
    for (chooser, chosen), rank in ranks.items():
        if chooser >= chosen:
            continue
        reverse = ranks.get((chosen, chooser))
        if reverse is None:
            continue
        matches.append(MutualMatch(participant1_id=chooser, participant2_id=chosen, rank1=rank, rank2=reverse))

    return sort_matches(matches)


def match_counts(matches: Iterable[MutualMatch]) -> dict[int, int]:
    counts: dict[int, int] = {}
    for match in matches:
        for pid in match.participant_ids:
            counts[pid] = counts.get(pid, 0) + 1
    return counts
