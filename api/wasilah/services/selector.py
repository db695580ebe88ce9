from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .matching import MutualMatch, sort_matches


@dataclass
class ToggleResult:
    selected: list[MutualMatch]
    changed: bool
    conflicts: list[MutualMatch] = field(default_factory=list)
    removed: list[MutualMatch] = field(default_factory=list)

    @property
    def conflict(self) -> MutualMatch | None:
        return self.conflicts[0] if self.conflicts else None


def select_conflict_free(matches: Iterable[MutualMatch]) -> list[MutualMatch]:
    """Greedy pick by score: a participant used once is unavailable afterwards.

    This is not a maximum-weight matching; a lower-scoring pair can block two
    better ones. Callers depend only on the signature, so an optimal matcher
    can replace it.
    """
    used: set[int] = set()
    chosen: list[MutualMatch] = []
    for match in sort_matches(matches):
        if match.participant1_id in used or match.participant2_id in used:
            continue
        used.add(match.participant1_id)
        used.add(match.participant2_id)
        chosen.append(match)
    return chosen


def find_conflicts(selected: Iterable[MutualMatch], candidate: MutualMatch) -> list[MutualMatch]:
    ids = set(candidate.participant_ids)
    return [
        match
        for match in selected
        if match.id != candidate.id and ids.intersection(match.participant_ids)
    ]


def find_conflict(selected: Iterable[MutualMatch], candidate: MutualMatch) -> MutualMatch | None:
    conflicts = find_conflicts(selected, candidate)
    return conflicts[0] if conflicts else None


def is_conflict_free(matches: Iterable[MutualMatch]) -> bool:
    seen: set[int] = set()
    for match in matches:
        for pid in match.participant_ids:
            if pid in seen:
                return False
            seen.add(pid)
    return True


def select_match(selected: list[MutualMatch], candidate: MutualMatch, swap: bool = False) -> ToggleResult:
    if any(m.id == candidate.id for m in selected):
        return ToggleResult(selected=list(selected), changed=False)

    conflicts = find_conflicts(selected, candidate)
    if conflicts and not swap:
        return ToggleResult(selected=list(selected), changed=False, conflicts=conflicts)

    conflict_ids = {m.id for m in conflicts}
    kept = [m for m in selected if m.id not in conflict_ids]
    kept.append(candidate)
    return ToggleResult(selected=kept, changed=True, conflicts=conflicts, removed=conflicts)


def deselect_match(selected: list[MutualMatch], candidate: MutualMatch) -> ToggleResult:
    kept = [m for m in selected if m.id != candidate.id]
    changed = len(kept) != len(selected)
    return ToggleResult(selected=kept, changed=changed, removed=[candidate] if changed else [])


def select_all(matches: Iterable[MutualMatch]) -> list[MutualMatch]:
    return select_conflict_free(matches)
