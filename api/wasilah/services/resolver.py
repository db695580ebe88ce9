from __future__ import annotations

import logging
from typing import Any, Iterable

from .. import repo
from ..database import SessionLocal
from .matching import MutualMatch, find_mutual_matches, match_counts

logger = logging.getLogger(__name__)


def run_matching() -> list[MutualMatch]:
    """Recompute every mutual match from the current selections and materialize them.

    Reading, resolving and rewriting share one transaction; an integrity
    failure leaves the previously materialized matches in place.
    """
    with SessionLocal() as db:
        selections, known_ids = repo.fetch_selection_snapshot(db)
        matches = find_mutual_matches(selections, known_ids)
        repo.save_mutual_matches(db, matches)
        db.commit()
    logger.info("[matching] run complete selections=%d matches=%d", len(selections), len(matches))
    return matches


def present_match(match: MutualMatch, names: dict[int, str]) -> dict[str, Any]:
    out = match.as_dict()
    out["name1"] = names.get(match.participant1_id, "Unknown")
    out["name2"] = names.get(match.participant2_id, "Unknown")
    return out


def present_matches(matches: Iterable[MutualMatch], names: dict[int, str] | None = None) -> dict[str, Any]:
    matches = list(matches)
    names = names if names is not None else repo.participant_names()
    counts = match_counts(matches)
    summary = [
        {"participant_id": pid, "first_name": names.get(pid, "Unknown"), "match_count": count}
        for pid, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    return {
        "count": len(matches),
        "matches": [present_match(m, names) for m in matches],
        "summary": summary,
    }
