from __future__ import annotations

import logging
from typing import Any

from .. import repo
from ..errors import SelectionError

logger = logging.getLogger(__name__)


def _coerce_id(value: Any) -> int:
    if isinstance(value, bool):
        raise SelectionError(f"Invalid participant id: {value!r}", SelectionError.UNKNOWN_PARTICIPANT)
    try:
        pid = int(value)
    except (TypeError, ValueError):
        raise SelectionError(f"Invalid participant id: {value!r}", SelectionError.UNKNOWN_PARTICIPANT)
    if not 1 <= pid <= repo.MAX_PARTICIPANT_ID:
        raise SelectionError(f"Unknown participant id(s): {pid}", SelectionError.UNKNOWN_PARTICIPANT)
    return pid


def normalize_submission(items: list[Any]) -> list[int]:
    """Turn a submission into ids ordered from most to least preferred.

    Items are plain ids (ranked by position) or ``{"id", "rank"}`` objects.
    Explicit ranks must be given for every item and cover exactly 0..k-1.
    """
    if not items:
        return []

    if not any(isinstance(item, dict) for item in items):
        return [_coerce_id(item) for item in items]

    if not all(isinstance(item, dict) for item in items):
        raise SelectionError("Selections must be all ids or all {id, rank} objects", SelectionError.INVALID_RANK)

    ranked: list[tuple[int, int]] = []
    has_rank = ["rank" in item and item["rank"] is not None for item in items]
    if any(has_rank) and not all(has_rank):
        raise SelectionError("Either every selection carries a rank or none does", SelectionError.INVALID_RANK)

    for position, item in enumerate(items):
        pid = _coerce_id(item.get("id"))
        rank = item.get("rank") if has_rank[position] else position
        if isinstance(rank, bool) or not isinstance(rank, int):
            raise SelectionError(f"Invalid rank {rank!r} for participant {pid}", SelectionError.INVALID_RANK)
        ranked.append((rank, pid))

    ranks = sorted(rank for rank, _ in ranked)
    if ranks != list(range(len(ranked))):
        raise SelectionError("Ranks must run from 0 to k-1 without gaps or repeats", SelectionError.INVALID_RANK)

    return [pid for _, pid in sorted(ranked)]


def validate_ranked_ids(participant_id: int, ranked_ids: list[int], known_ids: set[int]) -> None:
    seen: set[int] = set()
    for pid in ranked_ids:
        if pid == participant_id:
            raise SelectionError("You cannot select yourself", SelectionError.SELF_SELECTION)
        if pid in seen:
            raise SelectionError(f"Participant {pid} was selected more than once", SelectionError.DUPLICATE_SELECTION)
        seen.add(pid)
    unknown = sorted(seen - known_ids)
    if unknown:
        raise SelectionError(
            f"Unknown participant id(s): {', '.join(str(u) for u in unknown)}",
            SelectionError.UNKNOWN_PARTICIPANT,
        )


def submit_selections(token: str, items: list[Any]) -> dict[str, Any]:
    participant = repo.get_participant_by_token((token or "").strip())
    if not participant:
        raise SelectionError("This link is invalid or has expired.", SelectionError.INVALID_TOKEN)

    participant_id = int(participant["id"])
    ranked_ids = normalize_submission(items)
    validate_ranked_ids(participant_id, ranked_ids, repo.existing_participant_ids(ranked_ids))

    stored = repo.replace_selections(participant_id, ranked_ids)
    logger.info("[selections] participant_id=%s stored=%d", participant_id, stored)
    return {
        "success": True,
        "participant_id": participant_id,
        "selections": [{"selected_id": pid, "rank": rank} for rank, pid in enumerate(ranked_ids)],
    }
