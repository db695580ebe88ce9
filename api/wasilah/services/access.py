from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Any

from .. import config
from .. import repo


@dataclass
class TokenResolution:
    participant: dict[str, Any]
    candidates: list[dict[str, Any]]
    current_selections: list[dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "participant": self.participant,
            "available_participants": self.candidates,
            "current_selections": self.current_selections,
        }


def mint_token() -> str:
    return secrets.token_urlsafe(config.TOKEN_BYTES)


def public_participant(row: dict[str, Any]) -> dict[str, Any]:
    return {"id": int(row["id"]), "first_name": row["first_name"], "gender": row.get("gender")}


def resolve_token(token: str) -> TokenResolution | None:
    participant = repo.get_participant_by_token((token or "").strip())
    if not participant:
        return None
    participant_id = int(participant["id"])
    candidates = [public_participant(c) for c in repo.list_candidates(participant_id)]
    current = [
        {"selected_id": int(s["selected_id"]), "rank": int(s["rank"])}
        for s in repo.get_selections(participant_id)
    ]
    return TokenResolution(participant=public_participant(participant), candidates=candidates, current_selections=current)
