from typing import Any

from fastapi import APIRouter, HTTPException

from ..config import RL_PARTICIPANT_LIMIT, RL_WINDOW_SECONDS
from ..deps import raise_for_error
from ..errors import SelectionError
from ..schemas import SubmitSelectionsRequest
from ..services.access import resolve_token
from ..services.rate_limit import rate_limit_dependency
from ..services.selections import submit_selections

router = APIRouter()
scaffold_router = APIRouter()

RL_PARTICIPANT = rate_limit_dependency("participant", RL_PARTICIPANT_LIMIT, RL_WINDOW_SECONDS)

INVALID_LINK_MESSAGE = "This link is invalid or has expired."


@scaffold_router.get("/health")
def participant_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "participant"}


@router.get("/participant/{token}", dependencies=[RL_PARTICIPANT])
def get_participant_data(token: str) -> dict[str, Any]:
    resolution = resolve_token(token)
    if resolution is None:
        raise HTTPException(
            status_code=404,
            detail={"success": False, "error": SelectionError.INVALID_TOKEN, "message": INVALID_LINK_MESSAGE},
        )
    return resolution.as_dict()


@router.post("/participant/{token}/selections", dependencies=[RL_PARTICIPANT])
def post_selections(token: str, payload: SubmitSelectionsRequest) -> dict[str, Any]:
    try:
        return submit_selections(token, payload.selections)
    except SelectionError as exc:
        raise_for_error(exc)
