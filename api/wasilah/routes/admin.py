import logging
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.encoders import jsonable_encoder

from .. import config
from .. import repo
from ..auth.admin_deps import get_current_admin
from ..auth.security import create_admin_access_token, verify_admin_password
from ..config import RL_ADMIN_LOGIN_LIMIT, RL_WINDOW_SECONDS
from ..deps import raise_for_error
from ..errors import DataIntegrityError, RosterError
from ..schemas import AdminLoginRequest, ImportParticipantsRequest, MatchSelectionRequest
from ..services.invitations import invite_mailto, participant_link
from ..services.matching import MutualMatch
from ..services.rate_limit import rate_limit_dependency
from ..services.resolver import present_match, present_matches, run_matching
from ..services.roster import import_csv, import_records
from ..services.selector import deselect_match, is_conflict_free, select_conflict_free, select_match

logger = logging.getLogger(__name__)

router = APIRouter()
scaffold_router = APIRouter()

RL_ADMIN_LOGIN = rate_limit_dependency("admin_login", RL_ADMIN_LOGIN_LIMIT, RL_WINDOW_SECONDS)


def _json(data: Any) -> Any:
    return jsonable_encoder(data)


def _ids(matches: list[MutualMatch]) -> list[str]:
    return [m.id for m in matches]


@scaffold_router.get("/health")
def admin_scaffold_health() -> dict[str, str]:
    return {"status": "ok", "module": "admin"}


@router.post("/admin/login", dependencies=[RL_ADMIN_LOGIN])
def admin_login(payload: AdminLoginRequest) -> dict[str, Any]:
    if not verify_admin_password(payload.password):
        logger.warning("[admin] rejected login attempt")
        raise HTTPException(status_code=401, detail="Invalid password")
    return {
        "success": True,
        "access_token": create_admin_access_token(),
        "token_type": "bearer",
        "expires_in": config.ADMIN_SESSION_TTL_MINUTES * 60,
    }


@router.post("/admin/upload-csv")
async def upload_csv(
    file: UploadFile = File(...),
    admin_user: dict[str, Any] = Depends(get_current_admin),
) -> dict[str, Any]:
    data = await file.read()
    if len(data) > config.MAX_ROSTER_BYTES:
        raise_for_error(RosterError(f"Roster must be {config.MAX_ROSTER_BYTES} bytes or smaller"))
    try:
        summary = import_csv(data)
    except RosterError as exc:
        raise_for_error(exc)
    return summary.as_dict()


@router.post("/admin/participants/import")
def import_participants(
    payload: ImportParticipantsRequest,
    admin_user: dict[str, Any] = Depends(get_current_admin),
) -> dict[str, Any]:
    return import_records(payload.participants).as_dict()


@router.get("/admin/participants")
def list_participants(admin_user: dict[str, Any] = Depends(get_current_admin)) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for row in repo.list_participants():
        link = participant_link(row["token"])
        out.append(
            {
                "id": row["id"],
                "first_name": row["first_name"],
                "gender": row.get("gender"),
                "email": row.get("email"),
                "token": row["token"],
                "link": link,
                "mailto": invite_mailto(row, link),
                "selection_count": int(row.get("selection_count") or 0),
                "selections_submitted_at": row.get("selections_submitted_at"),
            }
        )
    return _json(out)


@router.post("/admin/run-matching")
def admin_run_matching(admin_user: dict[str, Any] = Depends(get_current_admin)) -> dict[str, Any]:
    try:
        matches = run_matching()
    except DataIntegrityError as exc:
        raise_for_error(exc)
    presented = present_matches(matches)
    return {"success": True, "matches_found": presented["count"], **presented}


@router.get("/admin/matches")
def get_matches(admin_user: dict[str, Any] = Depends(get_current_admin)) -> dict[str, Any]:
    return present_matches(repo.list_mutual_matches())


@router.post("/admin/matches/smart-select")
def smart_select(admin_user: dict[str, Any] = Depends(get_current_admin)) -> dict[str, Any]:
    matches = repo.list_mutual_matches()
    chosen = select_conflict_free(matches)
    presented = present_matches(chosen)
    return {
        "selected": _ids(chosen),
        "selected_count": len(chosen),
        "total_matches": len(matches),
        "total_score": sum(m.score for m in chosen),
        "matches": presented["matches"],
    }


@router.post("/admin/matches/selection")
def toggle_match_selection(
    payload: MatchSelectionRequest,
    admin_user: dict[str, Any] = Depends(get_current_admin),
) -> dict[str, Any]:
    by_id = {m.id: m for m in repo.list_mutual_matches()}
    candidate = by_id.get(payload.match_id)
    if candidate is None:
        raise HTTPException(
            status_code=404,
            detail={"success": False, "error": "unknown_match", "message": f"Match {payload.match_id} not found"},
        )

    selected: list[MutualMatch] = []
    dropped: list[str] = []
    for match_id in dict.fromkeys(payload.selected):
        if match_id in by_id:
            selected.append(by_id[match_id])
        else:
            dropped.append(match_id)

    if payload.action == "deselect":
        result = deselect_match(selected, candidate)
    else:
        result = select_match(selected, candidate, swap=payload.swap)

    names = repo.participant_names()
    return {
        "selected": _ids(result.selected),
        "changed": result.changed,
        "conflict": present_match(result.conflict, names) if result.conflict and not result.changed else None,
        "conflicts": [present_match(m, names) for m in result.conflicts],
        "removed": _ids(result.removed),
        "dropped": dropped,
        "conflict_free": is_conflict_free(result.selected),
    }


@router.post("/admin/clear-all")
def clear_all(admin_user: dict[str, Any] = Depends(get_current_admin)) -> dict[str, Any]:
    deleted = repo.clear_all()
    logger.warning("[admin] cleared all data deleted=%s", deleted)
    return {"success": True, "deleted": deleted}
