from __future__ import annotations

import hmac
from typing import Any

from fastapi import Header, HTTPException

from .. import config
from .security import decode_admin_access_token

DEV_ADMIN_TOKEN = "dev-admin-token"


def _extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


def _static_token_matches(candidate: str | None) -> bool:
    if not candidate:
        return False
    if config.ADMIN_TOKEN:
        return hmac.compare_digest(candidate, config.ADMIN_TOKEN)
    # Dev fallback only.
    return config.DEV_MODE and candidate == DEV_ADMIN_TOKEN


def get_current_admin(
    authorization: str | None = Header(default=None, alias="Authorization"),
    x_admin_token: str | None = Header(default=None, alias="X-Admin-Token"),
) -> dict[str, Any]:
    bearer = _extract_bearer(authorization)
    if bearer:
        payload = decode_admin_access_token(bearer)
        return {"id": str(payload.get("sub") or "organizer"), "auth_mode": "session"}

    if _static_token_matches(x_admin_token):
        return {"id": "organizer", "auth_mode": "token"}

    raise HTTPException(status_code=401, detail="Admin authentication required")
