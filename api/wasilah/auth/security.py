import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import HTTPException
from passlib.context import CryptContext

from .. import config

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")
ALGORITHM = "HS256"
ADMIN_SCOPE = "admin"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_admin_password(password: str) -> bool:
    if not password:
        return False
    if config.ADMIN_PASSWORD_HASH:
        return pwd_context.verify(password, config.ADMIN_PASSWORD_HASH)
    if config.ADMIN_PASSWORD:
        return hmac.compare_digest(password.encode("utf-8"), config.ADMIN_PASSWORD.encode("utf-8"))
    raise HTTPException(status_code=503, detail="Admin login is not configured")


def _require_secret() -> str:
    if not config.JWT_SECRET:
        raise HTTPException(status_code=500, detail="JWT secret not configured")
    return config.JWT_SECRET


def create_admin_access_token(ttl_minutes: int | None = None) -> str:
    secret = _require_secret()
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=max(5, int(ttl_minutes or config.ADMIN_SESSION_TTL_MINUTES)))
    payload: dict[str, Any] = {
        "sub": "organizer",
        "scope": ADMIN_SCOPE,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_admin_access_token(token: str) -> dict[str, Any]:
    secret = _require_secret()
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise HTTPException(status_code=401, detail="Token expired") from exc
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    if not isinstance(payload, dict) or payload.get("scope") != ADMIN_SCOPE:
        raise HTTPException(status_code=401, detail="Invalid admin token")
    return payload
