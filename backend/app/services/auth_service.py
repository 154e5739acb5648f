# backend/app/services/auth_service.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt  # PyJWT

from app.config import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(*, subject: str, minutes: int = 60, extra: Optional[dict[str, Any]] = None) -> str:
    """Mint a token the way the hosted auth service does (dev tooling + tests)."""
    now = _now()
    payload: dict[str, Any] = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=int(minutes))).timestamp()),
    }
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    payload.update(extra or {})
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_access_token(token: str) -> dict[str, Any]:
    if settings.jwt_audience:
        return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"], audience=settings.jwt_audience)
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"], options={"verify_aud": False})


def resolve_user_id(token: str) -> Optional[str]:
    """Bearer token -> user id, or None when the token is bad/expired."""
    try:
        claims = decode_access_token(token)
    except jwt.PyJWTError:
        return None
    sub = str(claims.get("sub") or "").strip()
    return sub or None
