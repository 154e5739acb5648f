# backend/app/auth.py
from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .config import settings
from .models import Profile
from .services.auth_service import resolve_user_id


@dataclass(frozen=True)
class Caller:
    kind: str  # cron | admin
    user_id: Optional[str] = None


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and str(authorization).lower().startswith("bearer "):
        token = str(authorization).split(" ", 1)[1].strip()
        return token or None
    return None


def _cron_secret_ok(provided: Optional[str]) -> bool:
    expected = settings.cron_secret
    if not expected or not provided:
        return False
    return hmac.compare_digest(str(provided).encode(), str(expected).encode())


def authorize_heartbeat(
    db: Session,
    *,
    cron_secret: Optional[str],
    authorization: Optional[str],
) -> Optional[Caller]:
    """
    Accepted credentials (in priority order):
      1) X-Cron-Secret matching settings.cron_secret (scheduled runs)
      2) Authorization: Bearer <jwt> for a profile whose role is "admin" (manual runs)

    Returns None when neither matches.
    """
    if _cron_secret_ok(cron_secret):
        return Caller(kind="cron")

    token = _bearer_token(authorization)
    if not token:
        return None

    user_id = resolve_user_id(token)
    if not user_id:
        return None

    role = db.scalar(select(Profile.role).where(Profile.id == user_id))
    if role == "admin":
        return Caller(kind="admin", user_id=user_id)
    return None
