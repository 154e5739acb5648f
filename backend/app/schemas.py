# backend/app/schemas.py
from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


# -------------------- Heartbeat --------------------

class HeartbeatResultOut(BaseModel):
    processed: int = 0
    tasks_created: int = 0
    actions_auto_executed: int = 0

    # per-user / per-candidate errors; a non-empty list means partial failure
    errors: List[str] = Field(default_factory=list)


class UnauthorizedOut(BaseModel):
    error: str = "Unauthorized"


# -------------------- Meta --------------------

class HealthOut(BaseModel):
    ok: bool
    version: str
    env: str
