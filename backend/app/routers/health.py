# backend/app/routers/health.py
from __future__ import annotations

from fastapi import APIRouter

from ..config import settings
from ..schemas import HealthOut

router = APIRouter(tags=["meta"])


@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(ok=True, version=settings.app_version, env=settings.app_env)
