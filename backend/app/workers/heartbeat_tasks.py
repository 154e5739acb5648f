# backend/app/workers/heartbeat_tasks.py
from __future__ import annotations

from typing import Optional

from ..db import SessionLocal
from ..middleware.request_id import bound_request_id
from ..services.heartbeat import run_heartbeat
from .celery_app import celery_app


@celery_app.task(name="app.workers.heartbeat_tasks.run_agent_heartbeat")
def run_agent_heartbeat(user_id: Optional[str] = None) -> dict:
    """
    Scheduled sweep (celery-beat). No retries: a failed sweep is simply
    picked up by the next tick.
    """
    with bound_request_id(prefix="sweep-"):
        db = SessionLocal()
        try:
            return run_heartbeat(db, target_user_id=user_id).to_dict()
        finally:
            db.close()
