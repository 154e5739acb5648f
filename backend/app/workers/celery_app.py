# backend/app/workers/celery_app.py
from __future__ import annotations

from celery import Celery

from ..config import settings

BROKER = settings.celery_broker_url or "redis://localhost:6379/0"
BACKEND = settings.celery_result_backend or "redis://localhost:6379/1"

celery_app = Celery(
    "casa",
    broker=BROKER,
    backend=BACKEND,
    include=["app.workers.heartbeat_tasks"],
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    timezone="UTC",
)

celery_app.conf.task_routes = {
    "app.workers.heartbeat_tasks.*": {"queue": "heartbeat"},
}

# Sweeps must not overlap (the dedup gate is check-then-insert), so the
# period should stay well above a sweep's runtime.
celery_app.conf.beat_schedule = {
    "agent-heartbeat": {
        "task": "app.workers.heartbeat_tasks.run_agent_heartbeat",
        "schedule": float(settings.heartbeat_interval_minutes * 60),
        "options": {"expires": float(settings.heartbeat_interval_minutes * 60)},
    },
}
