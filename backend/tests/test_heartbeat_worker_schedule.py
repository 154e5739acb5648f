from __future__ import annotations

from datetime import datetime, timedelta

from app.config import settings
from app.workers.celery_app import celery_app
from app.workers.heartbeat_tasks import run_agent_heartbeat


def test_beat_runs_the_heartbeat_on_the_configured_interval():
    entry = celery_app.conf.beat_schedule["agent-heartbeat"]
    assert entry["task"] == "app.workers.heartbeat_tasks.run_agent_heartbeat"
    assert entry["schedule"] == settings.heartbeat_interval_minutes * 60


def test_task_returns_the_summary(make):
    owner = make.owner()
    make.tenancy(make.property(owner), lease_end_date=datetime.utcnow().date() + timedelta(days=20))

    out = run_agent_heartbeat()
    assert out["processed"] == 1
    assert out["tasks_created"] >= 1
    assert out["errors"] == []
