from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.models import AgentTask
from app.services import heartbeat
from app.services.heartbeat import load_property_ids, run_heartbeat
from app.services.scanners import LeaseExpiryScanner

NOW = datetime(2026, 3, 2, 9, 0, 0)


def test_deleted_properties_are_not_scanned(db, make):
    owner = make.owner()
    gone = make.property(owner, address="9 Sold St", deleted_at=NOW - timedelta(days=3))
    make.tenancy(gone, lease_end_date=NOW.date() + timedelta(days=10))

    assert load_property_ids(db, owner.id) == []

    res = run_heartbeat(db, now=NOW, scanners=[LeaseExpiryScanner()])
    assert res.processed == 1
    assert res.errors == []
    assert res.tasks_created == 0
    assert db.scalar(select(func.count(AgentTask.id))) == 0


def test_only_active_properties_of_a_mixed_portfolio_are_scanned(db, make):
    owner = make.owner()
    live = make.property(owner, address="1 Live St")
    make.tenancy(live, lease_end_date=NOW.date() + timedelta(days=10))
    gone = make.property(owner, address="2 Gone St", deleted_at=NOW - timedelta(days=1))
    make.tenancy(gone, lease_end_date=NOW.date() + timedelta(days=10))

    assert load_property_ids(db, owner.id) == [str(live.id)]

    res = run_heartbeat(db, now=NOW, scanners=[LeaseExpiryScanner()])
    assert res.tasks_created == 1


def test_property_load_failure_is_reported_per_user(db, make, monkeypatch):
    broken = make.owner(full_name="Broken", created_at=NOW - timedelta(days=2))
    healthy = make.owner(full_name="Healthy", created_at=NOW - timedelta(days=1))
    make.tenancy(make.property(healthy), lease_end_date=NOW.date() + timedelta(days=10))

    real = heartbeat.load_property_ids

    def _load(db, user_id):
        if user_id == str(broken.id):
            raise SQLAlchemyError("properties unavailable")
        return real(db, user_id)

    monkeypatch.setattr(heartbeat, "load_property_ids", _load)

    res = run_heartbeat(db, now=NOW, scanners=[LeaseExpiryScanner()])
    assert res.processed == 2
    assert res.tasks_created == 1
    assert res.errors == [
        f"[user:{broken.id}] Failed to load properties for user {broken.id}: properties unavailable"
    ]
