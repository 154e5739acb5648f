from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import select

from app.models import AgentTask
from app.services.heartbeat import run_heartbeat
from app.services.scanners import LeaseExpiryScanner
from app.services.task_ledger import has_open_action

NOW = datetime(2026, 3, 2, 9, 0, 0)


def test_differently_worded_manual_task_does_not_suppress_scan(db, make):
    owner = make.owner()
    prop = make.property(owner)
    tenancy = make.tenancy(prop, lease_end_date=NOW.date() + timedelta(days=25))

    db.add(
        AgentTask(
            user_id=owner.id,
            title="Call Terry about the fence",
            category="maintenance",
            status="in_progress",
            related_entity_type="tenancy",
            related_entity_id=tenancy.id,
            trigger_type=None,
        )
    )
    db.commit()

    assert not has_open_action(db, user_id=owner.id, related_entity_id=tenancy.id, trigger_type="lease_expiry")

    res = run_heartbeat(db, now=NOW, scanners=[LeaseExpiryScanner()])
    assert res.tasks_created == 1

    scan_task = db.scalar(select(AgentTask).where(AgentTask.trigger_type == "lease_expiry"))
    assert scan_task is not None
    assert scan_task.related_entity_id == tenancy.id
    assert has_open_action(db, user_id=owner.id, related_entity_id=tenancy.id, trigger_type="lease_expiry")


def test_gate_is_scoped_per_trigger_and_user(db, make):
    owner = make.owner()
    other = make.owner(full_name="Other Owner")
    db.add(
        AgentTask(
            user_id=owner.id,
            title="x",
            category="rent_collection",
            status="pending_input",
            related_entity_id="entity-1",
            trigger_type="overdue_rent",
        )
    )
    db.commit()

    assert has_open_action(db, user_id=owner.id, related_entity_id="entity-1", trigger_type="overdue_rent")
    assert not has_open_action(db, user_id=owner.id, related_entity_id="entity-1", trigger_type="lease_expiry")
    assert not has_open_action(db, user_id=other.id, related_entity_id="entity-1", trigger_type="overdue_rent")
