from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import select

from app.domain.jurisdiction_defaults import inspection_rule_for, routine_interval_days
from app.models import AgentTask
from app.services.heartbeat import run_heartbeat
from app.services.scanners import OverdueInspectionScanner, RoutineInspectionDueScanner

NOW = datetime(2026, 3, 2, 9, 0, 0)
TODAY = NOW.date()


def test_state_rules():
    assert inspection_rule_for("qld").routine_interval_months == 3
    assert inspection_rule_for("SA").routine_interval_months == 4
    assert inspection_rule_for("VIC").routine_interval_months == 6
    assert inspection_rule_for(None).state == "NSW"
    assert round(routine_interval_days("WA"), 2) == 91.32


def test_overdue_inspection_priority(db, make):
    owner = make.owner()
    prop = make.property(owner)
    late = make.inspection(prop, scheduled_date=TODAY - timedelta(days=10), inspection_type="entry")
    recent = make.inspection(prop, scheduled_date=TODAY - timedelta(days=3))
    make.inspection(prop, scheduled_date=TODAY)
    make.inspection(prop, scheduled_date=TODAY - timedelta(days=20), status="completed")

    res = run_heartbeat(db, now=NOW, scanners=[OverdueInspectionScanner()])
    assert res.errors == []
    assert res.tasks_created == 2

    tasks = {t.related_entity_id: t for t in db.scalars(select(AgentTask))}
    assert tasks[late.id].priority == "high"
    assert tasks[late.id].status == "in_progress"
    assert tasks[late.id].category == "inspections"
    assert "10 days overdue" in tasks[late.id].description
    assert tasks[recent.id].priority == "normal"


def test_routine_inspection_due_follows_state_interval(db, make):
    owner = make.owner()

    qld = make.property(owner, state="QLD", address="1 Queen St")
    make.tenancy(qld)
    make.inspection(qld, scheduled_date=TODAY - timedelta(days=100), status="completed")

    nsw = make.property(owner, state="NSW", address="2 George St")
    make.tenancy(nsw)
    make.inspection(nsw, scheduled_date=TODAY - timedelta(days=100), status="finalized")

    res = run_heartbeat(db, now=NOW, scanners=[RoutineInspectionDueScanner()])
    assert res.errors == []
    assert res.tasks_created == 1

    task = db.scalar(select(AgentTask))
    assert task.related_entity_type == "property"
    assert task.related_entity_id == qld.id
    assert task.priority == "normal"
    assert "QLD requires routine inspections at least every 3 months" in task.description
    assert task.deep_link == f"/(app)/inspections/schedule?property_id={qld.id}&type=routine"


def test_never_inspected_tenanted_property_is_due(db, make):
    owner = make.owner()
    prop = make.property(owner, state="VIC")
    make.tenancy(prop)

    res = run_heartbeat(db, now=NOW, scanners=[RoutineInspectionDueScanner()])
    assert res.tasks_created == 1
    assert "No routine inspection on record" in db.scalar(select(AgentTask)).description


def test_vacant_or_already_booked_properties_are_skipped(db, make):
    owner = make.owner()

    make.property(owner, state="QLD", address="3 Empty St")

    booked = make.property(owner, state="QLD", address="4 Booked St")
    make.tenancy(booked)
    make.inspection(booked, scheduled_date=TODAY + timedelta(days=5))

    ended = make.property(owner, state="QLD", address="5 Gone St")
    make.tenancy(ended, status="ended")

    res = run_heartbeat(db, now=NOW, scanners=[RoutineInspectionDueScanner()])
    assert res.tasks_created == 0
