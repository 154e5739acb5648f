from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import select

from app.models import AgentTask
from app.services.heartbeat import run_heartbeat
from app.services.scanners import LeaseExpiryScanner
from app.services.scanners.lease_expiry import expiry_window

NOW = datetime(2026, 3, 2, 9, 0, 0)


def test_expiry_window_edges():
    assert expiry_window(0)[1] == "urgent"
    assert expiry_window(14)[1] == "urgent"
    assert expiry_window(15)[1] == "high"
    assert expiry_window(30)[1] == "high"
    assert expiry_window(31)[1] == "normal"
    assert expiry_window(60)[1] == "normal"
    assert expiry_window(61) is None


def test_lease_expiry_tiers(db, make):
    owner = make.owner()
    tenant = make.profile(email="t@example.com", full_name="Terry Tenant", role="tenant")

    by_days = {}
    for days in (10, 25, 45, 61):
        prop = make.property(owner, address=f"{days} Long St")
        t = make.tenancy(prop, lease_end_date=NOW.date() + timedelta(days=days), tenant=tenant)
        by_days[days] = t.id

    # already ended and periodic-with-no-end tenancies are ignored
    make.tenancy(make.property(owner, address="1 Past St"), lease_end_date=NOW.date() - timedelta(days=1))
    make.tenancy(make.property(owner, address="2 Open St"), lease_end_date=None)

    res = run_heartbeat(db, now=NOW, scanners=[LeaseExpiryScanner()])
    assert res.errors == []
    assert res.tasks_created == 3

    tasks = {t.related_entity_id: t for t in db.scalars(select(AgentTask))}
    assert tasks[by_days[10]].priority == "urgent"
    assert tasks[by_days[25]].priority == "high"
    assert tasks[by_days[45]].priority == "normal"
    assert by_days[61] not in tasks

    urgent = tasks[by_days[10]]
    assert urgent.status == "pending_input"
    assert urgent.category == "lease_management"
    assert urgent.title == "Lease expiry in 10 days - 10 Long St, Newtown, NSW"
    assert "Terry Tenant" in urgent.description
    assert urgent.deep_link.startswith("/(app)/(tabs)/properties/")


def test_other_owners_tenancies_are_out_of_scope(db, make):
    owner = make.owner()
    stranger = make.owner(full_name="Stranger", preset=None)
    make.property(owner)
    make.tenancy(make.property(stranger), lease_end_date=NOW.date() + timedelta(days=5))

    res = run_heartbeat(db, now=NOW, scanners=[LeaseExpiryScanner()])
    assert res.tasks_created == 0
