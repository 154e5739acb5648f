from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.services.heartbeat import run_heartbeat
from app.services.scanners import LeaseExpiryScanner, Scanner

NOW = datetime(2026, 3, 2, 9, 0, 0)


class _BrokenQueryScanner(Scanner):
    trigger_type = "broken"
    label = "Broken"
    category = "query"
    entity_type = "property"

    def detect(self, db, scope):
        raise SQLAlchemyError("relation does not exist")

    def describe(self, candidate, scope, executed):
        raise AssertionError("no candidates are produced")


def test_query_error_is_prefixed_and_other_scanners_continue(db, make):
    owner = make.owner()
    make.tenancy(make.property(owner), lease_end_date=NOW.date() + timedelta(days=20))

    res = run_heartbeat(db, now=NOW, scanners=[_BrokenQueryScanner(), LeaseExpiryScanner()])

    assert res.processed == 1
    assert res.tasks_created == 1
    assert res.errors == [f"[user:{owner.id}] Broken query: relation does not exist"]


def test_scanners_are_skipped_without_properties(db, make):
    make.owner()
    res = run_heartbeat(db, now=NOW, scanners=[_BrokenQueryScanner()])
    assert res.errors == []


def test_rule_without_describe_cannot_be_built():
    class _DetectOnly(Scanner):
        trigger_type = "detect_only"

        def detect(self, db, scope):
            return []

    with pytest.raises(TypeError):
        _DetectOnly()
