# backend/app/services/scanners/base.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import AutonomySettings, Property
from app.services.task_ledger import TaskDraft, TimelineEntry, has_open_action, record_action

log = logging.getLogger("casa.heartbeat.scanner")


@dataclass(frozen=True)
class ScanScope:
    user_id: str
    property_ids: tuple[str, ...]
    autonomy: Optional[AutonomySettings]
    now: datetime

    @property
    def today(self) -> date:
        return self.now.date()


@dataclass(frozen=True)
class Candidate:
    entity_type: str
    entity_id: str
    facts: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AutoAction:
    """A side effect the scanner wants to perform without asking the owner."""

    tool_name: str
    tool_params: dict[str, Any]
    level: int
    perform: Callable[[Session], dict[str, Any]]


@dataclass(frozen=True)
class ExecutedAction:
    action: AutoAction
    result: dict[str, Any]


@dataclass
class ScanResult:
    tasks_created: int = 0
    auto_executed: int = 0
    errors: list[str] = field(default_factory=list)


def format_address(prop: Optional[Property]) -> str:
    if prop is None:
        return ""
    return ", ".join(x for x in (prop.address_line_1, prop.suburb, prop.state) if x)


def money(v: Any) -> str:
    return f"${float(v or 0):.2f}"


def days_between(later: date, earlier: date) -> int:
    return (later - earlier).days


class Scanner(ABC):
    """
    One detection rule: detect -> (maybe) act -> describe.

    Subclasses set the class attributes and implement detect() + describe().
    Scanners that can act on their own also implement decide().
    """

    trigger_type: str = ""
    label: str = ""
    category: str = ""
    entity_type: str = ""

    @abstractmethod
    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        ...

    def decide(self, db: Session, candidate: Candidate, scope: ScanScope) -> Optional[AutoAction]:
        return None

    @abstractmethod
    def describe(
        self,
        candidate: Candidate,
        scope: ScanScope,
        executed: Optional[ExecutedAction],
    ) -> TaskDraft:
        ...

    # helpers shared by every rule
    def draft(self, candidate: Candidate, scope: ScanScope, **kw: Any) -> TaskDraft:
        return TaskDraft(
            user_id=scope.user_id,
            category=self.category,
            related_entity_type=candidate.entity_type,
            related_entity_id=candidate.entity_id,
            trigger_type=self.trigger_type,
            **kw,
        )

    def entry(
        self,
        scope: ScanScope,
        action: str,
        status: str,
        *,
        reasoning: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> TimelineEntry:
        return TimelineEntry(
            timestamp=timestamp or scope.now,
            action=action,
            status=status,
            reasoning=reasoning,
            data=data,
        )


def run_scanner(db: Session, scanner: Scanner, scope: ScanScope) -> ScanResult:
    """
    Shared loop: query -> dedup gate -> optional side effect -> record task + audit.

    Errors become strings on the result; nothing here raises for a single
    failed query or candidate.
    """
    res = ScanResult()
    if not scope.property_ids:
        return res

    try:
        candidates = scanner.detect(db, scope)
    except SQLAlchemyError as e:
        db.rollback()
        log.warning(
            "%s query failed: %s",
            scanner.label,
            e,
            extra={"user_id": scope.user_id, "scanner": scanner.trigger_type},
        )
        res.errors.append(f"{scanner.label} query: {e}")
        return res

    for c in candidates:
        try:
            _process_candidate(db, scanner, scope, c, res)
        except SQLAlchemyError as e:
            db.rollback()
            res.errors.append(f"{scanner.label} task for {c.entity_type} {c.entity_id}: {e}")

    return res


def _process_candidate(db: Session, scanner: Scanner, scope: ScanScope, c: Candidate, res: ScanResult) -> None:
    # The gate runs before any side effect so a reminder is never sent twice.
    if has_open_action(db, user_id=scope.user_id, related_entity_id=c.entity_id, trigger_type=scanner.trigger_type):
        return

    # The side effect is only flushed here; it commits together with the task
    # row in record_action, so a failed task write discards it as well.
    executed: Optional[ExecutedAction] = None
    action = scanner.decide(db, c, scope)
    if action is not None:
        try:
            result = action.perform(db)
        except SQLAlchemyError as e:
            db.rollback()
            res.errors.append(f"Auto-execute {action.tool_name} for {c.entity_type} {c.entity_id}: {e}")
        else:
            executed = ExecutedAction(action=action, result=result)

    draft = scanner.describe(c, scope, executed)
    if executed is not None:
        draft.was_auto_executed = True
        draft.tool_name = executed.action.tool_name
        draft.tool_params = executed.action.tool_params
        draft.tool_result = executed.result

    rec = record_action(db, draft)
    if rec.error:
        if executed is not None:
            db.rollback()
        res.errors.append(f"{scanner.label} task for {c.entity_type} {c.entity_id}: {rec.error}")
        return

    res.tasks_created += 1
    if executed is not None:
        res.auto_executed += 1


def run_all(db: Session, scanners: Sequence[Scanner], scope: ScanScope) -> ScanResult:
    total = ScanResult()
    for s in scanners:
        r = run_scanner(db, s, scope)
        total.tasks_created += r.tasks_created
        total.auto_executed += r.auto_executed
        total.errors.extend(r.errors)
    return total
