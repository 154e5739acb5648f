# backend/app/services/task_ledger.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import AgentTask, ProactiveAction

log = logging.getLogger("casa.heartbeat.ledger")

OPEN_TASK_STATUSES = ("pending_input", "in_progress", "scheduled", "paused")
TERMINAL_TASK_STATUSES = ("completed", "cancelled")


def _iso_utc(ts: datetime) -> str:
    # Naive values are UTC (datetime.utcnow throughout).
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def _dumps(v: Any) -> Optional[str]:
    if v is None:
        return None
    return json.dumps(v, ensure_ascii=False, default=str)


@dataclass(frozen=True)
class TimelineEntry:
    timestamp: datetime
    action: str
    status: str  # completed|current|pending
    reasoning: Optional[str] = None
    data: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "timestamp": _iso_utc(self.timestamp),
            "action": self.action,
            "status": self.status,
        }
        if self.reasoning is not None:
            out["reasoning"] = self.reasoning
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass
class TaskDraft:
    """Everything needed to write one AgentTask + its paired ProactiveAction."""

    user_id: str
    title: str
    description: str
    category: str
    status: str
    priority: str
    recommendation: str
    related_entity_type: str
    related_entity_id: str
    trigger_type: str
    action_taken: str
    deep_link: Optional[str] = None
    was_auto_executed: bool = False
    tool_name: Optional[str] = None
    tool_params: Optional[dict[str, Any]] = None
    tool_result: Optional[dict[str, Any]] = None
    timeline: list[TimelineEntry] = field(default_factory=list)

    @property
    def trigger_source(self) -> str:
        return f"{self.related_entity_type}:{self.related_entity_id}"


@dataclass(frozen=True)
class RecordResult:
    task_id: Optional[str]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.task_id is not None and self.error is None


def has_open_action(db: Session, *, user_id: str, related_entity_id: str, trigger_type: str) -> bool:
    """
    True if the user already has a non-terminal task raised by `trigger_type`
    for this entity. Hand-made tasks (trigger_type NULL) never match.
    """
    row = db.scalar(
        select(AgentTask.id)
        .where(AgentTask.user_id == user_id)
        .where(AgentTask.related_entity_id == str(related_entity_id))
        .where(AgentTask.trigger_type == trigger_type)
        .where(AgentTask.status.in_(OPEN_TASK_STATUSES))
        .limit(1)
    )
    return row is not None


def record_action(db: Session, draft: TaskDraft) -> RecordResult:
    """
    Two independent writes:
      1) the task (primary; failure is returned to the caller)
      2) the audit row (best-effort; failure is logged, the task stays)
    """
    task = AgentTask(
        user_id=draft.user_id,
        title=draft.title,
        description=draft.description,
        category=draft.category,
        status=draft.status,
        priority=draft.priority,
        recommendation=draft.recommendation,
        related_entity_type=draft.related_entity_type,
        related_entity_id=str(draft.related_entity_id),
        trigger_type=draft.trigger_type,
        deep_link=draft.deep_link or None,
        timeline_json=_dumps([e.to_dict() for e in draft.timeline]) or "[]",
    )
    try:
        db.add(task)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        return RecordResult(task_id=None, error=str(e) or "Failed to create task")

    task_id = str(task.id)

    try:
        db.add(
            ProactiveAction(
                user_id=draft.user_id,
                trigger_type=draft.trigger_type,
                trigger_source=draft.trigger_source,
                action_taken=draft.action_taken,
                tool_name=draft.tool_name,
                tool_params_json=_dumps(draft.tool_params),
                result_json=_dumps(draft.tool_result),
                was_auto_executed=bool(draft.was_auto_executed),
                task_id=task_id,
            )
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        log.error(
            "failed to log proactive action for user %s: %s",
            draft.user_id,
            e,
            extra={"user_id": draft.user_id, "trigger_type": draft.trigger_type, "task_id": task_id},
        )

    return RecordResult(task_id=task_id)


def load_timeline(task: AgentTask) -> list[dict[str, Any]]:
    try:
        v = json.loads(task.timeline_json or "[]")
    except (TypeError, ValueError):
        return []
    return v if isinstance(v, list) else []
