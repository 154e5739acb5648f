# backend/app/services/heartbeat.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import AutonomySettings, Property
from app.services.scanners import DEFAULT_SCANNERS, ScanScope, Scanner, run_all

log = logging.getLogger("casa.heartbeat")


class HeartbeatError(RuntimeError):
    """The sweep could not start at all (e.g. the opted-in user list is unreadable)."""


@dataclass
class UserResult:
    tasks_created: int = 0
    actions_auto_executed: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class HeartbeatResult:
    processed: int = 0
    tasks_created: int = 0
    actions_auto_executed: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def list_opted_in_users(db: Session) -> list[str]:
    """Users with an autonomy settings row have engaged with the agent."""
    return [str(uid) for uid in db.scalars(select(AutonomySettings.user_id).order_by(AutonomySettings.created_at))]


def load_property_ids(db: Session, user_id: str) -> list[str]:
    return [
        str(pid)
        for pid in db.scalars(
            select(Property.id).where(Property.owner_id == user_id).where(Property.deleted_at.is_(None))
        )
    ]


def load_autonomy_settings(db: Session, user_id: str) -> Optional[AutonomySettings]:
    return db.scalar(select(AutonomySettings).where(AutonomySettings.user_id == user_id))


def process_user(
    db: Session,
    user_id: str,
    *,
    now: datetime,
    scanners: Sequence[Scanner] = DEFAULT_SCANNERS,
) -> UserResult:
    out = UserResult()

    try:
        property_ids = load_property_ids(db, user_id)
    except SQLAlchemyError as e:
        db.rollback()
        out.errors.append(f"Failed to load properties for user {user_id}: {e}")
        return out

    scope = ScanScope(
        user_id=user_id,
        property_ids=tuple(property_ids),
        autonomy=load_autonomy_settings(db, user_id),
        now=now,
    )

    res = run_all(db, scanners, scope)
    out.tasks_created = res.tasks_created
    out.actions_auto_executed = res.auto_executed
    out.errors = res.errors
    return out


def run_heartbeat(
    db: Session,
    target_user_id: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
    scanners: Optional[Sequence[Scanner]] = None,
) -> HeartbeatResult:
    """
    One sweep over every opted-in user (or exactly `target_user_id`).

    A failing user never aborts the batch: the exception becomes one
    "[user:<id>] ..." error and the next user proceeds.
    """
    now = now or datetime.utcnow()
    scanners = tuple(scanners) if scanners is not None else DEFAULT_SCANNERS

    if target_user_id:
        user_ids = [str(target_user_id)]
    else:
        try:
            user_ids = list_opted_in_users(db)
        except SQLAlchemyError as e:
            db.rollback()
            raise HeartbeatError(f"Failed to load users: {e}") from e

    log.info("agent heartbeat starting: processing %d user(s)", len(user_ids))

    result = HeartbeatResult()
    for uid in user_ids:
        try:
            ur = process_user(db, uid, now=now, scanners=scanners)
        except Exception as e:
            db.rollback()
            log.exception("error processing user %s", uid, extra={"user_id": uid})
            result.processed += 1
            result.errors.append(f"[user:{uid}] Unhandled error: {e}")
            continue

        result.processed += 1
        result.tasks_created += ur.tasks_created
        result.actions_auto_executed += ur.actions_auto_executed
        result.errors.extend(f"[user:{uid}] {err}" for err in ur.errors)

    log.info(
        "agent heartbeat complete: %d users, %d tasks created, %d auto-executed, %d errors",
        result.processed,
        result.tasks_created,
        result.actions_auto_executed,
        len(result.errors),
    )
    return result
