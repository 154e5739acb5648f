# backend/app/services/scanners/inspections.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.domain.jurisdiction_defaults import DAYS_PER_MONTH, inspection_rule_for, normalize_state
from app.models import Inspection, Property, Tenancy
from app.services.task_ledger import TaskDraft
from .base import Candidate, ExecutedAction, ScanScope, Scanner, days_between, format_address

DONE_STATUSES = ("completed", "finalized")
HIGH_PRIORITY_OVERDUE_DAYS = 7


class OverdueInspectionScanner(Scanner):
    """Inspections whose scheduled date has passed while still 'scheduled'."""

    trigger_type = "overdue_inspection"
    label = "Overdue inspection"
    category = "inspections"
    entity_type = "inspection"

    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        today = scope.today
        rows = db.scalars(
            select(Inspection)
            .where(Inspection.status == "scheduled")
            .where(Inspection.property_id.in_(scope.property_ids))
            .where(Inspection.scheduled_date < today)
            .options(joinedload(Inspection.property))
            .order_by(Inspection.scheduled_date.asc())
        ).all()

        return [
            Candidate(
                entity_type=self.entity_type,
                entity_id=str(i.id),
                facts={
                    "address": format_address(i.property),
                    "inspection_type": i.inspection_type,
                    "scheduled_date": i.scheduled_date,
                    "overdue_days": days_between(today, i.scheduled_date),
                },
            )
            for i in rows
        ]

    def describe(self, candidate: Candidate, scope: ScanScope, executed: Optional[ExecutedAction]) -> TaskDraft:
        f = candidate.facts
        days = f["overdue_days"]
        kind = f["inspection_type"]
        sched = f["scheduled_date"].isoformat()
        address = f["address"]

        return self.draft(
            candidate,
            scope,
            title=f"Overdue inspection - {address}",
            description=(
                f"A {kind} inspection at {address} was scheduled for {sched} but hasn't been completed. "
                f"It is {days} day{'' if days == 1 else 's'} overdue."
            ),
            status="in_progress",
            priority="high" if days >= HIGH_PRIORITY_OVERDUE_DAYS else "normal",
            recommendation=(
                "This inspection is overdue. Options:\n"
                "1. Start the inspection now if you can visit the property\n"
                "2. Reschedule to a new date\n"
                "3. Cancel if no longer needed"
            ),
            deep_link=f"/(app)/inspections/{candidate.entity_id}",
            action_taken=f"Created overdue inspection task ({days} days overdue)",
            timeline=[
                self.entry(
                    scope,
                    f"Detected overdue {kind} inspection ({days} days past scheduled date)",
                    "completed",
                    reasoning=f"Inspection was scheduled for {sched} and is still in 'scheduled' status.",
                    data={"overdue_days": days, "inspection_type": kind},
                ),
                self.entry(scope, "Awaiting owner action to reschedule or complete", "current"),
            ],
        )


class RoutineInspectionDueScanner(Scanner):
    """
    Tenanted properties with no completed routine inspection inside the
    state's required interval, and nothing already booked.
    """

    trigger_type = "routine_inspection_due"
    label = "Routine inspection due"
    category = "inspections"
    entity_type = "property"

    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        today = scope.today
        props = db.scalars(
            select(Property)
            .where(Property.id.in_(scope.property_ids))
            .where(Property.deleted_at.is_(None))
            .order_by(Property.created_at.asc())
        ).all()

        out: list[Candidate] = []
        for p in props:
            already_booked = db.scalar(
                select(Inspection.id)
                .where(Inspection.property_id == p.id)
                .where(Inspection.inspection_type == "routine")
                .where(Inspection.status == "scheduled")
                .limit(1)
            )
            if already_booked is not None:
                continue

            # vacant properties are not inspected
            tenancy_id = db.scalar(
                select(Tenancy.id).where(Tenancy.property_id == p.id).where(Tenancy.status == "active").limit(1)
            )
            if tenancy_id is None:
                continue

            last = db.scalar(
                select(Inspection)
                .where(Inspection.property_id == p.id)
                .where(Inspection.inspection_type == "routine")
                .where(Inspection.status.in_(DONE_STATUSES))
                .order_by(Inspection.scheduled_date.desc())
                .limit(1)
            )

            rule = inspection_rule_for(p.state)
            last_date = last.scheduled_date if last is not None else None
            days_since = days_between(today, last_date) if last_date is not None else None
            if days_since is not None and days_since < rule.routine_interval_months * DAYS_PER_MONTH:
                continue

            out.append(
                Candidate(
                    entity_type=self.entity_type,
                    entity_id=str(p.id),
                    facts={
                        "address": format_address(p),
                        "state": normalize_state(p.state),
                        "interval_months": rule.routine_interval_months,
                        "notice_days": rule.notice_days,
                        "last_inspection_date": last_date,
                        "months_since": int(days_since // DAYS_PER_MONTH) if days_since is not None else None,
                    },
                )
            )
        return out

    def describe(self, candidate: Candidate, scope: ScanScope, executed: Optional[ExecutedAction]) -> TaskDraft:
        f = candidate.facts
        address = f["address"]
        state = f["state"]
        months = f["interval_months"]
        since = (
            f"{f['months_since']} months since last inspection"
            if f["months_since"] is not None
            else "No routine inspection on record"
        )
        last = f["last_inspection_date"]

        return self.draft(
            candidate,
            scope,
            title=f"Routine inspection due - {address}",
            description=(
                f"A routine inspection is due for {address}. {since}. "
                f"{state} requires routine inspections at least every {months} months."
            ),
            status="in_progress",
            priority="normal",
            recommendation=(
                f"Schedule a routine inspection for this property. Under {state} tenancy law, routine inspections "
                f"must be conducted at least every {months} months with {f['notice_days']} days written notice "
                f"to the tenant."
            ),
            deep_link=f"/(app)/inspections/schedule?property_id={candidate.entity_id}&type=routine",
            action_taken=f"Created routine inspection due task ({since})",
            timeline=[
                self.entry(
                    scope,
                    f"Detected routine inspection due for {address}",
                    "completed",
                    reasoning=f"{since}. {state} requires inspections every {months} months.",
                    data={
                        "state": state,
                        "interval_months": months,
                        "last_inspection_date": last.isoformat() if last is not None else None,
                    },
                ),
                self.entry(scope, "Awaiting scheduling", "current"),
            ],
        )
