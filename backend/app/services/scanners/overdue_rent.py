# backend/app/services/scanners/overdue_rent.py
from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.domain.autonomy import AUTO_EXECUTE_THRESHOLD, resolve_level
from app.models import ArrearsRecord, Property, Tenancy
from app.services.email_queue import queue_rent_reminder
from app.services.task_ledger import TaskDraft
from .base import AutoAction, Candidate, ExecutedAction, ScanScope, Scanner, format_address, money

LOOKBACK = timedelta(hours=24)
AUTONOMY_CATEGORY = "rent_collection"


def overdue_priority(days_overdue: int) -> str:
    if days_overdue >= 14:
        return "urgent"
    if days_overdue >= 7:
        return "high"
    return "normal"


class OverdueRentScanner(Scanner):
    """New arrears (created in the last 24h). Sends a reminder on its own at L2+."""

    trigger_type = "overdue_rent"
    label = "Overdue rent"
    category = "rent_collection"
    entity_type = "arrears_record"

    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        since = scope.now - LOOKBACK
        rows = db.scalars(
            select(ArrearsRecord)
            .join(Tenancy, Tenancy.id == ArrearsRecord.tenancy_id)
            .join(Property, Property.id == Tenancy.property_id)
            .where(ArrearsRecord.is_resolved.is_(False))
            .where(Property.owner_id == scope.user_id)
            .where(Property.id.in_(scope.property_ids))
            .where(ArrearsRecord.created_at >= since)
            .options(
                joinedload(ArrearsRecord.tenancy).joinedload(Tenancy.property),
                joinedload(ArrearsRecord.tenant),
            )
            .order_by(ArrearsRecord.created_at.asc())
        ).all()

        out: list[Candidate] = []
        for a in rows:
            tenant = a.tenant
            out.append(
                Candidate(
                    entity_type=self.entity_type,
                    entity_id=str(a.id),
                    facts={
                        "tenancy_id": str(a.tenancy_id),
                        "property_id": str(a.tenancy.property_id),
                        "address": format_address(a.tenancy.property),
                        "tenant_name": (tenant.full_name if tenant else None) or "Tenant",
                        "tenant_email": (tenant.email if tenant else None) or None,
                        "total_overdue": float(a.total_overdue or 0),
                        "days_overdue": int(a.days_overdue or 0),
                    },
                )
            )
        return out

    def decide(self, db: Session, candidate: Candidate, scope: ScanScope) -> Optional[AutoAction]:
        level = resolve_level(scope.autonomy, AUTONOMY_CATEGORY)
        f = candidate.facts
        email = f["tenant_email"]
        if level < AUTO_EXECUTE_THRESHOLD or not email:
            return None

        def perform(session: Session) -> dict[str, Any]:
            row = queue_rent_reminder(
                session,
                to_email=email,
                tenant_name=f["tenant_name"],
                property_address=f["address"],
                amount=money(f["total_overdue"]),
            )
            return {"status": "email_queued", "email_id": str(row.id)}

        return AutoAction(
            tool_name="send_rent_reminder",
            tool_params={
                "tenancy_id": f["tenancy_id"],
                "tenant_email": email,
                "amount": f["total_overdue"],
            },
            level=level,
            perform=perform,
        )

    def describe(self, candidate: Candidate, scope: ScanScope, executed: Optional[ExecutedAction]) -> TaskDraft:
        f = candidate.facts
        name = f["tenant_name"]
        address = f["address"]
        amount = money(f["total_overdue"])
        days = f["days_overdue"]
        level = resolve_level(scope.autonomy, AUTONOMY_CATEGORY)
        detected = f"Detected {amount} overdue rent ({days} days)"
        common = dict(
            title=f"Overdue rent - {name} at {address}",
            priority=overdue_priority(days),
            deep_link=f"/(app)/(tabs)/properties/{f['property_id']}",
        )

        if executed is not None:
            return self.draft(
                candidate,
                scope,
                description=f"{name} has {amount} in overdue rent at {address}. A reminder has been automatically sent.",
                status="in_progress",
                recommendation=(
                    f"A rent reminder has been sent to {name} at {f['tenant_email']}. If payment is not received "
                    f"within 7 days, consider escalating with a formal breach notice as per the Residential "
                    f"Tenancies Act."
                ),
                action_taken=(
                    f"Auto-sent rent reminder to {name} ({f['tenant_email']}) for {amount} overdue at {address}"
                ),
                timeline=[
                    self.entry(
                        scope,
                        detected,
                        "completed",
                        reasoning=(
                            f"Arrears record created within the last 24 hours. Owner autonomy for rent_collection "
                            f"is L{level} (>= L{AUTO_EXECUTE_THRESHOLD}), so a reminder was auto-sent."
                        ),
                        data={
                            "total_overdue": f["total_overdue"],
                            "days_overdue": days,
                            "tenant_name": name,
                            "tenant_email": f["tenant_email"],
                        },
                    ),
                    self.entry(scope, f"Sent payment reminder to {name}", "completed"),
                    self.entry(scope, "Monitoring for payment", "current"),
                ],
                **common,
            )

        if level < AUTO_EXECUTE_THRESHOLD:
            why = (
                f"Owner autonomy for rent_collection is L{level} (< L{AUTO_EXECUTE_THRESHOLD}), "
                f"so owner approval is required before sending a reminder."
            )
        elif not f["tenant_email"]:
            why = "The tenant has no email address on file, so a reminder could not be sent automatically."
        else:
            why = "The reminder could not be queued automatically, so owner input is required."

        return self.draft(
            candidate,
            scope,
            description=(
                f"{name} has {amount} in overdue rent at {address} ({days} days overdue). "
                f"Your input is needed on next steps."
            ),
            status="pending_input",
            recommendation=(
                f"{name} owes {amount} in overdue rent. I recommend sending a friendly payment reminder. "
                f"If you approve, I can send it immediately. You can also choose to call the tenant directly "
                f"or issue a formal breach notice."
            ),
            action_taken=f"Created overdue rent task (awaiting owner input, autonomy L{level})",
            timeline=[
                self.entry(
                    scope,
                    detected,
                    "completed",
                    reasoning=f"Arrears record created within the last 24 hours. {why}",
                    data={"total_overdue": f["total_overdue"], "days_overdue": days, "tenant_name": name},
                ),
                self.entry(scope, "Awaiting owner decision on next steps", "current"),
            ],
            **common,
        )
