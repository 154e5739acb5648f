# backend/app/services/scanners/lease_expiry.py
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from app.models import Property, Tenancy, TenancyTenant
from app.services.task_ledger import TaskDraft
from .base import Candidate, ExecutedAction, ScanScope, Scanner, days_between, format_address

# (max days until lease end, priority, window label); first match wins.
LEASE_EXPIRY_WINDOWS = (
    (14, "urgent", "14 days"),
    (30, "high", "30 days"),
    (60, "normal", "60 days"),
)
LOOKAHEAD_DAYS = LEASE_EXPIRY_WINDOWS[-1][0]


def expiry_window(days_until_expiry: int) -> Optional[tuple[int, str, str]]:
    for w in LEASE_EXPIRY_WINDOWS:
        if days_until_expiry <= w[0]:
            return w
    return None


class LeaseExpiryScanner(Scanner):
    trigger_type = "lease_expiry"
    label = "Lease expiry"
    category = "lease_management"
    entity_type = "tenancy"

    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        today = scope.today
        horizon = today + timedelta(days=LOOKAHEAD_DAYS)

        rows = db.scalars(
            select(Tenancy)
            .join(Property, Property.id == Tenancy.property_id)
            .where(Tenancy.status == "active")
            .where(Property.owner_id == scope.user_id)
            .where(Property.id.in_(scope.property_ids))
            .where(Tenancy.lease_end_date.is_not(None))
            .where(Tenancy.lease_end_date >= today)
            .where(Tenancy.lease_end_date <= horizon)
            .options(
                joinedload(Tenancy.property),
                selectinload(Tenancy.tenants).joinedload(TenancyTenant.profile),
            )
            .order_by(Tenancy.lease_end_date.asc())
        ).all()

        out: list[Candidate] = []
        for t in rows:
            days = days_between(t.lease_end_date, today)
            window = expiry_window(days)
            if window is None:
                continue
            names = ", ".join(tt.profile.full_name for tt in t.tenants if tt.profile and tt.profile.full_name)
            out.append(
                Candidate(
                    entity_type=self.entity_type,
                    entity_id=str(t.id),
                    facts={
                        "property_id": str(t.property_id),
                        "address": format_address(t.property),
                        "tenant_names": names,
                        "lease_end_date": t.lease_end_date,
                        "days_until_expiry": days,
                        "priority": window[1],
                        "window_label": window[2],
                    },
                )
            )
        return out

    def describe(self, candidate: Candidate, scope: ScanScope, executed: Optional[ExecutedAction]) -> TaskDraft:
        f = candidate.facts
        days = f["days_until_expiry"]
        address = f["address"]
        names = f["tenant_names"]
        end_fmt = f["lease_end_date"].strftime("%d/%m/%Y")

        if days <= 14:
            rec = (
                f"Urgent: The lease expires in {days} days. Contact the tenant immediately to discuss renewal "
                f"or provide notice as required under the Residential Tenancies Act."
            )
        elif days <= 30:
            rec = (
                f"The lease expires in {days} days. Now is a good time to begin renewal discussions with "
                f"{names or 'the tenant'}. Consider whether you want to offer a new fixed term, allow the tenancy "
                f"to go periodic, or provide notice to vacate."
            )
        else:
            rec = (
                f"The lease expires in {days} days. You have time to plan ahead. Consider reviewing current "
                f"market rents and deciding on your preferred approach before reaching out to "
                f"{names or 'the tenant'}."
            )

        return self.draft(
            candidate,
            scope,
            title=f"Lease expiry in {days} days - {address}",
            description=(
                f"The lease for {names or 'tenant'} at {address} expires on {end_fmt}. "
                f"You should decide whether to renew, go periodic, or end the tenancy."
            ),
            status="pending_input",
            priority=f["priority"],
            recommendation=rec,
            deep_link=f"/(app)/(tabs)/properties/{f['property_id']}",
            action_taken=f"Created lease expiry warning task ({days} days remaining)",
            timeline=[
                self.entry(
                    scope,
                    f"Detected lease expiring on {end_fmt} ({days} days)",
                    "completed",
                    reasoning=f"Lease end date {end_fmt} falls within the {f['window_label']} warning window.",
                    data={
                        "lease_end_date": f["lease_end_date"].isoformat(),
                        "days_until_expiry": days,
                        "tenant_names": names,
                        "property_address": address,
                    },
                ),
                self.entry(scope, "Awaiting owner decision on lease renewal", "current"),
            ],
        )
