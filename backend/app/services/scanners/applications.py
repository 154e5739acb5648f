# backend/app/services/scanners/applications.py
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.models import Application, Listing
from app.services.task_ledger import TaskDraft
from .base import Candidate, ExecutedAction, ScanScope, Scanner, format_address

LOOKBACK = timedelta(hours=24)

# Minimum annual income / annual rent for a "strong" applicant.
INCOME_TO_RENT_CUTOFF = 2.5

RENT_PERIODS_PER_YEAR = {
    "weekly": 52,
    "fortnightly": 26,
    "monthly": 12,
}


def annual_rent(rent_amount: float, rent_frequency: Optional[str]) -> float:
    periods = RENT_PERIODS_PER_YEAR.get((rent_frequency or "weekly").strip().lower(), 52)
    return float(rent_amount or 0) * periods


def income_to_rent_ratio(annual_income: float, rent_amount: float, rent_frequency: Optional[str]) -> Optional[float]:
    yearly = annual_rent(rent_amount, rent_frequency)
    if yearly <= 0 or not annual_income or annual_income <= 0:
        return None
    return float(annual_income) / yearly


class NewApplicationScanner(Scanner):
    trigger_type = "new_application"
    label = "New application"
    category = "tenant_finding"
    entity_type = "application"

    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        since = scope.now - LOOKBACK
        rows = db.scalars(
            select(Application)
            .join(Listing, Listing.id == Application.listing_id)
            .where(Application.status == "submitted")
            .where(Listing.owner_id == scope.user_id)
            .where(Listing.property_id.in_(scope.property_ids))
            .where(Application.submitted_at >= since)
            .options(joinedload(Application.listing).joinedload(Listing.property))
            .order_by(Application.submitted_at.asc())
        ).all()

        out: list[Candidate] = []
        for app in rows:
            listing = app.listing
            income = float(app.annual_income or 0)
            ratio = income_to_rent_ratio(income, listing.rent_amount, listing.rent_frequency)
            out.append(
                Candidate(
                    entity_type=self.entity_type,
                    entity_id=str(app.id),
                    facts={
                        "property_id": str(listing.property_id),
                        "address": format_address(listing.property),
                        "listing_title": listing.title,
                        "applicant_name": app.full_name,
                        "job_title": app.job_title or "N/A",
                        "employer_name": app.employer_name or "N/A",
                        "annual_income": income,
                        "ratio": ratio,
                        "move_in_date": app.move_in_date.isoformat() if app.move_in_date else None,
                        "submitted_at": app.submitted_at,
                    },
                )
            )
        return out

    def describe(self, candidate: Candidate, scope: ScanScope, executed: Optional[ExecutedAction]) -> TaskDraft:
        f = candidate.facts
        name = f["applicant_name"]
        address = f["address"]
        ratio: Optional[float] = f["ratio"]
        ratio_str = f"{ratio:.1f}x" if ratio is not None else "unknown"
        employment = f"{f['job_title']} at {f['employer_name']}"

        if ratio is None:
            rec = (
                f"{name} has submitted an application. Review their details and decide whether to shortlist, "
                f"request more information, or reject."
            )
        elif ratio >= INCOME_TO_RENT_CUTOFF:
            rec = (
                f"{name} appears to be a strong applicant with an income-to-rent ratio of {ratio_str} "
                f"(recommended minimum is {INCOME_TO_RENT_CUTOFF}x). Consider reviewing their references and "
                f"running a background check before shortlisting."
            )
        else:
            rec = (
                f"{name} has an income-to-rent ratio of {ratio_str}, which is below the recommended "
                f"{INCOME_TO_RENT_CUTOFF}x threshold. Review carefully and consider requesting a guarantor or "
                f"additional documentation."
            )

        return self.draft(
            candidate,
            scope,
            title=f"New application - {name} for {address}",
            description=(
                f"{name} has applied for {address} ({f['listing_title'] or 'listing'}). They work as {employment} "
                f"with an annual income of ${f['annual_income']:,.0f}. Income-to-rent ratio: {ratio_str}."
            ),
            status="pending_input",
            priority="high",
            recommendation=rec,
            deep_link=f"/(app)/(tabs)/properties/{f['property_id']}/applications/{candidate.entity_id}",
            action_taken=f"Created new application review task for {name}",
            timeline=[
                self.entry(
                    scope,
                    f"Application received from {name}",
                    "completed",
                    timestamp=f["submitted_at"] or scope.now,
                    reasoning=f'New application submitted for listing "{f["listing_title"] or "Unknown"}" at {address}.',
                    data={
                        "applicant_name": name,
                        "employment": employment,
                        "annual_income": f["annual_income"],
                        "income_to_rent_ratio": ratio_str,
                        "move_in_date": f["move_in_date"],
                    },
                ),
                self.entry(scope, "Awaiting owner review", "current"),
            ],
        )
