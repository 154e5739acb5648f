# backend/app/services/scanners/listings.py
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app.models import Application, Listing
from app.services.task_ledger import TaskDraft
from .base import Candidate, ExecutedAction, ScanScope, Scanner, format_address

STALE_AFTER = timedelta(days=7)
MIN_VIEWS = 10
HIGH_PRIORITY_AFTER_DAYS = 21


def is_stale(view_count: int, recent_applications: int) -> bool:
    # Both signals must be weak; a well-viewed listing is not stale.
    return (view_count or 0) < MIN_VIEWS and (recent_applications or 0) == 0


class StaleListingScanner(Scanner):
    trigger_type = "stale_listing"
    label = "Stale listing"
    category = "listings"
    entity_type = "listing"

    def detect(self, db: Session, scope: ScanScope) -> list[Candidate]:
        cutoff = scope.now - STALE_AFTER
        rows = db.scalars(
            select(Listing)
            .where(Listing.status == "active")
            .where(Listing.owner_id == scope.user_id)
            .where(Listing.property_id.in_(scope.property_ids))
            .where(Listing.published_at.is_not(None))
            .where(Listing.published_at < cutoff)
            .options(joinedload(Listing.property))
            .order_by(Listing.published_at.asc())
        ).all()

        out: list[Candidate] = []
        for listing in rows:
            recent = db.scalar(
                select(func.count(Application.id))
                .where(Application.listing_id == listing.id)
                .where(Application.created_at >= cutoff)
            ) or 0
            if not is_stale(listing.view_count, recent):
                continue

            days_live = int((scope.now - listing.published_at).total_seconds() // 86400)
            out.append(
                Candidate(
                    entity_type=self.entity_type,
                    entity_id=str(listing.id),
                    facts={
                        "property_id": str(listing.property_id),
                        "address": format_address(listing.property),
                        "suburb": listing.property.suburb if listing.property else None,
                        "title": listing.title,
                        "rent_amount": float(listing.rent_amount or 0),
                        "view_count": int(listing.view_count or 0),
                        "application_count": int(listing.application_count or 0),
                        "days_live": days_live,
                    },
                )
            )
        return out

    def describe(self, candidate: Candidate, scope: ScanScope, executed: Optional[ExecutedAction]) -> TaskDraft:
        f = candidate.facts
        days = f["days_live"]
        views = f["view_count"]
        address = f["address"]

        return self.draft(
            candidate,
            scope,
            title=f"Stale listing - {address}",
            description=(
                f'Your listing "{f["title"]}" at {address} has been live for {days} days with only {views} views '
                f"and {f['application_count']} total applications. No new applications in the last 7 days."
            ),
            status="in_progress",
            priority="high" if days >= HIGH_PRIORITY_AFTER_DAYS else "normal",
            recommendation=(
                "This listing is underperforming. Consider these improvements:\n"
                "1. Review the listing title and description for appeal\n"
                f"2. Check if the rent (${f['rent_amount']:.0f}/wk) is competitive for {f['suburb'] or 'the area'}\n"
                "3. Add more or better quality photos\n"
                "4. Ensure the listing is syndicated to Domain and REA portals\n"
                "5. Consider adjusting the rent down by 5-10% to attract more interest"
            ),
            deep_link=f"/(app)/(tabs)/properties/{f['property_id']}/listings/{candidate.entity_id}",
            action_taken=f"Created stale listing improvement task ({days} days, {views} views, 0 recent apps)",
            timeline=[
                self.entry(
                    scope,
                    f"Detected underperforming listing ({days} days live, {views} views)",
                    "completed",
                    reasoning=(
                        f"Listing published {days} days ago with {views} views and no applications in the last "
                        f"7 days. This is below expected engagement."
                    ),
                    data={
                        "days_since_published": days,
                        "view_count": views,
                        "application_count": f["application_count"],
                        "recent_applications": 0,
                        "rent_amount": f["rent_amount"],
                    },
                ),
                self.entry(scope, "Analysing listing performance and preparing recommendations", "current"),
            ],
        )
