# backend/tests/conftest.py
from __future__ import annotations

import json
import os
import tempfile
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

# Configure the environment BEFORE importing app (settings are read at import).
_TMP_DIR = tempfile.mkdtemp(prefix="casa-heartbeat-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["APP_ENV"] = "test"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["LOG_LEVEL"] = "WARNING"

from app import models  # noqa: E402,F401
from app.db import Base, SessionLocal, engine  # noqa: E402
from app.models import (  # noqa: E402
    Application,
    ArrearsRecord,
    AutonomySettings,
    Inspection,
    Listing,
    Profile,
    Property,
    Tenancy,
    TenancyTenant,
)


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


class Factory:
    """Small builders for portfolio rows. Every helper commits."""

    def __init__(self, db):
        self.db = db

    def _save(self, row):
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def profile(self, *, email: Optional[str] = None, full_name: str = "Owner", role: str = "owner") -> Profile:
        return self._save(Profile(email=email, full_name=full_name, role=role))

    def owner(
        self,
        *,
        preset: Optional[str] = "balanced",
        overrides: Optional[dict] = None,
        created_at: Optional[datetime] = None,
        full_name: str = "Owner",
    ) -> Profile:
        """An owner who has opted in (has an autonomy settings row) unless preset is None."""
        p = self.profile(full_name=full_name, email=f"{full_name.lower().replace(' ', '.')}@owner.test")
        if preset is not None:
            self._save(
                AutonomySettings(
                    user_id=p.id,
                    preset=preset,
                    category_overrides_json=json.dumps(overrides or {}),
                    created_at=created_at or datetime.utcnow(),
                )
            )
        return p

    def property(self, owner: Profile, *, state: str = "NSW", address: str = "12 Smith St", **kw) -> Property:
        return self._save(
            Property(owner_id=owner.id, address_line_1=address, suburb=kw.pop("suburb", "Newtown"), state=state, **kw)
        )

    def tenancy(
        self,
        prop: Property,
        *,
        lease_end_date: Optional[date] = None,
        status: str = "active",
        rent_amount: float = 550.0,
        tenant: Optional[Profile] = None,
    ) -> Tenancy:
        t = self._save(
            Tenancy(
                property_id=prop.id,
                status=status,
                lease_start_date=date(2025, 1, 1),
                lease_end_date=lease_end_date,
                rent_amount=rent_amount,
            )
        )
        if tenant is not None:
            self._save(TenancyTenant(tenancy_id=t.id, tenant_id=tenant.id, is_primary=True))
        return t

    def arrears(
        self,
        tenancy: Tenancy,
        tenant: Profile,
        *,
        total_overdue: float = 200.0,
        days_overdue: int = 10,
        created_at: datetime,
    ) -> ArrearsRecord:
        return self._save(
            ArrearsRecord(
                tenancy_id=tenancy.id,
                tenant_id=tenant.id,
                first_overdue_date=created_at.date() - timedelta(days=days_overdue),
                total_overdue=total_overdue,
                days_overdue=days_overdue,
                created_at=created_at,
            )
        )

    def listing(
        self,
        owner: Profile,
        prop: Property,
        *,
        published_at: Optional[datetime] = None,
        view_count: int = 0,
        rent_amount: float = 500.0,
        rent_frequency: str = "weekly",
        status: str = "active",
    ) -> Listing:
        return self._save(
            Listing(
                owner_id=owner.id,
                property_id=prop.id,
                title="Sunny 2br terrace",
                rent_amount=rent_amount,
                rent_frequency=rent_frequency,
                view_count=view_count,
                status=status,
                published_at=published_at,
            )
        )

    def application(
        self,
        listing: Listing,
        *,
        annual_income: Optional[float] = 90000.0,
        submitted_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        status: str = "submitted",
        full_name: str = "Jamie Applicant",
    ) -> Application:
        return self._save(
            Application(
                listing_id=listing.id,
                full_name=full_name,
                email="jamie@applicant.test",
                employer_name="Acme",
                job_title="Engineer",
                annual_income=annual_income,
                status=status,
                submitted_at=submitted_at,
                created_at=created_at or submitted_at or datetime.utcnow(),
            )
        )

    def inspection(
        self,
        prop: Property,
        *,
        scheduled_date: date,
        status: str = "scheduled",
        inspection_type: str = "routine",
    ) -> Inspection:
        return self._save(
            Inspection(
                property_id=prop.id,
                inspection_type=inspection_type,
                scheduled_date=scheduled_date,
                status=status,
            )
        )


@pytest.fixture
def make(db):
    return Factory(db)
