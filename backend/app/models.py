# backend/app/models.py
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


# -----------------------------
# Identity
# -----------------------------
class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="owner")  # owner|tenant|admin

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Portfolio (read-only to the heartbeat)
# -----------------------------
class Property(Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)

    address_line_1: Mapped[str] = mapped_column(String(255), nullable=False)
    suburb: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    postcode: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    tenancies: Mapped[List["Tenancy"]] = relationship(back_populates="property")
    listings: Mapped[List["Listing"]] = relationship(back_populates="property")
    inspections: Mapped[List["Inspection"]] = relationship(back_populates="property")


class Tenancy(Base):
    __tablename__ = "tenancies"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")  # pending|active|ending|ended
    lease_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rent_frequency: Mapped[str] = mapped_column(String(20), nullable=False, default="weekly")
    is_periodic: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="tenancies")
    tenants: Mapped[List["TenancyTenant"]] = relationship(back_populates="tenancy", cascade="all, delete-orphan")


class TenancyTenant(Base):
    __tablename__ = "tenancy_tenants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenancy_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    tenancy: Mapped["Tenancy"] = relationship(back_populates="tenants")
    profile: Mapped["Profile"] = relationship()


class ArrearsRecord(Base):
    __tablename__ = "arrears_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenancy_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)

    first_overdue_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_overdue: Mapped[float] = mapped_column(Float, nullable=False)
    days_overdue: Mapped[int] = mapped_column(Integer, nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="minor")

    is_resolved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    tenancy: Mapped["Tenancy"] = relationship()
    tenant: Mapped["Profile"] = relationship()


class Listing(Base):
    __tablename__ = "listings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    owner_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rent_frequency: Mapped[str] = mapped_column(String(20), nullable=False, default="weekly")
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    application_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")  # draft|active|paused|closed
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="listings")
    applications: Mapped[List["Application"]] = relationship(back_populates="listing")


class Application(Base):
    __tablename__ = "applications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    listing_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    employment_type: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    employer_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    job_title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    annual_income: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    move_in_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")  # draft|submitted|shortlisted|...
    submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    listing: Mapped["Listing"] = relationship(back_populates="applications")


class Inspection(Base):
    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    property_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    inspection_type: Mapped[str] = mapped_column(String(20), nullable=False, default="routine")  # routine|entry|exit
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="scheduled"
    )  # scheduled|in_progress|completed|finalized|cancelled

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    property: Mapped["Property"] = relationship(back_populates="inspections")


# -----------------------------
# Agent ledger
# -----------------------------
class AgentTask(Base):
    __tablename__ = "agent_tasks"
    __table_args__ = (
        Index("ix_agent_tasks_user_entity_trigger", "user_id", "related_entity_id", "trigger_type"),
        Index("ix_agent_tasks_user_status", "user_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="in_progress"
    )  # pending_input|in_progress|scheduled|paused|completed|cancelled
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="normal")  # urgent|high|normal|low
    recommendation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    related_entity_type: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    related_entity_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    # Set by scanners; NULL for tasks created by hand.
    trigger_type: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    deep_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    timeline_json: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    manual_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class ProactiveAction(Base):
    __tablename__ = "agent_proactive_actions"
    __table_args__ = (
        Index("ix_agent_proactive_user_created", "user_id", "created_at"),
        Index("ix_agent_proactive_trigger_created", "trigger_type", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)

    trigger_type: Mapped[str] = mapped_column(String(60), nullable=False)
    trigger_source: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)  # "<kind>:<id>"
    action_taken: Mapped[str] = mapped_column(Text, nullable=False)

    tool_name: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    tool_params_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    result_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    was_auto_executed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    task_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("agent_tasks.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class AutonomySettings(Base):
    __tablename__ = "agent_autonomy_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    preset: Mapped[str] = mapped_column(String(20), nullable=False, default="balanced")  # cautious|balanced|hands_off|custom
    # {"messages": "L3", "rent_collection": "L1", ...}
    category_overrides_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class EmailQueue(Base):
    __tablename__ = "email_queue"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    to_email: Mapped[str] = mapped_column(String(200), nullable=False)
    to_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    template_name: Mapped[str] = mapped_column(String(80), nullable=False)
    template_data_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")  # pending|processing|sent|failed
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
