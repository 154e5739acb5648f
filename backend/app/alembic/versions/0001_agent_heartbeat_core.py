"""agent heartbeat core schema

Revision ID: 0001_agent_heartbeat_core
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_agent_heartbeat_core"
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _created_at():
    return sa.Column("created_at", sa.DateTime(), nullable=False)


def upgrade():
    op.create_table(
        "profiles",
        _id(),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("full_name", sa.String(length=200), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="owner"),
        _created_at(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])

    op.create_table(
        "properties",
        _id(),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("address_line_1", sa.String(length=255), nullable=False),
        sa.Column("suburb", sa.String(length=120), nullable=True),
        sa.Column("state", sa.String(length=8), nullable=True),
        sa.Column("postcode", sa.String(length=10), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])

    op.create_table(
        "tenancies",
        _id(),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("lease_start_date", sa.Date(), nullable=False),
        sa.Column("lease_end_date", sa.Date(), nullable=True),
        sa.Column("rent_amount", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("rent_frequency", sa.String(length=20), nullable=False, server_default="weekly"),
        sa.Column("is_periodic", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at(),
    )
    op.create_index("ix_tenancies_property_id", "tenancies", ["property_id"])

    op.create_table(
        "tenancy_tenants",
        _id(),
        sa.Column("tenancy_id", sa.String(length=36), sa.ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_tenancy_tenants_tenancy_id", "tenancy_tenants", ["tenancy_id"])
    op.create_index("ix_tenancy_tenants_tenant_id", "tenancy_tenants", ["tenant_id"])

    op.create_table(
        "arrears_records",
        _id(),
        sa.Column("tenancy_id", sa.String(length=36), sa.ForeignKey("tenancies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tenant_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("first_overdue_date", sa.Date(), nullable=False),
        sa.Column("total_overdue", sa.Float(), nullable=False),
        sa.Column("days_overdue", sa.Integer(), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False, server_default="minor"),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("resolved_at", sa.DateTime(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_arrears_records_tenancy_id", "arrears_records", ["tenancy_id"])
    op.create_index("ix_arrears_records_tenant_id", "arrears_records", ["tenant_id"])
    op.create_index("ix_arrears_records_created_at", "arrears_records", ["created_at"])

    op.create_table(
        "listings",
        _id(),
        sa.Column("owner_id", sa.String(length=36), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("rent_amount", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("rent_frequency", sa.String(length=20), nullable=False, server_default="weekly"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("application_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_listings_owner_id", "listings", ["owner_id"])
    op.create_index("ix_listings_property_id", "listings", ["property_id"])

    op.create_table(
        "applications",
        _id(),
        sa.Column("listing_id", sa.String(length=36), sa.ForeignKey("listings.id", ondelete="CASCADE"), nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("employment_type", sa.String(length=40), nullable=True),
        sa.Column("employer_name", sa.String(length=200), nullable=True),
        sa.Column("job_title", sa.String(length=200), nullable=True),
        sa.Column("annual_income", sa.Float(), nullable=True),
        sa.Column("move_in_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("submitted_at", sa.DateTime(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_applications_listing_id", "applications", ["listing_id"])

    op.create_table(
        "inspections",
        _id(),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("inspection_type", sa.String(length=20), nullable=False, server_default="routine"),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="scheduled"),
        _created_at(),
    )
    op.create_index("ix_inspections_property_id", "inspections", ["property_id"])

    op.create_table(
        "agent_tasks",
        _id(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="in_progress"),
        sa.Column("priority", sa.String(length=10), nullable=False, server_default="normal"),
        sa.Column("recommendation", sa.Text(), nullable=True),
        sa.Column("related_entity_type", sa.String(length=40), nullable=True),
        sa.Column("related_entity_id", sa.String(length=36), nullable=True),
        sa.Column("trigger_type", sa.String(length=60), nullable=True),
        sa.Column("deep_link", sa.String(length=500), nullable=True),
        sa.Column("timeline_json", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("manual_override", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("scheduled_at", sa.DateTime(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_agent_tasks_user_entity_trigger",
        "agent_tasks",
        ["user_id", "related_entity_id", "trigger_type"],
    )
    op.create_index("ix_agent_tasks_user_status", "agent_tasks", ["user_id", "status"])

    op.create_table(
        "agent_proactive_actions",
        _id(),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("trigger_type", sa.String(length=60), nullable=False),
        sa.Column("trigger_source", sa.String(length=120), nullable=True),
        sa.Column("action_taken", sa.Text(), nullable=False),
        sa.Column("tool_name", sa.String(length=80), nullable=True),
        sa.Column("tool_params_json", sa.Text(), nullable=True),
        sa.Column("result_json", sa.Text(), nullable=True),
        sa.Column("was_auto_executed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("task_id", sa.String(length=36), sa.ForeignKey("agent_tasks.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
    )
    op.create_index("ix_agent_proactive_user_created", "agent_proactive_actions", ["user_id", "created_at"])
    op.create_index("ix_agent_proactive_trigger_created", "agent_proactive_actions", ["trigger_type", "created_at"])
    op.create_index("ix_agent_proactive_actions_task_id", "agent_proactive_actions", ["task_id"])

    op.create_table(
        "agent_autonomy_settings",
        _id(),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("preset", sa.String(length=20), nullable=False, server_default="balanced"),
        sa.Column("category_overrides_json", sa.Text(), nullable=False, server_default="{}"),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "email_queue",
        _id(),
        sa.Column("to_email", sa.String(length=200), nullable=False),
        sa.Column("to_name", sa.String(length=200), nullable=True),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("template_name", sa.String(length=80), nullable=False),
        sa.Column("template_data_json", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_email_queue_status_created", "email_queue", ["status", "created_at"])


def downgrade():
    op.drop_table("email_queue")
    op.drop_table("agent_autonomy_settings")
    op.drop_table("agent_proactive_actions")
    op.drop_table("agent_tasks")
    op.drop_table("inspections")
    op.drop_table("applications")
    op.drop_table("listings")
    op.drop_table("arrears_records")
    op.drop_table("tenancy_tenants")
    op.drop_table("tenancies")
    op.drop_table("properties")
    op.drop_table("profiles")
