"""Baseline migration - residents, events, passes, visitors, issues and tasks

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Creates every portal table and seeds the five roles.
"""
import uuid
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ROLE_NAMES = ("RESIDENT", "SECURITY", "FACILITY_MANAGER", "ADMIN", "SUPERADMIN")

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _fk(name: str, target: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )


def upgrade() -> None:
    """Create portal tables."""

    # ==========================================================================
    # Residents and flats
    # ==========================================================================
    roles = op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.String(30), nullable=False, unique=True),
    )

    op.create_table(
        "flats",
        _id(),
        sa.Column("block", sa.Integer(), nullable=False),
        sa.Column("flat_number", sa.String(20), nullable=False),
        sa.UniqueConstraint("block", "flat_number", name="uq_flats_block_flat_number"),
    )

    op.create_table(
        "residents",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("block", sa.Integer(), nullable=False),
        sa.Column("flat_number", sa.String(20), nullable=False),
        sa.Column("resident_type", sa.String(10), nullable=False),
        sa.Column("google_image", sa.String(1024), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        _fk("role_id", "roles.id", ondelete="RESTRICT"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("idx_residents_block_flat", "residents", ["block", "flat_number"])
    op.create_index("idx_residents_role", "residents", ["role_id", "is_approved"])

    # ==========================================================================
    # Announcements and event configuration
    # ==========================================================================
    op.create_table(
        "announcements",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        _timestamp("date"),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("link", sa.String(1024), nullable=True),
        sa.Column("link_text", sa.String(255), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "idx_announcements_published_date", "announcements", ["published", "date"]
    )

    op.create_table(
        "event_configs",
        _id(),
        sa.Column(
            "announcement_id",
            sa.Uuid(),
            sa.ForeignKey("announcements.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("meal_type", sa.String(20), nullable=True),
        sa.Column("rsvp_deadline", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "menu_items",
        _id(),
        _fk("event_config_id", "event_configs.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price_per_plate", sa.Numeric(10, 2), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "custom_fields",
        _id(),
        _fk("event_config_id", "event_configs.id"),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("field_type", sa.String(20), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("options", JSON, nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    # ==========================================================================
    # RSVPs
    # ==========================================================================
    op.create_table(
        "rsvps",
        _id(),
        _fk("event_config_id", "event_configs.id"),
        _fk("resident_id", "residents.id"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("attended_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("event_config_id", "resident_id", name="uq_rsvps_event_resident"),
    )

    op.create_table(
        "rsvp_items",
        _id(),
        _fk("rsvp_id", "rsvps.id"),
        _fk("menu_item_id", "menu_items.id"),
        sa.Column("plates", sa.Integer(), nullable=False),
    )

    op.create_table(
        "rsvp_field_responses",
        _id(),
        _fk("rsvp_id", "rsvps.id"),
        _fk("custom_field_id", "custom_fields.id"),
        sa.Column("value", sa.Text(), nullable=False),
    )

    op.create_table(
        "guest_rsvps",
        _id(),
        _fk("event_config_id", "event_configs.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("block", sa.Integer(), nullable=False),
        sa.Column("flat_number", sa.String(20), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("attended", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("attended_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("event_config_id", "email", name="uq_guest_rsvps_event_email"),
    )

    op.create_table(
        "guest_rsvp_items",
        _id(),
        _fk("guest_rsvp_id", "guest_rsvps.id"),
        _fk("menu_item_id", "menu_items.id"),
        sa.Column("plates", sa.Integer(), nullable=False),
    )

    op.create_table(
        "guest_rsvp_field_responses",
        _id(),
        _fk("guest_rsvp_id", "guest_rsvps.id"),
        _fk("custom_field_id", "custom_fields.id"),
        sa.Column("value", sa.Text(), nullable=False),
    )

    # ==========================================================================
    # Sports registrations
    # ==========================================================================
    op.create_table(
        "sports_configs",
        _id(),
        sa.Column(
            "announcement_id",
            sa.Uuid(),
            sa.ForeignKey("announcements.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("registration_deadline", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "sport_items",
        _id(),
        _fk("sports_config_id", "sports_configs.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "sports_registrations",
        _id(),
        _fk("sports_config_id", "sports_configs.id"),
        _fk("resident_id", "residents.id"),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.UniqueConstraint(
            "sports_config_id", "resident_id", name="uq_sports_registrations_config_resident"
        ),
    )

    op.create_table(
        "participants",
        _id(),
        _fk("registration_id", "sports_registrations.id"),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("age_category", sa.String(10), nullable=False),
    )

    op.create_table(
        "participant_sports",
        _id(),
        _fk("participant_id", "participants.id"),
        _fk("sport_item_id", "sport_items.id"),
        sa.UniqueConstraint("participant_id", "sport_item_id", name="uq_participant_sports_pair"),
    )

    # ==========================================================================
    # Visitors, issues and tasks
    # ==========================================================================
    op.create_table(
        "visitors",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("vehicle_number", sa.String(30), nullable=True),
        sa.Column("visiting_block", sa.Integer(), nullable=False),
        sa.Column("visiting_flat", sa.String(20), nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="PENDING"),
        _fk("created_by_id", "residents.id", ondelete="SET NULL", nullable=True),
        _fk("decided_by_id", "residents.id", ondelete="SET NULL", nullable=True),
        _timestamp("decided_at", nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("idx_visitors_flat", "visitors", ["visiting_block", "visiting_flat"])
    op.create_index("idx_visitors_created", "visitors", ["created_at"])

    op.create_table(
        "issues",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("status", sa.String(10), nullable=False, server_default="OPEN"),
        _fk("resident_id", "residents.id"),
        sa.Column("closure_comment", sa.Text(), nullable=True),
        _fk("closed_by_id", "residents.id", ondelete="SET NULL", nullable=True),
        _timestamp("closed_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("idx_issues_resident", "issues", ["resident_id", "created_at"])
    op.create_index("idx_issues_status", "issues", ["status", "created_at"])

    op.create_table(
        "tasks",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("priority", sa.String(10), nullable=False, server_default="NORMAL"),
        sa.Column("status", sa.String(20), nullable=False, server_default="OPEN"),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=False),
        _timestamp("closed_at", nullable=True),
        _fk("owner_id", "residents.id", ondelete="RESTRICT"),
        _fk("created_by_id", "residents.id", ondelete="RESTRICT"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("idx_tasks_owner_status", "tasks", ["owner_id", "status"])
    op.create_index("idx_tasks_created", "tasks", ["created_at"])

    op.create_table(
        "task_comments",
        _id(),
        _fk("task_id", "tasks.id"),
        _fk("author_id", "residents.id", ondelete="RESTRICT"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("old_status", sa.String(20), nullable=True),
        sa.Column("new_status", sa.String(20), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("idx_task_comments_task", "task_comments", ["task_id", "created_at"])

    # ==========================================================================
    # Notifications
    # ==========================================================================
    op.create_table(
        "notifications",
        _id(),
        _fk("resident_id", "residents.id"),
        _fk("announcement_id", "announcements.id", nullable=True),
        _fk("visitor_id", "visitors.id", nullable=True),
        _fk("issue_id", "issues.id", nullable=True),
        _fk("task_id", "tasks.id", nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
        sa.UniqueConstraint(
            "resident_id", "announcement_id", name="uq_notifications_resident_announcement"
        ),
        sa.CheckConstraint(
            "(CASE WHEN announcement_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN visitor_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN issue_id IS NULL THEN 0 ELSE 1 END)"
            " + (CASE WHEN task_id IS NULL THEN 0 ELSE 1 END) = 1",
            name="ck_notifications_single_target",
        ),
    )
    op.create_index(
        "idx_notif_resident_unread", "notifications", ["resident_id", "read", "created_at"]
    )

    # ==========================================================================
    # Seed roles
    # ==========================================================================
    op.bulk_insert(roles, [{"id": uuid.uuid4(), "name": name} for name in ROLE_NAMES])


def downgrade() -> None:
    """Drop all portal tables."""
    for table in (
        "notifications",
        "task_comments",
        "tasks",
        "issues",
        "visitors",
        "participant_sports",
        "participants",
        "sports_registrations",
        "sport_items",
        "sports_configs",
        "guest_rsvp_field_responses",
        "guest_rsvp_items",
        "guest_rsvps",
        "rsvp_field_responses",
        "rsvp_items",
        "rsvps",
        "custom_fields",
        "menu_items",
        "event_configs",
        "announcements",
        "residents",
        "flats",
        "roles",
    ):
        op.drop_table(table)
