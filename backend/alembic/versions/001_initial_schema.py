"""Initial schema — users, church settings, gatherings, people, attendance, bookkeeping.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="attendance_taker"),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("default_gathering_id", sa.Integer, nullable=True),
        _created_at(),
    )

    op.create_table(
        "church_settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, unique=True),
        sa.Column("church_name", sa.String(255), nullable=False),
        sa.Column("country_code", sa.String(2), nullable=False, server_default="AU"),
        sa.Column("timezone", sa.String(50), nullable=False, server_default="America/New_York"),
        sa.Column("email_from_name", sa.String(255), nullable=True),
        sa.Column("email_from_address", sa.String(255), nullable=True),
        sa.Column("onboarding_completed", sa.Boolean, nullable=False, server_default=sa.false()),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "gathering_types",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("day_of_week", sa.String(10), nullable=True),
        sa.Column("start_time", sa.String(8), nullable=True),
        sa.Column("end_time", sa.String(8), nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=True, server_default="90"),
        sa.Column("frequency", sa.String(10), nullable=True),
        sa.Column("attendance_type", sa.String(10), nullable=False, server_default="standard"),
        sa.Column("custom_schedule", sa.JSON, nullable=True),
        sa.Column("group_by_family", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("kiosk_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("kiosk_end_time", sa.String(8), nullable=True),
        sa.Column("kiosk_message", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
    )

    op.create_table(
        "user_gathering_assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("gathering_type_id", sa.Integer, sa.ForeignKey("gathering_types.id", ondelete="CASCADE"), nullable=False),
        sa.Column("assigned_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at("assigned_at"),
        sa.UniqueConstraint("user_id", "gathering_type_id", name="unique_user_gathering"),
    )

    op.create_table(
        "families",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("family_name", sa.String(255), nullable=False, index=True),
        sa.Column("family_identifier", sa.String(255), nullable=True),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
    )

    op.create_table(
        "individuals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("family_id", sa.Integer, sa.ForeignKey("families.id", ondelete="SET NULL"), nullable=True),
        sa.Column("people_type", sa.String(20), nullable=False, server_default="regular"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
    )

    op.create_table(
        "gathering_lists",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("gathering_type_id", sa.Integer, sa.ForeignKey("gathering_types.id", ondelete="CASCADE"), nullable=False),
        sa.Column("individual_id", sa.Integer, sa.ForeignKey("individuals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("added_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at("added_at"),
        sa.UniqueConstraint("gathering_type_id", "individual_id", name="unique_gathering_individual"),
    )

    op.create_table(
        "attendance_sessions",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("gathering_type_id", sa.Integer, sa.ForeignKey("gathering_types.id", ondelete="CASCADE"), nullable=False),
        sa.Column("session_date", sa.Date, nullable=False, index=True),
        sa.Column("created_by", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
        _created_at("updated_at"),
        sa.UniqueConstraint("gathering_type_id", "session_date", name="unique_session"),
    )

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("session_id", sa.Integer, sa.ForeignKey("attendance_sessions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("individual_id", sa.Integer, sa.ForeignKey("individuals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("present", sa.Boolean, nullable=False, server_default=sa.true()),
        _created_at(),
        sa.UniqueConstraint("session_id", "individual_id", name="unique_session_individual"),
    )

    op.create_table(
        "onboarding_progress",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=False, index=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("current_step", sa.Integer, nullable=False, server_default="1"),
        sa.Column("church_info", sa.JSON, nullable=True),
        sa.Column("gatherings", sa.JSON, nullable=True),
        sa.Column("csv_upload", sa.JSON, nullable=True),
        sa.Column("completed_steps", sa.JSON, nullable=False),
        _created_at(),
        _created_at("updated_at"),
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("church_id", sa.String(36), nullable=True, index=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column("entity_id", sa.Integer, nullable=True),
        sa.Column("new_values", sa.JSON, nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        _created_at(),
    )

    op.create_table(
        "migrations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("version", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _created_at("executed_at"),
        sa.Column("execution_time_ms", sa.Integer, nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="success"),
        sa.Column("error_message", sa.Text, nullable=True),
    )


def downgrade() -> None:
    for table in (
        "migrations", "audit_log", "onboarding_progress", "attendance_records",
        "attendance_sessions", "gathering_lists", "individuals", "families",
        "user_gathering_assignments", "gathering_types", "church_settings", "users",
    ):
        op.drop_table(table)
