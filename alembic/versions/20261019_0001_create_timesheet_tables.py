"""create timesheet tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "upload_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("file_type", sa.String(length=16), nullable=False),
        sa.Column("uploaded_by_email", sa.String(length=320), nullable=False),
        sa.Column("uploaded_by_name", sa.String(length=255), nullable=True),
        sa.Column("total_rows", sa.Integer(), nullable=False),
        sa.Column("successful_rows", sa.Integer(), nullable=False),
        sa.Column("failed_rows", sa.Integer(), nullable=False),
        sa.Column("skipped_rows", sa.Integer(), nullable=False),
        sa.Column("duplicate_in_batch_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("duplicate_existing_rows", sa.Integer(), server_default="0", nullable=False),
        sa.Column("data_date_from", sa.Date(), nullable=True),
        sa.Column("data_date_to", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("validation_errors", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_upload_history_created_at", "upload_history", ["created_at"], unique=False)
    op.create_index("ix_upload_history_status", "upload_history", ["status"], unique=False)

    op.create_table(
        "timesheet_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("person_id", sa.BigInteger(), nullable=False),
        sa.Column("person_name", sa.String(length=255), nullable=False),
        sa.Column("person_email", sa.String(length=320), nullable=True),
        sa.Column("project_id", sa.BigInteger(), nullable=False),
        sa.Column("project_name", sa.String(length=255), nullable=False),
        sa.Column("project_category", sa.String(length=64), nullable=False),
        sa.Column("activity_id", sa.BigInteger(), nullable=False),
        sa.Column("activity_name", sa.String(length=255), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("hours", sa.Numeric(precision=10, scale=4), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.Column("billable", sa.Boolean(), nullable=False),
        sa.Column("natural_key", sa.String(length=64), nullable=False),
        sa.Column("upload_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("source_row", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("hours >= 0", name="ck_timesheet_entries_hours_non_negative"),
        sa.ForeignKeyConstraint(["upload_id"], ["upload_history.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_timesheet_entries_date", "timesheet_entries", ["date"], unique=False)
    op.create_index(
        "ix_timesheet_entries_person_name_date",
        "timesheet_entries",
        ["person_name", "date"],
        unique=False,
    )
    op.create_index(
        "ix_timesheet_entries_project_category",
        "timesheet_entries",
        ["project_category"],
        unique=False,
    )
    op.create_index("ix_timesheet_entries_upload_id", "timesheet_entries", ["upload_id"], unique=False)

    op.create_table(
        "planned_fte",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("person_name", sa.String(length=255), nullable=False),
        sa.Column("person_id", sa.BigInteger(), nullable=True),
        sa.Column("fte_value", sa.Numeric(precision=4, scale=2), nullable=False),
        sa.Column("valid_from", sa.Date(), nullable=False),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("fte_value >= 0 AND fte_value <= 2", name="ck_planned_fte_value_range"),
        sa.CheckConstraint("valid_to IS NULL OR valid_to >= valid_from", name="ck_planned_fte_interval"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("person_name", "valid_from", name="uq_planned_fte_person_valid_from"),
    )
    op.create_index("ix_planned_fte_person_name", "planned_fte", ["person_name"], unique=False)

    op.create_table(
        "activity_keywords",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("keyword", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("category", "keyword", name="uq_activity_keywords_category_keyword"),
    )
    op.create_index("ix_activity_keywords_category", "activity_keywords", ["category"], unique=False)

    op.create_table(
        "public_holidays",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("holiday_date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("country_code", sa.String(length=2), server_default="CZ", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("holiday_date", name="public_holidays_holiday_date_key"),
    )


def downgrade() -> None:
    op.drop_table("public_holidays")
    op.drop_index("ix_activity_keywords_category", table_name="activity_keywords")
    op.drop_table("activity_keywords")
    op.drop_index("ix_planned_fte_person_name", table_name="planned_fte")
    op.drop_table("planned_fte")
    op.drop_index("ix_timesheet_entries_upload_id", table_name="timesheet_entries")
    op.drop_index("ix_timesheet_entries_project_category", table_name="timesheet_entries")
    op.drop_index("ix_timesheet_entries_person_name_date", table_name="timesheet_entries")
    op.drop_index("ix_timesheet_entries_date", table_name="timesheet_entries")
    op.drop_table("timesheet_entries")
    op.drop_index("ix_upload_history_status", table_name="upload_history")
    op.drop_index("ix_upload_history_created_at", table_name="upload_history")
    op.drop_table("upload_history")
