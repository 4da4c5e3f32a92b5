"""add natural key unique constraint to timesheet_entries

Run ``python scripts/cleanup_duplicates.py`` before upgrading a database that
already holds duplicate entries; the constraint cannot be created otherwise.

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:30:00
"""

from __future__ import annotations

from alembic import op

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_unique_constraint(
        "uq_timesheet_entries_natural_key",
        "timesheet_entries",
        ["natural_key"],
    )


def downgrade() -> None:
    op.drop_constraint(
        "uq_timesheet_entries_natural_key",
        "timesheet_entries",
        type_="unique",
    )
