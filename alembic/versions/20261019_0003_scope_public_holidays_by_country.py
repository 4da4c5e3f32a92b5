"""scope public holiday uniqueness by country

Revision ID: 20261019_0003
Revises: 20261019_0002
Create Date: 2026-10-19 14:10:00
"""

from __future__ import annotations

from alembic import op

revision = "20261019_0003"
down_revision = "20261019_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.drop_constraint("public_holidays_holiday_date_key", "public_holidays", type_="unique")
    op.create_unique_constraint(
        "uq_public_holidays_country_date",
        "public_holidays",
        ["country_code", "holiday_date"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_public_holidays_country_date", "public_holidays", type_="unique")
    op.create_unique_constraint(
        "public_holidays_holiday_date_key",
        "public_holidays",
        ["holiday_date"],
    )
