"""
db/models/public_holiday.py

Public holidays excluded from business-day counts.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin

COUNTRY_DATE_CONSTRAINT = "uq_public_holidays_country_date"


class PublicHoliday(Base, CreatedAtMixin):
    __tablename__ = "public_holidays"
    __table_args__ = (
        UniqueConstraint("country_code", "holiday_date", name=COUNTRY_DATE_CONSTRAINT),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    holiday_date: Mapped[date] = mapped_column(Date, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False, default="CZ")
