"""
db/models/timesheet_entry.py

Stored timesheet entries, one row per imported time record.
"""

from __future__ import annotations

import uuid
import datetime

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

NATURAL_KEY_CONSTRAINT = "uq_timesheet_entries_natural_key"


class TimesheetEntry(Base, TimestampMixin):
    __tablename__ = "timesheet_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    person_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    person_name: Mapped[str] = mapped_column(String(255), nullable=False)
    person_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    project_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_category: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="Other",
        comment="OPS, Internal, R&D, Guiding, PR, UX Maturity, Other",
    )
    activity_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    activity_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    hours: Mapped[float] = mapped_column(Numeric(10, 4, asdecimal=False), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    billable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    natural_key: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 of the normalized (person, date, project, activity, description, hours) key",
    )
    upload_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("upload_history.id", ondelete="CASCADE"),
        nullable=True,
    )
    source_row: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="1-based data row of the uploaded file",
    )

    __table_args__ = (
        UniqueConstraint("natural_key", name=NATURAL_KEY_CONSTRAINT),
        CheckConstraint("hours >= 0", name="ck_timesheet_entries_hours_non_negative"),
        Index("ix_timesheet_entries_date", "date"),
        Index("ix_timesheet_entries_person_name_date", "person_name", "date"),
        Index("ix_timesheet_entries_project_category", "project_category"),
        Index("ix_timesheet_entries_upload_id", "upload_id"),
    )
