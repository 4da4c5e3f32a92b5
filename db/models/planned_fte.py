"""
db/models/planned_fte.py

Effective-dated planned FTE targets per person.
"""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import BigInteger, CheckConstraint, Date, Index, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class PlannedFTE(Base, TimestampMixin):
    __tablename__ = "planned_fte"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    person_name: Mapped[str] = mapped_column(String(255), nullable=False)
    person_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    fte_value: Mapped[float] = mapped_column(Numeric(4, 2, asdecimal=False), nullable=False)
    valid_from: Mapped[date] = mapped_column(Date, nullable=False)
    valid_to: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Inclusive end date; NULL while the target is in effect",
    )

    __table_args__ = (
        UniqueConstraint("person_name", "valid_from", name="uq_planned_fte_person_valid_from"),
        CheckConstraint("fte_value >= 0 AND fte_value <= 2", name="ck_planned_fte_value_range"),
        CheckConstraint("valid_to IS NULL OR valid_to >= valid_from", name="ck_planned_fte_interval"),
        Index("ix_planned_fte_person_name", "person_name"),
    )
