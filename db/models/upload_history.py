"""
db/models/upload_history.py

One row per timesheet import call with its outcome counters.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import BigInteger, Date, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class UploadHistory(Base, TimestampMixin):
    __tablename__ = "upload_history"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    file_type: Mapped[str] = mapped_column(String(16), nullable=False, comment="csv, xlsx, xls")
    uploaded_by_email: Mapped[str] = mapped_column(String(320), nullable=False)
    uploaded_by_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duplicate_in_batch_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duplicate_existing_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data_date_from: Mapped[date | None] = mapped_column(Date, nullable=True)
    data_date_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="processing",
        comment="processing, completed, failed, partial",
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    validation_errors: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="Capped list of row errors recorded for this batch",
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_upload_history_created_at", "created_at"),
        Index("ix_upload_history_status", "status"),
    )
