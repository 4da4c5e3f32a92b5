"""
db/models/activity_keyword.py

Keyword rules used to categorize OPS activities.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class ActivityKeyword(Base, TimestampMixin):
    __tablename__ = "activity_keywords"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    category: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="OPS_Hiring, OPS_Jobs, OPS_Reviews, OPS_Guiding",
    )
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("category", "keyword", name="uq_activity_keywords_category_keyword"),
        Index("ix_activity_keywords_category", "category"),
    )
