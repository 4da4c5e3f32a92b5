"""
app/repositories/activity_keyword_repository.py

Access to the keyword rules that drive activity categorization.
"""

from __future__ import annotations

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.stores import EntryStoreError
from app.services.activity_categorizer import KeywordRule
from db.models.activity_keyword import ActivityKeyword


class ActivityKeywordRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def list_rules(self, *, active_only: bool = True) -> list[KeywordRule]:
        stmt: Select[tuple[ActivityKeyword]] = select(ActivityKeyword)
        if active_only:
            stmt = stmt.where(ActivityKeyword.is_active.is_(True))
        stmt = stmt.order_by(ActivityKeyword.category.asc(), ActivityKeyword.keyword.asc())
        try:
            records = self._session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise EntryStoreError("Failed to load activity keywords.") from exc
        return [
            KeywordRule(
                id=str(record.id),
                category=record.category,
                keyword=record.keyword,
                active=record.is_active,
            )
            for record in records
        ]
