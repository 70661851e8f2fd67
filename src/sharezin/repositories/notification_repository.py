"""Stored notification persistence operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from sharezin.db.models.notification import NotificationRecord
from sharezin.domain.notifications import Notification


@dataclass(slots=True, frozen=True)
class NotificationListFilters:
    """Filters for one user's notification feed."""

    user_id: str
    unread_only: bool = False
    limit: int = 50
    offset: int = 0


class NotificationRepository:
    """Repository for notifications addressed to users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, notification: Notification) -> NotificationRecord:
        record = NotificationRecord(
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            receipt_id=notification.receipt_id,
            related_user_id=notification.related_user_id,
            is_read=False,
            created_at=datetime.now(tz=UTC),
        )
        self._session.add(record)
        self._session.flush()
        return record

    def get(self, notification_id: str) -> NotificationRecord | None:
        statement = select(NotificationRecord).where(
            NotificationRecord.id == notification_id
        )
        return self._session.scalar(statement)

    def list_for_user(
        self, filters: NotificationListFilters
    ) -> tuple[list[NotificationRecord], int]:
        """List newest notifications first with the unfiltered total count."""

        statement = select(NotificationRecord).where(
            NotificationRecord.user_id == filters.user_id
        )
        if filters.unread_only:
            statement = statement.where(NotificationRecord.is_read.is_(False))

        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = (
            statement.order_by(
                NotificationRecord.created_at.desc(), NotificationRecord.id.desc()
            )
            .limit(filters.limit)
            .offset(filters.offset)
        )
        return list(self._session.scalars(page_statement).all()), total

    def mark_read(self, record: NotificationRecord) -> NotificationRecord:
        record.is_read = True
        self._session.flush()
        return record

    def mark_many_read(
        self, user_id: str, notification_ids: list[str] | None = None
    ) -> int:
        """Mark the user's unread notifications as read, optionally only some."""

        statement = update(NotificationRecord).where(
            NotificationRecord.user_id == user_id,
            NotificationRecord.is_read.is_(False),
        )
        if notification_ids is not None:
            statement = statement.where(NotificationRecord.id.in_(notification_ids))
        result = self._session.execute(
            statement.values(is_read=True).execution_options(
                synchronize_session="fetch"
            )
        )
        return int(result.rowcount or 0)

    def delete(self, record: NotificationRecord) -> None:
        self._session.delete(record)
        self._session.flush()
