"""Notification storage, delivery and feed use cases."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from sharezin.db.models.notification import NotificationRecord
from sharezin.domain.errors import NotFoundError
from sharezin.domain.notifications import Notification, NotificationType
from sharezin.notifications.dispatcher import NotificationDispatcher, NotificationEvent
from sharezin.repositories.notification_repository import NotificationListFilters

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by notification service."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def refresh(self, instance: object) -> None: ...


class NotificationRepositoryProtocol(Protocol):
    """Notification repository contract consumed by service."""

    def add(self, notification: Notification) -> NotificationRecord: ...

    def get(self, notification_id: str) -> NotificationRecord | None: ...

    def list_for_user(
        self, filters: NotificationListFilters
    ) -> tuple[list[NotificationRecord], int]: ...

    def mark_read(self, record: NotificationRecord) -> NotificationRecord: ...

    def mark_many_read(
        self, user_id: str, notification_ids: list[str] | None = None
    ) -> int: ...

    def delete(self, record: NotificationRecord) -> None: ...


@dataclass(slots=True, frozen=True)
class ListNotificationsInput:
    """Input model for notification feed listing."""

    user_id: str
    unread_only: bool = False
    limit: int = 50
    offset: int = 0


class NotificationService:
    """Stores notifications and fans them out to live subscribers."""

    def __init__(
        self,
        *,
        notification_repository: NotificationRepositoryProtocol,
        session: SessionProtocol,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._notification_repository = notification_repository
        self._session = session
        self._dispatcher = dispatcher

    def notify(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        receipt_id: str | None = None,
        related_user_id: str | None = None,
    ) -> NotificationRecord | None:
        """Store and publish one notification, best effort.

        Failures are logged and reported as ``None``. The caller's own
        transaction has already been committed at this point.
        """

        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            receipt_id=receipt_id,
            related_user_id=related_user_id,
        )
        try:
            record = self._notification_repository.add(notification)
            self._session.commit()
        except Exception:
            self._session.rollback()
            logger.exception(
                "notification_dispatch_failed",
                extra={
                    "user_id": user_id,
                    "type": type.value,
                    "receipt_id": receipt_id,
                },
            )
            return None

        if self._dispatcher is not None:
            self._dispatcher.publish(
                NotificationEvent(
                    id=record.id,
                    notification=notification,
                    created_at=record.created_at,
                )
            )
        logger.info(
            "notification_sent",
            extra={
                "notification_id": record.id,
                "user_id": user_id,
                "type": type.value,
            },
        )
        return record

    def notify_all(self, notifications: Iterable[Notification]) -> int:
        """Send every notification and return how many were stored."""

        sent = 0
        for notification in notifications:
            record = self.notify(
                notification.user_id,
                notification.type,
                notification.title,
                notification.message,
                receipt_id=notification.receipt_id,
                related_user_id=notification.related_user_id,
            )
            if record is not None:
                sent += 1
        return sent

    def list_notifications(
        self, payload: ListNotificationsInput
    ) -> tuple[list[NotificationRecord], int]:
        return self._notification_repository.list_for_user(
            NotificationListFilters(
                user_id=payload.user_id,
                unread_only=payload.unread_only,
                limit=payload.limit,
                offset=payload.offset,
            )
        )

    def mark_read(self, *, user_id: str, notification_id: str) -> NotificationRecord:
        """Mark one of the user's notifications as read."""

        record = self._require_own(user_id, notification_id)
        if record.is_read:
            return record

        try:
            updated = self._notification_repository.mark_read(record)
            self._session.commit()
            self._session.refresh(updated)
            return updated
        except Exception:
            self._session.rollback()
            raise

    def mark_many_read(
        self, *, user_id: str, notification_ids: list[str] | None = None
    ) -> int:
        """Mark the user's unread notifications as read.

        Without ``notification_ids`` every unread notification is marked.
        Ids belonging to other users are ignored. Returns how many changed.
        """

        try:
            updated = self._notification_repository.mark_many_read(
                user_id, notification_ids
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "notifications_marked_read",
            extra={"user_id": user_id, "updated": updated},
        )
        return updated

    def delete_notification(self, *, user_id: str, notification_id: str) -> None:
        record = self._require_own(user_id, notification_id)
        try:
            self._notification_repository.delete(record)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "notification_deleted",
            extra={"user_id": user_id, "notification_id": notification_id},
        )

    def _require_own(self, user_id: str, notification_id: str) -> NotificationRecord:
        record = self._notification_repository.get(notification_id)
        if record is None or record.user_id != user_id:
            raise NotFoundError(
                code="NOTIFICATION_NOT_FOUND",
                message="notification not found",
                details={"notification_id": notification_id},
            )
        return record
