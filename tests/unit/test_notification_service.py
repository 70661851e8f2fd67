"""Unit tests for notification service."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from sharezin.db.models.notification import NotificationRecord
from sharezin.domain.errors import NotFoundError
from sharezin.domain.notifications import Notification, NotificationType
from sharezin.notifications.dispatcher import NotificationDispatcher, NotificationEvent
from sharezin.repositories.notification_repository import NotificationListFilters
from sharezin.services.notification_service import (
    ListNotificationsInput,
    NotificationService,
)

CREATED_AT = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)


class FakeSession:
    def __init__(self) -> None:
        self.commits = 0
        self.rolled_back = False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rolled_back = True

    def refresh(self, instance: object) -> None:
        _ = instance


class FakeNotificationRepository:
    def __init__(self, *, fail_for: str | None = None) -> None:
        self.records: dict[str, NotificationRecord] = {}
        self.fail_for = fail_for
        self.last_filters: NotificationListFilters | None = None

    def add(self, notification: Notification) -> NotificationRecord:
        if notification.user_id == self.fail_for:
            raise RuntimeError("insert failed")
        record = NotificationRecord(
            id=f"n{len(self.records) + 1}",
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            receipt_id=notification.receipt_id,
            related_user_id=notification.related_user_id,
            is_read=False,
            created_at=CREATED_AT,
        )
        self.records[record.id] = record
        return record

    def get(self, notification_id: str) -> NotificationRecord | None:
        return self.records.get(notification_id)

    def list_for_user(
        self, filters: NotificationListFilters
    ) -> tuple[list[NotificationRecord], int]:
        self.last_filters = filters
        items = [r for r in self.records.values() if r.user_id == filters.user_id]
        return items, len(items)

    def mark_read(self, record: NotificationRecord) -> NotificationRecord:
        record.is_read = True
        return record

    def mark_many_read(
        self, user_id: str, notification_ids: list[str] | None = None
    ) -> int:
        updated = 0
        for record in self.records.values():
            if record.user_id != user_id or record.is_read:
                continue
            if notification_ids is not None and record.id not in notification_ids:
                continue
            record.is_read = True
            updated += 1
        return updated

    def delete(self, record: NotificationRecord) -> None:
        del self.records[record.id]


def make_notification(user_id: str) -> Notification:
    return Notification(
        user_id=user_id,
        type=NotificationType.RECEIPT_CLOSED,
        title="Receipt closed",
        message="The receipt Dinner was closed by its creator",
        receipt_id="r1",
        related_user_id="ana",
    )


def test_notify_stores_commits_and_publishes() -> None:
    repository = FakeNotificationRepository()
    session = FakeSession()
    dispatcher = NotificationDispatcher()
    dispatcher.start()
    received: list[NotificationEvent] = []
    dispatcher.subscribe(received.append, user_id="bia")
    service = NotificationService(
        notification_repository=repository,
        session=session,
        dispatcher=dispatcher,
    )

    record = service.notify(
        "bia",
        NotificationType.ITEM_ADDED,
        "New item added",
        "Bia added Soda to Dinner",
        receipt_id="r1",
    )

    assert record is not None
    assert session.commits == 1
    assert [(event.id, event.user_id) for event in received] == [(record.id, "bia")]
    assert received[0].notification.type is NotificationType.ITEM_ADDED


def test_notify_failure_is_logged_and_swallowed(
    caplog: pytest.LogCaptureFixture,
) -> None:
    session = FakeSession()
    service = NotificationService(
        notification_repository=FakeNotificationRepository(fail_for="bia"),
        session=session,
    )

    record = service.notify(
        "bia", NotificationType.RECEIPT_CLOSED, "Receipt closed", "closed"
    )

    assert record is None
    assert session.rolled_back is True
    assert "notification_dispatch_failed" in caplog.text


def test_notify_all_counts_only_stored_notifications() -> None:
    service = NotificationService(
        notification_repository=FakeNotificationRepository(fail_for="caio"),
        session=FakeSession(),
    )

    sent = service.notify_all(
        [make_notification("bia"), make_notification("caio"), make_notification("dani")]
    )

    assert sent == 2


def test_list_notifications_forwards_filters() -> None:
    repository = FakeNotificationRepository()
    service = NotificationService(
        notification_repository=repository, session=FakeSession()
    )
    service.notify_all([make_notification("bia"), make_notification("caio")])

    items, total = service.list_notifications(
        ListNotificationsInput(user_id="bia", unread_only=True, limit=5)
    )

    assert total == 1
    assert items[0].user_id == "bia"
    assert repository.last_filters == NotificationListFilters(
        user_id="bia", unread_only=True, limit=5, offset=0
    )


def test_mark_read_only_for_recipient() -> None:
    repository = FakeNotificationRepository()
    session = FakeSession()
    service = NotificationService(notification_repository=repository, session=session)
    record = service.notify(
        "bia", NotificationType.RECEIPT_CLOSED, "Receipt closed", "closed"
    )
    assert record is not None

    with pytest.raises(NotFoundError) as exc_info:
        service.mark_read(user_id="caio", notification_id=record.id)
    assert exc_info.value.code == "NOTIFICATION_NOT_FOUND"

    updated = service.mark_read(user_id="bia", notification_id=record.id)

    assert updated.is_read is True
    assert session.commits == 2


def test_mark_many_read_marks_all_or_listed_for_user() -> None:
    repository = FakeNotificationRepository()
    session = FakeSession()
    service = NotificationService(notification_repository=repository, session=session)
    service.notify_all(
        [make_notification("bia"), make_notification("bia"), make_notification("caio")]
    )

    assert service.mark_many_read(user_id="bia", notification_ids=["n1", "n3"]) == 1
    assert service.mark_many_read(user_id="bia") == 1
    assert service.mark_many_read(user_id="bia") == 0
    assert [record.is_read for record in repository.records.values()] == [
        True,
        True,
        False,
    ]


def test_delete_notification_only_for_recipient() -> None:
    repository = FakeNotificationRepository()
    session = FakeSession()
    service = NotificationService(notification_repository=repository, session=session)
    record = service.notify(
        "bia", NotificationType.RECEIPT_CLOSED, "Receipt closed", "closed"
    )
    assert record is not None

    with pytest.raises(NotFoundError):
        service.delete_notification(user_id="caio", notification_id=record.id)

    service.delete_notification(user_id="bia", notification_id=record.id)

    assert repository.records == {}
    assert session.commits == 2
