"""In-process publish/subscribe fan-out for stored notifications."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from threading import RLock

from sharezin.domain.notifications import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """Notification as delivered to subscribers after it was stored."""

    id: str
    notification: Notification
    created_at: datetime

    @property
    def user_id(self) -> str:
        return self.notification.user_id


Listener = Callable[[NotificationEvent], None]

# Subscribers registered under this key receive every event.
ALL_USERS = "*"


class NotificationDispatcher:
    """Routes published events to listeners registered per user.

    The dispatcher only delivers while started. Stopping it drops every
    subscription, so a restarted dispatcher starts from a clean slate.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._lock = RLock()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
        logger.info("notification_dispatcher_started")

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._listeners.clear()
        logger.info("notification_dispatcher_stopped")

    def subscribe(
        self, listener: Listener, *, user_id: str = ALL_USERS
    ) -> Callable[[], None]:
        """Register listener and return a callable that removes it."""

        with self._lock:
            self._listeners[user_id].append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener, user_id=user_id)

        return unsubscribe

    def unsubscribe(self, listener: Listener, *, user_id: str = ALL_USERS) -> None:
        with self._lock:
            listeners = self._listeners.get(user_id)
            if not listeners or listener not in listeners:
                return
            listeners.remove(listener)
            if not listeners:
                del self._listeners[user_id]

    def subscriber_count(self, user_id: str | None = None) -> int:
        with self._lock:
            if user_id is not None:
                return len(self._listeners.get(user_id, ()))
            return sum(len(listeners) for listeners in self._listeners.values())

    def publish(self, event: NotificationEvent) -> int:
        """Deliver event and return how many listeners accepted it.

        A failing listener is logged and skipped; it never prevents delivery
        to the remaining listeners nor propagates to the publisher.
        """

        with self._lock:
            if not self._running:
                return 0
            listeners = [
                *self._listeners.get(event.user_id, ()),
                *self._listeners.get(ALL_USERS, ()),
            ]

        delivered = 0
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "notification_listener_failed",
                    extra={
                        "notification_id": event.id,
                        "user_id": event.user_id,
                    },
                )
                continue
            delivered += 1
        return delivered
