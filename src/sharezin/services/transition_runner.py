"""Read-check-write execution of receipt transitions."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Protocol

from sharezin.domain.errors import ReceiptNotFoundError
from sharezin.domain.lifecycle import Transition
from sharezin.domain.notifications import Notification
from sharezin.domain.receipt import ReceiptSnapshot

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by receipt services."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class ReceiptStoreProtocol(Protocol):
    """Receipt repository subset needed to apply a transition."""

    def get_for_update(self, receipt_id: str) -> ReceiptSnapshot | None: ...

    def save(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot: ...


class NotifierProtocol(Protocol):
    """Best-effort notification sink."""

    def notify_all(self, notifications: Iterable[Notification]) -> int: ...


class TransitionRunner:
    """Applies one pure transition under the receipt row lock.

    The receipt is loaded ``FOR UPDATE``, the transition is evaluated on the
    snapshot, the result is saved and committed, and only then are the
    transition's notifications handed to the notifier.
    """

    def __init__(
        self,
        *,
        receipt_repository: ReceiptStoreProtocol,
        notifier: NotifierProtocol,
        session: SessionProtocol,
    ) -> None:
        self._receipt_repository = receipt_repository
        self._notifier = notifier
        self._session = session

    def run(
        self,
        *,
        receipt_id: str,
        actor_user_id: str,
        action: str,
        apply: Callable[[ReceiptSnapshot], Transition],
    ) -> Transition:
        try:
            receipt = self._receipt_repository.get_for_update(receipt_id)
            if receipt is None:
                raise ReceiptNotFoundError(details={"receipt_id": receipt_id})
            transition = apply(receipt)
            saved = self._receipt_repository.save(transition.receipt)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "receipt_transition_applied",
            extra={
                "receipt_id": receipt_id,
                "action": action,
                "actor_user_id": actor_user_id,
                "subject_id": transition.subject_id,
                "notifications": len(transition.notifications),
            },
        )
        if transition.notifications:
            self._notifier.notify_all(transition.notifications)
        return Transition(
            receipt=saved,
            notifications=transition.notifications,
            subject_id=transition.subject_id,
        )
