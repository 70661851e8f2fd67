"""Join and deletion request use cases."""

from __future__ import annotations

from dataclasses import dataclass

from sharezin.domain import membership
from sharezin.domain.errors import DomainInvariantError
from sharezin.domain.receipt import (
    DeletionRequestSnapshot,
    PendingParticipantSnapshot,
    ReceiptSnapshot,
)
from sharezin.services.transition_runner import (
    NotifierProtocol,
    ReceiptStoreProtocol,
    SessionProtocol,
    TransitionRunner,
)


@dataclass(slots=True, frozen=True)
class JoinRequestInput:
    """Input model for a join request."""

    receipt_id: str
    user_id: str
    name: str


class MembershipService:
    """Runs the request/approval workflows of a receipt."""

    def __init__(
        self,
        *,
        receipt_repository: ReceiptStoreProtocol,
        notifier: NotifierProtocol,
        session: SessionProtocol,
    ) -> None:
        self._runner = TransitionRunner(
            receipt_repository=receipt_repository,
            notifier=notifier,
            session=session,
        )

    def request_join(self, payload: JoinRequestInput) -> PendingParticipantSnapshot:
        """Store a join request and return it."""

        transition = self._runner.run(
            receipt_id=payload.receipt_id,
            actor_user_id=payload.user_id,
            action="request_join",
            apply=lambda receipt: membership.request_join(
                receipt, user_id=payload.user_id, name=payload.name
            ),
        )
        pending = transition.receipt.pending_for_user(payload.user_id)
        if pending is None:
            raise DomainInvariantError(
                message="join request was not stored",
                details={"receipt_id": payload.receipt_id},
            )
        return pending

    def approve_join(
        self, *, receipt_id: str, user_id: str, pending_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="approve_join",
            apply=lambda receipt: membership.approve_join(
                receipt, actor_user_id=user_id, pending_id=pending_id
            ),
        ).receipt

    def reject_join(
        self, *, receipt_id: str, user_id: str, pending_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="reject_join",
            apply=lambda receipt: membership.reject_join(
                receipt, actor_user_id=user_id, pending_id=pending_id
            ),
        ).receipt

    def request_item_deletion(
        self, *, receipt_id: str, user_id: str, item_id: str
    ) -> DeletionRequestSnapshot:
        """Store a deletion request for the item and return it."""

        transition = self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="request_item_deletion",
            apply=lambda receipt: membership.request_item_deletion(
                receipt, actor_user_id=user_id, item_id=item_id
            ),
        )
        request = transition.receipt.deletion_request_for_item(item_id)
        if request is None:
            raise DomainInvariantError(
                message="deletion request was not stored",
                details={"receipt_id": receipt_id, "item_id": item_id},
            )
        return request

    def approve_deletion(
        self, *, receipt_id: str, user_id: str, request_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="approve_deletion",
            apply=lambda receipt: membership.approve_deletion(
                receipt, actor_user_id=user_id, request_id=request_id
            ),
        ).receipt

    def reject_deletion(
        self, *, receipt_id: str, user_id: str, request_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="reject_deletion",
            apply=lambda receipt: membership.reject_deletion(
                receipt, actor_user_id=user_id, request_id=request_id
            ),
        ).receipt
