"""Join request and item deletion request workflows."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from sharezin.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from sharezin.domain.lifecycle import Transition, with_total
from sharezin.domain.notifications import Notification, NotificationType
from sharezin.domain.receipt import (
    DeletionRequestSnapshot,
    ParticipantSnapshot,
    PendingParticipantSnapshot,
    ReceiptSnapshot,
    new_id,
    resolve_now,
)


def _require_pending(
    receipt: ReceiptSnapshot, pending_id: str
) -> PendingParticipantSnapshot:
    pending = receipt.pending_participant(pending_id)
    if pending is None:
        raise NotFoundError(
            code="JOIN_REQUEST_NOT_FOUND",
            message="join request not found in this receipt",
            details={"pending_participant_id": pending_id},
        )
    return pending


def _require_deletion_request(
    receipt: ReceiptSnapshot, request_id: str
) -> DeletionRequestSnapshot:
    request = receipt.deletion_request(request_id)
    if request is None:
        raise NotFoundError(
            code="DELETION_REQUEST_NOT_FOUND",
            message="deletion request not found in this receipt",
            details={"deletion_request_id": request_id},
        )
    return request


def _ensure_reviewer(receipt: ReceiptSnapshot, actor_user_id: str, what: str) -> None:
    if not receipt.is_creator(actor_user_id):
        raise ForbiddenError(
            code="CREATOR_ONLY",
            message=f"only the creator can review {what}",
        )


def request_join(
    receipt: ReceiptSnapshot,
    *,
    user_id: str,
    name: str,
    now: datetime | None = None,
) -> Transition:
    """Register a join request for a user reaching the receipt by invite."""

    if receipt.is_closed:
        raise ConflictError(
            code="RECEIPT_CLOSED",
            message="cannot request to join a closed receipt",
        )
    if receipt.is_creator(user_id):
        raise ConflictError(
            code="JOIN_BY_CREATOR",
            message="you are the creator of this receipt",
        )
    if receipt.participant_for_user(user_id) is not None:
        raise ConflictError(
            code="ALREADY_PARTICIPANT",
            message="you are already a participant of this receipt",
        )
    if receipt.pending_for_user(user_id) is not None:
        raise ConflictError(
            code="JOIN_ALREADY_REQUESTED",
            message="join already requested, wait for the creator's approval",
        )
    display_name = name.strip()
    if not display_name:
        raise InvalidRequestError(message="name is required")

    pending = PendingParticipantSnapshot(
        id=new_id(),
        name=display_name,
        user_id=user_id,
        requested_at=resolve_now(now),
    )
    notification = Notification(
        user_id=receipt.creator_id,
        type=NotificationType.PARTICIPANT_REQUEST,
        title="New join request",
        message=f"{display_name} asked to join the receipt {receipt.title}",
        receipt_id=receipt.id,
        related_user_id=user_id,
    )
    return Transition(
        receipt=replace(
            receipt,
            pending_participants=(*receipt.pending_participants, pending),
        ),
        notifications=(notification,),
        subject_id=pending.id,
    )


def approve_join(
    receipt: ReceiptSnapshot, *, actor_user_id: str, pending_id: str
) -> Transition:
    """Turn a pending request into a participant."""

    _ensure_reviewer(receipt, actor_user_id, "join requests")
    pending = _require_pending(receipt, pending_id)
    remaining = tuple(p for p in receipt.pending_participants if p.id != pending.id)
    if receipt.participant_for_user(pending.user_id) is not None:
        raise ConflictError(
            code="ALREADY_PARTICIPANT",
            message="user is already a participant of this receipt",
        )

    participant = ParticipantSnapshot(
        id=new_id(),
        name=pending.name,
        user_id=pending.user_id,
    )
    notification = Notification(
        user_id=pending.user_id,
        type=NotificationType.PARTICIPANT_APPROVED,
        title="Join request approved",
        message=f"You are now a participant of the receipt {receipt.title}",
        receipt_id=receipt.id,
        related_user_id=actor_user_id,
    )
    return Transition(
        receipt=replace(
            receipt,
            pending_participants=remaining,
            participants=(*receipt.participants, participant),
        ),
        notifications=(notification,),
        subject_id=participant.id,
    )


def reject_join(
    receipt: ReceiptSnapshot, *, actor_user_id: str, pending_id: str
) -> Transition:
    _ensure_reviewer(receipt, actor_user_id, "join requests")
    pending = _require_pending(receipt, pending_id)
    notification = Notification(
        user_id=pending.user_id,
        type=NotificationType.PARTICIPANT_REJECTED,
        title="Join request rejected",
        message=f"Your request to join the receipt {receipt.title} was rejected",
        receipt_id=receipt.id,
        related_user_id=actor_user_id,
    )
    return Transition(
        receipt=replace(
            receipt,
            pending_participants=tuple(
                p for p in receipt.pending_participants if p.id != pending.id
            ),
        ),
        notifications=(notification,),
        subject_id=pending.id,
    )


def request_item_deletion(
    receipt: ReceiptSnapshot,
    *,
    actor_user_id: str,
    item_id: str,
    now: datetime | None = None,
) -> Transition:
    """Owner of an item asks the creator to remove it."""

    requester = receipt.participant_for_user(actor_user_id)
    if requester is None and not receipt.is_creator(actor_user_id):
        raise ForbiddenError(
            code="NOT_A_PARTICIPANT",
            message="only participants can request item deletion",
        )
    if receipt.is_closed:
        raise ConflictError(code="RECEIPT_CLOSED", message="receipt is closed")
    item = receipt.item(item_id)
    if item is None:
        raise NotFoundError(
            code="ITEM_NOT_FOUND",
            message="item not found in this receipt",
            details={"item_id": item_id},
        )
    if requester is None or item.participant_id != requester.id:
        raise ForbiddenError(
            code="NOT_ITEM_OWNER",
            message="only owner can request deletion of own items",
        )
    if receipt.is_creator(actor_user_id):
        raise ForbiddenError(
            code="CREATOR_DELETES_DIRECTLY",
            message="the creator removes items directly",
        )
    if requester.is_closed:
        raise ConflictError(
            code="PARTICIPATION_CLOSED",
            message="participation is closed",
        )
    if receipt.deletion_request_for_item(item.id) is not None:
        raise ConflictError(
            code="DELETION_ALREADY_REQUESTED",
            message="deletion already requested",
        )

    request = DeletionRequestSnapshot(
        id=new_id(),
        item_id=item.id,
        participant_id=requester.id,
        requested_at=resolve_now(now),
    )
    notification = Notification(
        user_id=receipt.creator_id,
        type=NotificationType.DELETION_REQUEST,
        title="Item deletion requested",
        message=f"{requester.name} asked to remove {item.name} from {receipt.title}",
        receipt_id=receipt.id,
        related_user_id=actor_user_id,
    )
    return Transition(
        receipt=replace(
            receipt,
            deletion_requests=(*receipt.deletion_requests, request),
        ),
        notifications=(notification,),
        subject_id=request.id,
    )


def _requester_notification(
    receipt: ReceiptSnapshot,
    request: DeletionRequestSnapshot,
    *,
    actor_user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
) -> tuple[Notification, ...]:
    requester = receipt.participant(request.participant_id)
    if requester is None or requester.user_id is None:
        return ()
    return (
        Notification(
            user_id=requester.user_id,
            type=notification_type,
            title=title,
            message=message,
            receipt_id=receipt.id,
            related_user_id=actor_user_id,
        ),
    )


def approve_deletion(
    receipt: ReceiptSnapshot, *, actor_user_id: str, request_id: str
) -> Transition:
    """Delete the requested item along with its request."""

    _ensure_reviewer(receipt, actor_user_id, "deletion requests")
    request = _require_deletion_request(receipt, request_id)
    item = receipt.item(request.item_id)
    item_name = item.name if item is not None else "an item"
    updated = replace(
        receipt,
        items=tuple(i for i in receipt.items if i.id != request.item_id),
        deletion_requests=tuple(
            r for r in receipt.deletion_requests if r.id != request.id
        ),
    )
    return Transition(
        receipt=with_total(updated),
        notifications=_requester_notification(
            receipt,
            request,
            actor_user_id=actor_user_id,
            notification_type=NotificationType.DELETION_APPROVED,
            title="Deletion approved",
            message=f"{item_name} was removed from the receipt {receipt.title}",
        ),
        subject_id=request.id,
    )


def reject_deletion(
    receipt: ReceiptSnapshot, *, actor_user_id: str, request_id: str
) -> Transition:
    _ensure_reviewer(receipt, actor_user_id, "deletion requests")
    request = _require_deletion_request(receipt, request_id)
    item = receipt.item(request.item_id)
    item_name = item.name if item is not None else "an item"
    return Transition(
        receipt=replace(
            receipt,
            deletion_requests=tuple(
                r for r in receipt.deletion_requests if r.id != request.id
            ),
        ),
        notifications=_requester_notification(
            receipt,
            request,
            actor_user_id=actor_user_id,
            notification_type=NotificationType.DELETION_REJECTED,
            title="Deletion rejected",
            message=(
                f"Your request to remove {item_name} from "
                f"{receipt.title} was rejected"
            ),
        ),
        subject_id=request.id,
    )
