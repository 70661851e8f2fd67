"""Receipt and participation state transitions.

Every transition takes an immutable snapshot plus the acting user id and
returns a ``Transition`` holding the next snapshot and the notifications the
caller should dispatch once the snapshot is persisted. Rejected transitions
raise a ``DomainError`` subclass whose ``code`` and ``message`` identify the
exact reason.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from sharezin.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from sharezin.domain.money import (
    HUNDRED,
    MONEY_PLACES,
    QUANTITY_PLACES,
    ZERO,
    decimal_places,
    quantize_money,
    receipt_total,
)
from sharezin.domain.notifications import Notification, NotificationType
from sharezin.domain.receipt import (
    ItemSnapshot,
    ParticipantSnapshot,
    ReceiptSnapshot,
    new_id,
    resolve_now,
)


@dataclass(frozen=True, slots=True)
class Transition:
    """Outcome of an accepted transition."""

    receipt: ReceiptSnapshot
    notifications: tuple[Notification, ...] = ()
    subject_id: str | None = None


def with_total(receipt: ReceiptSnapshot) -> ReceiptSnapshot:
    """Return snapshot with the cached total recomputed."""

    return replace(receipt, total=quantize_money(receipt_total(receipt)))


def validate_title(title: str) -> str:
    trimmed = title.strip()
    if not trimmed:
        raise InvalidRequestError(message="title is required")
    return trimmed


def validate_precision(field: str, value: Decimal, places: int) -> None:
    """Reject values finer than the precision the receipt is stored with."""

    if decimal_places(value) > places:
        raise InvalidRequestError(
            message=f"{field} accepts at most {places} decimal places",
            details={field: str(value)},
        )


def validate_charges(service_charge_percent: Decimal, cover: Decimal) -> None:
    """Reject service charge outside 0-100 and negative cover."""

    validate_precision("service_charge_percent", service_charge_percent, MONEY_PLACES)
    validate_precision("cover", cover, MONEY_PLACES)
    if service_charge_percent < ZERO or service_charge_percent > HUNDRED:
        raise InvalidRequestError(
            message="service charge percent must be between 0 and 100",
            details={"service_charge_percent": str(service_charge_percent)},
        )
    if cover < ZERO:
        raise InvalidRequestError(
            message="cover cannot be negative",
            details={"cover": str(cover)},
        )


def _creator_only(receipt: ReceiptSnapshot, actor_user_id: str, message: str) -> None:
    if not receipt.is_creator(actor_user_id):
        raise ForbiddenError(code="CREATOR_ONLY", message=message)


def _ensure_open(receipt: ReceiptSnapshot) -> None:
    if receipt.is_closed:
        raise ConflictError(code="RECEIPT_CLOSED", message="receipt is closed")


def _require_participant(
    receipt: ReceiptSnapshot, participant_id: str
) -> ParticipantSnapshot:
    participant = receipt.participant(participant_id)
    if participant is None:
        raise NotFoundError(
            code="PARTICIPANT_NOT_FOUND",
            message="participant not found in this receipt",
            details={"participant_id": participant_id},
        )
    return participant


def _require_item(receipt: ReceiptSnapshot, item_id: str) -> ItemSnapshot:
    item = receipt.item(item_id)
    if item is None:
        raise NotFoundError(
            code="ITEM_NOT_FOUND",
            message="item not found in this receipt",
            details={"item_id": item_id},
        )
    return item


def _replace_participant(
    receipt: ReceiptSnapshot, updated: ParticipantSnapshot
) -> ReceiptSnapshot:
    participants = tuple(
        updated if participant.id == updated.id else participant
        for participant in receipt.participants
    )
    return replace(receipt, participants=participants)


def ensure_can_view(receipt: ReceiptSnapshot, user_id: str) -> None:
    """Only the creator and participants may read a receipt."""

    if receipt.is_creator(user_id) or receipt.participant_for_user(user_id):
        return
    raise ForbiddenError(
        code="ACCESS_DENIED",
        message="you do not have access to this receipt",
    )


def ensure_can_delete(receipt: ReceiptSnapshot, user_id: str) -> None:
    _creator_only(receipt, user_id, "only the creator can delete the receipt")


def update_settings(
    receipt: ReceiptSnapshot,
    *,
    actor_user_id: str,
    title: str | None = None,
    service_charge_percent: Decimal | None = None,
    cover: Decimal | None = None,
) -> Transition:
    """Change title, service charge or cover of an open receipt."""

    _creator_only(receipt, actor_user_id, "only the creator can modify the receipt")
    _ensure_open(receipt)

    next_title = validate_title(title) if title is not None else receipt.title
    next_percent = (
        service_charge_percent
        if service_charge_percent is not None
        else receipt.service_charge_percent
    )
    next_cover = cover if cover is not None else receipt.cover
    validate_charges(next_percent, next_cover)

    updated = replace(
        receipt,
        title=next_title,
        service_charge_percent=next_percent,
        cover=next_cover,
    )
    return Transition(receipt=with_total(updated))


def close_receipt(receipt: ReceiptSnapshot, *, actor_user_id: str) -> Transition:
    """Lock the receipt for good. Closing twice is a no-op."""

    _creator_only(receipt, actor_user_id, "only the creator can close the receipt")
    if receipt.is_closed:
        return Transition(receipt=receipt)

    notifications = tuple(
        Notification(
            user_id=participant.user_id,
            type=NotificationType.RECEIPT_CLOSED,
            title="Receipt closed",
            message=f"The receipt {receipt.title} was closed by its creator",
            receipt_id=receipt.id,
            related_user_id=actor_user_id,
        )
        for participant in receipt.participants
        if participant.user_id is not None and participant.user_id != actor_user_id
    )
    return Transition(
        receipt=with_total(replace(receipt, is_closed=True)),
        notifications=notifications,
    )


def close_own_participation(
    receipt: ReceiptSnapshot, *, actor_user_id: str
) -> Transition:
    """Mark the actor as done adding items."""

    participant = receipt.participant_for_user(actor_user_id)
    if participant is None:
        raise ForbiddenError(
            code="NOT_A_PARTICIPANT",
            message="only participants can close their participation",
        )
    if receipt.is_closed:
        raise ConflictError(
            code="RECEIPT_CLOSED",
            message="cannot close participation on a closed receipt",
        )
    if participant.is_closed:
        raise ConflictError(
            code="PARTICIPATION_ALREADY_CLOSED",
            message="participation already closed",
        )
    return Transition(
        receipt=_replace_participant(receipt, replace(participant, is_closed=True)),
        subject_id=participant.id,
    )


def close_participant(
    receipt: ReceiptSnapshot, *, actor_user_id: str, participant_id: str
) -> Transition:
    """Creator closes another participant's participation."""

    _creator_only(
        receipt, actor_user_id, "only the creator can close other participations"
    )
    if receipt.is_closed:
        raise ConflictError(
            code="RECEIPT_CLOSED",
            message="cannot close participation on a closed receipt",
        )
    participant = _require_participant(receipt, participant_id)
    if participant.user_id == receipt.creator_id:
        raise ForbiddenError(
            code="CANNOT_TARGET_CREATOR",
            message="use close my participation to close your own participation",
        )
    if participant.is_closed:
        raise ConflictError(
            code="PARTICIPATION_ALREADY_CLOSED",
            message="participation already closed",
        )
    return Transition(
        receipt=_replace_participant(receipt, replace(participant, is_closed=True)),
        subject_id=participant.id,
    )


def remove_participant(
    receipt: ReceiptSnapshot, *, actor_user_id: str, participant_id: str
) -> Transition:
    """Hard delete a participant together with their items and requests."""

    _creator_only(receipt, actor_user_id, "only the creator can remove participants")
    participant = _require_participant(receipt, participant_id)
    if participant.user_id == receipt.creator_id:
        raise ForbiddenError(
            code="CANNOT_TARGET_CREATOR",
            message="the creator cannot be removed from the receipt",
        )

    removed_item_ids = {
        item.id for item in receipt.items if item.participant_id == participant.id
    }
    updated = replace(
        receipt,
        participants=tuple(p for p in receipt.participants if p.id != participant.id),
        items=tuple(item for item in receipt.items if item.id not in removed_item_ids),
        deletion_requests=tuple(
            request
            for request in receipt.deletion_requests
            if request.item_id not in removed_item_ids
            and request.participant_id != participant.id
        ),
    )
    return Transition(receipt=with_total(updated), subject_id=participant.id)


def transfer_creator(
    receipt: ReceiptSnapshot, *, actor_user_id: str, participant_id: str
) -> Transition:
    """Hand receipt ownership to another open, account-linked participant."""

    _creator_only(
        receipt,
        actor_user_id,
        "only the current creator can transfer the receipt",
    )
    if receipt.is_closed:
        raise ConflictError(
            code="RECEIPT_CLOSED",
            message="cannot transfer the creator of a closed receipt",
        )
    target = _require_participant(receipt, participant_id)
    if target.user_id is None:
        raise ConflictError(
            code="TRANSFER_TARGET_UNLINKED",
            message="new creator must be linked to a user account",
        )
    if target.user_id == actor_user_id:
        raise ConflictError(
            code="TRANSFER_TO_SELF",
            message="cannot transfer the receipt to yourself",
        )
    if target.is_closed:
        raise ConflictError(
            code="TRANSFER_TARGET_CLOSED",
            message=(
                "cannot transfer to a participant who closed their participation"
            ),
        )

    notifications = (
        Notification(
            user_id=target.user_id,
            type=NotificationType.CREATOR_TRANSFERRED,
            title="You are now responsible",
            message=f"You are now responsible for the receipt {receipt.title}",
            receipt_id=receipt.id,
            related_user_id=actor_user_id,
        ),
        Notification(
            user_id=actor_user_id,
            type=NotificationType.CREATOR_TRANSFERRED_FROM,
            title="Responsibility transferred",
            message=(
                f"You transferred the receipt {receipt.title} to {target.name}"
            ),
            receipt_id=receipt.id,
            related_user_id=target.user_id,
        ),
    )
    return Transition(
        receipt=replace(receipt, creator_id=target.user_id),
        notifications=notifications,
        subject_id=target.id,
    )


def add_item(
    receipt: ReceiptSnapshot,
    *,
    actor_user_id: str,
    name: str,
    quantity: Decimal,
    price: Decimal,
    participant_id: str | None = None,
    participant_name: str | None = None,
    now: datetime | None = None,
) -> Transition:
    """Append an item owned by a participant.

    Participants add items for themselves. The creator may add for anyone,
    even after they closed their own participation, and may name a new
    participant which is created on the fly (names match case-insensitively).
    """

    item_name = name.strip()
    if not item_name:
        raise InvalidRequestError(message="item name is required")
    if quantity <= ZERO:
        raise InvalidRequestError(
            message="quantity must be greater than zero",
            details={"quantity": str(quantity)},
        )
    if price < ZERO:
        raise InvalidRequestError(
            message="price cannot be negative",
            details={"price": str(price)},
        )
    validate_precision("quantity", quantity, QUANTITY_PLACES)
    validate_precision("price", price, MONEY_PLACES)

    is_creator = receipt.is_creator(actor_user_id)
    actor_participant = receipt.participant_for_user(actor_user_id)
    if not is_creator and actor_participant is None:
        raise ForbiddenError(
            code="NOT_A_PARTICIPANT",
            message="only participants can add items",
        )
    _ensure_open(receipt)
    if not is_creator and actor_participant is not None and actor_participant.is_closed:
        raise ConflictError(
            code="PARTICIPATION_CLOSED",
            message="participation is closed",
        )

    participants = receipt.participants
    if participant_id is not None:
        target = _require_participant(receipt, participant_id)
        if not is_creator and actor_participant is not None and (
            target.id != actor_participant.id
        ):
            raise ForbiddenError(
                code="CREATOR_ONLY",
                message="only the creator can add items for other participants",
            )
    elif participant_name is not None:
        if not is_creator:
            raise ForbiddenError(
                code="CREATOR_ONLY",
                message="only the creator can add items for other participants",
            )
        wanted = participant_name.strip()
        if not wanted:
            raise InvalidRequestError(message="participant name is required")
        existing = next(
            (p for p in participants if p.name.lower() == wanted.lower()),
            None,
        )
        if existing is None:
            target = ParticipantSnapshot(id=new_id(), name=wanted)
            participants = (*participants, target)
        else:
            target = existing
    elif actor_participant is not None:
        target = actor_participant
    else:
        raise ConflictError(
            code="CREATOR_PARTICIPANT_MISSING",
            message="creator has no participant in this receipt",
        )

    item = ItemSnapshot(
        id=new_id(),
        name=item_name,
        quantity=quantity,
        price=price,
        participant_id=target.id,
        added_at=resolve_now(now),
    )
    updated = replace(
        receipt,
        participants=participants,
        items=(*receipt.items, item),
    )

    notifications: tuple[Notification, ...] = ()
    if not is_creator:
        notifications = (
            Notification(
                user_id=receipt.creator_id,
                type=NotificationType.ITEM_ADDED,
                title="New item added",
                message=f"{target.name} added {item_name} to {receipt.title}",
                receipt_id=receipt.id,
                related_user_id=actor_user_id,
            ),
        )
    return Transition(
        receipt=with_total(updated),
        notifications=notifications,
        subject_id=item.id,
    )


def remove_item(
    receipt: ReceiptSnapshot, *, actor_user_id: str, item_id: str
) -> Transition:
    """Creator deletes an item directly; its deletion request goes with it."""

    _creator_only(receipt, actor_user_id, "only the creator can remove items")
    item = _require_item(receipt, item_id)
    updated = replace(
        receipt,
        items=tuple(i for i in receipt.items if i.id != item.id),
        deletion_requests=tuple(
            request
            for request in receipt.deletion_requests
            if request.item_id != item.id
        ),
    )
    return Transition(receipt=with_total(updated), subject_id=item.id)
