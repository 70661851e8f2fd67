"""Unit tests for receipt and participation transitions."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from sharezin.domain import lifecycle
from sharezin.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from sharezin.domain.notifications import NotificationType
from sharezin.domain.receipt import (
    DeletionRequestSnapshot,
    ItemSnapshot,
    ParticipantSnapshot,
    ReceiptSnapshot,
)

NOW = datetime(2026, 3, 1, 20, 0, tzinfo=UTC)


def make_receipt(**overrides: object) -> ReceiptSnapshot:
    """Receipt owned by ana with bia linked and a guest without account."""

    receipt = ReceiptSnapshot(
        id="r1",
        title="Dinner",
        date=NOW,
        creator_id="ana",
        invite_code="ABC234",
        service_charge_percent=Decimal("10"),
        cover=Decimal("0"),
        participants=(
            ParticipantSnapshot(id="p-ana", name="Ana", user_id="ana"),
            ParticipantSnapshot(id="p-bia", name="Bia", user_id="bia"),
            ParticipantSnapshot(id="p-guest", name="Guest"),
        ),
        items=(
            ItemSnapshot(
                id="i-ana",
                name="Pizza",
                quantity=Decimal("1"),
                price=Decimal("60"),
                participant_id="p-ana",
                added_at=NOW,
            ),
            ItemSnapshot(
                id="i-bia",
                name="Soda",
                quantity=Decimal("2"),
                price=Decimal("5"),
                participant_id="p-bia",
                added_at=NOW,
            ),
        ),
    )
    return replace(receipt, **overrides)


def closed_participant(
    receipt: ReceiptSnapshot, participant_id: str
) -> ReceiptSnapshot:
    return replace(
        receipt,
        participants=tuple(
            replace(p, is_closed=True) if p.id == participant_id else p
            for p in receipt.participants
        ),
    )


def test_update_settings_changes_fields_and_total() -> None:
    transition = lifecycle.update_settings(
        make_receipt(),
        actor_user_id="ana",
        title="  Late dinner ",
        service_charge_percent=Decimal("0"),
        cover=Decimal("30"),
    )

    assert transition.receipt.title == "Late dinner"
    assert transition.receipt.total == Decimal("100.00")
    assert transition.notifications == ()


def test_update_settings_requires_creator() -> None:
    with pytest.raises(ForbiddenError) as exc_info:
        lifecycle.update_settings(make_receipt(), actor_user_id="bia", title="x")

    assert exc_info.value.code == "CREATOR_ONLY"
    assert exc_info.value.message == "only the creator can modify the receipt"


def test_update_settings_rejects_closed_receipt() -> None:
    with pytest.raises(ConflictError) as exc_info:
        lifecycle.update_settings(
            make_receipt(is_closed=True), actor_user_id="ana", title="x"
        )

    assert exc_info.value.code == "RECEIPT_CLOSED"


@pytest.mark.parametrize(
    ("fields", "message"),
    [
        ({"title": "   "}, "title is required"),
        (
            {"service_charge_percent": Decimal("100.01")},
            "service charge percent must be between 0 and 100",
        ),
        (
            {"service_charge_percent": Decimal("-1")},
            "service charge percent must be between 0 and 100",
        ),
        ({"cover": Decimal("-0.01")}, "cover cannot be negative"),
        ({"cover": Decimal("1.005")}, "cover accepts at most 2 decimal places"),
        (
            {"service_charge_percent": Decimal("12.125")},
            "service_charge_percent accepts at most 2 decimal places",
        ),
    ],
)
def test_update_settings_validates_fields(fields: dict, message: str) -> None:
    with pytest.raises(InvalidRequestError) as exc_info:
        lifecycle.update_settings(make_receipt(), actor_user_id="ana", **fields)

    assert exc_info.value.message == message


def test_close_receipt_notifies_linked_participants_except_creator() -> None:
    transition = lifecycle.close_receipt(make_receipt(), actor_user_id="ana")

    assert transition.receipt.is_closed is True
    assert [n.user_id for n in transition.notifications] == ["bia"]
    assert transition.notifications[0].type is NotificationType.RECEIPT_CLOSED


def test_close_receipt_twice_is_noop() -> None:
    receipt = make_receipt(is_closed=True)

    transition = lifecycle.close_receipt(receipt, actor_user_id="ana")

    assert transition.receipt is receipt
    assert transition.notifications == ()


def test_close_receipt_requires_creator() -> None:
    with pytest.raises(ForbiddenError) as exc_info:
        lifecycle.close_receipt(make_receipt(), actor_user_id="bia")

    assert exc_info.value.message == "only the creator can close the receipt"


def test_close_own_participation_marks_participant() -> None:
    transition = lifecycle.close_own_participation(
        make_receipt(), actor_user_id="bia"
    )

    assert transition.subject_id == "p-bia"
    bia = transition.receipt.participant("p-bia")
    assert bia is not None and bia.is_closed is True


@pytest.mark.parametrize(
    ("receipt", "actor", "error_type", "code"),
    [
        (make_receipt(), "carla", ForbiddenError, "NOT_A_PARTICIPANT"),
        (make_receipt(is_closed=True), "bia", ConflictError, "RECEIPT_CLOSED"),
        (
            closed_participant(make_receipt(), "p-bia"),
            "bia",
            ConflictError,
            "PARTICIPATION_ALREADY_CLOSED",
        ),
    ],
)
def test_close_own_participation_guards(
    receipt: ReceiptSnapshot,
    actor: str,
    error_type: type,
    code: str,
) -> None:
    with pytest.raises(error_type) as exc_info:
        lifecycle.close_own_participation(receipt, actor_user_id=actor)

    assert exc_info.value.code == code


def test_close_participant_by_creator() -> None:
    transition = lifecycle.close_participant(
        make_receipt(), actor_user_id="ana", participant_id="p-guest"
    )

    guest = transition.receipt.participant("p-guest")
    assert guest is not None and guest.is_closed is True


@pytest.mark.parametrize(
    ("receipt", "actor", "participant_id", "error_type", "code"),
    [
        (make_receipt(), "bia", "p-guest", ForbiddenError, "CREATOR_ONLY"),
        (
            make_receipt(is_closed=True),
            "ana",
            "p-guest",
            ConflictError,
            "RECEIPT_CLOSED",
        ),
        (make_receipt(), "ana", "missing", NotFoundError, "PARTICIPANT_NOT_FOUND"),
        (make_receipt(), "ana", "p-ana", ForbiddenError, "CANNOT_TARGET_CREATOR"),
        (
            closed_participant(make_receipt(), "p-bia"),
            "ana",
            "p-bia",
            ConflictError,
            "PARTICIPATION_ALREADY_CLOSED",
        ),
    ],
)
def test_close_participant_guards(
    receipt: ReceiptSnapshot,
    actor: str,
    participant_id: str,
    error_type: type,
    code: str,
) -> None:
    with pytest.raises(error_type) as exc_info:
        lifecycle.close_participant(
            receipt, actor_user_id=actor, participant_id=participant_id
        )

    assert exc_info.value.code == code


def test_remove_participant_cascades_items_and_requests() -> None:
    receipt = make_receipt(
        deletion_requests=(
            DeletionRequestSnapshot(
                id="d1",
                item_id="i-bia",
                participant_id="p-bia",
                requested_at=NOW,
            ),
        )
    )

    transition = lifecycle.remove_participant(
        receipt, actor_user_id="ana", participant_id="p-bia"
    )

    updated = transition.receipt
    assert [p.id for p in updated.participants] == ["p-ana", "p-guest"]
    assert [i.id for i in updated.items] == ["i-ana"]
    assert updated.deletion_requests == ()
    assert updated.total == Decimal("66.00")


def test_remove_participant_allowed_on_closed_receipt() -> None:
    transition = lifecycle.remove_participant(
        make_receipt(is_closed=True), actor_user_id="ana", participant_id="p-guest"
    )

    assert transition.receipt.participant("p-guest") is None


def test_remove_participant_rejects_creator_target() -> None:
    with pytest.raises(ForbiddenError) as exc_info:
        lifecycle.remove_participant(
            make_receipt(), actor_user_id="ana", participant_id="p-ana"
        )

    assert exc_info.value.code == "CANNOT_TARGET_CREATOR"


def test_remove_participant_requires_creator() -> None:
    with pytest.raises(ForbiddenError) as exc_info:
        lifecycle.remove_participant(
            make_receipt(), actor_user_id="bia", participant_id="p-guest"
        )

    assert exc_info.value.message == "only the creator can remove participants"


def test_transfer_creator_moves_ownership_and_notifies_both() -> None:
    transition = lifecycle.transfer_creator(
        make_receipt(), actor_user_id="ana", participant_id="p-bia"
    )

    assert transition.receipt.creator_id == "bia"
    assert [(n.user_id, n.type) for n in transition.notifications] == [
        ("bia", NotificationType.CREATOR_TRANSFERRED),
        ("ana", NotificationType.CREATOR_TRANSFERRED_FROM),
    ]
    # The previous creator stays a participant of the receipt.
    assert transition.receipt.participant_for_user("ana") is not None


@pytest.mark.parametrize(
    ("receipt", "actor", "participant_id", "error_type", "code"),
    [
        (make_receipt(), "bia", "p-bia", ForbiddenError, "CREATOR_ONLY"),
        (
            make_receipt(is_closed=True),
            "ana",
            "p-bia",
            ConflictError,
            "RECEIPT_CLOSED",
        ),
        (make_receipt(), "ana", "missing", NotFoundError, "PARTICIPANT_NOT_FOUND"),
        (make_receipt(), "ana", "p-guest", ConflictError, "TRANSFER_TARGET_UNLINKED"),
        (make_receipt(), "ana", "p-ana", ConflictError, "TRANSFER_TO_SELF"),
        (
            closed_participant(make_receipt(), "p-bia"),
            "ana",
            "p-bia",
            ConflictError,
            "TRANSFER_TARGET_CLOSED",
        ),
    ],
)
def test_transfer_creator_guards(
    receipt: ReceiptSnapshot,
    actor: str,
    participant_id: str,
    error_type: type,
    code: str,
) -> None:
    with pytest.raises(error_type) as exc_info:
        lifecycle.transfer_creator(
            receipt, actor_user_id=actor, participant_id=participant_id
        )

    assert exc_info.value.code == code


def test_add_item_by_participant_notifies_creator() -> None:
    transition = lifecycle.add_item(
        make_receipt(),
        actor_user_id="bia",
        name=" Beer ",
        quantity=Decimal("2"),
        price=Decimal("8"),
        now=NOW,
    )

    item = transition.receipt.item(str(transition.subject_id))
    assert item is not None
    assert item.name == "Beer"
    assert item.participant_id == "p-bia"
    assert transition.receipt.total == Decimal("94.60")
    assert [n.user_id for n in transition.notifications] == ["ana"]
    assert transition.notifications[0].type is NotificationType.ITEM_ADDED


def test_add_item_by_creator_for_new_named_participant() -> None:
    transition = lifecycle.add_item(
        make_receipt(),
        actor_user_id="ana",
        name="Cake",
        quantity=Decimal("1"),
        price=Decimal("12"),
        participant_name="Carla",
    )

    carla = transition.receipt.participants[-1]
    assert carla.name == "Carla"
    assert carla.user_id is None
    item = transition.receipt.item(str(transition.subject_id))
    assert item is not None and item.participant_id == carla.id
    assert transition.notifications == ()


def test_add_item_by_creator_reuses_participant_name_case_insensitively() -> None:
    transition = lifecycle.add_item(
        make_receipt(),
        actor_user_id="ana",
        name="Cake",
        quantity=Decimal("1"),
        price=Decimal("12"),
        participant_name="guest",
    )

    assert len(transition.receipt.participants) == 3
    item = transition.receipt.item(str(transition.subject_id))
    assert item is not None and item.participant_id == "p-guest"


def test_creator_adds_items_after_closing_own_participation() -> None:
    receipt = closed_participant(make_receipt(), "p-ana")

    transition = lifecycle.add_item(
        receipt,
        actor_user_id="ana",
        name="Coffee",
        quantity=Decimal("1"),
        price=Decimal("4"),
    )

    item = transition.receipt.item(str(transition.subject_id))
    assert item is not None and item.participant_id == "p-ana"


@pytest.mark.parametrize(
    ("receipt", "actor", "extra", "error_type", "code"),
    [
        (make_receipt(), "carla", {}, ForbiddenError, "NOT_A_PARTICIPANT"),
        (make_receipt(is_closed=True), "bia", {}, ConflictError, "RECEIPT_CLOSED"),
        (
            closed_participant(make_receipt(), "p-bia"),
            "bia",
            {},
            ConflictError,
            "PARTICIPATION_CLOSED",
        ),
        (
            make_receipt(),
            "bia",
            {"participant_id": "p-guest"},
            ForbiddenError,
            "CREATOR_ONLY",
        ),
        (
            make_receipt(),
            "bia",
            {"participant_name": "Carla"},
            ForbiddenError,
            "CREATOR_ONLY",
        ),
        (
            make_receipt(),
            "ana",
            {"participant_id": "missing"},
            NotFoundError,
            "PARTICIPANT_NOT_FOUND",
        ),
        (
            make_receipt(participants=()),
            "ana",
            {},
            ConflictError,
            "CREATOR_PARTICIPANT_MISSING",
        ),
    ],
)
def test_add_item_guards(
    receipt: ReceiptSnapshot,
    actor: str,
    extra: dict,
    error_type: type,
    code: str,
) -> None:
    with pytest.raises(error_type) as exc_info:
        lifecycle.add_item(
            receipt,
            actor_user_id=actor,
            name="Beer",
            quantity=Decimal("1"),
            price=Decimal("8"),
            **extra,
        )

    assert exc_info.value.code == code


@pytest.mark.parametrize(
    ("name", "quantity", "price"),
    [
        ("  ", Decimal("1"), Decimal("1")),
        ("Beer", Decimal("0"), Decimal("1")),
        ("Beer", Decimal("1"), Decimal("-1")),
        ("Beer", Decimal("1"), Decimal("0.333")),
        ("Beer", Decimal("0.0005"), Decimal("1")),
    ],
)
def test_add_item_validates_line(name: str, quantity: Decimal, price: Decimal) -> None:
    with pytest.raises(InvalidRequestError):
        lifecycle.add_item(
            make_receipt(),
            actor_user_id="ana",
            name=name,
            quantity=quantity,
            price=price,
        )


def test_remove_item_drops_item_and_its_request() -> None:
    receipt = make_receipt(
        deletion_requests=(
            DeletionRequestSnapshot(
                id="d1",
                item_id="i-bia",
                participant_id="p-bia",
                requested_at=NOW,
            ),
        )
    )

    transition = lifecycle.remove_item(receipt, actor_user_id="ana", item_id="i-bia")

    assert transition.receipt.item("i-bia") is None
    assert transition.receipt.deletion_requests == ()
    assert transition.receipt.total == Decimal("66.00")


def test_remove_item_guards() -> None:
    with pytest.raises(ForbiddenError):
        lifecycle.remove_item(make_receipt(), actor_user_id="bia", item_id="i-bia")
    with pytest.raises(NotFoundError) as exc_info:
        lifecycle.remove_item(make_receipt(), actor_user_id="ana", item_id="nope")

    assert exc_info.value.code == "ITEM_NOT_FOUND"


def test_view_and_delete_guards() -> None:
    receipt = make_receipt()

    lifecycle.ensure_can_view(receipt, "bia")
    lifecycle.ensure_can_delete(receipt, "ana")
    with pytest.raises(ForbiddenError) as view_error:
        lifecycle.ensure_can_view(receipt, "carla")
    with pytest.raises(ForbiddenError):
        lifecycle.ensure_can_delete(receipt, "bia")

    assert view_error.value.code == "ACCESS_DENIED"


def test_closed_receipt_never_reopens() -> None:
    receipt = lifecycle.close_receipt(make_receipt(), actor_user_id="ana").receipt

    for attempt in (
        lambda: lifecycle.update_settings(receipt, actor_user_id="ana", title="x"),
        lambda: lifecycle.close_own_participation(receipt, actor_user_id="bia"),
        lambda: lifecycle.transfer_creator(
            receipt, actor_user_id="ana", participant_id="p-bia"
        ),
        lambda: lifecycle.add_item(
            receipt,
            actor_user_id="ana",
            name="Beer",
            quantity=Decimal("1"),
            price=Decimal("1"),
        ),
    ):
        with pytest.raises(ConflictError):
            attempt()

    assert lifecycle.close_receipt(receipt, actor_user_id="ana").receipt.is_closed
