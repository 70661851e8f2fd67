"""What a given user may do on a receipt, for clients rendering actions."""

from __future__ import annotations

from dataclasses import dataclass

from sharezin.domain.receipt import ReceiptSnapshot


@dataclass(frozen=True, slots=True)
class ReceiptPermissions:
    is_creator: bool
    is_participant: bool
    can_modify_receipt: bool
    can_add_items: bool
    can_close_receipt: bool
    can_close_participation: bool


def permissions_for(receipt: ReceiptSnapshot, user_id: str) -> ReceiptPermissions:
    """Project lifecycle guards into flags for one user."""

    is_creator = receipt.is_creator(user_id)
    participant = receipt.participant_for_user(user_id)
    is_participant = participant is not None
    participant_closed = participant is not None and participant.is_closed
    is_open = not receipt.is_closed

    return ReceiptPermissions(
        is_creator=is_creator,
        is_participant=is_participant,
        can_modify_receipt=is_creator and is_open,
        can_add_items=is_open
        and (is_creator or (is_participant and not participant_closed)),
        can_close_receipt=is_creator and is_open,
        can_close_participation=is_participant and is_open and not participant_closed,
    )
