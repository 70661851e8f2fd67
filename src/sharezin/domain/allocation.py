"""Allocation of a receipt total across its participants.

Item totals go to the participant who owns the item. The service charge is
split in proportion to each participant's item subtotal and the cover is a
flat per-head fee split evenly across every participant.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from sharezin.domain.money import (
    ZERO,
    item_total,
    items_total,
    quantize_money,
    service_charge_amount,
)
from sharezin.domain.receipt import ReceiptSnapshot


@dataclass(frozen=True, slots=True)
class ParticipantShare:
    """Unrounded components of what one participant owes."""

    participant_id: str
    items_subtotal: Decimal
    service_charge: Decimal
    cover: Decimal

    @property
    def total(self) -> Decimal:
        return self.items_subtotal + self.service_charge + self.cover


def participant_breakdown(receipt: ReceiptSnapshot) -> dict[str, ParticipantShare]:
    """Return the itemised share of every current participant."""

    participant_count = len(receipt.participants)
    if participant_count == 0:
        return {}

    subtotals: dict[str, Decimal] = {
        participant.id: ZERO for participant in receipt.participants
    }
    for item in receipt.items:
        # Items of a removed participant are left out of the split.
        if item.participant_id in subtotals:
            subtotals[item.participant_id] += item_total(item)

    total_items = items_total(receipt)
    service_charge = service_charge_amount(receipt)
    cover_per_head = receipt.cover / Decimal(participant_count)

    breakdown: dict[str, ParticipantShare] = {}
    for participant_id, subtotal in subtotals.items():
        charge = ZERO
        if total_items > ZERO:
            charge = subtotal / total_items * service_charge
        breakdown[participant_id] = ParticipantShare(
            participant_id=participant_id,
            items_subtotal=subtotal,
            service_charge=charge,
            cover=cover_per_head,
        )
    return breakdown


def participant_totals(receipt: ReceiptSnapshot) -> dict[str, Decimal]:
    """Map participant id to the unrounded amount owed."""

    return {
        participant_id: share.total
        for participant_id, share in participant_breakdown(receipt).items()
    }


def rounded_participant_totals(receipt: ReceiptSnapshot) -> dict[str, Decimal]:
    """Map participant id to the amount owed rounded for reporting."""

    return {
        participant_id: quantize_money(total)
        for participant_id, total in participant_totals(receipt).items()
    }
