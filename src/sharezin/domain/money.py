"""Money math over receipt snapshots.

Sums are kept at full Decimal precision and only rounded, HALF_UP to two
places, when a figure is reported.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharezin.domain.receipt import ItemSnapshot, ReceiptSnapshot

MONEY_PRECISION = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Fractional digits persisted for prices, cover and percent, and for quantities.
MONEY_PLACES = 2
QUANTITY_PLACES = 3


def decimal_places(value: Decimal) -> int:
    """Return how many significant fractional digits value carries."""

    exponent = value.normalize().as_tuple().exponent
    if not isinstance(exponent, int):
        return 0
    return max(0, -exponent)


def quantize_money(value: Decimal) -> Decimal:
    """Return value rounded to two decimal places with HALF_UP strategy."""

    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def parse_money(value: str) -> Decimal:
    """Parse and normalize input money string into Decimal."""

    return quantize_money(Decimal(value))


def format_money(value: Decimal) -> str:
    """Render money as string with exactly two decimal places."""

    return f"{quantize_money(value):.2f}"


def item_total(item: ItemSnapshot) -> Decimal:
    return item.quantity * item.price


def items_total(receipt: ReceiptSnapshot) -> Decimal:
    """Sum of every line before service charge and cover."""

    return sum((item_total(item) for item in receipt.items), ZERO)


def service_charge_amount(receipt: ReceiptSnapshot) -> Decimal:
    return items_total(receipt) * (receipt.service_charge_percent / HUNDRED)


def receipt_total(receipt: ReceiptSnapshot) -> Decimal:
    """Items plus service charge plus cover, unrounded."""

    return items_total(receipt) + service_charge_amount(receipt) + receipt.cover
