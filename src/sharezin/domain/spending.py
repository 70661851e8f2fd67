"""What one user spent across closed receipts.

A user's spend on a receipt is the allocation total of every participant
linked to that user. Figures stay unrounded here; callers round on output.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sharezin.domain.allocation import participant_totals
from sharezin.domain.money import ZERO
from sharezin.domain.receipt import ReceiptSnapshot


@dataclass(frozen=True, slots=True)
class ReceiptSpending:
    receipt_id: str
    title: str
    date: datetime
    total: Decimal


@dataclass(frozen=True, slots=True)
class PeriodSpending:
    period: str
    total: Decimal
    receipt_count: int


@dataclass(frozen=True, slots=True)
class SpendingStats:
    """Spend grouped by month, by day of one year, and by receipt."""

    year: int
    by_month: tuple[PeriodSpending, ...]
    by_day: tuple[PeriodSpending, ...]
    by_receipt: tuple[ReceiptSpending, ...]


def user_spending(receipt: ReceiptSnapshot, user_id: str) -> Decimal | None:
    """Return the user's share of receipt, or None when they are not in it."""

    owned = [
        participant.id
        for participant in receipt.participants
        if participant.user_id == user_id
    ]
    if not owned:
        return None
    totals = participant_totals(receipt)
    return sum((totals[participant_id] for participant_id in owned), ZERO)


def _group_by_period(
    entries: Iterable[tuple[str, ReceiptSpending]],
) -> tuple[PeriodSpending, ...]:
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    receipt_ids: dict[str, set[str]] = defaultdict(set)
    for period, spending in entries:
        totals[period] += spending.total
        receipt_ids[period].add(spending.receipt_id)
    return tuple(
        PeriodSpending(
            period=period,
            total=totals[period],
            receipt_count=len(receipt_ids[period]),
        )
        for period in sorted(totals)
    )


def spending_stats(
    receipts: Iterable[ReceiptSnapshot],
    user_id: str,
    *,
    year: int,
) -> SpendingStats:
    """Aggregate user's spend on closed receipts.

    Months cover every closed receipt; days only those dated in ``year``.
    Periods are ascending, receipts newest first.
    """

    spendings: list[ReceiptSpending] = []
    for receipt in receipts:
        if not receipt.is_closed:
            continue
        total = user_spending(receipt, user_id)
        if total is None:
            continue
        spendings.append(
            ReceiptSpending(
                receipt_id=receipt.id,
                title=receipt.title,
                date=receipt.date,
                total=total,
            )
        )
    spendings.sort(key=lambda spending: (spending.date, spending.receipt_id))
    spendings.reverse()

    return SpendingStats(
        year=year,
        by_month=_group_by_period(
            (spending.date.strftime("%Y-%m"), spending) for spending in spendings
        ),
        by_day=_group_by_period(
            (spending.date.strftime("%Y-%m-%d"), spending)
            for spending in spendings
            if spending.date.year == year
        ),
        by_receipt=tuple(spendings),
    )
