"""Receipt API schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from sharezin.domain.money import format_money, item_total
from sharezin.domain.permissions import permissions_for
from sharezin.domain.receipt import (
    DeletionRequestSnapshot,
    ItemSnapshot,
    ParticipantSnapshot,
    PendingParticipantSnapshot,
    ReceiptSnapshot,
)
from sharezin.domain.spending import PeriodSpending, SpendingStats
from sharezin.services.receipt_service import ReceiptSummary

MONEY_PATTERN = r"^-?[0-9]+\.[0-9]{2}$"


def format_quantity(value: Decimal) -> str:
    """Render quantity without trailing zeros."""

    normalized = value.normalize()
    return format(normalized, "f")


class CreateReceiptRequest(BaseModel):
    """Payload for receipt creation."""

    title: str = Field(min_length=1, max_length=120)
    creator_name: str = Field(min_length=1, max_length=120)
    date: datetime | None = None
    service_charge_percent: Decimal = Field(
        default=Decimal("0"), max_digits=5, decimal_places=2
    )
    cover: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    group_id: str | None = None


class UpdateReceiptRequest(BaseModel):
    """Payload for receipt settings update."""

    title: str | None = Field(default=None, max_length=120)
    service_charge_percent: Decimal | None = Field(
        default=None, max_digits=5, decimal_places=2
    )
    cover: Decimal | None = Field(default=None, max_digits=12, decimal_places=2)


class AddItemRequest(BaseModel):
    """Payload for adding one item."""

    name: str = Field(min_length=1, max_length=120)
    quantity: Decimal = Field(default=Decimal("1"), max_digits=10, decimal_places=3)
    price: Decimal = Field(max_digits=12, decimal_places=2)
    participant_id: str | None = None
    participant_name: str | None = Field(default=None, max_length=120)

    @model_validator(mode="after")
    def validate_single_target(self) -> AddItemRequest:
        if self.participant_id is not None and self.participant_name is not None:
            raise ValueError("Send participant_id or participant_name, not both.")
        return self


class TransferCreatorRequest(BaseModel):
    """Payload for creator transfer."""

    participant_id: str = Field(min_length=1)


class JoinRequestRequest(BaseModel):
    """Payload for a join request."""

    name: str = Field(min_length=1, max_length=120)


class ParticipantResponse(BaseModel):
    id: str
    name: str
    user_id: str | None
    group_id: str | None
    is_closed: bool

    @classmethod
    def from_snapshot(cls, participant: ParticipantSnapshot) -> ParticipantResponse:
        return cls(
            id=participant.id,
            name=participant.name,
            user_id=participant.user_id,
            group_id=participant.group_id,
            is_closed=participant.is_closed,
        )


class ItemResponse(BaseModel):
    id: str
    name: str
    quantity: str
    price: str = Field(pattern=MONEY_PATTERN)
    total: str = Field(pattern=MONEY_PATTERN)
    participant_id: str
    added_at: datetime

    @classmethod
    def from_snapshot(cls, item: ItemSnapshot) -> ItemResponse:
        return cls(
            id=item.id,
            name=item.name,
            quantity=format_quantity(item.quantity),
            price=format_money(item.price),
            total=format_money(item_total(item)),
            participant_id=item.participant_id,
            added_at=item.added_at,
        )


class PendingParticipantResponse(BaseModel):
    id: str
    name: str
    user_id: str
    requested_at: datetime

    @classmethod
    def from_snapshot(
        cls, pending: PendingParticipantSnapshot
    ) -> PendingParticipantResponse:
        return cls(
            id=pending.id,
            name=pending.name,
            user_id=pending.user_id,
            requested_at=pending.requested_at,
        )


class DeletionRequestResponse(BaseModel):
    id: str
    item_id: str
    participant_id: str
    requested_at: datetime

    @classmethod
    def from_snapshot(
        cls, request: DeletionRequestSnapshot
    ) -> DeletionRequestResponse:
        return cls(
            id=request.id,
            item_id=request.item_id,
            participant_id=request.participant_id,
            requested_at=request.requested_at,
        )


class PermissionsResponse(BaseModel):
    """Actions the requesting user may take on the receipt."""

    is_creator: bool
    is_participant: bool
    can_modify_receipt: bool
    can_add_items: bool
    can_close_receipt: bool
    can_close_participation: bool


class ReceiptResponse(BaseModel):
    """Serialized receipt returned by API."""

    id: str
    title: str
    date: datetime
    creator_id: str
    invite_code: str
    service_charge_percent: str
    cover: str = Field(pattern=MONEY_PATTERN)
    total: str = Field(pattern=MONEY_PATTERN)
    is_closed: bool
    participants: list[ParticipantResponse]
    items: list[ItemResponse]
    pending_participants: list[PendingParticipantResponse]
    deletion_requests: list[DeletionRequestResponse]
    permissions: PermissionsResponse

    @classmethod
    def from_snapshot(cls, receipt: ReceiptSnapshot, user_id: str) -> ReceiptResponse:
        permissions = permissions_for(receipt, user_id)
        return cls(
            id=receipt.id,
            title=receipt.title,
            date=receipt.date,
            creator_id=receipt.creator_id,
            invite_code=receipt.invite_code,
            service_charge_percent=format_money(receipt.service_charge_percent),
            cover=format_money(receipt.cover),
            total=format_money(receipt.total),
            is_closed=receipt.is_closed,
            participants=[
                ParticipantResponse.from_snapshot(p) for p in receipt.participants
            ],
            items=[ItemResponse.from_snapshot(item) for item in receipt.items],
            pending_participants=[
                PendingParticipantResponse.from_snapshot(p)
                for p in receipt.pending_participants
            ],
            deletion_requests=[
                DeletionRequestResponse.from_snapshot(r)
                for r in receipt.deletion_requests
            ],
            permissions=PermissionsResponse(
                is_creator=permissions.is_creator,
                is_participant=permissions.is_participant,
                can_modify_receipt=permissions.can_modify_receipt,
                can_add_items=permissions.can_add_items,
                can_close_receipt=permissions.can_close_receipt,
                can_close_participation=permissions.can_close_participation,
            ),
        )


class ReceiptListResponse(BaseModel):
    """Paginated receipt list response."""

    items: list[ReceiptResponse]
    total: int = Field(ge=0)
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)

    @classmethod
    def from_snapshots(
        cls,
        *,
        items: list[ReceiptSnapshot],
        user_id: str,
        total: int,
        limit: int,
        offset: int,
    ) -> ReceiptListResponse:
        return cls(
            items=[ReceiptResponse.from_snapshot(item, user_id) for item in items],
            total=total,
            limit=limit,
            offset=offset,
        )


class InvitePreviewResponse(BaseModel):
    """What a user reaching a receipt by invite code gets to see."""

    receipt_id: str
    title: str
    date: datetime
    invite_code: str
    is_closed: bool
    creator_name: str | None
    participant_count: int = Field(ge=0)
    is_creator: bool
    is_participant: bool
    has_pending_request: bool

    @classmethod
    def from_snapshot(
        cls, receipt: ReceiptSnapshot, user_id: str
    ) -> InvitePreviewResponse:
        creator = receipt.creator_participant()
        return cls(
            receipt_id=receipt.id,
            title=receipt.title,
            date=receipt.date,
            invite_code=receipt.invite_code,
            is_closed=receipt.is_closed,
            creator_name=creator.name if creator is not None else None,
            participant_count=len(receipt.participants),
            is_creator=receipt.is_creator(user_id),
            is_participant=receipt.participant_for_user(user_id) is not None,
            has_pending_request=receipt.pending_for_user(user_id) is not None,
        )


class JoinRequestResponse(BaseModel):
    receipt_id: str
    pending_participant: PendingParticipantResponse


class ParticipantShareResponse(BaseModel):
    participant_id: str
    name: str
    items_subtotal: str = Field(pattern=MONEY_PATTERN)
    service_charge: str = Field(pattern=MONEY_PATTERN)
    cover: str = Field(pattern=MONEY_PATTERN)
    total: str = Field(pattern=MONEY_PATTERN)


class ReceiptSummaryResponse(BaseModel):
    """Totals and per-participant split of one receipt."""

    receipt_id: str
    items_total: str = Field(pattern=MONEY_PATTERN)
    service_charge: str = Field(pattern=MONEY_PATTERN)
    cover: str = Field(pattern=MONEY_PATTERN)
    total: str = Field(pattern=MONEY_PATTERN)
    participants: list[ParticipantShareResponse]

    @classmethod
    def from_summary(cls, summary: ReceiptSummary) -> ReceiptSummaryResponse:
        return cls(
            receipt_id=summary.receipt.id,
            items_total=format_money(summary.items_total),
            service_charge=format_money(summary.service_charge),
            cover=format_money(summary.cover),
            total=format_money(summary.total),
            participants=[
                ParticipantShareResponse(
                    participant_id=share.participant_id,
                    name=share.name,
                    items_subtotal=format_money(share.items_subtotal),
                    service_charge=format_money(share.service_charge),
                    cover=format_money(share.cover),
                    total=format_money(share.total),
                )
                for share in summary.shares
            ],
        )


class PeriodSpendingResponse(BaseModel):
    period: str
    total: str = Field(pattern=MONEY_PATTERN)
    receipt_count: int = Field(ge=0)

    @classmethod
    def from_periods(
        cls, periods: tuple[PeriodSpending, ...]
    ) -> list[PeriodSpendingResponse]:
        return [
            cls(
                period=period.period,
                total=format_money(period.total),
                receipt_count=period.receipt_count,
            )
            for period in periods
        ]


class ReceiptSpendingResponse(BaseModel):
    receipt_id: str
    title: str
    date: datetime
    total: str = Field(pattern=MONEY_PATTERN)


class SpendingStatsResponse(BaseModel):
    """What the acting user spent on closed receipts."""

    year: int
    by_month: list[PeriodSpendingResponse]
    by_day: list[PeriodSpendingResponse]
    by_receipt: list[ReceiptSpendingResponse]

    @classmethod
    def from_stats(cls, stats: SpendingStats) -> SpendingStatsResponse:
        return cls(
            year=stats.year,
            by_month=PeriodSpendingResponse.from_periods(stats.by_month),
            by_day=PeriodSpendingResponse.from_periods(stats.by_day),
            by_receipt=[
                ReceiptSpendingResponse(
                    receipt_id=spending.receipt_id,
                    title=spending.title,
                    date=spending.date,
                    total=format_money(spending.total),
                )
                for spending in stats.by_receipt
            ],
        )
