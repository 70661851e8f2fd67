"""Receipt service layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sharezin.db.models.group import Group
from sharezin.domain import lifecycle
from sharezin.domain.allocation import participant_breakdown
from sharezin.domain.errors import (
    DomainInvariantError,
    InvalidRequestError,
    NotFoundError,
    ReceiptNotFoundError,
    compose_error_message,
)
from sharezin.domain.invite_code import (
    INVITE_CODE_LENGTH,
    generate_invite_code,
    normalize_invite_code,
)
from sharezin.domain.money import (
    items_total,
    quantize_money,
    receipt_total,
    service_charge_amount,
)
from sharezin.domain.receipt import (
    ParticipantSnapshot,
    ReceiptSnapshot,
    new_id,
    resolve_now,
)
from sharezin.domain.spending import SpendingStats, spending_stats
from sharezin.repositories.receipt_repository import (
    ReceiptListFilters,
    ReceiptStatusFilter,
)
from sharezin.services.transition_runner import (
    NotifierProtocol,
    SessionProtocol,
    TransitionRunner,
)

logger = logging.getLogger(__name__)


class ReceiptRepositoryProtocol(Protocol):
    """Receipt repository contract consumed by receipt service."""

    def get(self, receipt_id: str) -> ReceiptSnapshot | None: ...

    def get_for_update(self, receipt_id: str) -> ReceiptSnapshot | None: ...

    def get_by_invite_code(self, invite_code: str) -> ReceiptSnapshot | None: ...

    def invite_code_exists(self, invite_code: str) -> bool: ...

    def list_for_user(
        self, filters: ReceiptListFilters
    ) -> tuple[list[ReceiptSnapshot], int]: ...

    def list_closed_for_participant(self, user_id: str) -> list[ReceiptSnapshot]: ...

    def add(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot: ...

    def save(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot: ...

    def delete(self, receipt_id: str) -> bool: ...


class GroupRepositoryProtocol(Protocol):
    """Group repository contract consumed by receipt service."""

    def get(self, group_id: str) -> Group | None: ...


@dataclass(slots=True, frozen=True)
class CreateReceiptInput:
    """Input model for receipt creation."""

    creator_user_id: str
    creator_name: str
    title: str
    date: datetime | None = None
    service_charge_percent: Decimal = Decimal("0")
    cover: Decimal = Decimal("0")
    group_id: str | None = None


@dataclass(slots=True, frozen=True)
class UpdateReceiptInput:
    """Input model for receipt settings update."""

    receipt_id: str
    actor_user_id: str
    title: str | None = None
    service_charge_percent: Decimal | None = None
    cover: Decimal | None = None


@dataclass(slots=True, frozen=True)
class ListReceiptsInput:
    """Input model for receipt listing."""

    user_id: str
    status: ReceiptStatusFilter = "all"
    limit: int = 50
    offset: int = 0


@dataclass(slots=True, frozen=True)
class AddItemInput:
    """Input model for adding an item to a receipt."""

    receipt_id: str
    actor_user_id: str
    name: str
    quantity: Decimal
    price: Decimal
    participant_id: str | None = None
    participant_name: str | None = None


@dataclass(slots=True, frozen=True)
class SummaryShare:
    """Rounded components of one participant's share."""

    participant_id: str
    name: str
    items_subtotal: Decimal
    service_charge: Decimal
    cover: Decimal
    total: Decimal


@dataclass(slots=True, frozen=True)
class ReceiptSummary:
    """Rounded totals and per-participant shares of one receipt."""

    receipt: ReceiptSnapshot
    items_total: Decimal
    service_charge: Decimal
    cover: Decimal
    total: Decimal
    shares: tuple[SummaryShare, ...]


class ReceiptService:
    """Coordinates receipt CRUD and lifecycle use cases."""

    def __init__(
        self,
        *,
        receipt_repository: ReceiptRepositoryProtocol,
        group_repository: GroupRepositoryProtocol,
        notifier: NotifierProtocol,
        session: SessionProtocol,
        invite_code_length: int = INVITE_CODE_LENGTH,
        invite_code_max_attempts: int = 5,
    ) -> None:
        self._receipt_repository = receipt_repository
        self._group_repository = group_repository
        self._session = session
        self._invite_code_length = invite_code_length
        self._invite_code_max_attempts = invite_code_max_attempts
        self._runner = TransitionRunner(
            receipt_repository=receipt_repository,
            notifier=notifier,
            session=session,
        )

    def create_receipt(self, payload: CreateReceiptInput) -> ReceiptSnapshot:
        """Create an open receipt with the creator as first participant."""

        title = lifecycle.validate_title(payload.title)
        lifecycle.validate_charges(payload.service_charge_percent, payload.cover)
        creator_name = payload.creator_name.strip()
        if not creator_name:
            raise InvalidRequestError(message="creator name is required")

        participants = [
            ParticipantSnapshot(
                id=new_id(),
                name=creator_name,
                user_id=payload.creator_user_id,
            )
        ]
        if payload.group_id is not None:
            participants.extend(
                self._participants_from_group(
                    group_id=payload.group_id,
                    owner_user_id=payload.creator_user_id,
                )
            )

        try:
            receipt = ReceiptSnapshot(
                id=new_id(),
                title=title,
                date=resolve_now(payload.date),
                creator_id=payload.creator_user_id,
                invite_code=self._allocate_invite_code(),
                service_charge_percent=payload.service_charge_percent,
                cover=payload.cover,
                participants=tuple(participants),
            )
            created = self._receipt_repository.add(lifecycle.with_total(receipt))
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "receipt_created",
            extra={
                "receipt_id": created.id,
                "creator_id": created.creator_id,
                "participants": len(created.participants),
            },
        )
        return created

    def get_receipt(self, *, receipt_id: str, user_id: str) -> ReceiptSnapshot:
        receipt = self._require_receipt(receipt_id)
        lifecycle.ensure_can_view(receipt, user_id)
        return receipt

    def get_by_invite_code(self, invite_code: str) -> ReceiptSnapshot:
        """Resolve free-text invite code to a receipt."""

        normalized = normalize_invite_code(invite_code)
        receipt = (
            self._receipt_repository.get_by_invite_code(normalized)
            if normalized
            else None
        )
        if receipt is None:
            raise ReceiptNotFoundError(details={"invite_code": normalized})
        return receipt

    def list_receipts(
        self, payload: ListReceiptsInput
    ) -> tuple[list[ReceiptSnapshot], int]:
        return self._receipt_repository.list_for_user(
            ReceiptListFilters(
                user_id=payload.user_id,
                status=payload.status,
                limit=payload.limit,
                offset=payload.offset,
            )
        )

    def get_spending_stats(
        self, *, user_id: str, year: int | None = None
    ) -> SpendingStats:
        """Aggregate what the user spent on closed receipts."""

        receipts = self._receipt_repository.list_closed_for_participant(user_id)
        return spending_stats(
            receipts,
            user_id,
            year=year if year is not None else resolve_now(None).year,
        )

    def update_receipt(self, payload: UpdateReceiptInput) -> ReceiptSnapshot:
        transition = self._runner.run(
            receipt_id=payload.receipt_id,
            actor_user_id=payload.actor_user_id,
            action="update_settings",
            apply=lambda receipt: lifecycle.update_settings(
                receipt,
                actor_user_id=payload.actor_user_id,
                title=payload.title,
                service_charge_percent=payload.service_charge_percent,
                cover=payload.cover,
            ),
        )
        return transition.receipt

    def delete_receipt(self, *, receipt_id: str, user_id: str) -> None:
        """Delete a receipt with everything it owns. Creator only."""

        try:
            receipt = self._receipt_repository.get_for_update(receipt_id)
            if receipt is None:
                raise ReceiptNotFoundError(details={"receipt_id": receipt_id})
            lifecycle.ensure_can_delete(receipt, user_id)
            self._receipt_repository.delete(receipt_id)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
        logger.info(
            "receipt_deleted",
            extra={"receipt_id": receipt_id, "actor_user_id": user_id},
        )

    def get_summary(self, *, receipt_id: str, user_id: str) -> ReceiptSummary:
        """Report totals and the per-participant split, rounded."""

        receipt = self.get_receipt(receipt_id=receipt_id, user_id=user_id)
        names = {
            participant.id: participant.name for participant in receipt.participants
        }
        shares = tuple(
            SummaryShare(
                participant_id=share.participant_id,
                name=names[share.participant_id],
                items_subtotal=quantize_money(share.items_subtotal),
                service_charge=quantize_money(share.service_charge),
                cover=quantize_money(share.cover),
                total=quantize_money(share.total),
            )
            for share in participant_breakdown(receipt).values()
        )
        return ReceiptSummary(
            receipt=receipt,
            items_total=quantize_money(items_total(receipt)),
            service_charge=quantize_money(service_charge_amount(receipt)),
            cover=quantize_money(receipt.cover),
            total=quantize_money(receipt_total(receipt)),
            shares=shares,
        )

    def close_receipt(self, *, receipt_id: str, user_id: str) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="close_receipt",
            apply=lambda receipt: lifecycle.close_receipt(
                receipt, actor_user_id=user_id
            ),
        ).receipt

    def close_my_participation(
        self, *, receipt_id: str, user_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="close_own_participation",
            apply=lambda receipt: lifecycle.close_own_participation(
                receipt, actor_user_id=user_id
            ),
        ).receipt

    def close_participant(
        self, *, receipt_id: str, user_id: str, participant_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="close_participant",
            apply=lambda receipt: lifecycle.close_participant(
                receipt, actor_user_id=user_id, participant_id=participant_id
            ),
        ).receipt

    def remove_participant(
        self, *, receipt_id: str, user_id: str, participant_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="remove_participant",
            apply=lambda receipt: lifecycle.remove_participant(
                receipt, actor_user_id=user_id, participant_id=participant_id
            ),
        ).receipt

    def transfer_creator(
        self, *, receipt_id: str, user_id: str, participant_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="transfer_creator",
            apply=lambda receipt: lifecycle.transfer_creator(
                receipt, actor_user_id=user_id, participant_id=participant_id
            ),
        ).receipt

    def add_item(self, payload: AddItemInput) -> tuple[ReceiptSnapshot, str]:
        """Add an item and return the updated receipt with the new item id."""

        transition = self._runner.run(
            receipt_id=payload.receipt_id,
            actor_user_id=payload.actor_user_id,
            action="add_item",
            apply=lambda receipt: lifecycle.add_item(
                receipt,
                actor_user_id=payload.actor_user_id,
                name=payload.name,
                quantity=payload.quantity,
                price=payload.price,
                participant_id=payload.participant_id,
                participant_name=payload.participant_name,
            ),
        )
        return transition.receipt, str(transition.subject_id)

    def remove_item(
        self, *, receipt_id: str, user_id: str, item_id: str
    ) -> ReceiptSnapshot:
        return self._runner.run(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            action="remove_item",
            apply=lambda receipt: lifecycle.remove_item(
                receipt, actor_user_id=user_id, item_id=item_id
            ),
        ).receipt

    def _require_receipt(self, receipt_id: str) -> ReceiptSnapshot:
        receipt = self._receipt_repository.get(receipt_id)
        if receipt is None:
            raise ReceiptNotFoundError(details={"receipt_id": receipt_id})
        return receipt

    def _participants_from_group(
        self, *, group_id: str, owner_user_id: str
    ) -> list[ParticipantSnapshot]:
        group = self._group_repository.get(group_id)
        if group is None or group.owner_user_id != owner_user_id:
            raise NotFoundError(
                code="GROUP_NOT_FOUND",
                message="group not found",
                details={"group_id": group_id},
            )
        return [
            ParticipantSnapshot(
                id=new_id(),
                name=member.name,
                user_id=member.user_id,
                group_id=group.id,
            )
            for member in group.members
            if member.user_id != owner_user_id
        ]

    def _allocate_invite_code(self) -> str:
        """Draw codes until one is free; uniqueness is still enforced on insert."""

        for attempt in range(1, self._invite_code_max_attempts + 1):
            code = generate_invite_code(self._invite_code_length)
            if not self._receipt_repository.invite_code_exists(code):
                return code
            logger.warning(
                "invite_code_collision",
                extra={"attempt": attempt, "invite_code": code},
            )
        raise DomainInvariantError(
            message=compose_error_message(
                cause="Could not allocate a unique invite code.",
                action="Retry the receipt creation.",
            ),
            details={"attempts": self._invite_code_max_attempts},
        )

