"""Immutable receipt aggregate consumed by allocation and lifecycle rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4


def new_id() -> str:
    """Return a fresh opaque identifier."""

    return str(uuid4())


def resolve_now(now: datetime | None) -> datetime:
    """Return given timestamp or current UTC time when omitted."""

    if now is None:
        return datetime.now(UTC)
    if now.tzinfo is None:
        return now.replace(tzinfo=UTC)
    return now


@dataclass(frozen=True, slots=True)
class ParticipantSnapshot:
    """One billed party inside one receipt."""

    id: str
    name: str
    user_id: str | None = None
    group_id: str | None = None
    is_closed: bool = False


@dataclass(frozen=True, slots=True)
class ItemSnapshot:
    """A billed line owned by one participant."""

    id: str
    name: str
    quantity: Decimal
    price: Decimal
    participant_id: str
    added_at: datetime


@dataclass(frozen=True, slots=True)
class PendingParticipantSnapshot:
    """A join request awaiting the creator's decision."""

    id: str
    name: str
    user_id: str
    requested_at: datetime


@dataclass(frozen=True, slots=True)
class DeletionRequestSnapshot:
    """An item removal request awaiting the creator's decision."""

    id: str
    item_id: str
    participant_id: str
    requested_at: datetime


@dataclass(frozen=True, slots=True)
class ReceiptSnapshot:
    """Materialized receipt with its children already loaded."""

    id: str
    title: str
    date: datetime
    creator_id: str
    invite_code: str
    service_charge_percent: Decimal = Decimal("0")
    cover: Decimal = Decimal("0")
    items: tuple[ItemSnapshot, ...] = ()
    participants: tuple[ParticipantSnapshot, ...] = ()
    pending_participants: tuple[PendingParticipantSnapshot, ...] = ()
    deletion_requests: tuple[DeletionRequestSnapshot, ...] = ()
    total: Decimal = Decimal("0.00")
    is_closed: bool = False

    def is_creator(self, user_id: str) -> bool:
        return self.creator_id == user_id

    def participant(self, participant_id: str) -> ParticipantSnapshot | None:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def participant_for_user(self, user_id: str) -> ParticipantSnapshot | None:
        for participant in self.participants:
            if participant.user_id is not None and participant.user_id == user_id:
                return participant
        return None

    def creator_participant(self) -> ParticipantSnapshot | None:
        return self.participant_for_user(self.creator_id)

    def item(self, item_id: str) -> ItemSnapshot | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def pending_participant(self, pending_id: str) -> PendingParticipantSnapshot | None:
        for pending in self.pending_participants:
            if pending.id == pending_id:
                return pending
        return None

    def pending_for_user(self, user_id: str) -> PendingParticipantSnapshot | None:
        for pending in self.pending_participants:
            if pending.user_id == user_id:
                return pending
        return None

    def deletion_request(self, request_id: str) -> DeletionRequestSnapshot | None:
        for request in self.deletion_requests:
            if request.id == request_id:
                return request
        return None

    def deletion_request_for_item(self, item_id: str) -> DeletionRequestSnapshot | None:
        for request in self.deletion_requests:
            if request.item_id == item_id:
                return request
        return None
