"""Receipt aggregate persistence operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from sqlalchemy import Select, delete, exists, func, or_, select
from sqlalchemy.orm import Session, selectinload

from sharezin.db.models.deletion_request import DeletionRequest
from sharezin.db.models.participant import Participant
from sharezin.db.models.pending_participant import PendingParticipant
from sharezin.db.models.receipt import Receipt
from sharezin.db.models.receipt_item import ReceiptItem
from sharezin.domain.receipt import (
    DeletionRequestSnapshot,
    ItemSnapshot,
    ParticipantSnapshot,
    PendingParticipantSnapshot,
    ReceiptSnapshot,
)

ReceiptStatusFilter = Literal["open", "closed", "all"]


@dataclass(slots=True, frozen=True)
class ReceiptListFilters:
    """Filters for listing receipts visible to one user."""

    user_id: str
    status: ReceiptStatusFilter = "all"
    limit: int = 50
    offset: int = 0


def receipt_to_snapshot(receipt: Receipt) -> ReceiptSnapshot:
    """Materialize an ORM receipt and its children as an immutable snapshot."""

    return ReceiptSnapshot(
        id=receipt.id,
        title=receipt.title,
        date=receipt.date,
        creator_id=receipt.creator_id,
        invite_code=receipt.invite_code,
        service_charge_percent=receipt.service_charge_percent,
        cover=receipt.cover,
        items=tuple(
            ItemSnapshot(
                id=item.id,
                name=item.name,
                quantity=item.quantity,
                price=item.price,
                participant_id=item.participant_id,
                added_at=item.added_at,
            )
            for item in receipt.items
        ),
        participants=tuple(
            ParticipantSnapshot(
                id=participant.id,
                name=participant.name,
                user_id=participant.user_id,
                group_id=participant.group_id,
                is_closed=participant.is_closed,
            )
            for participant in receipt.participants
        ),
        pending_participants=tuple(
            PendingParticipantSnapshot(
                id=pending.id,
                name=pending.name,
                user_id=pending.user_id,
                requested_at=pending.requested_at,
            )
            for pending in receipt.pending_participants
        ),
        deletion_requests=tuple(
            DeletionRequestSnapshot(
                id=request.id,
                item_id=request.item_id,
                participant_id=request.participant_id,
                requested_at=request.requested_at,
            )
            for request in receipt.deletion_requests
        ),
        total=receipt.total,
        is_closed=receipt.is_closed,
    )


def _with_children(statement: Select[tuple[Receipt]]) -> Select[tuple[Receipt]]:
    return statement.options(
        selectinload(Receipt.participants),
        selectinload(Receipt.items),
        selectinload(Receipt.pending_participants),
        selectinload(Receipt.deletion_requests),
    )


class ReceiptRepository:
    """Repository that stores receipts and hands them out as snapshots."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, receipt_id: str) -> ReceiptSnapshot | None:
        """Fetch receipt snapshot by id."""

        row = self._get_row(receipt_id)
        return receipt_to_snapshot(row) if row is not None else None

    def get_for_update(self, receipt_id: str) -> ReceiptSnapshot | None:
        """Fetch and lock one receipt row for a read-check-write transition."""

        row = self._get_row(receipt_id, for_update=True)
        return receipt_to_snapshot(row) if row is not None else None

    def get_by_invite_code(self, invite_code: str) -> ReceiptSnapshot | None:
        statement = _with_children(
            select(Receipt).where(Receipt.invite_code == invite_code)
        )
        row = self._session.scalar(statement)
        return receipt_to_snapshot(row) if row is not None else None

    def invite_code_exists(self, invite_code: str) -> bool:
        statement = select(exists().where(Receipt.invite_code == invite_code))
        return bool(self._session.scalar(statement))

    def list_for_user(
        self, filters: ReceiptListFilters
    ) -> tuple[list[ReceiptSnapshot], int]:
        """List receipts the user created or participates in."""

        statement = self._apply_list_filters(select(Receipt), filters)
        total_statement = select(func.count()).select_from(statement.subquery())
        total = int(self._session.scalar(total_statement) or 0)

        page_statement = _with_children(
            statement.order_by(Receipt.updated_at.desc(), Receipt.id.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        rows = self._session.scalars(page_statement).all()
        return [receipt_to_snapshot(row) for row in rows], total

    def list_closed_for_participant(self, user_id: str) -> list[ReceiptSnapshot]:
        """List closed receipts where the user is a participant, newest first."""

        is_member = exists().where(
            Participant.receipt_id == Receipt.id,
            Participant.user_id == user_id,
        )
        statement = _with_children(
            select(Receipt)
            .where(Receipt.is_closed.is_(True), is_member)
            .order_by(Receipt.date.desc(), Receipt.id.desc())
        )
        rows = self._session.scalars(statement).all()
        return [receipt_to_snapshot(row) for row in rows]

    def add(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot:
        """Persist a new receipt together with its initial participants."""

        row = Receipt(
            id=snapshot.id,
            title=snapshot.title,
            date=snapshot.date,
            creator_id=snapshot.creator_id,
            invite_code=snapshot.invite_code,
            service_charge_percent=snapshot.service_charge_percent,
            cover=snapshot.cover,
            total=snapshot.total,
            is_closed=snapshot.is_closed,
        )
        self._session.add(row)
        self._session.flush()
        for position, participant in enumerate(snapshot.participants):
            row.participants.append(self._new_participant(participant, position))
        self._session.flush()
        return receipt_to_snapshot(row)

    def save(self, snapshot: ReceiptSnapshot) -> ReceiptSnapshot:
        """Write snapshot state back onto the stored receipt.

        Children are synchronized by id. Removals run before insertions and
        each stage is flushed so foreign keys are always satisfied.
        """

        row = self._get_row(snapshot.id)
        if row is None:
            raise LookupError(f"receipt {snapshot.id} is not stored")

        row.title = snapshot.title
        row.date = snapshot.date
        row.creator_id = snapshot.creator_id
        row.service_charge_percent = snapshot.service_charge_percent
        row.cover = snapshot.cover
        row.total = snapshot.total
        row.is_closed = snapshot.is_closed

        request_ids = {request.id for request in snapshot.deletion_requests}
        item_ids = {item.id for item in snapshot.items}
        participant_ids = {participant.id for participant in snapshot.participants}
        pending_ids = {pending.id for pending in snapshot.pending_participants}

        for request_row in list(row.deletion_requests):
            if request_row.id not in request_ids:
                row.deletion_requests.remove(request_row)
        self._session.flush()

        for item_row in list(row.items):
            if item_row.id not in item_ids:
                row.items.remove(item_row)
        self._session.flush()

        for pending_row in list(row.pending_participants):
            if pending_row.id not in pending_ids:
                row.pending_participants.remove(pending_row)
        for participant_row in list(row.participants):
            if participant_row.id not in participant_ids:
                row.participants.remove(participant_row)
        self._session.flush()

        stored_participants = {p.id: p for p in row.participants}
        next_position = max((p.position for p in row.participants), default=-1) + 1
        for participant in snapshot.participants:
            participant_row = stored_participants.get(participant.id)
            if participant_row is None:
                row.participants.append(
                    self._new_participant(participant, next_position)
                )
                next_position += 1
                continue
            participant_row.name = participant.name
            participant_row.user_id = participant.user_id
            participant_row.group_id = participant.group_id
            participant_row.is_closed = participant.is_closed
        self._session.flush()

        stored_item_ids = {item_row.id for item_row in row.items}
        for item in snapshot.items:
            if item.id not in stored_item_ids:
                row.items.append(
                    ReceiptItem(
                        id=item.id,
                        name=item.name,
                        quantity=item.quantity,
                        price=item.price,
                        participant_id=item.participant_id,
                        added_at=item.added_at,
                    )
                )
        stored_pending_ids = {pending.id for pending in row.pending_participants}
        for pending in snapshot.pending_participants:
            if pending.id not in stored_pending_ids:
                row.pending_participants.append(
                    PendingParticipant(
                        id=pending.id,
                        name=pending.name,
                        user_id=pending.user_id,
                        requested_at=pending.requested_at,
                    )
                )
        self._session.flush()

        stored_request_ids = {request_row.id for request_row in row.deletion_requests}
        for request in snapshot.deletion_requests:
            if request.id not in stored_request_ids:
                row.deletion_requests.append(
                    DeletionRequest(
                        id=request.id,
                        item_id=request.item_id,
                        participant_id=request.participant_id,
                        requested_at=request.requested_at,
                    )
                )
        self._session.flush()
        return receipt_to_snapshot(row)

    def delete(self, receipt_id: str) -> bool:
        """Delete receipt and every child row; return whether it existed."""

        row = self._get_row(receipt_id, for_update=True)
        if row is None:
            return False
        for table in (DeletionRequest, ReceiptItem, PendingParticipant, Participant):
            self._session.execute(delete(table).where(table.receipt_id == receipt_id))
        self._session.execute(delete(Receipt).where(Receipt.id == receipt_id))
        self._session.flush()
        return True

    def _get_row(self, receipt_id: str, *, for_update: bool = False) -> Receipt | None:
        statement = select(Receipt).where(Receipt.id == receipt_id)
        if for_update:
            statement = statement.with_for_update()
        return self._session.scalar(_with_children(statement))

    def _new_participant(
        self, participant: ParticipantSnapshot, position: int
    ) -> Participant:
        return Participant(
            id=participant.id,
            name=participant.name,
            user_id=participant.user_id,
            group_id=participant.group_id,
            position=position,
            is_closed=participant.is_closed,
        )

    def _apply_list_filters(
        self,
        statement: Select[tuple[Receipt]],
        filters: ReceiptListFilters,
    ) -> Select[tuple[Receipt]]:
        is_member = exists().where(
            Participant.receipt_id == Receipt.id,
            Participant.user_id == filters.user_id,
        )
        statement = statement.where(
            or_(Receipt.creator_id == filters.user_id, is_member)
        )
        if filters.status == "open":
            statement = statement.where(Receipt.is_closed.is_(False))
        elif filters.status == "closed":
            statement = statement.where(Receipt.is_closed.is_(True))
        return statement
