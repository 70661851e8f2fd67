"""Receipt aggregate root ORM model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sharezin.db.base import Base

if TYPE_CHECKING:
    from sharezin.db.models.deletion_request import DeletionRequest
    from sharezin.db.models.participant import Participant
    from sharezin.db.models.pending_participant import PendingParticipant
    from sharezin.db.models.receipt_item import ReceiptItem


class Receipt(Base):
    """Shared bill with its participants, items and pending requests."""

    __tablename__ = "receipts"
    __table_args__ = (
        CheckConstraint(
            "service_charge_percent >= 0 AND service_charge_percent <= 100",
            name="ck_receipts_service_charge_percent_range",
        ),
        CheckConstraint("cover >= 0", name="ck_receipts_cover_non_negative"),
        UniqueConstraint("invite_code", name="uq_receipts_invite_code"),
        Index("ix_receipts_creator_id", "creator_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    title: Mapped[str] = mapped_column(String(120), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    creator_id: Mapped[str] = mapped_column(String(64), nullable=False)
    invite_code: Mapped[str] = mapped_column(String(12), nullable=False)
    service_charge_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("0")
    )
    cover: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    total: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    is_closed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    participants: Mapped[list[Participant]] = relationship(
        "Participant",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="Participant.position",
    )
    items: Mapped[list[ReceiptItem]] = relationship(
        "ReceiptItem",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="ReceiptItem.added_at",
    )
    pending_participants: Mapped[list[PendingParticipant]] = relationship(
        "PendingParticipant",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="PendingParticipant.requested_at",
    )
    deletion_requests: Mapped[list[DeletionRequest]] = relationship(
        "DeletionRequest",
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="DeletionRequest.requested_at",
    )
