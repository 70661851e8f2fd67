"""Pending join request ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sharezin.db.base import Base


class PendingParticipant(Base):
    """Join request awaiting the creator's decision."""

    __tablename__ = "pending_participants"
    __table_args__ = (
        UniqueConstraint(
            "receipt_id",
            "user_id",
            name="uq_pending_participants_receipt_user",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    receipt_id: Mapped[str] = mapped_column(
        ForeignKey("receipts.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    receipt: Mapped[Any] = relationship(
        "Receipt", back_populates="pending_participants"
    )
