"""Item deletion request ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sharezin.db.base import Base


class DeletionRequest(Base):
    """Request from an item owner to remove the item."""

    __tablename__ = "deletion_requests"
    __table_args__ = (
        UniqueConstraint("item_id", name="uq_deletion_requests_item_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    receipt_id: Mapped[str] = mapped_column(
        ForeignKey("receipts.id", ondelete="CASCADE"),
        nullable=False,
    )
    item_id: Mapped[str] = mapped_column(
        ForeignKey("receipt_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    participant_id: Mapped[str] = mapped_column(
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    receipt: Mapped[Any] = relationship("Receipt", back_populates="deletion_requests")
