"""Notification types and payloads emitted by receipt transitions."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class NotificationType(enum.StrEnum):
    """Supported notification types."""

    PARTICIPANT_REQUEST = "participant_request"
    PARTICIPANT_APPROVED = "participant_approved"
    PARTICIPANT_REJECTED = "participant_rejected"
    DELETION_REQUEST = "deletion_request"
    DELETION_APPROVED = "deletion_approved"
    DELETION_REJECTED = "deletion_rejected"
    RECEIPT_CLOSED = "receipt_closed"
    ITEM_ADDED = "item_added"
    CREATOR_TRANSFERRED = "creator_transferred"
    CREATOR_TRANSFERRED_FROM = "creator_transferred_from"


@dataclass(frozen=True, slots=True)
class Notification:
    """Notification intent addressed to one user."""

    user_id: str
    type: NotificationType
    title: str
    message: str
    receipt_id: str | None = None
    related_user_id: str | None = None
