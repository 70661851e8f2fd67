"""API request and response schemas."""

from sharezin.api.schemas.groups import CreateGroupRequest, GroupResponse
from sharezin.api.schemas.notifications import NotificationResponse
from sharezin.api.schemas.receipts import (
    CreateReceiptRequest,
    ReceiptResponse,
    ReceiptSummaryResponse,
)

__all__ = [
    "CreateGroupRequest",
    "CreateReceiptRequest",
    "GroupResponse",
    "NotificationResponse",
    "ReceiptResponse",
    "ReceiptSummaryResponse",
]
