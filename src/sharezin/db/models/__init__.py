"""ORM models for the sharezin domain."""

from sharezin.db.models.deletion_request import DeletionRequest
from sharezin.db.models.group import Group, GroupMember
from sharezin.db.models.notification import NotificationRecord
from sharezin.db.models.participant import Participant
from sharezin.db.models.pending_participant import PendingParticipant
from sharezin.db.models.receipt import Receipt
from sharezin.db.models.receipt_item import ReceiptItem

__all__ = [
    "DeletionRequest",
    "Group",
    "GroupMember",
    "NotificationRecord",
    "Participant",
    "PendingParticipant",
    "Receipt",
    "ReceiptItem",
]
