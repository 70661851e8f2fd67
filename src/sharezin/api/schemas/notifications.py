"""Notification API schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from sharezin.db.models.notification import NotificationRecord
from sharezin.domain.notifications import NotificationType


class NotificationResponse(BaseModel):
    """Serialized notification."""

    id: str
    type: NotificationType
    title: str
    message: str
    receipt_id: str | None
    related_user_id: str | None
    is_read: bool
    created_at: datetime

    @classmethod
    def from_model(cls, record: NotificationRecord) -> NotificationResponse:
        return cls(
            id=record.id,
            type=record.type,
            title=record.title,
            message=record.message,
            receipt_id=record.receipt_id,
            related_user_id=record.related_user_id,
            is_read=record.is_read,
            created_at=record.created_at,
        )


class NotificationListResponse(BaseModel):
    """Paginated notification feed."""

    items: list[NotificationResponse]
    total: int = Field(ge=0)
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)

    @classmethod
    def from_models(
        cls,
        *,
        items: list[NotificationRecord],
        total: int,
        limit: int,
        offset: int,
    ) -> NotificationListResponse:
        return cls(
            items=[NotificationResponse.from_model(item) for item in items],
            total=total,
            limit=limit,
            offset=offset,
        )


class MarkNotificationsReadRequest(BaseModel):
    """Payload marking every or some notifications as read."""

    mark_all_as_read: bool = False
    notification_ids: list[str] | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def validate_target(self) -> MarkNotificationsReadRequest:
        if self.mark_all_as_read == (self.notification_ids is not None):
            raise ValueError("Send mark_all_as_read or notification_ids.")
        return self


class MarkNotificationsReadResponse(BaseModel):
    updated: int = Field(ge=0)
