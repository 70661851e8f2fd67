"""Notification feed routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from sharezin.api.dependencies import get_current_user_id, get_notification_service
from sharezin.api.schemas.notifications import (
    MarkNotificationsReadRequest,
    MarkNotificationsReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from sharezin.services.notification_service import (
    ListNotificationsInput,
    NotificationService,
)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    unread_only: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> NotificationListResponse:
    """List the acting user's notifications, newest first."""

    items, total = service.list_notifications(
        ListNotificationsInput(
            user_id=user_id,
            unread_only=unread_only,
            limit=limit,
            offset=offset,
        )
    )
    return NotificationListResponse.from_models(
        items=items, total=total, limit=limit, offset=offset
    )


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    responses={404: {"description": "Notification not found"}},
)
def mark_notification_read(
    notification_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> NotificationResponse:
    record = service.mark_read(user_id=user_id, notification_id=notification_id)
    return NotificationResponse.from_model(record)


@router.put("", response_model=MarkNotificationsReadResponse)
def mark_notifications_read(
    payload: MarkNotificationsReadRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> MarkNotificationsReadResponse:
    """Mark every unread notification, or the listed ones, as read."""

    updated = service.mark_many_read(
        user_id=user_id,
        notification_ids=None if payload.mark_all_as_read else payload.notification_ids,
    )
    return MarkNotificationsReadResponse(updated=updated)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Notification not found"}},
)
def delete_notification(
    notification_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> Response:
    service.delete_notification(user_id=user_id, notification_id=notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
