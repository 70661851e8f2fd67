"""API dependency providers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from sharezin.core.settings import get_settings
from sharezin.db.session import get_db_session
from sharezin.domain.errors import AuthenticationRequiredError
from sharezin.notifications.dispatcher import NotificationDispatcher
from sharezin.repositories.group_repository import GroupRepository
from sharezin.repositories.notification_repository import NotificationRepository
from sharezin.repositories.receipt_repository import ReceiptRepository
from sharezin.services.group_service import GroupService
from sharezin.services.membership_service import MembershipService
from sharezin.services.notification_service import NotificationService
from sharezin.services.receipt_service import ReceiptService


def get_current_user_id(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
) -> str:
    """Resolve the acting user from the identity header."""

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationRequiredError()
    return user_id


def get_notification_dispatcher(request: Request) -> NotificationDispatcher | None:
    """Return the dispatcher owned by the application lifespan, if any."""

    return getattr(request.app.state, "notification_dispatcher", None)


def get_notification_service(
    session: Annotated[Session, Depends(get_db_session)],
    dispatcher: Annotated[
        NotificationDispatcher | None, Depends(get_notification_dispatcher)
    ],
) -> NotificationService:
    """Build notification service with per-request session."""

    return NotificationService(
        notification_repository=NotificationRepository(session),
        session=session,
        dispatcher=dispatcher,
    )


def get_receipt_service(
    session: Annotated[Session, Depends(get_db_session)],
    notification_service: Annotated[
        NotificationService, Depends(get_notification_service)
    ],
) -> ReceiptService:
    """Build receipt service with per-request session."""

    settings = get_settings()
    return ReceiptService(
        receipt_repository=ReceiptRepository(session),
        group_repository=GroupRepository(session),
        notifier=notification_service,
        session=session,
        invite_code_length=settings.invite_code_length,
        invite_code_max_attempts=settings.invite_code_max_attempts,
    )


def get_membership_service(
    session: Annotated[Session, Depends(get_db_session)],
    notification_service: Annotated[
        NotificationService, Depends(get_notification_service)
    ],
) -> MembershipService:
    """Build membership service with per-request session."""

    return MembershipService(
        receipt_repository=ReceiptRepository(session),
        notifier=notification_service,
        session=session,
    )


def get_group_service(
    session: Annotated[Session, Depends(get_db_session)],
) -> GroupService:
    """Build group service with per-request session."""

    return GroupService(group_repository=GroupRepository(session), session=session)
