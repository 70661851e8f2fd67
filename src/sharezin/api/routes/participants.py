"""Participant and join request routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from sharezin.api.dependencies import (
    get_current_user_id,
    get_membership_service,
    get_receipt_service,
)
from sharezin.api.schemas.receipts import (
    JoinRequestRequest,
    JoinRequestResponse,
    PendingParticipantResponse,
    ReceiptResponse,
)
from sharezin.services.membership_service import JoinRequestInput, MembershipService
from sharezin.services.receipt_service import ReceiptService

router = APIRouter(prefix="/receipts/{receipt_id}", tags=["Participants"])

CurrentUser = Annotated[str, Depends(get_current_user_id)]


@router.post(
    "/participants/me/close",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Not a participant"},
        409: {"description": "Receipt or participation already closed"},
    },
)
def close_my_participation(
    receipt_id: str,
    user_id: CurrentUser,
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
) -> ReceiptResponse:
    """Mark the acting user as done adding items."""

    receipt = service.close_my_participation(receipt_id=receipt_id, user_id=user_id)
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.post(
    "/participants/{participant_id}/close",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can close other participations"},
        404: {"description": "Participant not found"},
        409: {"description": "Receipt or participation already closed"},
    },
)
def close_participant(
    receipt_id: str,
    participant_id: str,
    user_id: CurrentUser,
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
) -> ReceiptResponse:
    receipt = service.close_participant(
        receipt_id=receipt_id,
        user_id=user_id,
        participant_id=participant_id,
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.delete(
    "/participants/{participant_id}",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can remove participants"},
        404: {"description": "Participant not found"},
    },
)
def remove_participant(
    receipt_id: str,
    participant_id: str,
    user_id: CurrentUser,
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
) -> ReceiptResponse:
    """Remove a participant with their items and deletion requests."""

    receipt = service.remove_participant(
        receipt_id=receipt_id,
        user_id=user_id,
        participant_id=participant_id,
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.post(
    "/join-requests",
    response_model=JoinRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Receipt not found"},
        409: {"description": "Receipt closed or user already joined"},
    },
)
def request_join(
    receipt_id: str,
    payload: JoinRequestRequest,
    user_id: CurrentUser,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> JoinRequestResponse:
    """Ask the creator to be added as a participant."""

    pending = service.request_join(
        JoinRequestInput(receipt_id=receipt_id, user_id=user_id, name=payload.name)
    )
    return JoinRequestResponse(
        receipt_id=receipt_id,
        pending_participant=PendingParticipantResponse.from_snapshot(pending),
    )


@router.post(
    "/join-requests/{pending_id}/approve",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can review join requests"},
        404: {"description": "Join request not found"},
    },
)
def approve_join(
    receipt_id: str,
    pending_id: str,
    user_id: CurrentUser,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> ReceiptResponse:
    receipt = service.approve_join(
        receipt_id=receipt_id, user_id=user_id, pending_id=pending_id
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.post(
    "/join-requests/{pending_id}/reject",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can review join requests"},
        404: {"description": "Join request not found"},
    },
)
def reject_join(
    receipt_id: str,
    pending_id: str,
    user_id: CurrentUser,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> ReceiptResponse:
    receipt = service.reject_join(
        receipt_id=receipt_id, user_id=user_id, pending_id=pending_id
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)
