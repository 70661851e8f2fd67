"""Item and deletion request routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from sharezin.api.dependencies import (
    get_current_user_id,
    get_membership_service,
    get_receipt_service,
)
from sharezin.api.schemas.receipts import (
    AddItemRequest,
    DeletionRequestResponse,
    ReceiptResponse,
)
from sharezin.services.membership_service import MembershipService
from sharezin.services.receipt_service import AddItemInput, ReceiptService

router = APIRouter(prefix="/receipts/{receipt_id}", tags=["Items"])

CurrentUser = Annotated[str, Depends(get_current_user_id)]


@router.post(
    "/items",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload"},
        403: {"description": "Not allowed to add this item"},
        409: {"description": "Receipt or participation closed"},
    },
)
def add_item(
    receipt_id: str,
    payload: AddItemRequest,
    user_id: CurrentUser,
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
) -> ReceiptResponse:
    """Add an item for the acting user or, as creator, for anyone."""

    receipt, _ = service.add_item(
        AddItemInput(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            name=payload.name,
            quantity=payload.quantity,
            price=payload.price,
            participant_id=payload.participant_id,
            participant_name=payload.participant_name,
        )
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.delete(
    "/items/{item_id}",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can remove items"},
        404: {"description": "Item not found"},
    },
)
def remove_item(
    receipt_id: str,
    item_id: str,
    user_id: CurrentUser,
    service: Annotated[ReceiptService, Depends(get_receipt_service)],
) -> ReceiptResponse:
    receipt = service.remove_item(
        receipt_id=receipt_id, user_id=user_id, item_id=item_id
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.post(
    "/items/{item_id}/deletion-requests",
    response_model=DeletionRequestResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        403: {"description": "Only owner can request deletion of own items"},
        404: {"description": "Item not found"},
        409: {"description": "Deletion already requested"},
    },
)
def request_item_deletion(
    receipt_id: str,
    item_id: str,
    user_id: CurrentUser,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> DeletionRequestResponse:
    """Ask the creator to remove one of the acting user's items."""

    request = service.request_item_deletion(
        receipt_id=receipt_id, user_id=user_id, item_id=item_id
    )
    return DeletionRequestResponse.from_snapshot(request)


@router.post(
    "/deletion-requests/{request_id}/approve",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can review deletion requests"},
        404: {"description": "Deletion request not found"},
    },
)
def approve_deletion(
    receipt_id: str,
    request_id: str,
    user_id: CurrentUser,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> ReceiptResponse:
    receipt = service.approve_deletion(
        receipt_id=receipt_id, user_id=user_id, request_id=request_id
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.post(
    "/deletion-requests/{request_id}/reject",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can review deletion requests"},
        404: {"description": "Deletion request not found"},
    },
)
def reject_deletion(
    receipt_id: str,
    request_id: str,
    user_id: CurrentUser,
    service: Annotated[MembershipService, Depends(get_membership_service)],
) -> ReceiptResponse:
    receipt = service.reject_deletion(
        receipt_id=receipt_id, user_id=user_id, request_id=request_id
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)
