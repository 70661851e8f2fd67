"""Receipt routes."""

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Response, status

from sharezin.api.dependencies import get_current_user_id, get_receipt_service
from sharezin.api.schemas.receipts import (
    CreateReceiptRequest,
    InvitePreviewResponse,
    ReceiptListResponse,
    ReceiptResponse,
    ReceiptSummaryResponse,
    SpendingStatsResponse,
    TransferCreatorRequest,
    UpdateReceiptRequest,
)
from sharezin.services.receipt_service import (
    CreateReceiptInput,
    ListReceiptsInput,
    ReceiptService,
    UpdateReceiptInput,
)

router = APIRouter(prefix="/receipts", tags=["Receipts"])

CurrentUser = Annotated[str, Depends(get_current_user_id)]
Service = Annotated[ReceiptService, Depends(get_receipt_service)]


@router.post(
    "",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload"},
        404: {"description": "Group not found"},
    },
)
def create_receipt(
    payload: CreateReceiptRequest,
    user_id: CurrentUser,
    service: Service,
) -> ReceiptResponse:
    """Create one open receipt owned by the acting user."""

    receipt = service.create_receipt(
        CreateReceiptInput(
            creator_user_id=user_id,
            creator_name=payload.creator_name,
            title=payload.title,
            date=payload.date,
            service_charge_percent=payload.service_charge_percent,
            cover=payload.cover,
            group_id=payload.group_id,
        )
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.get("", response_model=ReceiptListResponse)
def list_receipts(
    user_id: CurrentUser,
    service: Service,
    status: Annotated[Literal["open", "closed", "all"], Query()] = "all",
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ReceiptListResponse:
    """List receipts the acting user created or participates in."""

    items, total = service.list_receipts(
        ListReceiptsInput(user_id=user_id, status=status, limit=limit, offset=offset)
    )
    return ReceiptListResponse.from_snapshots(
        items=items,
        user_id=user_id,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/stats", response_model=SpendingStatsResponse)
def get_spending_stats(
    user_id: CurrentUser,
    service: Service,
    year: Annotated[int | None, Query(ge=1970, le=9999)] = None,
) -> SpendingStatsResponse:
    """Report what the acting user spent on closed receipts."""

    stats = service.get_spending_stats(user_id=user_id, year=year)
    return SpendingStatsResponse.from_stats(stats)


@router.get(
    "/invite/{invite_code}",
    response_model=InvitePreviewResponse,
    responses={404: {"description": "Receipt not found"}},
)
def get_receipt_by_invite_code(
    invite_code: str,
    user_id: CurrentUser,
    service: Service,
) -> InvitePreviewResponse:
    """Resolve an invite code typed in any case."""

    receipt = service.get_by_invite_code(invite_code)
    return InvitePreviewResponse.from_snapshot(receipt, user_id)


@router.get(
    "/{receipt_id}",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Not a member of the receipt"},
        404: {"description": "Receipt not found"},
    },
)
def get_receipt(
    receipt_id: str,
    user_id: CurrentUser,
    service: Service,
) -> ReceiptResponse:
    receipt = service.get_receipt(receipt_id=receipt_id, user_id=user_id)
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.patch(
    "/{receipt_id}",
    response_model=ReceiptResponse,
    responses={
        400: {"description": "Invalid payload"},
        403: {"description": "Only the creator can modify the receipt"},
        404: {"description": "Receipt not found"},
        409: {"description": "Receipt is closed"},
    },
)
def update_receipt(
    receipt_id: str,
    payload: UpdateReceiptRequest,
    user_id: CurrentUser,
    service: Service,
) -> ReceiptResponse:
    """Change title, service charge or cover."""

    receipt = service.update_receipt(
        UpdateReceiptInput(
            receipt_id=receipt_id,
            actor_user_id=user_id,
            title=payload.title,
            service_charge_percent=payload.service_charge_percent,
            cover=payload.cover,
        )
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.delete(
    "/{receipt_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        403: {"description": "Only the creator can delete the receipt"},
        404: {"description": "Receipt not found"},
    },
)
def delete_receipt(
    receipt_id: str,
    user_id: CurrentUser,
    service: Service,
) -> Response:
    service.delete_receipt(receipt_id=receipt_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{receipt_id}/summary",
    response_model=ReceiptSummaryResponse,
    responses={
        403: {"description": "Not a member of the receipt"},
        404: {"description": "Receipt not found"},
    },
)
def get_receipt_summary(
    receipt_id: str,
    user_id: CurrentUser,
    service: Service,
) -> ReceiptSummaryResponse:
    """Return totals and what every participant owes."""

    summary = service.get_summary(receipt_id=receipt_id, user_id=user_id)
    return ReceiptSummaryResponse.from_summary(summary)


@router.post(
    "/{receipt_id}/close",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the creator can close the receipt"},
        404: {"description": "Receipt not found"},
    },
)
def close_receipt(
    receipt_id: str,
    user_id: CurrentUser,
    service: Service,
) -> ReceiptResponse:
    """Close the receipt for good; closing twice changes nothing."""

    receipt = service.close_receipt(receipt_id=receipt_id, user_id=user_id)
    return ReceiptResponse.from_snapshot(receipt, user_id)


@router.put(
    "/{receipt_id}/transfer-creator",
    response_model=ReceiptResponse,
    responses={
        403: {"description": "Only the current creator can transfer"},
        404: {"description": "Receipt or participant not found"},
        409: {"description": "Target cannot receive the receipt"},
    },
)
def transfer_creator(
    receipt_id: str,
    payload: TransferCreatorRequest,
    user_id: CurrentUser,
    service: Service,
) -> ReceiptResponse:
    receipt = service.transfer_creator(
        receipt_id=receipt_id,
        user_id=user_id,
        participant_id=payload.participant_id,
    )
    return ReceiptResponse.from_snapshot(receipt, user_id)
