"""Group template routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from sharezin.api.dependencies import get_current_user_id, get_group_service
from sharezin.api.schemas.groups import (
    CreateGroupRequest,
    GroupListResponse,
    GroupResponse,
)
from sharezin.services.group_service import (
    CreateGroupInput,
    GroupMemberInput,
    GroupService,
)

router = APIRouter(prefix="/groups", tags=["Groups"])


@router.get("", response_model=GroupListResponse)
def list_groups(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[GroupService, Depends(get_group_service)],
) -> GroupListResponse:
    """List the acting user's groups."""

    return GroupListResponse.from_models(service.list_groups(user_id))


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload"}},
)
def create_group(
    payload: CreateGroupRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[GroupService, Depends(get_group_service)],
) -> GroupResponse:
    group = service.create_group(
        CreateGroupInput(
            owner_user_id=user_id,
            name=payload.name,
            members=tuple(
                GroupMemberInput(name=member.name, user_id=member.user_id)
                for member in payload.members
            ),
        )
    )
    return GroupResponse.from_model(group)
