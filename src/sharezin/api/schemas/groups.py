"""Group API schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from sharezin.db.models.group import Group


class GroupMemberRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    user_id: str | None = None


class CreateGroupRequest(BaseModel):
    """Payload for group creation."""

    name: str = Field(min_length=1, max_length=120)
    members: list[GroupMemberRequest] = Field(default_factory=list)


class GroupMemberResponse(BaseModel):
    name: str
    user_id: str | None


class GroupResponse(BaseModel):
    """Serialized group template."""

    id: str
    name: str
    owner_user_id: str
    members: list[GroupMemberResponse]

    @classmethod
    def from_model(cls, group: Group) -> GroupResponse:
        return cls(
            id=group.id,
            name=group.name,
            owner_user_id=group.owner_user_id,
            members=[
                GroupMemberResponse(name=member.name, user_id=member.user_id)
                for member in group.members
            ],
        )


class GroupListResponse(BaseModel):
    groups: list[GroupResponse]

    @classmethod
    def from_models(cls, groups: list[Group]) -> GroupListResponse:
        return cls(groups=[GroupResponse.from_model(group) for group in groups])
