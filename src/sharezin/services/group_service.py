"""Group template service layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sharezin.db.models.group import Group
from sharezin.domain.errors import InvalidRequestError
from sharezin.services.transition_runner import SessionProtocol

logger = logging.getLogger(__name__)


class GroupRepositoryProtocol(Protocol):
    """Group repository contract consumed by group service."""

    def list_for_owner(self, owner_user_id: str) -> list[Group]: ...

    def add(
        self,
        *,
        owner_user_id: str,
        name: str,
        members: list[tuple[str, str | None]],
    ) -> Group: ...


@dataclass(slots=True, frozen=True)
class GroupMemberInput:
    name: str
    user_id: str | None = None


@dataclass(slots=True, frozen=True)
class CreateGroupInput:
    """Input model for group creation."""

    owner_user_id: str
    name: str
    members: tuple[GroupMemberInput, ...] = ()


class GroupService:
    """Creates and lists reusable participant lists."""

    def __init__(
        self,
        *,
        group_repository: GroupRepositoryProtocol,
        session: SessionProtocol,
    ) -> None:
        self._group_repository = group_repository
        self._session = session

    def create_group(self, payload: CreateGroupInput) -> Group:
        name = payload.name.strip()
        if not name:
            raise InvalidRequestError(message="group name is required")

        members: list[tuple[str, str | None]] = []
        for member in payload.members:
            member_name = member.name.strip()
            if not member_name:
                raise InvalidRequestError(message="member name is required")
            members.append((member_name, member.user_id))

        try:
            group = self._group_repository.add(
                owner_user_id=payload.owner_user_id,
                name=name,
                members=members,
            )
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "group_created",
            extra={"group_id": group.id, "members": len(members)},
        )
        return group

    def list_groups(self, owner_user_id: str) -> list[Group]:
        return self._group_repository.list_for_owner(owner_user_id)
