"""Group template persistence operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from sharezin.db.models.group import Group, GroupMember


class GroupRepository:
    """Repository for participant group templates."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, group_id: str) -> Group | None:
        statement = (
            select(Group)
            .where(Group.id == group_id)
            .options(selectinload(Group.members))
        )
        return self._session.scalar(statement)

    def list_for_owner(self, owner_user_id: str) -> list[Group]:
        statement = (
            select(Group)
            .where(Group.owner_user_id == owner_user_id)
            .options(selectinload(Group.members))
            .order_by(Group.name.asc(), Group.id.asc())
        )
        return list(self._session.scalars(statement).all())

    def add(
        self,
        *,
        owner_user_id: str,
        name: str,
        members: list[tuple[str, str | None]],
    ) -> Group:
        """Persist group with members kept in the given order."""

        group = Group(owner_user_id=owner_user_id, name=name)
        group.members = [
            GroupMember(name=member_name, user_id=member_user_id, position=index)
            for index, (member_name, member_user_id) in enumerate(members)
        ]
        self._session.add(group)
        self._session.flush()
        return group
