"""
Service layer for groups.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.core.errors import NotAllowedError, NotFoundError
from groupcal.core.group import GroupOptions
from groupcal.core.models import SetChange
from groupcal.core.uuid import UUID
from groupcal.database.group import Group, GroupMembership

from . import sets


class GroupNotFound(NotFoundError):
    pass


class NotGroupMember(NotFoundError):
    pass


class UserNotInGroup(NotAllowedError):
    def __init__(self, user_id: UUID, group_id: UUID):
        super().__init__(
            f"User {user_id} is not a member of group {group_id}",
            actor=user_id,
            resource=group_id,
        )


async def create(
    creator_id: UUID,
    title: str,
    member_ids: list[UUID],
    conn: AsyncSession,
    log: FilteringBoundLogger,
    description: str | None = None,
    options: GroupOptions | None = None,
) -> Group:
    """
    Create a new group.

    Parameters
    ----------
    creator_id: UUID
        The user that created this group.
    title: str
        Name of the group, e.g. "Smith Family".
    member_ids: list[UUID]
        The users who should initially be in the group. The creator is always
        added to this list.
    description: str | None
        Free-form description.
    options: GroupOptions | None
        Privacy, display theme and role labels.
    """
    # Keep first occurrence order, creator first
    members = list(dict.fromkeys([creator_id, *member_ids]))

    log = log.bind(
        user_id=creator_id,
        title=title,
        number_of_members=len(members),
    )

    group = Group(
        creator_id=creator_id,
        title=title,
        description=description,
        options=options.model_dump(exclude_none=True) if options else None,
        created_at=datetime.now(tz=timezone.utc),
    )
    conn.add(group)
    await conn.flush()

    for member_id in members:
        await sets.add_element(
            GroupMembership(group_id=group.group_id, user_id=member_id), conn=conn
        )

    await log.ainfo("group.created", group_id=group.group_id)

    return group


async def get_group_list(
    conn: AsyncSession,
    log: FilteringBoundLogger,
    for_user: UUID | None = None,
) -> list[Group]:
    """
    Get a list of all groups, or only those that `for_user` is a member of.
    """
    log = log.bind(for_user=for_user)
    query = select(Group)

    if for_user:
        query = query.join(
            GroupMembership, GroupMembership.group_id == Group.group_id
        ).where(GroupMembership.user_id == for_user)

    groups = (await conn.execute(query.order_by(Group.created_at))).scalars().all()
    await log.adebug("group.listed", number_of_groups=len(groups))
    return list(groups)


async def read_by_id(
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Group:
    """
    Read a group by its ID.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    """
    log = log.bind(group_id=group_id)
    group = await conn.get(Group, group_id)
    if not group:
        await log.ainfo("group.not_found")
        raise GroupNotFound(f"Group {group_id} does not exist!")
    await log.adebug("group.found")
    return group


async def get_members(
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[UUID]:
    """
    List the members of a group, in the order they joined.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    """
    await read_by_id(group_id=group_id, conn=conn, log=log)

    query = (
        select(GroupMembership.user_id)
        .where(GroupMembership.group_id == group_id)
        .order_by(GroupMembership.joined_at)
    )
    return list((await conn.execute(query)).scalars().all())


async def invite_user(
    group_id: UUID,
    invitee_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> SetChange:
    """
    Add a user to a group. Inviting an existing member does nothing and
    returns `SetChange.ALREADY_PRESENT`.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    """
    log = log.bind(group_id=group_id, invitee_id=invitee_id)
    await read_by_id(group_id=group_id, conn=conn, log=log)

    change = await sets.add_element(
        GroupMembership(group_id=group_id, user_id=invitee_id), conn=conn
    )

    if change.changed:
        await log.ainfo("group.user_added")
    else:
        await log.ainfo("group.user_already_member")

    return change


async def assert_is_in_group(
    user_id: UUID,
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    Check that a user is a member of a group.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    UserNotInGroup
        If the user is not one of its members.
    """
    log = log.bind(group_id=group_id, user_id=user_id)
    await read_by_id(group_id=group_id, conn=conn, log=log)

    query = select(GroupMembership).where(
        GroupMembership.group_id == group_id, GroupMembership.user_id == user_id
    )
    if (await conn.execute(query)).scalar_one_or_none() is None:
        await log.ainfo("group.user_not_member")
        raise UserNotInGroup(user_id=user_id, group_id=group_id)


async def leave_group(
    group_id: UUID,
    user_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> SetChange:
    """
    Remove a user from a group. The creator may leave like anyone else.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    NotGroupMember
        If the user is not currently a member.
    """
    log = log.bind(group_id=group_id, user_id=user_id)
    await read_by_id(group_id=group_id, conn=conn, log=log)

    change = await sets.remove_element(
        GroupMembership, conn=conn, group_id=group_id, user_id=user_id
    )

    if not change.changed:
        await log.ainfo("group.user_not_member")
        raise NotGroupMember(f"User {user_id} is not a member of group {group_id}!")

    await log.ainfo("group.user_removed")
    return change


async def delete_group(
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    Delete a group and its membership records. Events that reference the
    group are left alone.
    """
    log = log.bind(group_id=group_id)
    await conn.execute(
        delete(GroupMembership).where(GroupMembership.group_id == group_id)
    )
    await conn.execute(delete(Group).where(Group.group_id == group_id))
    await log.ainfo("group.deleted")
