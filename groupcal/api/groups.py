"""
Group handlers.
"""

from groupcal.core.models import (
    GroupCreationRequest,
    GroupMembersResponse,
    GroupResponse,
    InviteRequest,
    LeaveGroupResponse,
    MessageResponse,
)
from groupcal.core.uuid import parse_identity
from groupcal.service import sync
from groupcal.service import user as user_service

from .dependencies import ContextDependency


async def create_group(
    content: GroupCreationRequest, ctx: ContextDependency
) -> GroupResponse:
    """
    Create a group. The session user is always a member, alongside any
    members supplied.
    """
    group = await sync.create_group(
        ctx,
        title=content.title,
        member_ids=content.members,
        description=content.description,
        options=content.options,
    )

    return GroupResponse(msg="Group successfully created!", group=group)


async def add_to_group(
    user_id: str, content: InviteRequest, ctx: ContextDependency
) -> MessageResponse:
    """
    Add another user to a group that you are already in.
    """
    change = await sync.invite_to_group(
        ctx,
        group_id=parse_identity(content.group_id, "group id"),
        invitee_id=parse_identity(user_id, "user id"),
    )

    if change.changed:
        return MessageResponse(msg="User successfully invited!")

    return MessageResponse(msg="User is already a member!")


async def get_group_members(
    group_id: str, ctx: ContextDependency
) -> GroupMembersResponse:
    members = await sync.get_group_members(
        ctx, group_id=parse_identity(group_id, "group id")
    )
    return GroupMembersResponse(
        msg="Fetched group members!",
        members=members,
        member_names=await user_service.ids_to_names(members, conn=ctx.conn),
    )


async def leave_group(group_id: str, ctx: ContextDependency) -> LeaveGroupResponse:
    """
    Leave a group. Events you created in it are deleted.
    """
    removed = await sync.leave_group(ctx, group_id=parse_identity(group_id, "group id"))

    return LeaveGroupResponse(
        msg="You have successfully left the group!", events_deleted=removed
    )
