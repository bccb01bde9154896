"""
A single authorization capability for the synchronization layer. Every
cross-store permission check goes through `check` or `require` with the
relation the actor must hold to the resource.
"""

from enum import Enum
from typing import Awaitable, Callable

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.core.errors import NotAllowedError
from groupcal.core.uuid import UUID

from . import events, groups


class Relation(str, Enum):
    # The actor created the event
    EVENT_CREATOR = "event_creator"
    # The actor is a member of the group
    GROUP_MEMBER = "group_member"


class Decision(BaseModel):
    allowed: bool
    reason: str | None = None


async def _event_creator(
    actor: UUID, resource_id: UUID, conn: AsyncSession, log: FilteringBoundLogger
):
    await events.assert_creator_is_user(
        event_id=resource_id, user_id=actor, conn=conn, log=log
    )


async def _group_member(
    actor: UUID, resource_id: UUID, conn: AsyncSession, log: FilteringBoundLogger
):
    await groups.assert_is_in_group(
        user_id=actor, group_id=resource_id, conn=conn, log=log
    )


ASSERTIONS: dict[
    Relation,
    Callable[[UUID, UUID, AsyncSession, FilteringBoundLogger], Awaitable[None]],
] = {
    Relation.EVENT_CREATOR: _event_creator,
    Relation.GROUP_MEMBER: _group_member,
}


async def require(
    actor: UUID,
    resource_id: UUID,
    relation: Relation,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    Return if `actor` holds `relation` to the resource.

    Raises
    ------
    NotFoundError
        If the resource does not exist.
    NotAllowedError
        If the relation does not hold.
    """
    log = log.bind(actor=actor, resource_id=resource_id, relation=relation.value)

    try:
        await ASSERTIONS[relation](actor, resource_id, conn, log)
    except NotAllowedError as e:
        await log.ainfo("authorization.denied")
        raise e

    await log.adebug("authorization.allowed")


async def check(
    actor: UUID,
    resource_id: UUID,
    relation: Relation,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Decision:
    """
    Like `require`, but reports a denial as a `Decision` rather than raising.
    A missing resource still raises.
    """
    try:
        await require(
            actor=actor, resource_id=resource_id, relation=relation, conn=conn, log=log
        )
    except NotAllowedError as e:
        return Decision(allowed=False, reason=str(e))

    return Decision(allowed=True)
