"""
Synchronizations: user-facing operations composed from the group, event and
calendar stores.

Stores never call each other. Each operation here runs its cross-store checks
first, then calls the stores in a fixed order and stops at the first failure.
Errors from the stores propagate unchanged, and earlier steps are not undone
when a later one fails.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.core.calendar import CalendarData, ResolvedCalendarData
from groupcal.core.event import EventData, EventOptions, EventTransportData, EventUpdate
from groupcal.core.group import GroupData, GroupOptions
from groupcal.core.models import SetChange
from groupcal.core.uuid import UUID, InvalidIdentity, parse_identity

from . import calendars, events, groups
from .authorization import Relation, require


@dataclass
class SyncContext:
    """
    Everything an operation needs: who is acting, the database session for
    this request and a logger already bound to the actor.
    """

    actor: UUID
    conn: AsyncSession
    log: FilteringBoundLogger


async def _calendar_data(ctx: SyncContext, user_id: UUID) -> CalendarData:
    calendar = await calendars.get_calendar(user_id=user_id, conn=ctx.conn, log=ctx.log)
    return calendar.to_core(
        items=await calendars.get_items(calendar.calendar_id, conn=ctx.conn)
    )


async def create_calendar(ctx: SyncContext) -> tuple[CalendarData, bool]:
    calendar, created = await calendars.create_calendar(
        user_id=ctx.actor, conn=ctx.conn, log=ctx.log
    )
    items = await calendars.get_items(calendar.calendar_id, conn=ctx.conn)
    return calendar.to_core(items=items), created


async def add_event_to_calendar(
    ctx: SyncContext, event_ref: str
) -> tuple[SetChange, CalendarData]:
    """
    Add a reference to the actor's own calendar. The reference is not checked
    against the event store; see `get_calendar` for how dangling references
    are reported.
    """
    change = await calendars.add_item(
        user_id=ctx.actor, item=event_ref, conn=ctx.conn, log=ctx.log
    )
    return change, await _calendar_data(ctx, ctx.actor)


async def _resolve(ctx: SyncContext, event_ref: str) -> EventData | None:
    """
    The event a calendar reference names, or None if the reference is not an
    event ID or its event no longer exists.
    """
    try:
        event = await events.read_by_id(
            event_id=parse_identity(event_ref), conn=ctx.conn, log=ctx.log
        )
    except (InvalidIdentity, events.EventNotFound):
        return None

    return await events.to_core(event, conn=ctx.conn)


async def delete_event_from_calendar(
    ctx: SyncContext, user_id: UUID, event_ref: str
) -> SetChange:
    """
    Remove an event reference from `user_id`'s calendar, which need not be the
    actor's own. Allowed only if the actor created the event.

    Owners may also remove references from their own calendar that no
    longer resolve to an event (see `get_calendar`).
    """
    if user_id == ctx.actor and await _resolve(ctx, event_ref) is None:
        await ctx.log.ainfo("sync.calendar.remove_dangling", item=event_ref)
        return await calendars.remove_item(
            user_id=user_id, item=event_ref, conn=ctx.conn, log=ctx.log
        )

    event_id = parse_identity(event_ref, "event id")

    await require(
        actor=ctx.actor,
        resource_id=event_id,
        relation=Relation.EVENT_CREATOR,
        conn=ctx.conn,
        log=ctx.log,
    )

    return await calendars.remove_item(
        user_id=user_id, item=event_ref, conn=ctx.conn, log=ctx.log
    )


async def get_calendar(ctx: SyncContext) -> ResolvedCalendarData:
    """
    The actor's calendar with each reference resolved against the event store.
    References that are not event IDs, or whose event has been deleted, are
    listed as dangling rather than dropped. The owner can remove them with
    `delete_event_from_calendar`.
    """
    calendar = await _calendar_data(ctx, ctx.actor)

    resolved = []
    dangling = []

    for item in calendar.items:
        event = await _resolve(ctx, item)

        if event is None:
            dangling.append(item)
        else:
            resolved.append(event)

    if dangling:
        await ctx.log.ainfo("sync.calendar.dangling", number_of_dangling=len(dangling))

    return ResolvedCalendarData(calendar=calendar, events=resolved, dangling=dangling)


async def create_group(
    ctx: SyncContext,
    title: str,
    member_ids: list[UUID],
    description: str | None = None,
    options: GroupOptions | None = None,
) -> GroupData:
    group = await groups.create(
        creator_id=ctx.actor,
        title=title,
        member_ids=member_ids,
        description=description,
        options=options,
        conn=ctx.conn,
        log=ctx.log,
    )
    members = await groups.get_members(group.group_id, conn=ctx.conn, log=ctx.log)
    return group.to_core(members=members)


async def invite_to_group(
    ctx: SyncContext, group_id: UUID, invitee_id: UUID
) -> SetChange:
    """
    Add `invitee_id` to a group the actor is already a member of.
    """
    await require(
        actor=ctx.actor,
        resource_id=group_id,
        relation=Relation.GROUP_MEMBER,
        conn=ctx.conn,
        log=ctx.log,
    )

    return await groups.invite_user(
        group_id=group_id, invitee_id=invitee_id, conn=ctx.conn, log=ctx.log
    )


async def leave_group(ctx: SyncContext, group_id: UUID) -> int:
    """
    The actor leaves the group, and the events they created in it are deleted.
    Returns the number of events removed.
    """
    await groups.leave_group(
        group_id=group_id, user_id=ctx.actor, conn=ctx.conn, log=ctx.log
    )

    return await events.delete_events_by_creator_and_group(
        creator_id=ctx.actor, group_id=group_id, conn=ctx.conn, log=ctx.log
    )


async def get_group_members(ctx: SyncContext, group_id: UUID) -> list[UUID]:
    return await groups.get_members(group_id=group_id, conn=ctx.conn, log=ctx.log)


async def get_group_calendar(ctx: SyncContext, group_id: UUID) -> list[str]:
    """
    All calendar items of all members of a group. Membership is read first and
    the calendars afterwards, with no guarantee that both reads see the same
    state.
    """
    members = await groups.get_members(group_id=group_id, conn=ctx.conn, log=ctx.log)
    return await calendars.get_items_by_group_members(
        member_ids=members, conn=ctx.conn, log=ctx.log
    )


async def create_event(
    ctx: SyncContext,
    group_id: UUID,
    title: str,
    date: str,
    description: str | None = None,
    attendee_ids: list[UUID] | None = None,
    options: EventOptions | None = None,
) -> EventData:
    """
    Create an event in a group the actor belongs to. The event store itself
    does not know about groups; the group is checked here.
    """
    await require(
        actor=ctx.actor,
        resource_id=group_id,
        relation=Relation.GROUP_MEMBER,
        conn=ctx.conn,
        log=ctx.log,
    )

    event = await events.create(
        creator_id=ctx.actor,
        group_id=group_id,
        title=title,
        date=date,
        description=description,
        attendee_ids=attendee_ids,
        options=options,
        conn=ctx.conn,
        log=ctx.log,
    )
    return await events.to_core(event, conn=ctx.conn)


async def update_event(
    ctx: SyncContext, event_id: UUID, update: EventUpdate
) -> EventData:
    await require(
        actor=ctx.actor,
        resource_id=event_id,
        relation=Relation.EVENT_CREATOR,
        conn=ctx.conn,
        log=ctx.log,
    )

    event = await events.update_event(
        event_id=event_id, update=update, conn=ctx.conn, log=ctx.log
    )
    return await events.to_core(event, conn=ctx.conn)


async def delete_event(ctx: SyncContext, event_id: UUID) -> bool:
    """
    Delete an event the actor created. Calendars that reference it keep the
    reference; it is reported as dangling when they are read.
    """
    await require(
        actor=ctx.actor,
        resource_id=event_id,
        relation=Relation.EVENT_CREATOR,
        conn=ctx.conn,
        log=ctx.log,
    )

    return await events.delete_event(event_id=event_id, conn=ctx.conn, log=ctx.log)


async def attend_event(ctx: SyncContext, event_id: UUID) -> SetChange:
    """
    The actor attends an event: they join its attendees and it is added to
    their calendar, which is created if needed.
    """
    change = await events.add_attendee(
        event_id=event_id, attendee_id=ctx.actor, conn=ctx.conn, log=ctx.log
    )

    await calendars.create_calendar(user_id=ctx.actor, conn=ctx.conn, log=ctx.log)
    await calendars.add_item(
        user_id=ctx.actor, item=str(event_id), conn=ctx.conn, log=ctx.log
    )

    return change


async def list_events(ctx: SyncContext) -> list[EventData]:
    return await events.get_events(conn=ctx.conn, log=ctx.log)


async def my_events(ctx: SyncContext) -> list[EventData]:
    return await events.get_by_user(user_id=ctx.actor, conn=ctx.conn, log=ctx.log)


async def group_events(ctx: SyncContext, group_id: UUID) -> list[EventTransportData]:
    """
    Events of a group the actor belongs to, with dates as ISO-8601 text.
    """
    await require(
        actor=ctx.actor,
        resource_id=group_id,
        relation=Relation.GROUP_MEMBER,
        conn=ctx.conn,
        log=ctx.log,
    )

    return await events.get_events_by_group_id(
        group_id=group_id, conn=ctx.conn, log=ctx.log
    )
