"""
Calendar handlers.
"""

from groupcal.core.models import (
    AddCalendarItemRequest,
    CalendarResponse,
    GroupCalendarResponse,
    MessageResponse,
    ResolvedCalendarResponse,
)
from groupcal.core.uuid import parse_identity
from groupcal.service import sync

from .dependencies import ContextDependency


async def create_calendar(ctx: ContextDependency) -> CalendarResponse:
    calendar, created = await sync.create_calendar(ctx)

    if created:
        return CalendarResponse(msg="Calendar created successfully!", calendar=calendar)

    return CalendarResponse(msg="User already has a calendar!", calendar=calendar)


async def get_calendar(ctx: ContextDependency) -> ResolvedCalendarResponse:
    return ResolvedCalendarResponse(
        msg="User's calendar fetched!", calendar=await sync.get_calendar(ctx)
    )


async def add_event_to_calendar(
    content: AddCalendarItemRequest, ctx: ContextDependency
) -> CalendarResponse:
    change, calendar = await sync.add_event_to_calendar(ctx, event_ref=content.event_id)

    if change.changed:
        return CalendarResponse(msg="Event added to calendar!", calendar=calendar)

    return CalendarResponse(msg="Event is already in the calendar!", calendar=calendar)


async def delete_event_from_calendar(
    event_id: str, user_id: str, ctx: ContextDependency
) -> MessageResponse:
    """
    Remove an event from any user's calendar. Only the event's creator may do
    this.
    """
    change = await sync.delete_event_from_calendar(
        ctx, user_id=parse_identity(user_id, "user id"), event_ref=event_id
    )

    if change.changed:
        return MessageResponse(msg="Event removed from calendar!")

    return MessageResponse(msg="Event not found in the calendar!")


async def get_group_calendar(
    group_id: str, ctx: ContextDependency
) -> GroupCalendarResponse:
    events = await sync.get_group_calendar(
        ctx, group_id=parse_identity(group_id, "group id")
    )
    return GroupCalendarResponse(
        msg="Fetched calendar events for group members!", events=events
    )
