"""
Event handlers.
"""

from groupcal.core.event import EventUpdate
from groupcal.core.models import (
    EventCreationRequest,
    EventListResponse,
    EventResponse,
    GroupEventListResponse,
    MessageResponse,
)
from groupcal.core.uuid import parse_identity
from groupcal.service import sync

from .dependencies import ContextDependency


async def create_event(
    content: EventCreationRequest, ctx: ContextDependency
) -> EventResponse:
    event = await sync.create_event(
        ctx,
        group_id=parse_identity(content.group_id, "group id"),
        title=content.title,
        date=content.date,
        description=content.description,
        attendee_ids=content.attendees,
        options=content.options,
    )

    return EventResponse(msg="Event successfully created!", event=event)


async def get_events(ctx: ContextDependency) -> EventListResponse:
    return EventListResponse(msg="Fetched events!", events=await sync.list_events(ctx))


async def get_my_events(ctx: ContextDependency) -> EventListResponse:
    return EventListResponse(
        msg="Fetched events you are attending!", events=await sync.my_events(ctx)
    )


async def get_group_events(
    group_id: str, ctx: ContextDependency
) -> GroupEventListResponse:
    events = await sync.group_events(ctx, group_id=parse_identity(group_id, "group id"))
    return GroupEventListResponse(msg="Fetched events for group!", events=events)


async def update_event(
    event_id: str, content: EventUpdate, ctx: ContextDependency
) -> EventResponse:
    event = await sync.update_event(
        ctx, event_id=parse_identity(event_id, "event id"), update=content
    )
    return EventResponse(msg="Event updated successfully!", event=event)


async def delete_event(event_id: str, ctx: ContextDependency) -> MessageResponse:
    await sync.delete_event(ctx, event_id=parse_identity(event_id, "event id"))
    return MessageResponse(msg="Event deleted successfully!")


async def attend_event(event_id: str, ctx: ContextDependency) -> MessageResponse:
    change = await sync.attend_event(ctx, event_id=parse_identity(event_id, "event id"))

    if change.changed:
        return MessageResponse(msg="Attendee added successfully!")

    return MessageResponse(msg="Attendee is already added!")
