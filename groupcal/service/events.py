"""
Service layer for events.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.core.errors import NotAllowedError, NotFoundError
from groupcal.core.event import EventData, EventOptions, EventTransportData, EventUpdate
from groupcal.core.instant import InvalidDate, parse_instant, render_instant
from groupcal.core.models import SetChange
from groupcal.core.uuid import UUID
from groupcal.database.event import Event, EventAttendee

from . import sets


class EventNotFound(NotFoundError):
    pass


class EventCreatorNotMatch(NotAllowedError):
    """
    The user trying to modify the event is not its creator.
    """

    def __init__(self, user_id: UUID, event_id: UUID):
        super().__init__(
            f"{user_id} is not the creator of event {event_id}!",
            actor=user_id,
            resource=event_id,
        )


async def create(
    creator_id: UUID,
    group_id: UUID,
    title: str,
    date: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    description: str | None = None,
    attendee_ids: list[UUID] | None = None,
    options: EventOptions | None = None,
) -> Event:
    """
    Create a new event.

    Parameters
    ----------
    creator_id: UUID
        The user creating the event. Cannot be changed afterwards.
    group_id: UUID
        The group the event belongs to. Not checked against the group store.
    title: str
        Title of the event.
    date: str
        ISO-8601 text, e.g. '2024-12-31T18:30:00Z'.
    description: str | None
        Free-form description.
    attendee_ids: list[UUID] | None
        Users attending the event.
    options: EventOptions | None
        Location, reminder flag and theme.

    Raises
    ------
    InvalidDate
        If `date` cannot be parsed.
    """
    log = log.bind(creator_id=creator_id, group_id=group_id, title=title)

    try:
        instant = parse_instant(date)
    except InvalidDate as e:
        await log.ainfo("event.invalid_date", date=date)
        raise e

    event = Event(
        creator_id=creator_id,
        group_id=group_id,
        title=title,
        date=instant,
        description=description,
        options=options.model_dump(exclude_none=True) if options else None,
        created_at=datetime.now(tz=timezone.utc),
    )
    conn.add(event)
    await conn.flush()

    for attendee_id in dict.fromkeys(attendee_ids or []):
        await sets.add_element(
            EventAttendee(event_id=event.event_id, user_id=attendee_id), conn=conn
        )

    await log.ainfo("event.created", event_id=event.event_id)

    return event


async def read_by_id(
    event_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Event:
    """
    Read an event by its ID.

    Raises
    ------
    EventNotFound
        If the event does not exist.
    """
    log = log.bind(event_id=event_id)
    event = await conn.get(Event, event_id)
    if not event:
        await log.ainfo("event.not_found")
        raise EventNotFound(f"Event {event_id} does not exist!")
    await log.adebug("event.found")
    return event


async def get_attendees(event_id: UUID, conn: AsyncSession) -> list[UUID]:
    query = (
        select(EventAttendee.user_id)
        .where(EventAttendee.event_id == event_id)
        .order_by(EventAttendee.added_at)
    )
    return list((await conn.execute(query)).scalars().all())


async def to_core(event: Event, conn: AsyncSession) -> EventData:
    """
    Convert an event, with its attendees, to its core representation.
    """
    return event.to_core(attendees=await get_attendees(event.event_id, conn=conn))


async def assert_creator_is_user(
    event_id: UUID,
    user_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    Check that `user_id` created the event.

    Raises
    ------
    EventNotFound
        If the event does not exist.
    EventCreatorNotMatch
        If the event exists but was created by someone else.
    """
    log = log.bind(event_id=event_id, user_id=user_id)
    event = await read_by_id(event_id=event_id, conn=conn, log=log)

    if event.creator_id != user_id:
        await log.ainfo("event.creator_mismatch", creator_id=event.creator_id)
        raise EventCreatorNotMatch(user_id=user_id, event_id=event_id)


async def get_events(
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[EventData]:
    """
    All events, earliest first.
    """
    events = (await conn.execute(select(Event).order_by(Event.date))).scalars().all()
    await log.adebug("event.listed", number_of_events=len(events))
    return [await to_core(event, conn=conn) for event in events]


async def get_by_user(
    user_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[EventData]:
    """
    Events that `user_id` is attending, earliest first.
    """
    log = log.bind(user_id=user_id)
    query = (
        select(Event)
        .join(EventAttendee, EventAttendee.event_id == Event.event_id)
        .where(EventAttendee.user_id == user_id)
        .order_by(Event.date)
    )
    events = (await conn.execute(query)).scalars().all()
    await log.adebug("event.listed_for_user", number_of_events=len(events))
    return [await to_core(event, conn=conn) for event in events]


async def get_events_by_group_id(
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[EventTransportData]:
    """
    Events belonging to a group, earliest first, with dates rendered as
    ISO-8601 text.
    """
    log = log.bind(group_id=group_id)
    query = select(Event).where(Event.group_id == group_id).order_by(Event.date)
    events = (await conn.execute(query)).scalars().all()
    await log.adebug("event.listed_for_group", number_of_events=len(events))

    transport = []
    for event in events:
        core = await to_core(event, conn=conn)
        transport.append(
            EventTransportData(
                **core.model_dump(exclude={"date"}), date=render_instant(core.date)
            )
        )

    return transport


async def update_event(
    event_id: UUID,
    update: EventUpdate,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Event:
    """
    Apply a partial update. Only fields present in `update` are changed; a
    new date goes through the same parser as at creation. Supplying
    attendees replaces the whole attendee set.

    Raises
    ------
    EventNotFound
        If the event does not exist.
    InvalidDate
        If a supplied date cannot be parsed.
    """
    log = log.bind(event_id=event_id)
    event = await read_by_id(event_id=event_id, conn=conn, log=log)

    fields = update.model_dump(exclude_unset=True)

    # Parse before touching anything so a bad date leaves the event as it was
    if update.date is not None:
        event.date = parse_instant(update.date)

    if update.title is not None:
        event.title = update.title

    if update.description is not None:
        event.description = update.description

    if update.options is not None:
        event.options = update.options.model_dump(exclude_none=True)

    if update.attendees is not None:
        await conn.execute(
            delete(EventAttendee).where(EventAttendee.event_id == event_id)
        )
        for attendee_id in dict.fromkeys(update.attendees):
            await sets.add_element(
                EventAttendee(event_id=event_id, user_id=attendee_id), conn=conn
            )

    conn.add(event)
    await conn.flush()

    await log.ainfo("event.updated", fields=sorted(fields))

    return event


async def delete_event(
    event_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> bool:
    """
    Delete an event and its attendee records. Calendar references to it are
    not touched. Returns whether an event was removed.
    """
    log = log.bind(event_id=event_id)
    await conn.execute(delete(EventAttendee).where(EventAttendee.event_id == event_id))
    result = await conn.execute(delete(Event).where(Event.event_id == event_id))
    await log.ainfo("event.deleted", removed=result.rowcount)
    return result.rowcount > 0


async def delete_events_by_creator_and_group(
    creator_id: UUID,
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> int:
    """
    Delete every event `creator_id` created in `group_id`. Returns the number
    of events removed.
    """
    log = log.bind(creator_id=creator_id, group_id=group_id)

    event_ids = (
        (
            await conn.execute(
                select(Event.event_id).where(
                    Event.creator_id == creator_id, Event.group_id == group_id
                )
            )
        )
        .scalars()
        .all()
    )

    if not event_ids:
        await log.ainfo("event.bulk_deleted", removed=0)
        return 0

    await conn.execute(
        delete(EventAttendee).where(EventAttendee.event_id.in_(event_ids))
    )
    result = await conn.execute(delete(Event).where(Event.event_id.in_(event_ids)))

    await log.ainfo("event.bulk_deleted", removed=result.rowcount)
    return result.rowcount


async def add_attendee(
    event_id: UUID,
    attendee_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> SetChange:
    """
    Add an attendee to an event. Adding an existing attendee does nothing and
    returns `SetChange.ALREADY_PRESENT`.

    Raises
    ------
    EventNotFound
        If the event does not exist.
    """
    log = log.bind(event_id=event_id, attendee_id=attendee_id)
    await read_by_id(event_id=event_id, conn=conn, log=log)

    change = await sets.add_element(
        EventAttendee(event_id=event_id, user_id=attendee_id), conn=conn
    )

    if change.changed:
        await log.ainfo("event.attendee_added")
    else:
        await log.ainfo("event.attendee_already_added")

    return change


async def remove_attendee(
    event_id: UUID,
    attendee_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> SetChange:
    """
    Remove an attendee from an event. Removing someone who is not attending
    returns `SetChange.NOT_PRESENT`.

    Raises
    ------
    EventNotFound
        If the event does not exist.
    """
    log = log.bind(event_id=event_id, attendee_id=attendee_id)
    await read_by_id(event_id=event_id, conn=conn, log=log)

    change = await sets.remove_element(
        EventAttendee, conn=conn, event_id=event_id, user_id=attendee_id
    )
    await log.ainfo("event.attendee_removed", change=change.value)
    return change
