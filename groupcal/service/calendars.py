"""
Service layer for calendars. Each user has at most one calendar, holding a set
of opaque item references (usually event IDs).
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.core.errors import NotFoundError
from groupcal.core.models import SetChange
from groupcal.core.uuid import UUID, uuid7
from groupcal.database.calendar import Calendar, CalendarItem

from . import sets


class CalendarNotFound(NotFoundError):
    pass


async def _read_by_user(user_id: UUID, conn: AsyncSession) -> Calendar | None:
    query = select(Calendar).where(Calendar.user_id == user_id)
    return (await conn.execute(query)).scalar_one_or_none()


async def create_calendar(
    user_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> tuple[Calendar, bool]:
    """
    Create a calendar for `user_id` if they do not already have one.

    Returns
    -------
    calendar: Calendar
        The user's calendar, new or existing. An existing calendar is
        returned unchanged.
    created: bool
        Whether this call created it.
    """
    log = log.bind(user_id=user_id)

    created = await sets.insert_if_absent(
        Calendar,
        dict(
            calendar_id=uuid7(),
            user_id=user_id,
            created_at=datetime.now(timezone.utc),
        ),
        conn=conn,
    )

    calendar = await _read_by_user(user_id=user_id, conn=conn)

    if created:
        await log.ainfo("calendar.created", calendar_id=calendar.calendar_id)
    else:
        await log.ainfo("calendar.exists", calendar_id=calendar.calendar_id)

    return calendar, created


async def get_calendar(
    user_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Calendar:
    """
    Read a user's calendar.

    Raises
    ------
    CalendarNotFound
        If the user has no calendar.
    """
    log = log.bind(user_id=user_id)
    calendar = await _read_by_user(user_id=user_id, conn=conn)

    if calendar is None:
        await log.ainfo("calendar.not_found")
        raise CalendarNotFound(f"Calendar for user {user_id} does not exist!")

    await log.adebug("calendar.found", calendar_id=calendar.calendar_id)
    return calendar


async def get_items(calendar_id: UUID, conn: AsyncSession) -> list[str]:
    """
    The items in a calendar, in the order they were added.
    """
    query = (
        select(CalendarItem.item)
        .where(CalendarItem.calendar_id == calendar_id)
        .order_by(CalendarItem.added_at)
    )
    return list((await conn.execute(query)).scalars().all())


async def add_item(
    user_id: UUID,
    item: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> SetChange:
    """
    Add an item to a user's calendar. Any string is accepted; it is not checked
    against the event store. Adding an item that is already there does nothing
    and returns `SetChange.ALREADY_PRESENT`.

    Raises
    ------
    CalendarNotFound
        If the user has no calendar. Calendars are never created implicitly
        here.
    """
    log = log.bind(user_id=user_id, item=item)
    calendar = await get_calendar(user_id=user_id, conn=conn, log=log)

    change = await sets.add_element(
        CalendarItem(calendar_id=calendar.calendar_id, item=item), conn=conn
    )

    if change.changed:
        await log.ainfo("calendar.item_added")
    else:
        await log.ainfo("calendar.item_already_present")

    return change


async def remove_item(
    user_id: UUID,
    item: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> SetChange:
    """
    Remove an item from a user's calendar. Removing an item that is not there
    returns `SetChange.NOT_PRESENT`.

    Raises
    ------
    CalendarNotFound
        If the user has no calendar.
    """
    log = log.bind(user_id=user_id, item=item)
    calendar = await get_calendar(user_id=user_id, conn=conn, log=log)

    change = await sets.remove_element(
        CalendarItem, conn=conn, calendar_id=calendar.calendar_id, item=item
    )

    if change.changed:
        await log.ainfo("calendar.item_removed")
    else:
        await log.ainfo("calendar.item_not_present")

    return change


async def get_items_by_group_members(
    member_ids: list[UUID],
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> list[str]:
    """
    Concatenate the items of each member's calendar, following the order of
    `member_ids`. Members without a calendar are skipped. Items appearing in
    several calendars appear several times.
    """
    items = []

    for member_id in member_ids:
        calendar = await _read_by_user(user_id=member_id, conn=conn)
        if calendar is None:
            continue
        items.extend(await get_items(calendar_id=calendar.calendar_id, conn=conn))

    await log.adebug(
        "calendar.group_items",
        number_of_members=len(member_ids),
        number_of_items=len(items),
    )

    return items
