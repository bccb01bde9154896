"""
Tests the event service layer.
"""

import pytest

from groupcal.core.errors import InvalidInputError, NotAllowedError, NotFoundError
from groupcal.core.event import EventOptions, EventUpdate
from groupcal.core.models import SetChange
from groupcal.core.uuid import uuid7
from groupcal.service import events as events_service


@pytest.mark.asyncio(loop_scope="session")
async def test_create_rejects_invalid_date(session_manager, logger, user):
    group_id = uuid7()

    with pytest.raises(InvalidInputError):
        async with session_manager.session() as conn:
            async with conn.begin():
                await events_service.create(
                    creator_id=user,
                    group_id=group_id,
                    title="Party",
                    date="not-a-date",
                    conn=conn,
                    log=logger,
                )

    with pytest.raises(InvalidInputError):
        async with session_manager.session() as conn:
            async with conn.begin():
                await events_service.create(
                    creator_id=user,
                    group_id=group_id,
                    title="End of time",
                    date="9999-12-31T23:00:00-05:00",
                    conn=conn,
                    log=logger,
                )

    async with session_manager.session() as conn:
        async with conn.begin():
            assert (
                await events_service.get_events_by_group_id(
                    group_id=group_id, conn=conn, log=logger
                )
                == []
            )


@pytest.mark.asyncio(loop_scope="session")
async def test_date_round_trips_as_iso_text(session_manager, logger, user):
    group_id = uuid7()

    async with session_manager.session() as conn:
        async with conn.begin():
            event = await events_service.create(
                creator_id=user,
                group_id=group_id,
                title="New Year's Eve",
                date="2024-12-31T18:30:00Z",
                description="Fireworks",
                options=EventOptions(location="Harbour", reminder=True),
                conn=conn,
                log=logger,
            )
            EVENT_ID = event.event_id

    async with session_manager.session() as conn:
        async with conn.begin():
            group_events = await events_service.get_events_by_group_id(
                group_id=group_id, conn=conn, log=logger
            )

    assert len(group_events) == 1
    assert group_events[0].event_id == EVENT_ID
    assert group_events[0].date == "2024-12-31T18:30:00.000Z"
    assert group_events[0].options.location == "Harbour"
    assert group_events[0].options.reminder is True


@pytest.mark.asyncio(loop_scope="session")
async def test_events_ordered_by_date(session_manager, logger, user, other_user):
    group_id = uuid7()

    async with session_manager.session() as conn:
        async with conn.begin():
            late = await events_service.create(
                creator_id=user,
                group_id=group_id,
                title="Late",
                date="2031-06-01T10:00:00+02:00",
                attendee_ids=[other_user],
                conn=conn,
                log=logger,
            )
            early = await events_service.create(
                creator_id=user,
                group_id=group_id,
                title="Early",
                date="2031-06-01T09:00:00Z",
                attendee_ids=[other_user, other_user],
                conn=conn,
                log=logger,
            )
            LATE_ID, EARLY_ID = late.event_id, early.event_id

    async with session_manager.session() as conn:
        async with conn.begin():
            group_events = await events_service.get_events_by_group_id(
                group_id=group_id, conn=conn, log=logger
            )
            all_events = await events_service.get_events(conn=conn, log=logger)
            attending = await events_service.get_by_user(
                user_id=other_user, conn=conn, log=logger
            )

    # 10:00+02:00 is 08:00Z, so "Late" comes first
    assert [e.event_id for e in group_events] == [LATE_ID, EARLY_ID]
    assert group_events[0].date == "2031-06-01T08:00:00.000Z"

    ids = [e.event_id for e in all_events]
    assert ids.index(LATE_ID) < ids.index(EARLY_ID)

    assert [e.event_id for e in attending] == [LATE_ID, EARLY_ID]
    assert attending[1].attendees == [other_user]


@pytest.mark.asyncio(loop_scope="session")
async def test_assert_creator_is_user(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            event = await events_service.create(
                creator_id=user,
                group_id=uuid7(),
                title="Standup",
                date="2025-01-06T09:00:00Z",
                conn=conn,
                log=logger,
            )
            EVENT_ID = event.event_id

    async with session_manager.session() as conn:
        async with conn.begin():
            await events_service.assert_creator_is_user(
                event_id=EVENT_ID, user_id=user, conn=conn, log=logger
            )

            with pytest.raises(events_service.EventNotFound):
                await events_service.assert_creator_is_user(
                    event_id=uuid7(), user_id=user, conn=conn, log=logger
                )

            with pytest.raises(NotAllowedError) as excinfo:
                await events_service.assert_creator_is_user(
                    event_id=EVENT_ID, user_id=other_user, conn=conn, log=logger
                )

            assert not isinstance(excinfo.value, NotFoundError)
            assert excinfo.value.actor == other_user
            assert excinfo.value.resource == EVENT_ID


@pytest.mark.asyncio(loop_scope="session")
async def test_update_event(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            event = await events_service.create(
                creator_id=user,
                group_id=uuid7(),
                title="Dinner",
                date="2025-03-01T19:00:00Z",
                description="At home",
                attendee_ids=[user],
                conn=conn,
                log=logger,
            )
            EVENT_ID = event.event_id

    # Only the title changes
    async with session_manager.session() as conn:
        async with conn.begin():
            event = await events_service.update_event(
                event_id=EVENT_ID,
                update=EventUpdate(title="Late dinner"),
                conn=conn,
                log=logger,
            )
            core = await events_service.to_core(event, conn=conn)

    assert core.title == "Late dinner"
    assert core.description == "At home"
    assert core.attendees == [user]
    assert core.creator_id == user

    # Date goes through the creation parser; attendees are replaced
    async with session_manager.session() as conn:
        async with conn.begin():
            event = await events_service.update_event(
                event_id=EVENT_ID,
                update=EventUpdate(date="2025-03-01T20:00:00Z", attendees=[other_user]),
                conn=conn,
                log=logger,
            )
            core = await events_service.to_core(event, conn=conn)

    assert core.date.hour == 20
    assert core.attendees == [other_user]

    with pytest.raises(events_service.InvalidDate):
        async with session_manager.session() as conn:
            async with conn.begin():
                await events_service.update_event(
                    event_id=EVENT_ID,
                    update=EventUpdate(date="tomorrow-ish"),
                    conn=conn,
                    log=logger,
                )

    with pytest.raises(events_service.EventNotFound):
        async with session_manager.session() as conn:
            async with conn.begin():
                await events_service.update_event(
                    event_id=uuid7(),
                    update=EventUpdate(title="Nothing"),
                    conn=conn,
                    log=logger,
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_add_attendee_is_idempotent(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            event = await events_service.create(
                creator_id=user,
                group_id=uuid7(),
                title="Hike",
                date="2025-05-10T07:00:00Z",
                conn=conn,
                log=logger,
            )
            EVENT_ID = event.event_id

    async with session_manager.session() as conn:
        async with conn.begin():
            first = await events_service.add_attendee(
                event_id=EVENT_ID, attendee_id=other_user, conn=conn, log=logger
            )
            second = await events_service.add_attendee(
                event_id=EVENT_ID, attendee_id=other_user, conn=conn, log=logger
            )
            attendees = await events_service.get_attendees(EVENT_ID, conn=conn)

    assert first == SetChange.ADDED
    assert second == SetChange.ALREADY_PRESENT
    assert attendees == [other_user]

    async with session_manager.session() as conn:
        async with conn.begin():
            removed = await events_service.remove_attendee(
                event_id=EVENT_ID, attendee_id=other_user, conn=conn, log=logger
            )
            again = await events_service.remove_attendee(
                event_id=EVENT_ID, attendee_id=other_user, conn=conn, log=logger
            )

    assert removed == SetChange.REMOVED
    assert again == SetChange.NOT_PRESENT

    with pytest.raises(events_service.EventNotFound):
        async with session_manager.session() as conn:
            async with conn.begin():
                await events_service.add_attendee(
                    event_id=uuid7(), attendee_id=other_user, conn=conn, log=logger
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_delete_events(session_manager, logger, user, other_user):
    group_id = uuid7()

    async with session_manager.session() as conn:
        async with conn.begin():
            ids = []
            for creator, title in [(user, "A"), (user, "B"), (other_user, "C")]:
                event = await events_service.create(
                    creator_id=creator,
                    group_id=group_id,
                    title=title,
                    date="2025-07-01T12:00:00Z",
                    attendee_ids=[creator],
                    conn=conn,
                    log=logger,
                )
                ids.append(event.event_id)

    async with session_manager.session() as conn:
        async with conn.begin():
            removed = await events_service.delete_events_by_creator_and_group(
                creator_id=user, group_id=group_id, conn=conn, log=logger
            )
            remaining = await events_service.get_events_by_group_id(
                group_id=group_id, conn=conn, log=logger
            )

    assert removed == 2
    assert [e.event_id for e in remaining] == [ids[2]]

    async with session_manager.session() as conn:
        async with conn.begin():
            assert await events_service.delete_event(
                event_id=ids[2], conn=conn, log=logger
            )
            assert not await events_service.delete_event(
                event_id=ids[2], conn=conn, log=logger
            )
            assert (
                await events_service.delete_events_by_creator_and_group(
                    creator_id=user, group_id=group_id, conn=conn, log=logger
                )
                == 0
            )
