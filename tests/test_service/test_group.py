"""
Tests the group service layer.
"""

from datetime import timedelta

import pytest

from groupcal.core.errors import NotAllowedError, NotFoundError
from groupcal.core.group import GroupOptions
from groupcal.core.models import SetChange
from groupcal.core.uuid import uuid7
from groupcal.service import groups as groups_service


@pytest.mark.asyncio(loop_scope="session")
async def test_create_group(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            group = await groups_service.create(
                creator_id=user,
                title="Smith Family",
                member_ids=[other_user],
                description="Family calendar",
                options=GroupOptions(privacy="private", roles=["parent", "child"]),
                conn=conn,
                log=logger,
            )

            GROUP_ID = group.group_id

    async with session_manager.session() as conn:
        async with conn.begin():
            group = await groups_service.read_by_id(
                group_id=GROUP_ID, conn=conn, log=logger
            )
            members = await groups_service.get_members(
                group_id=GROUP_ID, conn=conn, log=logger
            )

            assert group.creator_id == user
            assert group.title == "Smith Family"
            assert set(members) == {user, other_user}

            core = group.to_core(members=members)
            assert core.options.privacy == "private"
            assert core.options.roles == ["parent", "child"]
            assert core.options.color_theme is None
            # Read back from the database, the timestamp is still UTC
            assert core.created_at.utcoffset() == timedelta(0)

    async with session_manager.session() as conn:
        async with conn.begin():
            await groups_service.delete_group(group_id=GROUP_ID, conn=conn, log=logger)

    async with session_manager.session() as conn:
        async with conn.begin():
            with pytest.raises(groups_service.GroupNotFound):
                await groups_service.read_by_id(
                    group_id=GROUP_ID, conn=conn, log=logger
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_creator_is_always_member(session_manager, logger, user):
    async with session_manager.session() as conn:
        async with conn.begin():
            solo = await groups_service.create(
                creator_id=user, title="Solo", member_ids=[], conn=conn, log=logger
            )
            repeated = await groups_service.create(
                creator_id=user,
                title="Repeated",
                member_ids=[user, user],
                conn=conn,
                log=logger,
            )

            assert await groups_service.get_members(
                group_id=solo.group_id, conn=conn, log=logger
            ) == [user]
            assert await groups_service.get_members(
                group_id=repeated.group_id, conn=conn, log=logger
            ) == [user]


@pytest.mark.asyncio(loop_scope="session")
async def test_invite_user_is_idempotent(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            group = await groups_service.create(
                creator_id=user, title="Book club", member_ids=[], conn=conn, log=logger
            )
            GROUP_ID = group.group_id

    async with session_manager.session() as conn:
        async with conn.begin():
            first = await groups_service.invite_user(
                group_id=GROUP_ID, invitee_id=other_user, conn=conn, log=logger
            )
            after_first = await groups_service.get_members(
                group_id=GROUP_ID, conn=conn, log=logger
            )

    async with session_manager.session() as conn:
        async with conn.begin():
            second = await groups_service.invite_user(
                group_id=GROUP_ID, invitee_id=other_user, conn=conn, log=logger
            )
            after_second = await groups_service.get_members(
                group_id=GROUP_ID, conn=conn, log=logger
            )

    assert first == SetChange.ADDED
    assert second == SetChange.ALREADY_PRESENT
    assert after_first == after_second
    assert set(after_second) == {user, other_user}

    async with session_manager.session() as conn:
        async with conn.begin():
            with pytest.raises(groups_service.GroupNotFound):
                await groups_service.invite_user(
                    group_id=uuid7(), invitee_id=other_user, conn=conn, log=logger
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_leave_group(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            group = await groups_service.create(
                creator_id=user,
                title="Climbing",
                member_ids=[other_user],
                conn=conn,
                log=logger,
            )
            GROUP_ID = group.group_id

    async with session_manager.session() as conn:
        async with conn.begin():
            change = await groups_service.leave_group(
                group_id=GROUP_ID, user_id=other_user, conn=conn, log=logger
            )
            members = await groups_service.get_members(
                group_id=GROUP_ID, conn=conn, log=logger
            )

    assert change == SetChange.REMOVED
    assert members == [user]

    # Leaving again is a not-found error, not a silent no-op
    with pytest.raises(NotFoundError):
        async with session_manager.session() as conn:
            async with conn.begin():
                await groups_service.leave_group(
                    group_id=GROUP_ID, user_id=other_user, conn=conn, log=logger
                )

    with pytest.raises(groups_service.GroupNotFound):
        async with session_manager.session() as conn:
            async with conn.begin():
                await groups_service.leave_group(
                    group_id=uuid7(), user_id=user, conn=conn, log=logger
                )

    # The creator may leave their own group
    async with session_manager.session() as conn:
        async with conn.begin():
            await groups_service.leave_group(
                group_id=GROUP_ID, user_id=user, conn=conn, log=logger
            )
            assert (
                await groups_service.get_members(
                    group_id=GROUP_ID, conn=conn, log=logger
                )
                == []
            )


@pytest.mark.asyncio(loop_scope="session")
async def test_assert_is_in_group(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            group = await groups_service.create(
                creator_id=user, title="Choir", member_ids=[], conn=conn, log=logger
            )
            GROUP_ID = group.group_id

    async with session_manager.session() as conn:
        async with conn.begin():
            await groups_service.assert_is_in_group(
                user_id=user, group_id=GROUP_ID, conn=conn, log=logger
            )

            with pytest.raises(NotAllowedError) as excinfo:
                await groups_service.assert_is_in_group(
                    user_id=other_user, group_id=GROUP_ID, conn=conn, log=logger
                )

            assert excinfo.value.actor == other_user
            assert excinfo.value.resource == GROUP_ID

            with pytest.raises(groups_service.GroupNotFound):
                await groups_service.assert_is_in_group(
                    user_id=user, group_id=uuid7(), conn=conn, log=logger
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_get_group_list(session_manager, logger, user, other_user):
    async with session_manager.session() as conn:
        async with conn.begin():
            mine = await groups_service.create(
                creator_id=user, title="Mine", member_ids=[], conn=conn, log=logger
            )
            theirs = await groups_service.create(
                creator_id=other_user,
                title="Theirs",
                member_ids=[],
                conn=conn,
                log=logger,
            )

            for_user = await groups_service.get_group_list(
                conn=conn, log=logger, for_user=user
            )
            everything = await groups_service.get_group_list(conn=conn, log=logger)

            assert [g.group_id for g in for_user] == [mine.group_id]
            assert {mine.group_id, theirs.group_id} <= {
                g.group_id for g in everything
            }
