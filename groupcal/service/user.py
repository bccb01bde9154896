"""
Service layer for users. A minimal user directory: registration, password
authentication and lookups between names and identities.
"""

import asyncio
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.config.settings import Settings
from groupcal.core.errors import NotAllowedError, NotFoundError
from groupcal.core.hashing import hash_password, verify_password
from groupcal.core.user import UserData
from groupcal.core.uuid import UUID
from groupcal.database.login import LoginSession
from groupcal.database.user import User


class UserNotFound(NotFoundError):
    pass


class UserExistsError(NotAllowedError):
    pass


class InvalidCredentials(NotAllowedError):
    pass


def normalize_user_name(user_name: str) -> str:
    return user_name.strip().lower().replace(" ", "_")


async def create(
    user_name: str,
    password: str,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> User:
    """
    Creates a user, if they do not exist.

    Raises
    ------
    UserExistsError
        If the user name is already taken.
    """

    user_name = normalize_user_name(user_name)

    log = log.bind(user_name=user_name)

    existing = await conn.execute(select(User).where(User.user_name == user_name))
    if existing.scalar_one_or_none() is not None:
        await log.ainfo("user.create.exists")
        raise UserExistsError(f"User with user name {user_name} already exists")

    user = User(
        user_name=user_name,
        hash_algorithm=settings.password_hash_algorithm,
        hashed_password=await asyncio.to_thread(
            hash_password, password, hash_algorithm=settings.password_hash_algorithm
        ),
        created_at=datetime.now(timezone.utc),
    )

    conn.add(user)
    await conn.flush()

    log = log.bind(user_id=user.user_id)
    await log.ainfo("user.created")

    return user


async def read_by_id(user_id: UUID, conn: AsyncSession) -> User:
    res = await conn.get(User, user_id)

    if res is None:
        raise UserNotFound(f"User with ID {user_id} not found in the database")

    return res


async def read_by_name(user_name: str, conn: AsyncSession) -> User:
    user_name = normalize_user_name(user_name)

    query = select(User).filter(User.user_name == user_name)
    res = (await conn.execute(query)).scalar_one_or_none()

    if res is None:
        raise UserNotFound(f"User with name {user_name} not found in the database")

    return res


async def get_user_list(conn: AsyncSession) -> list[UserData]:
    """
    Get a list of all users registered to the system.
    """
    query = select(User).order_by(User.user_name)
    res = (await conn.execute(query)).scalars().all()
    return [u.to_core() for u in res]


async def ids_to_names(user_ids: list[UUID], conn: AsyncSession) -> list[str]:
    """
    Map user IDs to user names, keeping order. Unknown IDs are rendered as
    'DELETED_USER'.
    """
    query = select(User.user_id, User.user_name).where(User.user_id.in_(user_ids))
    names = {row.user_id: row.user_name for row in await conn.execute(query)}
    return [names.get(user_id, "DELETED_USER") for user_id in user_ids]


async def authenticate(
    user_name: str,
    password: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> User:
    """
    Check a user name and password pair.

    Raises
    ------
    InvalidCredentials
        If the user does not exist or the password does not match. The two
        cases are not distinguished.
    """
    user_name = normalize_user_name(user_name)
    log = log.bind(user_name=user_name)

    try:
        user = await read_by_name(user_name=user_name, conn=conn)
    except UserNotFound:
        await log.ainfo("user.authenticate.unknown_user")
        raise InvalidCredentials("Username or password is incorrect.")

    if not await asyncio.to_thread(
        verify_password,
        password,
        user.hashed_password,
        hash_algorithm=user.hash_algorithm,
    ):
        await log.ainfo("user.authenticate.bad_password", user_id=user.user_id)
        raise InvalidCredentials(
            "Username or password is incorrect.", actor=user.user_id
        )

    await log.ainfo("user.authenticated", user_id=user.user_id)
    return user


async def update_user_name(
    user_id: UUID,
    user_name: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> User:
    """
    Rename a user.

    Raises
    ------
    UserNotFound
        If the user does not exist.
    UserExistsError
        If another user already has the new name.
    """
    user_name = normalize_user_name(user_name)
    log = log.bind(user_id=user_id, user_name=user_name)

    user = await read_by_id(user_id=user_id, conn=conn)

    existing = await conn.execute(select(User).where(User.user_name == user_name))
    taken = existing.scalar_one_or_none()
    if taken is not None and taken.user_id != user_id:
        await log.ainfo("user.rename.exists")
        raise UserExistsError(f"User with user name {user_name} already exists")

    user.user_name = user_name
    conn.add(user)
    await conn.flush()

    await log.ainfo("user.renamed")
    return user


async def update_password(
    user_id: UUID,
    current_password: str,
    new_password: str,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> User:
    """
    Change a user's password, given their current one.

    Raises
    ------
    UserNotFound
        If the user does not exist.
    InvalidCredentials
        If `current_password` does not match.
    """
    log = log.bind(user_id=user_id)
    user = await read_by_id(user_id=user_id, conn=conn)

    if not await asyncio.to_thread(
        verify_password,
        current_password,
        user.hashed_password,
        hash_algorithm=user.hash_algorithm,
    ):
        await log.ainfo("user.password.bad_password")
        raise InvalidCredentials("The given password is wrong!", actor=user_id)

    user.hash_algorithm = settings.password_hash_algorithm
    user.hashed_password = await asyncio.to_thread(
        hash_password, new_password, hash_algorithm=settings.password_hash_algorithm
    )
    conn.add(user)
    await conn.flush()

    await log.ainfo("user.password.updated")
    return user


async def delete_user(
    user_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    Delete a user and all of their login sessions. Groups, events and
    calendars that mention them are left alone; their name then shows as
    'DELETED_USER' (see `ids_to_names`).

    Raises
    ------
    UserNotFound
        If the user does not exist.
    """
    log = log.bind(user_id=user_id)
    await read_by_id(user_id=user_id, conn=conn)

    await conn.execute(delete(LoginSession).where(LoginSession.user_id == user_id))
    await conn.execute(delete(User).where(User.user_id == user_id))

    await log.ainfo("user.deleted")
