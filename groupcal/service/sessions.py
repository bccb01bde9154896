"""
Session resolution. A session maps an opaque token, held by the client in a
cookie, to a user identity.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from groupcal.config.settings import Settings
from groupcal.core.errors import NotAllowedError, UnauthenticatedError
from groupcal.core.hashing import checksum
from groupcal.core.instant import as_utc
from groupcal.core.random import session_token
from groupcal.core.uuid import UUID
from groupcal.database.login import LoginSession


class NotLoggedIn(UnauthenticatedError):
    pass


class AlreadyLoggedIn(NotAllowedError):
    pass


async def _read_by_token(
    token: str, settings: Settings, conn: AsyncSession
) -> LoginSession | None:
    hashed = checksum(token, hash_algorithm=settings.token_hash_algorithm)
    query = select(LoginSession).where(LoginSession.hashed_token == hashed)
    return (await conn.execute(query)).scalar_one_or_none()


async def start(
    user_id: UUID,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> str:
    """
    Start a session for `user_id`, returning the raw token to hand to the
    client. Only its checksum is stored.
    """
    token = session_token()
    current_time = datetime.now(timezone.utc)

    login_session = LoginSession(
        user_id=user_id,
        hash_algorithm=settings.token_hash_algorithm,
        hashed_token=checksum(token, hash_algorithm=settings.token_hash_algorithm),
        created_at=current_time,
        expires_at=current_time + settings.session_expiry,
    )
    conn.add(login_session)
    await conn.flush()

    await log.ainfo(
        "session.started",
        user_id=user_id,
        login_session_id=login_session.login_session_id,
    )

    return token


async def end(
    token: str | None,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    End the session for `token`. Ending a session that does not exist does
    nothing.
    """
    if not token:
        return

    hashed = checksum(token, hash_algorithm=settings.token_hash_algorithm)
    await conn.execute(delete(LoginSession).where(LoginSession.hashed_token == hashed))
    await log.ainfo("session.ended")


async def get_user(
    token: str | None,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> UUID:
    """
    Resolve the user behind a session token.

    Raises
    ------
    NotLoggedIn
        If there is no token, it is unknown, or the session has expired.
    """
    if not token:
        await log.adebug("session.no_token")
        raise NotLoggedIn("Must be logged in!")

    login_session = await _read_by_token(token=token, settings=settings, conn=conn)

    if login_session is None:
        await log.ainfo("session.unknown_token")
        raise NotLoggedIn("Must be logged in!")

    if as_utc(login_session.expires_at) < datetime.now(timezone.utc):
        await log.ainfo(
            "session.expired", login_session_id=login_session.login_session_id
        )
        raise NotLoggedIn("Session expired, log in again!")

    return login_session.user_id


async def is_logged_in(
    token: str | None,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> bool:
    try:
        await get_user(token=token, settings=settings, conn=conn, log=log)
    except NotLoggedIn:
        return False
    return True


async def assert_logged_out(
    token: str | None,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> None:
    """
    Raises
    ------
    AlreadyLoggedIn
        If `token` names a live session.
    """
    if await is_logged_in(token=token, settings=settings, conn=conn, log=log):
        raise AlreadyLoggedIn("Must be logged out!")
