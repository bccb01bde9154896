"""
Dependencies used by the API.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from groupcal.config.settings import Settings
from groupcal.core.uuid import UUID
from groupcal.service import sessions as sessions_service
from groupcal.service.sync import SyncContext


@lru_cache
def SETTINGS():
    return Settings()


DATABASE_MANAGER = SETTINGS().async_manager()


async def get_async_session():
    async with DATABASE_MANAGER.session() as session:
        async with session.begin():
            yield session


def logger():
    return get_logger()


SettingsDependency = Annotated[Settings, Depends(SETTINGS)]
DatabaseDependency = Annotated[AsyncSession, Depends(get_async_session)]
LoggerDependency = Annotated[FilteringBoundLogger, Depends(logger)]


def session_token(request: Request, settings: SettingsDependency) -> str | None:
    return request.cookies.get(settings.session_cookie_name)


SessionTokenDependency = Annotated[str | None, Depends(session_token)]


async def session_user(
    token: SessionTokenDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> UUID:
    """
    The user behind the request's session cookie. Raises `NotLoggedIn` (401)
    if there is none.
    """
    return await sessions_service.get_user(
        token=token, settings=settings, conn=conn, log=log
    )


SessionUserDependency = Annotated[UUID, Depends(session_user)]


async def sync_context(
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> SyncContext:
    return SyncContext(actor=user, conn=conn, log=log.bind(actor=user))


ContextDependency = Annotated[SyncContext, Depends(sync_context)]
