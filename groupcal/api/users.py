"""
User and session handlers: registration, lookup, account changes, login and
logout.
"""

from fastapi import Response

from groupcal.core.models import (
    CredentialsRequest,
    MessageResponse,
    PasswordUpdateRequest,
    UserNameUpdateRequest,
    UserResponse,
)
from groupcal.core.user import UserData
from groupcal.service import sessions as sessions_service
from groupcal.service import user as user_service

from .dependencies import (
    DatabaseDependency,
    LoggerDependency,
    SessionTokenDependency,
    SessionUserDependency,
    SettingsDependency,
)


async def get_session_user(
    user: SessionUserDependency, conn: DatabaseDependency
) -> UserData:
    """
    The user behind the current session.
    """
    return (await user_service.read_by_id(user_id=user, conn=conn)).to_core()


async def get_users(conn: DatabaseDependency) -> list[UserData]:
    return await user_service.get_user_list(conn=conn)


async def get_user(user_name: str, conn: DatabaseDependency) -> UserData:
    return (await user_service.read_by_name(user_name=user_name, conn=conn)).to_core()


async def create_user(
    content: CredentialsRequest,
    token: SessionTokenDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> UserResponse:
    """
    Register a new user. Only possible while logged out.
    """
    await sessions_service.assert_logged_out(
        token=token, settings=settings, conn=conn, log=log
    )

    user = await user_service.create(
        user_name=content.user_name,
        password=content.password,
        settings=settings,
        conn=conn,
        log=log,
    )

    return UserResponse(msg="User created successfully!", user=user.to_core())


async def log_in(
    content: CredentialsRequest,
    response: Response,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> MessageResponse:
    """
    Check credentials and start a session, handed to the client as an
    http-only cookie.
    """
    user = await user_service.authenticate(
        user_name=content.user_name, password=content.password, conn=conn, log=log
    )

    token = await sessions_service.start(
        user_id=user.user_id, settings=settings, conn=conn, log=log
    )

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(settings.session_expiry.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )

    return MessageResponse(msg="Logged in!")


async def log_out(
    response: Response,
    token: SessionTokenDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> MessageResponse:
    await sessions_service.end(token=token, settings=settings, conn=conn, log=log)
    response.delete_cookie(key=settings.session_cookie_name)
    return MessageResponse(msg="Logged out!")


async def update_user_name(
    content: UserNameUpdateRequest,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> UserResponse:
    updated = await user_service.update_user_name(
        user_id=user, user_name=content.user_name, conn=conn, log=log
    )
    return UserResponse(msg="Updated user name!", user=updated.to_core())


async def update_password(
    content: PasswordUpdateRequest,
    user: SessionUserDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> MessageResponse:
    """
    Change your password. The current password must be supplied.
    """
    await user_service.update_password(
        user_id=user,
        current_password=content.current_password,
        new_password=content.new_password,
        settings=settings,
        conn=conn,
        log=log,
    )
    return MessageResponse(msg="Updated password!")


async def delete_user(
    response: Response,
    user: SessionUserDependency,
    token: SessionTokenDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> MessageResponse:
    """
    Delete your account and log out.
    """
    await sessions_service.end(token=token, settings=settings, conn=conn, log=log)
    await user_service.delete_user(user_id=user, conn=conn, log=log)
    response.delete_cookie(key=settings.session_cookie_name)
    return MessageResponse(msg="You deleted your account")
