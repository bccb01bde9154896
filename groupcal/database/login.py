"""
Login session tracking.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from groupcal.core.uuid import UUID, uuid7


class LoginSession(SQLModel, table=True):
    login_session_id: UUID = Field(primary_key=True, default_factory=uuid7)

    user_id: UUID = Field(foreign_key="user.user_id", ondelete="CASCADE")

    # Only a checksum of the session token is kept; the token itself lives in
    # the client's cookie.
    hash_algorithm: str
    hashed_token: str = Field(unique=True)

    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))
    expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))
