"""
ORM for user information.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from groupcal.core.instant import as_utc
from groupcal.core.user import UserData
from groupcal.core.uuid import UUID, uuid7


class User(SQLModel, table=True):
    user_id: UUID = Field(primary_key=True, default_factory=uuid7)

    user_name: str = Field(unique=True)

    hash_algorithm: str
    hashed_password: str

    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))

    def to_core(self) -> UserData:
        return UserData(
            user_id=self.user_id,
            user_name=self.user_name,
            created_at=as_utc(self.created_at),
        )
