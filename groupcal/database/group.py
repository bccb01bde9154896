"""
Group ORM
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from groupcal.core.group import GroupData, GroupOptions
from groupcal.core.instant import as_utc
from groupcal.core.uuid import UUID, uuid7


class GroupMembership(SQLModel, table=True):
    """
    A record of a user's group membership. One row per member, so that
    members are added and removed one element at a time.
    """

    group_id: UUID = Field(
        primary_key=True, foreign_key="group.group_id", ondelete="CASCADE"
    )
    # Users live in a different store; no foreign key.
    user_id: UUID = Field(primary_key=True)
    joined_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Group(SQLModel, table=True):
    group_id: UUID = Field(primary_key=True, default_factory=uuid7)

    creator_id: UUID
    title: str
    description: str | None = None
    options: dict | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))

    def to_core(self, members: list[UUID]) -> GroupData:
        """
        Convert this Group ORM object to a GroupData core object. Members are
        read separately from the membership table.
        """
        return GroupData(
            group_id=self.group_id,
            creator_id=self.creator_id,
            title=self.title,
            description=self.description,
            options=GroupOptions.model_validate(self.options) if self.options else None,
            created_at=as_utc(self.created_at),
            members=members,
        )
