"""
Event ORM
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel

from groupcal.core.event import EventData, EventOptions
from groupcal.core.instant import as_utc
from groupcal.core.uuid import UUID, uuid7


class EventAttendee(SQLModel, table=True):
    event_id: UUID = Field(
        primary_key=True, foreign_key="event.event_id", ondelete="CASCADE"
    )
    user_id: UUID = Field(primary_key=True)
    added_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Event(SQLModel, table=True):
    event_id: UUID = Field(primary_key=True, default_factory=uuid7)

    creator_id: UUID
    # Weak reference into the group store; no foreign key.
    group_id: UUID = Field(index=True)
    title: str
    date: datetime = Field(sa_column=Column(DateTime(timezone=True), index=True))
    description: str | None = None
    options: dict | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))

    def to_core(self, attendees: list[UUID]) -> EventData:
        return EventData(
            event_id=self.event_id,
            creator_id=self.creator_id,
            group_id=self.group_id,
            title=self.title,
            date=as_utc(self.date),
            description=self.description,
            options=EventOptions.model_validate(self.options) if self.options else None,
            attendees=attendees,
        )
