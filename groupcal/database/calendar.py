"""
Calendar ORM
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

from groupcal.core.calendar import CalendarData
from groupcal.core.instant import as_utc
from groupcal.core.uuid import UUID, uuid7


class CalendarItem(SQLModel, table=True):
    """
    One opaque reference held by a calendar. Items are not checked against
    the event store.
    """

    calendar_id: UUID = Field(
        primary_key=True, foreign_key="calendar.calendar_id", ondelete="CASCADE"
    )
    item: str = Field(primary_key=True)
    added_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Calendar(SQLModel, table=True):
    calendar_id: UUID = Field(primary_key=True, default_factory=uuid7)

    # At most one calendar per user
    user_id: UUID = Field(unique=True)
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True)))

    def to_core(self, items: list[str]) -> CalendarData:
        return CalendarData(
            calendar_id=self.calendar_id,
            user_id=self.user_id,
            created_at=as_utc(self.created_at),
            items=items,
        )
