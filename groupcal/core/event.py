"""
Core event data models.
"""

from datetime import datetime

from pydantic import BaseModel

from groupcal.core.uuid import UUID


class EventOptions(BaseModel):
    location: str | None = None
    reminder: bool | None = None
    color_theme: str | None = None


class EventData(BaseModel):
    event_id: UUID
    creator_id: UUID
    group_id: UUID
    title: str
    date: datetime
    description: str | None = None
    options: EventOptions | None = None
    attendees: list[UUID]


class EventTransportData(EventData):
    # Dates rendered as ISO-8601 text for transport
    date: str


class EventUpdate(BaseModel):
    """
    A partial update to an event. Only fields that are set are applied; the
    creator is never part of an update.
    """

    title: str | None = None
    date: str | None = None
    description: str | None = None
    attendees: list[UUID] | None = None
    options: EventOptions | None = None
