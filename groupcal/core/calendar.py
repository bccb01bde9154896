"""
Core calendar data models.
"""

from datetime import datetime

from pydantic import BaseModel

from groupcal.core.event import EventData
from groupcal.core.uuid import UUID


class CalendarData(BaseModel):
    calendar_id: UUID
    user_id: UUID
    created_at: datetime
    # Opaque references, usually event IDs
    items: list[str]


class ResolvedCalendarData(BaseModel):
    calendar: CalendarData
    events: list[EventData]
    # References that are not event IDs, or that name events which no
    # longer exist.
    dangling: list[str]
