"""
Meta functionality for the database.
"""

from .calendar import Calendar, CalendarItem
from .event import Event, EventAttendee
from .group import Group, GroupMembership
from .login import LoginSession
from .user import User

ALL_TABLES = (
    Calendar,
    CalendarItem,
    Event,
    EventAttendee,
    Group,
    GroupMembership,
    LoginSession,
    User,
)
