"""
Pydantic models for request/responses to APIs, and the outcome of set
mutations shared by the stores.
"""

from enum import Enum

from pydantic import BaseModel, Field

from groupcal.core.calendar import CalendarData, ResolvedCalendarData
from groupcal.core.event import EventData, EventOptions, EventTransportData
from groupcal.core.group import GroupData, GroupOptions
from groupcal.core.user import UserData
from groupcal.core.uuid import UUID


class SetChange(str, Enum):
    """
    Outcome of an element-level mutation on a set-valued field.
    """

    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    NOT_PRESENT = "not_present"

    @property
    def changed(self) -> bool:
        return self in (SetChange.ADDED, SetChange.REMOVED)


class MessageResponse(BaseModel):
    msg: str


class CredentialsRequest(BaseModel):
    user_name: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    msg: str
    user: UserData


class UserNameUpdateRequest(BaseModel):
    user_name: str = Field(min_length=1)


class PasswordUpdateRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class CalendarResponse(BaseModel):
    msg: str
    calendar: CalendarData


class ResolvedCalendarResponse(BaseModel):
    msg: str
    calendar: ResolvedCalendarData


class AddCalendarItemRequest(BaseModel):
    event_id: str = Field(min_length=1)


class GroupCalendarResponse(BaseModel):
    msg: str
    events: list[str]


class GroupCreationRequest(BaseModel):
    title: str = Field(min_length=1)
    members: list[UUID] = []
    description: str | None = None
    options: GroupOptions | None = None


class GroupResponse(BaseModel):
    msg: str
    group: GroupData


class InviteRequest(BaseModel):
    group_id: str = Field(min_length=1)


class GroupMembersResponse(BaseModel):
    msg: str
    members: list[UUID]
    # Same order as members; unknown users show as DELETED_USER
    member_names: list[str]


class LeaveGroupResponse(BaseModel):
    msg: str
    events_deleted: int


class EventCreationRequest(BaseModel):
    group_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    date: str
    description: str | None = None
    attendees: list[UUID] | None = None
    options: EventOptions | None = None


class EventResponse(BaseModel):
    msg: str
    event: EventData


class EventListResponse(BaseModel):
    msg: str
    events: list[EventData]


class GroupEventListResponse(BaseModel):
    msg: str
    events: list[EventTransportData]
