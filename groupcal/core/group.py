"""
Core group data models.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from groupcal.core.uuid import UUID


class GroupOptions(BaseModel):
    privacy: Literal["public", "private"] | None = None
    color_theme: str | None = None
    roles: list[str] | None = None


class GroupData(BaseModel):
    group_id: UUID
    creator_id: UUID
    title: str
    description: str | None = None
    options: GroupOptions | None = None
    created_at: datetime
    members: list[UUID]
