"""
A shared user object that is serialized.
"""

from datetime import datetime

from pydantic import BaseModel

from groupcal.core.uuid import UUID


class UserData(BaseModel):
    user_id: UUID
    user_name: str
    created_at: datetime
