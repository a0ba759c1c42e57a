from enum import Enum
from pydantic import BaseModel
from datetime import datetime


class GroupRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class EventRole(str, Enum):
    ORGANIZER = "organizer"
    ATTENDEE = "attendee"


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    role: GroupRole
    created_at: datetime

    class Config:
        from_attributes = True


class EventMemberResponse(BaseModel):
    id: str
    event_id: str
    user_id: str
    role: EventRole
    created_at: datetime

    class Config:
        from_attributes = True
