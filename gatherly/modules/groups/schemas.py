from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class GroupPrivacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class GroupTopic(str, Enum):
    TECHNOLOGY = "technology"
    SPORTS = "sports"
    MUSIC = "music"
    ARTS = "arts"
    OUTDOORS = "outdoors"
    GAMING = "gaming"
    FOOD = "food"
    EDUCATION = "education"


class GroupCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    privacy: GroupPrivacy = GroupPrivacy.PUBLIC
    topics: List[GroupTopic] = []


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    privacy: Optional[GroupPrivacy] = None
    topics: Optional[List[GroupTopic]] = None


class GroupResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    privacy: GroupPrivacy
    topics: List[GroupTopic] = []
    created_by: Optional[str] = None
    member_count: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
