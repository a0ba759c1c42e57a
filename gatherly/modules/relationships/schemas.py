from enum import Enum
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from gatherly.modules.users.schemas import PublicUserResponse


class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class FriendshipResponse(BaseModel):
    id: str
    user_id: str
    friend_id: str
    status: FriendshipStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FollowResponse(BaseModel):
    id: str
    follower_id: str
    following_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class FollowDataResponse(BaseModel):
    followers: List[PublicUserResponse]
    followers_count: int
    following: List[PublicUserResponse]
    following_count: int


class IsFollowingResponse(BaseModel):
    is_following: bool
