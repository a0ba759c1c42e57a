from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class UserUpdate(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = None


class PublicUserResponse(BaseModel):
    """Profile as seen by other users; email is never exposed here"""
    id: str
    username: str
    avatar_url: Optional[str] = None
    online: bool = False

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """Profile as seen by its owner"""
    id: str
    username: str
    email: str
    avatar_url: Optional[str] = None
    online: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserGroupResponse(BaseModel):
    group_id: str
    name: str
    privacy: str
    membership_role: str
