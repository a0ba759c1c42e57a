from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PostCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)
    event_id: Optional[str] = None


class PostResponse(BaseModel):
    id: str
    group_id: str
    event_id: Optional[str] = None
    user_id: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
