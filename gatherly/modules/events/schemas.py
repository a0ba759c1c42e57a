import datetime as dt
from pydantic import BaseModel, Field
from typing import Optional


class EventCreate(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    date: dt.date
    time: dt.time
    location: Optional[str] = Field(default=None, max_length=100)


class EventUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    date: Optional[dt.date] = None
    time: Optional[dt.time] = None
    location: Optional[str] = Field(default=None, max_length=100)


class EventResponse(BaseModel):
    id: str
    group_id: str
    name: str
    description: Optional[str] = None
    date: dt.date
    time: dt.time
    location: Optional[str] = None
    created_by: Optional[str] = None
    attendee_count: Optional[int] = None
    created_at: dt.datetime
    updated_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
