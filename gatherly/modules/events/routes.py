from fastapi import APIRouter, Depends, Query
from gatherly.config import settings
from gatherly.database.supabase_client import get_supabase
from gatherly.modules.events.schemas import EventCreate, EventUpdate, EventResponse
from gatherly.modules.events.service import EventService
from gatherly.modules.memberships.schemas import EventMemberResponse
from gatherly.core.dependencies import get_current_user_id
from supabase import Client
from typing import List

router = APIRouter(prefix="/events", tags=["events"])
group_events_router = APIRouter(prefix="/groups/{group_id}/events", tags=["events"])


def get_event_service(supabase: Client = Depends(get_supabase)) -> EventService:
    return EventService(supabase)


@group_events_router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    group_id: str,
    event_data: EventCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    """Create an event in a group (group members only); the creator becomes its organizer"""
    return service.create_event(current_user_id, group_id, event_data)


@group_events_router.get("", response_model=List[EventResponse])
async def list_group_events(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    return service.list_group_events(group_id, viewer_id=current_user_id)


@router.get("", response_model=List[EventResponse])
async def list_events(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0),
    service: EventService = Depends(get_event_service)
):
    """List upcoming events of public groups"""
    return service.list_events(limit=limit, offset=offset)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    return service.get_event(event_id, viewer_id=current_user_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    """Update event (organizer only)"""
    return service.update_event(current_user_id, event_id, event_data)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    """Cancel event (organizer only)"""
    service.delete_event(current_user_id, event_id)
    return None


@router.get("/{event_id}/attendees", response_model=List[EventMemberResponse])
async def list_attendees(
    event_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    return service.list_attendees(event_id, viewer_id=current_user_id)


@router.post("/{event_id}/attendees", response_model=EventMemberResponse, status_code=201)
async def attend_event(
    event_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    """Attend an event (members of the event's group only)"""
    return service.attend_event(current_user_id, event_id)


@router.delete("/{event_id}/attendees/me", response_model=EventMemberResponse)
async def cancel_attendance(
    event_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    return service.cancel_attendance(current_user_id, event_id)
