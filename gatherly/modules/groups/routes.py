from fastapi import APIRouter, Depends, Query
from gatherly.config import settings
from gatherly.database.supabase_client import get_supabase
from gatherly.modules.groups.schemas import GroupCreate, GroupUpdate, GroupResponse, GroupTopic
from gatherly.modules.groups.service import GroupService
from gatherly.modules.memberships.schemas import GroupMemberResponse
from gatherly.core.dependencies import get_current_user_id, get_optional_user_id
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group; the creator becomes its admin"""
    return service.create_group(current_user_id, group_data)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    topics: Optional[List[GroupTopic]] = Query(default=None),
    name: Optional[str] = None,
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0),
    viewer_id: Optional[str] = Depends(get_optional_user_id),
    service: GroupService = Depends(get_group_service)
):
    """List public groups (and the caller's private ones). Filter with ?topics=music&topics=arts and/or ?name=<substring>"""
    topic_values = [t.value for t in topics] if topics else None
    return service.list_groups(topics=topic_values, name=name, limit=limit, offset=offset, viewer_id=viewer_id)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    return service.get_group(group_id, viewer_id=current_user_id)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Update group (group admin only)"""
    return service.update_group(current_user_id, group_id, group_data)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Disband group (group admin only)"""
    service.delete_group(current_user_id, group_id)
    return None


@router.get("/{group_id}/members", response_model=List[GroupMemberResponse])
async def list_members(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    return service.list_members(group_id, viewer_id=current_user_id)


@router.post("/{group_id}/members", response_model=GroupMemberResponse, status_code=201)
async def join_group(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Join a group as a member"""
    return service.join_group(current_user_id, group_id)


@router.delete("/{group_id}/members/me", response_model=GroupMemberResponse)
async def leave_group(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Leave a group (admins cannot leave)"""
    return service.leave_group(current_user_id, group_id)


@router.delete("/{group_id}/members/{user_id}", response_model=GroupMemberResponse)
async def kick_from_group(
    group_id: str,
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Remove a member from the group (group admin only)"""
    return service.kick_from_group(current_user_id, user_id, group_id)


@router.put("/{group_id}/members/{user_id}/admin", response_model=GroupMemberResponse)
async def promote_to_admin(
    group_id: str,
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Promote a member to admin (group admin only)"""
    return service.promote_to_admin(current_user_id, user_id, group_id)
