from fastapi import APIRouter, Depends, Query
from gatherly.config import settings
from gatherly.database.supabase_client import get_supabase
from gatherly.modules.users.schemas import (
    UserUpdate, UserResponse, PublicUserResponse, UserGroupResponse
)
from gatherly.modules.users.service import UserService
from gatherly.core.dependencies import get_current_user_id, get_optional_user_id
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("", response_model=List[PublicUserResponse])
async def list_users(
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(default=0, ge=0),
    service: UserService = Depends(get_user_service)
):
    """List public user profiles"""
    return service.list_users(limit=limit, offset=offset)


@router.get("/{user_id}", response_model=PublicUserResponse)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service)
):
    return service.get_user(user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    current_user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Update own profile"""
    return service.update_user(current_user_id, user_id, user_data)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    """Delete own account"""
    service.delete_user(current_user_id, user_id)
    return None


@router.get("/{user_id}/groups", response_model=List[UserGroupResponse])
async def get_user_groups(
    user_id: str,
    viewer_id: Optional[str] = Depends(get_optional_user_id),
    service: UserService = Depends(get_user_service)
):
    """Get the groups a user belongs to, with their role in each. Private groups only show to their members."""
    return service.get_user_groups(user_id, viewer_id=viewer_id)
