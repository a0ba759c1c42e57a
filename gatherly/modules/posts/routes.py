from fastapi import APIRouter, Depends
from gatherly.database.supabase_client import get_supabase
from gatherly.modules.posts.schemas import PostCreate, PostResponse
from gatherly.modules.posts.service import PostService
from gatherly.core.dependencies import get_current_user_id
from supabase import Client
from typing import List

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(supabase: Client = Depends(get_supabase)) -> PostService:
    return PostService(supabase)


@router.post("/group/{group_id}", response_model=PostResponse, status_code=201)
async def create_post(
    group_id: str,
    post_data: PostCreate,
    current_user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    """Create a post in a group (members only), optionally scoped to one of its events"""
    return service.create_post(current_user_id, group_id, post_data)


@router.get("/group/{group_id}", response_model=List[PostResponse])
async def list_group_posts(
    group_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    return service.list_group_posts(group_id, viewer_id=current_user_id)


@router.get("/group/{group_id}/event/{event_id}", response_model=List[PostResponse])
async def list_event_posts(
    group_id: str,
    event_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    return service.list_event_posts(group_id, event_id, viewer_id=current_user_id)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: PostService = Depends(get_post_service)
):
    """Delete a post (author or group admin)"""
    service.delete_post(current_user_id, post_id)
    return None
