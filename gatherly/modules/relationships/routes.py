from fastapi import APIRouter, Depends
from gatherly.database.supabase_client import get_supabase
from gatherly.modules.relationships.schemas import (
    FriendshipResponse, FollowResponse, FollowDataResponse, IsFollowingResponse
)
from gatherly.modules.relationships.service import FriendshipService, FollowService
from gatherly.modules.users.schemas import PublicUserResponse
from gatherly.core.dependencies import get_current_user_id
from supabase import Client
from typing import List

friends_router = APIRouter(prefix="/friends", tags=["friends"])
follows_router = APIRouter(prefix="/follows", tags=["follows"])


def get_friendship_service(supabase: Client = Depends(get_supabase)) -> FriendshipService:
    return FriendshipService(supabase)


def get_follow_service(supabase: Client = Depends(get_supabase)) -> FollowService:
    return FollowService(supabase)


# Friend endpoints
@friends_router.get("", response_model=List[PublicUserResponse])
async def list_friends(
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    return service.list_friends(current_user_id)


@friends_router.get("/requests", response_model=List[FriendshipResponse])
async def list_pending_requests(
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    """Friend requests waiting for the current user's answer"""
    return service.list_pending_requests(current_user_id)


@friends_router.post("/{friend_id}", response_model=FriendshipResponse, status_code=201)
async def send_friend_request(
    friend_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    return service.send_friend_request(current_user_id, friend_id)


@friends_router.put("/{requester_id}/accept", response_model=FriendshipResponse)
async def accept_friend_request(
    requester_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    return service.accept_friend_request(current_user_id, requester_id)


@friends_router.put("/{requester_id}/reject", response_model=FriendshipResponse)
async def reject_friend_request(
    requester_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    return service.reject_friend_request(current_user_id, requester_id)


@friends_router.delete("/{friend_id}/request", response_model=FriendshipResponse)
async def withdraw_friend_request(
    friend_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    return service.withdraw_friend_request(current_user_id, friend_id)


@friends_router.delete("/{friend_id}", response_model=FriendshipResponse)
async def unfriend(
    friend_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FriendshipService = Depends(get_friendship_service)
):
    return service.unfriend(current_user_id, friend_id)


# Follow endpoints
@follows_router.get("/{user_id}", response_model=FollowDataResponse)
async def get_follow_data(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FollowService = Depends(get_follow_service)
):
    return service.get_follow_data(user_id)


@follows_router.get("/{user_id}/is-following", response_model=IsFollowingResponse)
async def is_following(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FollowService = Depends(get_follow_service)
):
    return IsFollowingResponse(is_following=service.is_following(current_user_id, user_id))


@follows_router.post("/{user_id}", response_model=FollowResponse, status_code=201)
async def follow(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FollowService = Depends(get_follow_service)
):
    return service.follow(current_user_id, user_id)


@follows_router.delete("/{user_id}", response_model=FollowResponse)
async def unfollow(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    service: FollowService = Depends(get_follow_service)
):
    return service.unfollow(current_user_id, user_id)
