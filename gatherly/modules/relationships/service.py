"""
Friendship and follow state machines.

Friendship edge (requester -> target):

    none --send--> pending --accept--> accepted --unfriend--> none
                   pending --reject--> rejected
                   pending --withdraw--> none

A rejected edge is terminal. It blocks new requests in both directions and is
not removed by unfriend or withdraw.

Follow edge (follower -> following): absent <-> present, never self-directed.

Transitions out of pending are conditional updates filtered on the current
status, so when accept and reject race only one of them finds the row.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client

from gatherly.core.errors import Conflict, Forbidden, NotFound
from gatherly.database.store_errors import store_call
from gatherly.modules.relationships.schemas import (
    FollowDataResponse, FollowResponse, FriendshipResponse, FriendshipStatus
)
from gatherly.modules.users.schemas import PublicUserResponse
from gatherly.modules.users.service import UserService

logger = logging.getLogger(__name__)


class FriendshipService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)

    def _find_directed(self, user_id: str, friend_id: str) -> Optional[dict]:
        with store_call("find_friendship"):
            result = self.supabase.table("friendships")\
                .select("*")\
                .eq("user_id", user_id)\
                .eq("friend_id", friend_id)\
                .limit(1)\
                .execute()
        return result.data[0] if result.data else None

    def find_edge(self, a: str, b: str) -> Optional[dict]:
        """Edge between a and b in either direction"""
        return self._find_directed(a, b) or self._find_directed(b, a)

    def send_friend_request(self, requester_id: str, target_id: str) -> FriendshipResponse:
        if requester_id == target_id:
            raise Forbidden("You cannot befriend yourself", "send_friend_request")
        if not self.users.user_exists(target_id):
            raise NotFound("User not found", "send_friend_request")
        if self.find_edge(requester_id, target_id) is not None:
            raise Conflict("Friendship already exists", "send_friend_request")

        with store_call("send_friend_request"):
            result = self.supabase.table("friendships").insert({
                "user_id": requester_id,
                "friend_id": target_id,
                "status": FriendshipStatus.PENDING.value
            }).execute()
        if not result.data:
            raise Conflict("Friendship already exists", "send_friend_request")
        logger.info("User %s sent a friend request to %s", requester_id, target_id)
        return FriendshipResponse(**result.data[0])

    def _resolve_request(self, caller_id: str, requester_id: str, status: FriendshipStatus, source: str) -> FriendshipResponse:
        # Only the target of a pending request may resolve it
        with store_call(source):
            result = self.supabase.table("friendships")\
                .update({
                    "status": status.value,
                    "updated_at": datetime.now(timezone.utc).isoformat()
                })\
                .eq("user_id", requester_id)\
                .eq("friend_id", caller_id)\
                .eq("status", FriendshipStatus.PENDING.value)\
                .execute()
        if not result.data:
            raise NotFound("No pending friend request from this user", source)
        logger.info("User %s marked friend request from %s as %s", caller_id, requester_id, status.value)
        return FriendshipResponse(**result.data[0])

    def accept_friend_request(self, caller_id: str, requester_id: str) -> FriendshipResponse:
        return self._resolve_request(caller_id, requester_id, FriendshipStatus.ACCEPTED, "accept_friend_request")

    def reject_friend_request(self, caller_id: str, requester_id: str) -> FriendshipResponse:
        return self._resolve_request(caller_id, requester_id, FriendshipStatus.REJECTED, "reject_friend_request")

    def _delete_directed(self, user_id: str, friend_id: str, status: FriendshipStatus, source: str) -> List[dict]:
        with store_call(source):
            result = self.supabase.table("friendships")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("friend_id", friend_id)\
                .eq("status", status.value)\
                .execute()
        return result.data

    def unfriend(self, user_id: str, friend_id: str) -> FriendshipResponse:
        """Either side of an accepted friendship may end it"""
        deleted = self._delete_directed(user_id, friend_id, FriendshipStatus.ACCEPTED, "unfriend")\
            or self._delete_directed(friend_id, user_id, FriendshipStatus.ACCEPTED, "unfriend")
        if not deleted:
            raise NotFound("Friendship does not exist", "unfriend")
        logger.info("User %s unfriended %s", user_id, friend_id)
        return FriendshipResponse(**deleted[0])

    def withdraw_friend_request(self, requester_id: str, target_id: str) -> FriendshipResponse:
        deleted = self._delete_directed(requester_id, target_id, FriendshipStatus.PENDING, "withdraw_friend_request")
        if not deleted:
            raise NotFound("No pending friend request to this user", "withdraw_friend_request")
        logger.info("User %s withdrew friend request to %s", requester_id, target_id)
        return FriendshipResponse(**deleted[0])

    def list_friends(self, user_id: str) -> List[PublicUserResponse]:
        with store_call("list_friends"):
            sent = self.supabase.table("friendships")\
                .select("friend_id")\
                .eq("user_id", user_id)\
                .eq("status", FriendshipStatus.ACCEPTED.value)\
                .execute()
            received = self.supabase.table("friendships")\
                .select("user_id")\
                .eq("friend_id", user_id)\
                .eq("status", FriendshipStatus.ACCEPTED.value)\
                .execute()
        friend_ids = [f["friend_id"] for f in sent.data] + [f["user_id"] for f in received.data]
        return self.users.get_users(friend_ids)

    def list_pending_requests(self, user_id: str) -> List[FriendshipResponse]:
        """Incoming requests still waiting for user_id to answer"""
        with store_call("list_pending_requests"):
            result = self.supabase.table("friendships")\
                .select("*")\
                .eq("friend_id", user_id)\
                .eq("status", FriendshipStatus.PENDING.value)\
                .order("created_at", desc=True)\
                .execute()
        return [FriendshipResponse(**f) for f in result.data]


class FollowService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)

    def _check_target(self, follower_id: str, target_id: str, source: str) -> None:
        if follower_id == target_id:
            raise Forbidden("You cannot follow yourself", source)
        if not self.users.user_exists(target_id):
            raise NotFound("User not found", source)

    def is_following(self, follower_id: str, target_id: str) -> bool:
        with store_call("is_following"):
            result = self.supabase.table("follows")\
                .select("id")\
                .eq("follower_id", follower_id)\
                .eq("following_id", target_id)\
                .limit(1)\
                .execute()
        return bool(result.data)

    def follow(self, follower_id: str, target_id: str) -> FollowResponse:
        self._check_target(follower_id, target_id, "follow")
        if self.is_following(follower_id, target_id):
            raise Conflict("You are already following this user", "follow")

        with store_call("follow"):
            result = self.supabase.table("follows").insert({
                "follower_id": follower_id,
                "following_id": target_id
            }).execute()
        if not result.data:
            raise Conflict("You are already following this user", "follow")
        logger.info("User %s followed %s", follower_id, target_id)
        return FollowResponse(**result.data[0])

    def unfollow(self, follower_id: str, target_id: str) -> FollowResponse:
        self._check_target(follower_id, target_id, "unfollow")
        with store_call("unfollow"):
            result = self.supabase.table("follows")\
                .delete()\
                .eq("follower_id", follower_id)\
                .eq("following_id", target_id)\
                .execute()
        if not result.data:
            raise Conflict("You are not following this user", "unfollow")
        logger.info("User %s unfollowed %s", follower_id, target_id)
        return FollowResponse(**result.data[0])

    def get_follow_data(self, user_id: str) -> FollowDataResponse:
        if not self.users.user_exists(user_id):
            raise NotFound("User not found", "get_follow_data")
        with store_call("get_follow_data"):
            followers = self.supabase.table("follows")\
                .select("follower_id")\
                .eq("following_id", user_id)\
                .execute()
            following = self.supabase.table("follows")\
                .select("following_id")\
                .eq("follower_id", user_id)\
                .execute()
        follower_profiles = self.users.get_users([f["follower_id"] for f in followers.data])
        following_profiles = self.users.get_users([f["following_id"] for f in following.data])
        return FollowDataResponse(
            followers=follower_profiles,
            followers_count=len(follower_profiles),
            following=following_profiles,
            following_count=len(following_profiles)
        )
