import logging
from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client

from gatherly.core.authorization import authorize_self
from gatherly.core.errors import Forbidden, NotFound
from gatherly.database.store_errors import store_call
from gatherly.modules.groups.schemas import GroupPrivacy
from gatherly.modules.memberships.schemas import EventRole, GroupRole
from gatherly.modules.memberships.store import MembershipStore
from gatherly.modules.users.schemas import (
    PublicUserResponse, UserGroupResponse, UserResponse, UserUpdate
)

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.memberships = MembershipStore(supabase)

    def _fetch_profile(self, user_id: str, source: str) -> dict:
        with store_call(source):
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        if not result.data:
            raise NotFound("User not found", source)
        return result.data[0]

    def user_exists(self, user_id: str) -> bool:
        with store_call("user_exists"):
            result = self.supabase.table("user_profiles")\
                .select("id")\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
        return bool(result.data)

    def get_user(self, user_id: str) -> PublicUserResponse:
        return PublicUserResponse(**self._fetch_profile(user_id, "get_user"))

    def get_own_profile(self, user_id: str) -> UserResponse:
        return UserResponse(**self._fetch_profile(user_id, "get_own_profile"))

    def get_users(self, user_ids: List[str]) -> List[PublicUserResponse]:
        if not user_ids:
            return []
        with store_call("get_users"):
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .in_("id", user_ids)\
                .order("username")\
                .execute()
        return [PublicUserResponse(**user) for user in result.data]

    def list_users(self, limit: int = 20, offset: int = 0) -> List[PublicUserResponse]:
        with store_call("list_users"):
            result = self.supabase.table("user_profiles")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
        return [PublicUserResponse(**user) for user in result.data]

    def update_user(self, principal_id: str, user_id: str, user_data: UserUpdate) -> UserResponse:
        """Update a profile; only its owner may do so"""
        authorize_self(principal_id, user_id).require()

        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if user_data.username is not None:
            update_data["username"] = user_data.username
        if user_data.email is not None:
            update_data["email"] = user_data.email
        if user_data.avatar_url is not None:
            update_data["avatar_url"] = user_data.avatar_url

        with store_call("update_user"):
            result = self.supabase.table("user_profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        if not result.data:
            raise NotFound("User not found", "update_user")
        logger.info("User %s updated profile fields %s", user_id, sorted(update_data))
        return UserResponse(**result.data[0])

    def delete_user(self, principal_id: str, user_id: str) -> None:
        """Delete an account; only its owner may do so.

        Group admins and event organizers are refused, same as leaving as admin
        or cancelling as organizer: what they run would be left without anyone
        allowed to manage it. Every other edge the user holds is removed along
        with the profile.
        """
        authorize_self(principal_id, user_id).require()

        admin_of = [m.group_id for m in self.memberships.list_user_groups(user_id) if m.role == GroupRole.ADMIN]
        if admin_of:
            raise Forbidden("Group admins must disband or hand over their groups first", "delete_user")
        organizing = [m.event_id for m in self.memberships.list_user_events(user_id) if m.role == EventRole.ORGANIZER]
        if organizing:
            raise Forbidden("Event organizers must cancel their events first", "delete_user")

        with store_call("delete_user"):
            self.supabase.table("follows").delete().eq("follower_id", user_id).execute()
            self.supabase.table("follows").delete().eq("following_id", user_id).execute()
            self.supabase.table("friendships").delete().eq("user_id", user_id).execute()
            self.supabase.table("friendships").delete().eq("friend_id", user_id).execute()
            self.supabase.table("posts").delete().eq("user_id", user_id).execute()
            self.supabase.table("event_members").delete().eq("user_id", user_id).execute()
            self.supabase.table("group_members").delete().eq("user_id", user_id).execute()
            result = self.supabase.table("user_profiles")\
                .delete()\
                .eq("id", user_id)\
                .execute()
        if not result.data:
            raise NotFound("User not found", "delete_user")
        logger.info("User %s deleted their account", user_id)

    def get_user_groups(self, user_id: str, viewer_id: Optional[str] = None) -> List[UserGroupResponse]:
        """Groups user_id belongs to. Private ones are listed only to fellow members."""
        self._fetch_profile(user_id, "get_user_groups")
        memberships = self.memberships.list_user_groups(user_id)
        if not memberships:
            return []
        roles = {m.group_id: m.role for m in memberships}
        with store_call("get_user_groups"):
            result = self.supabase.table("groups")\
                .select("id, name, privacy")\
                .in_("id", list(roles))\
                .execute()

        visible_private = set()
        if viewer_id is not None:
            visible_private = {m.group_id for m in self.memberships.list_user_groups(viewer_id)}
        return [
            UserGroupResponse(
                group_id=group["id"],
                name=group["name"],
                privacy=group["privacy"],
                membership_role=roles[group["id"]].value
            )
            for group in result.data
            if group["privacy"] != GroupPrivacy.PRIVATE.value or group["id"] in visible_private
        ]
