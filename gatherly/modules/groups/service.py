import logging
from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client

from gatherly.core.authorization import authorize_group_admin, authorize_group_member
from gatherly.core.errors import Conflict, Forbidden, NotFound, ServiceError
from gatherly.database.store_errors import store_call
from gatherly.modules.groups.schemas import GroupCreate, GroupPrivacy, GroupResponse, GroupUpdate
from gatherly.modules.memberships.schemas import GroupMemberResponse, GroupRole
from gatherly.modules.memberships.store import MembershipStore

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.memberships = MembershipStore(supabase)

    def fetch_group(self, group_id: str, source: str) -> dict:
        with store_call(source):
            result = self.supabase.table("groups")\
                .select("*")\
                .eq("id", group_id)\
                .limit(1)\
                .execute()
        if not result.data:
            raise NotFound("Group not found", source)
        return result.data[0]

    def ensure_visible(self, group: dict, viewer_id: Optional[str]) -> None:
        """Private groups are only readable by their members"""
        if group["privacy"] != GroupPrivacy.PRIVATE.value:
            return
        if viewer_id is None:
            raise NotFound("Group not found", "ensure_visible")
        authorize_group_member(self.memberships, viewer_id, group["id"]).require()

    def create_group(self, user_id: str, group_data: GroupCreate) -> GroupResponse:
        """Create a group; its creator always becomes its first admin"""
        with store_call("create_group"):
            existing = self.supabase.table("groups")\
                .select("id")\
                .eq("name", group_data.name)\
                .limit(1)\
                .execute()
        if existing.data:
            raise Conflict("Group already exists", "create_group")

        with store_call("create_group"):
            result = self.supabase.table("groups").insert({
                "name": group_data.name,
                "description": group_data.description,
                "privacy": group_data.privacy.value,
                "topics": [t.value for t in group_data.topics],
                "created_by": user_id
            }).execute()
        if not result.data:
            raise Conflict("Group already exists", "create_group")
        group = result.data[0]

        try:
            self.memberships.add_group_membership(user_id, group["id"], GroupRole.ADMIN)
        except ServiceError:
            # A group must never exist without its admin
            with store_call("create_group"):
                self.supabase.table("groups").delete().eq("id", group["id"]).execute()
            raise

        logger.info("User %s created group %s (%s)", user_id, group["id"], group["name"])
        return GroupResponse(**group, member_count=1)

    def get_group(self, group_id: str, viewer_id: Optional[str] = None) -> GroupResponse:
        group = self.fetch_group(group_id, "get_group")
        self.ensure_visible(group, viewer_id)
        return GroupResponse(**group, member_count=self.memberships.count_group_members(group_id))

    def list_groups(
        self,
        topics: Optional[List[str]] = None,
        name: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
        viewer_id: Optional[str] = None
    ) -> List[GroupResponse]:
        """List public groups, plus the viewer's own private ones.

        Optionally filtered by overlapping topics and a name substring.
        """
        joined = [m.group_id for m in self.memberships.list_user_groups(viewer_id)] if viewer_id else []
        with store_call("list_groups"):
            query = self.supabase.table("groups").select("*")
            if joined:
                query = query.or_(f"privacy.eq.{GroupPrivacy.PUBLIC.value},id.in.({','.join(joined)})")
            else:
                query = query.eq("privacy", GroupPrivacy.PUBLIC.value)
            if topics:
                query = query.ov("topics", topics)
            if name:
                query = query.ilike("name", f"%{name}%")
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
        return [
            GroupResponse(**group, member_count=self.memberships.count_group_members(group["id"]))
            for group in result.data
        ]

    def update_group(self, principal_id: str, group_id: str, group_data: GroupUpdate) -> GroupResponse:
        authorize_group_admin(self.memberships, principal_id, group_id).require()

        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if group_data.name:
            update_data["name"] = group_data.name
        if group_data.description is not None:
            update_data["description"] = group_data.description
        if group_data.privacy is not None:
            update_data["privacy"] = group_data.privacy.value
        if group_data.topics is not None:
            update_data["topics"] = [t.value for t in group_data.topics]

        with store_call("update_group"):
            result = self.supabase.table("groups")\
                .update(update_data)\
                .eq("id", group_id)\
                .execute()
        if not result.data:
            raise NotFound("Group not found", "update_group")
        logger.info("Admin %s updated group %s", principal_id, group_id)
        return GroupResponse(**result.data[0])

    def delete_group(self, principal_id: str, group_id: str) -> None:
        """Disband a group along with its events, posts and memberships"""
        authorize_group_admin(self.memberships, principal_id, group_id).require()

        with store_call("delete_group"):
            events = self.supabase.table("events")\
                .select("id")\
                .eq("group_id", group_id)\
                .execute()
            event_ids = [e["id"] for e in events.data]

            self.supabase.table("posts").delete().eq("group_id", group_id).execute()
            if event_ids:
                self.supabase.table("event_members").delete().in_("event_id", event_ids).execute()
                self.supabase.table("events").delete().eq("group_id", group_id).execute()
            self.supabase.table("group_members").delete().eq("group_id", group_id).execute()
            result = self.supabase.table("groups").delete().eq("id", group_id).execute()

        if not result.data:
            raise NotFound("Group not found", "delete_group")
        logger.info("Admin %s disbanded group %s", principal_id, group_id)

    def list_members(self, group_id: str, viewer_id: Optional[str] = None) -> List[GroupMemberResponse]:
        group = self.fetch_group(group_id, "list_members")
        self.ensure_visible(group, viewer_id)
        return self.memberships.list_group_members(group_id)

    def join_group(self, user_id: str, group_id: str) -> GroupMemberResponse:
        self.fetch_group(group_id, "join_group")
        if authorize_group_member(self.memberships, user_id, group_id).authorized:
            raise Conflict("User is already a member of this group", "join_group")
        # The unique (group_id, user_id) constraint decides concurrent joins
        return self.memberships.add_group_membership(user_id, group_id, GroupRole.MEMBER)

    def leave_group(self, user_id: str, group_id: str) -> GroupMemberResponse:
        decision = authorize_group_member(self.memberships, user_id, group_id).require()
        if decision.role == GroupRole.ADMIN:
            raise Forbidden("Admins cannot leave their group; disband it instead", "leave_group")
        return self.memberships.remove_group_membership(user_id, group_id)

    def kick_from_group(self, admin_id: str, target_id: str, group_id: str) -> GroupMemberResponse:
        authorize_group_admin(self.memberships, admin_id, group_id).require()
        if admin_id == target_id:
            raise Forbidden("Admins cannot remove themselves from their group", "kick_from_group")
        removed = self.memberships.remove_group_membership(target_id, group_id)
        logger.info("Admin %s removed %s from group %s", admin_id, target_id, group_id)
        return removed

    def promote_to_admin(self, admin_id: str, target_id: str, group_id: str) -> GroupMemberResponse:
        authorize_group_admin(self.memberships, admin_id, group_id).require()
        role = self.memberships.has_group_role(target_id, group_id)
        if role is None:
            raise NotFound("User not found in group", "promote_to_admin")
        if role == GroupRole.ADMIN:
            raise Conflict("User is already an admin", "promote_to_admin")
        return self.memberships.set_group_role(target_id, group_id, GroupRole.ADMIN)
