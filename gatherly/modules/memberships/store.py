"""
Membership Store: relational facts about who belongs to which group or event.

No business rules live here. Each call is a single PostgREST statement, so a
concurrent duplicate insert is rejected by the table's unique constraint and
surfaces as Conflict.
"""

import logging
from typing import List, Optional

from supabase import Client

from gatherly.core.errors import Conflict, NotFound
from gatherly.database.store_errors import store_call
from gatherly.modules.memberships.schemas import (
    EventMemberResponse, EventRole, GroupMemberResponse, GroupRole
)

logger = logging.getLogger(__name__)


class MembershipStore:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Group edges

    def has_group_role(self, user_id: str, group_id: str) -> Optional[GroupRole]:
        """Role of user_id in group_id, or None when there is no edge"""
        with store_call("has_group_role"):
            result = self.supabase.table("group_members")\
                .select("role")\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        if not result.data:
            return None
        return GroupRole(result.data[0]["role"])

    def add_group_membership(self, user_id: str, group_id: str, role: GroupRole) -> GroupMemberResponse:
        with store_call("add_group_membership"):
            result = self.supabase.table("group_members").insert({
                "group_id": group_id,
                "user_id": user_id,
                "role": GroupRole(role).value
            }).execute()
        if not result.data:
            raise Conflict("User already a member of this group", "add_group_membership")
        logger.info("Added %s to group %s as %s", user_id, group_id, GroupRole(role).value)
        return GroupMemberResponse(**result.data[0])

    def remove_group_membership(self, user_id: str, group_id: str) -> GroupMemberResponse:
        with store_call("remove_group_membership"):
            result = self.supabase.table("group_members")\
                .delete()\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()
        if not result.data:
            raise NotFound("User not found in group", "remove_group_membership")
        logger.info("Removed %s from group %s", user_id, group_id)
        return GroupMemberResponse(**result.data[0])

    def set_group_role(self, user_id: str, group_id: str, role: GroupRole) -> GroupMemberResponse:
        with store_call("set_group_role"):
            result = self.supabase.table("group_members")\
                .update({"role": GroupRole(role).value})\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()
        if not result.data:
            raise NotFound("User not found in group", "set_group_role")
        logger.info("Set role of %s in group %s to %s", user_id, group_id, GroupRole(role).value)
        return GroupMemberResponse(**result.data[0])

    def list_group_members(self, group_id: str) -> List[GroupMemberResponse]:
        with store_call("list_group_members"):
            result = self.supabase.table("group_members")\
                .select("*")\
                .eq("group_id", group_id)\
                .order("created_at")\
                .execute()
        return [GroupMemberResponse(**member) for member in result.data]

    def list_user_groups(self, user_id: str) -> List[GroupMemberResponse]:
        with store_call("list_user_groups"):
            result = self.supabase.table("group_members")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute()
        return [GroupMemberResponse(**member) for member in result.data]

    def count_group_members(self, group_id: str) -> int:
        return len(self.list_group_members(group_id))

    # Event edges

    def has_event_role(self, user_id: str, event_id: str) -> Optional[EventRole]:
        """Role of user_id in event_id, or None when there is no edge"""
        with store_call("has_event_role"):
            result = self.supabase.table("event_members")\
                .select("role")\
                .eq("event_id", event_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
        if not result.data:
            return None
        return EventRole(result.data[0]["role"])

    def add_event_membership(self, user_id: str, event_id: str, role: EventRole) -> EventMemberResponse:
        with store_call("add_event_membership"):
            result = self.supabase.table("event_members").insert({
                "event_id": event_id,
                "user_id": user_id,
                "role": EventRole(role).value
            }).execute()
        if not result.data:
            raise Conflict("User already part of this event", "add_event_membership")
        logger.info("Added %s to event %s as %s", user_id, event_id, EventRole(role).value)
        return EventMemberResponse(**result.data[0])

    def remove_event_membership(self, user_id: str, event_id: str) -> EventMemberResponse:
        with store_call("remove_event_membership"):
            result = self.supabase.table("event_members")\
                .delete()\
                .eq("event_id", event_id)\
                .eq("user_id", user_id)\
                .execute()
        if not result.data:
            raise NotFound("User not found in event", "remove_event_membership")
        logger.info("Removed %s from event %s", user_id, event_id)
        return EventMemberResponse(**result.data[0])

    def list_event_members(self, event_id: str) -> List[EventMemberResponse]:
        with store_call("list_event_members"):
            result = self.supabase.table("event_members")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("created_at")\
                .execute()
        return [EventMemberResponse(**member) for member in result.data]

    def count_event_members(self, event_id: str) -> int:
        return len(self.list_event_members(event_id))

    def list_user_events(self, user_id: str) -> List[EventMemberResponse]:
        with store_call("list_user_events"):
            result = self.supabase.table("event_members")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute()
        return [EventMemberResponse(**member) for member in result.data]
