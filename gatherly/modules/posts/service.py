import logging
from typing import List, Optional

from supabase import Client

from gatherly.core.authorization import (
    authorize_event_member, authorize_group_admin, authorize_group_member
)
from gatherly.core.errors import NotFound, Unavailable
from gatherly.database.store_errors import store_call
from gatherly.modules.groups.service import GroupService
from gatherly.modules.posts.schemas import PostCreate, PostResponse

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.groups = GroupService(supabase)
        self.memberships = self.groups.memberships

    def _event_in_group(self, event_id: str, group_id: str, source: str) -> dict:
        with store_call(source):
            result = self.supabase.table("events")\
                .select("id, group_id")\
                .eq("id", event_id)\
                .eq("group_id", group_id)\
                .limit(1)\
                .execute()
        if not result.data:
            raise NotFound("Event not found", source)
        return result.data[0]

    def create_post(self, user_id: str, group_id: str, post_data: PostCreate) -> PostResponse:
        """Post to a group feed, or to an event feed when event_id is set.

        The author must belong to the group, and to the event for event posts.
        """
        self.groups.fetch_group(group_id, "create_post")
        authorize_group_member(self.memberships, user_id, group_id).require()
        if post_data.event_id:
            self._event_in_group(post_data.event_id, group_id, "create_post")
            authorize_event_member(self.memberships, user_id, post_data.event_id).require()

        with store_call("create_post"):
            result = self.supabase.table("posts").insert({
                "group_id": group_id,
                "event_id": post_data.event_id,
                "user_id": user_id,
                "content": post_data.content
            }).execute()
        if not result.data:
            raise Unavailable("Post was not stored", "create_post")
        post = result.data[0]
        logger.info("User %s posted %s in group %s", user_id, post["id"], group_id)
        return PostResponse(**post)

    def list_group_posts(self, group_id: str, viewer_id: Optional[str] = None) -> List[PostResponse]:
        group = self.groups.fetch_group(group_id, "list_group_posts")
        self.groups.ensure_visible(group, viewer_id)
        with store_call("list_group_posts"):
            result = self.supabase.table("posts")\
                .select("*")\
                .eq("group_id", group_id)\
                .is_("event_id", "null")\
                .order("created_at", desc=True)\
                .execute()
        return [PostResponse(**post) for post in result.data]

    def list_event_posts(self, group_id: str, event_id: str, viewer_id: Optional[str] = None) -> List[PostResponse]:
        group = self.groups.fetch_group(group_id, "list_event_posts")
        self.groups.ensure_visible(group, viewer_id)
        self._event_in_group(event_id, group_id, "list_event_posts")
        with store_call("list_event_posts"):
            result = self.supabase.table("posts")\
                .select("*")\
                .eq("group_id", group_id)\
                .eq("event_id", event_id)\
                .order("created_at", desc=True)\
                .execute()
        return [PostResponse(**post) for post in result.data]

    def delete_post(self, principal_id: str, post_id: str) -> None:
        """Delete a post; allowed for its author and for admins of its group"""
        with store_call("delete_post"):
            result = self.supabase.table("posts")\
                .select("*")\
                .eq("id", post_id)\
                .limit(1)\
                .execute()
        if not result.data:
            raise NotFound("Post not found", "delete_post")
        post = result.data[0]

        if post["user_id"] != principal_id:
            authorize_group_admin(self.memberships, principal_id, post["group_id"]).require()

        with store_call("delete_post"):
            self.supabase.table("posts").delete().eq("id", post_id).execute()
        logger.info("User %s deleted post %s", principal_id, post_id)
