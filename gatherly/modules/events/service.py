import logging
from datetime import datetime, timezone
from typing import List, Optional

from supabase import Client

from gatherly.core.authorization import (
    authorize_event_member, authorize_event_organizer, authorize_group_member
)
from gatherly.core.errors import Conflict, Forbidden, NotFound, ServiceError, Unavailable
from gatherly.database.store_errors import store_call
from gatherly.modules.events.schemas import EventCreate, EventResponse, EventUpdate
from gatherly.modules.groups.schemas import GroupPrivacy
from gatherly.modules.groups.service import GroupService
from gatherly.modules.memberships.schemas import EventMemberResponse, EventRole

logger = logging.getLogger(__name__)


class EventService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.groups = GroupService(supabase)
        self.memberships = self.groups.memberships

    def _fetch_event(self, event_id: str, source: str) -> dict:
        with store_call(source):
            result = self.supabase.table("events")\
                .select("*")\
                .eq("id", event_id)\
                .limit(1)\
                .execute()
        if not result.data:
            raise NotFound("Event not found", source)
        return result.data[0]

    def _with_count(self, event: dict) -> EventResponse:
        return EventResponse(**event, attendee_count=self.memberships.count_event_members(event["id"]))

    def create_event(self, user_id: str, group_id: str, event_data: EventCreate) -> EventResponse:
        """Create an event inside a group; its creator always becomes its organizer"""
        self.groups.fetch_group(group_id, "create_event")
        authorize_group_member(self.memberships, user_id, group_id).require()

        with store_call("create_event"):
            result = self.supabase.table("events").insert({
                "group_id": group_id,
                "name": event_data.name,
                "description": event_data.description,
                "date": event_data.date.isoformat(),
                "time": event_data.time.isoformat(timespec="minutes"),
                "location": event_data.location,
                "created_by": user_id
            }).execute()
        if not result.data:
            raise Unavailable("Event was not stored", "create_event")
        event = result.data[0]

        try:
            self.memberships.add_event_membership(user_id, event["id"], EventRole.ORGANIZER)
        except ServiceError:
            with store_call("create_event"):
                self.supabase.table("events").delete().eq("id", event["id"]).execute()
            raise

        logger.info("User %s created event %s in group %s", user_id, event["id"], group_id)
        return EventResponse(**event, attendee_count=1)

    def get_event(self, event_id: str, viewer_id: Optional[str] = None) -> EventResponse:
        event = self._fetch_event(event_id, "get_event")
        group = self.groups.fetch_group(event["group_id"], "get_event")
        self.groups.ensure_visible(group, viewer_id)
        return self._with_count(event)

    def list_events(self, limit: int = 20, offset: int = 0) -> List[EventResponse]:
        """List events of public groups"""
        with store_call("list_events"):
            groups = self.supabase.table("groups")\
                .select("id")\
                .eq("privacy", GroupPrivacy.PUBLIC.value)\
                .execute()
            group_ids = [g["id"] for g in groups.data]
            if not group_ids:
                return []
            result = self.supabase.table("events")\
                .select("*")\
                .in_("group_id", group_ids)\
                .order("date")\
                .limit(limit)\
                .offset(offset)\
                .execute()
        return [self._with_count(event) for event in result.data]

    def list_group_events(self, group_id: str, viewer_id: Optional[str] = None) -> List[EventResponse]:
        group = self.groups.fetch_group(group_id, "list_group_events")
        self.groups.ensure_visible(group, viewer_id)
        with store_call("list_group_events"):
            result = self.supabase.table("events")\
                .select("*")\
                .eq("group_id", group_id)\
                .order("date")\
                .execute()
        return [self._with_count(event) for event in result.data]

    def update_event(self, principal_id: str, event_id: str, event_data: EventUpdate) -> EventResponse:
        authorize_event_organizer(self.memberships, principal_id, event_id).require()

        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
        if event_data.name is not None:
            update_data["name"] = event_data.name
        if event_data.description is not None:
            update_data["description"] = event_data.description
        if event_data.date is not None:
            update_data["date"] = event_data.date.isoformat()
        if event_data.time is not None:
            update_data["time"] = event_data.time.isoformat(timespec="minutes")
        if event_data.location is not None:
            update_data["location"] = event_data.location

        with store_call("update_event"):
            result = self.supabase.table("events")\
                .update(update_data)\
                .eq("id", event_id)\
                .execute()
        if not result.data:
            raise NotFound("Event not found", "update_event")
        logger.info("Organizer %s updated event %s", principal_id, event_id)
        return self._with_count(result.data[0])

    def delete_event(self, principal_id: str, event_id: str) -> None:
        """Cancel an event (organizer only)"""
        authorize_event_organizer(self.memberships, principal_id, event_id).require()

        with store_call("delete_event"):
            self.supabase.table("posts").delete().eq("event_id", event_id).execute()
            self.supabase.table("event_members").delete().eq("event_id", event_id).execute()
            result = self.supabase.table("events").delete().eq("id", event_id).execute()
        if not result.data:
            raise NotFound("Event not found", "delete_event")
        logger.info("Organizer %s cancelled event %s", principal_id, event_id)

    def attend_event(self, user_id: str, event_id: str) -> EventMemberResponse:
        event = self._fetch_event(event_id, "attend_event")
        authorize_group_member(self.memberships, user_id, event["group_id"]).require()
        if authorize_event_member(self.memberships, user_id, event_id).authorized:
            raise Conflict("User is already attending this event", "attend_event")
        # The unique (event_id, user_id) constraint decides concurrent attends
        return self.memberships.add_event_membership(user_id, event_id, EventRole.ATTENDEE)

    def cancel_attendance(self, user_id: str, event_id: str) -> EventMemberResponse:
        decision = authorize_event_member(self.memberships, user_id, event_id).require()
        if decision.role == EventRole.ORGANIZER:
            raise Forbidden("Organizers cannot cancel attendance; cancel the event instead", "cancel_attendance")
        return self.memberships.remove_event_membership(user_id, event_id)

    def list_attendees(self, event_id: str, viewer_id: Optional[str] = None) -> List[EventMemberResponse]:
        event = self._fetch_event(event_id, "list_attendees")
        group = self.groups.fetch_group(event["group_id"], "list_attendees")
        self.groups.ensure_visible(group, viewer_id)
        return self.memberships.list_event_members(event_id)
