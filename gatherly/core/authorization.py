"""
Authorization decisions over membership facts.

Every check returns a Decision: either authorized (carrying the role that
granted it) or denied with a typed reason. Nothing here writes to the store.

Denial policy:
- NOT_FOUND when the caller has no relationship with the target at all
- FORBIDDEN when the relationship exists but the role is insufficient

Group admin authority and event organizer authority are independent. A group
admin has no say over an event unless they are also its organizer.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from gatherly.core.errors import ErrorKind, error_for
from gatherly.modules.memberships.schemas import EventRole, GroupRole

logger = logging.getLogger(__name__)

Role = Union[GroupRole, EventRole]


class RoleLookup(Protocol):
    def has_group_role(self, user_id: str, group_id: str) -> Optional[GroupRole]: ...

    def has_event_role(self, user_id: str, event_id: str) -> Optional[EventRole]: ...


@dataclass(frozen=True)
class Decision:
    authorized: bool
    role: Optional[Role] = None
    reason: Optional[ErrorKind] = None
    detail: str = ""
    source: Optional[str] = None

    @classmethod
    def grant(cls, role: Optional[Role] = None, source: Optional[str] = None) -> "Decision":
        return cls(authorized=True, role=role, source=source)

    @classmethod
    def deny(cls, reason: ErrorKind, detail: str, source: str, role: Optional[Role] = None) -> "Decision":
        logger.debug("Denied in %s (%s): %s", source, reason.value, detail)
        return cls(authorized=False, role=role, reason=reason, detail=detail, source=source)

    def require(self) -> "Decision":
        """Raise the error matching the denial reason, or return self."""
        if not self.authorized:
            raise error_for(self.reason, self.detail, self.source)
        return self


def authorize_group_admin(store: RoleLookup, user_id: str, group_id: str) -> Decision:
    role = store.has_group_role(user_id, group_id)
    if role is None:
        return Decision.deny(ErrorKind.NOT_FOUND, "User not found in group", "authorize_group_admin")
    if role != GroupRole.ADMIN:
        return Decision.deny(ErrorKind.FORBIDDEN, "User is not an admin", "authorize_group_admin", role)
    return Decision.grant(role, "authorize_group_admin")


def authorize_group_member(store: RoleLookup, user_id: str, group_id: str) -> Decision:
    role = store.has_group_role(user_id, group_id)
    if role is None:
        return Decision.deny(ErrorKind.NOT_FOUND, "User is not a member of this group", "authorize_group_member")
    return Decision.grant(role, "authorize_group_member")


def authorize_event_organizer(store: RoleLookup, user_id: str, event_id: str) -> Decision:
    role = store.has_event_role(user_id, event_id)
    if role is None:
        return Decision.deny(ErrorKind.NOT_FOUND, "User not found in event", "authorize_event_organizer")
    if role != EventRole.ORGANIZER:
        return Decision.deny(
            ErrorKind.FORBIDDEN, "You are not the organizer of this event", "authorize_event_organizer", role
        )
    return Decision.grant(role, "authorize_event_organizer")


def authorize_event_member(store: RoleLookup, user_id: str, event_id: str) -> Decision:
    role = store.has_event_role(user_id, event_id)
    if role is None:
        return Decision.deny(ErrorKind.NOT_FOUND, "User is not part of this event", "authorize_event_member")
    return Decision.grant(role, "authorize_event_member")


def authorize_self(principal_id: str, target_id: str) -> Decision:
    if principal_id != target_id:
        return Decision.deny(ErrorKind.FORBIDDEN, "You can only modify your own account", "authorize_self")
    return Decision.grant(source="authorize_self")
