import pytest

from gatherly.core.authorization import (
    authorize_event_member,
    authorize_event_organizer,
    authorize_group_admin,
    authorize_group_member,
    authorize_self,
)
from gatherly.core.errors import ErrorKind, Forbidden, NotFound
from gatherly.modules.memberships.schemas import EventRole, GroupRole


class StubRoles:
    def __init__(self, groups=None, events=None):
        self.groups = groups or {}
        self.events = events or {}

    def has_group_role(self, user_id, group_id):
        return self.groups.get((user_id, group_id))

    def has_event_role(self, user_id, event_id):
        return self.events.get((user_id, event_id))


ROLES = StubRoles(
    groups={("admin", "g1"): GroupRole.ADMIN, ("member", "g1"): GroupRole.MEMBER},
    events={("organizer", "e1"): EventRole.ORGANIZER, ("attendee", "e1"): EventRole.ATTENDEE},
)


def test_group_admin_granted_for_admin():
    decision = authorize_group_admin(ROLES, "admin", "g1")
    assert decision.authorized
    assert decision.role == GroupRole.ADMIN
    assert decision.require() is decision


def test_group_admin_denies_member_as_forbidden():
    decision = authorize_group_admin(ROLES, "member", "g1")
    assert not decision.authorized
    assert decision.reason == ErrorKind.FORBIDDEN
    assert decision.role == GroupRole.MEMBER
    with pytest.raises(Forbidden):
        decision.require()


def test_group_admin_denies_outsider_as_not_found():
    decision = authorize_group_admin(ROLES, "stranger", "g1")
    assert decision.reason == ErrorKind.NOT_FOUND
    with pytest.raises(NotFound):
        decision.require()


def test_group_member_accepts_any_role():
    assert authorize_group_member(ROLES, "admin", "g1").authorized
    assert authorize_group_member(ROLES, "member", "g1").authorized
    assert authorize_group_member(ROLES, "stranger", "g1").reason == ErrorKind.NOT_FOUND


def test_event_organizer_denies_attendee_explicitly():
    decision = authorize_event_organizer(ROLES, "attendee", "e1")
    assert not decision.authorized
    assert decision.reason == ErrorKind.FORBIDDEN


def test_event_organizer_checks():
    assert authorize_event_organizer(ROLES, "organizer", "e1").authorized
    assert authorize_event_organizer(ROLES, "stranger", "e1").reason == ErrorKind.NOT_FOUND


def test_group_admin_has_no_implicit_event_authority():
    decision = authorize_event_organizer(ROLES, "admin", "e1")
    assert not decision.authorized
    assert decision.reason == ErrorKind.NOT_FOUND


def test_event_member_accepts_any_event_role():
    assert authorize_event_member(ROLES, "organizer", "e1").authorized
    assert authorize_event_member(ROLES, "attendee", "e1").authorized
    assert authorize_event_member(ROLES, "member", "e1").reason == ErrorKind.NOT_FOUND


def test_authorize_self():
    assert authorize_self("u1", "u1").authorized
    decision = authorize_self("u1", "u2")
    assert decision.reason == ErrorKind.FORBIDDEN
    with pytest.raises(Forbidden):
        decision.require()
