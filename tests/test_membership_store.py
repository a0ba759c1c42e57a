import pytest

from gatherly.core.errors import Conflict, NotFound, Unavailable
from gatherly.modules.memberships.schemas import EventRole, GroupRole
from gatherly.modules.memberships.store import MembershipStore


@pytest.fixture
def store(db):
    return MembershipStore(db)


def test_group_edge_lifecycle(store):
    assert store.has_group_role("u1", "g1") is None

    edge = store.add_group_membership("u1", "g1", GroupRole.MEMBER)
    assert edge.role == GroupRole.MEMBER
    assert store.has_group_role("u1", "g1") == GroupRole.MEMBER

    promoted = store.set_group_role("u1", "g1", GroupRole.ADMIN)
    assert promoted.role == GroupRole.ADMIN
    assert store.has_group_role("u1", "g1") == GroupRole.ADMIN

    store.remove_group_membership("u1", "g1")
    assert store.has_group_role("u1", "g1") is None


def test_duplicate_group_edge_conflicts(store, db):
    store.add_group_membership("u1", "g1", GroupRole.MEMBER)
    with pytest.raises(Conflict):
        store.add_group_membership("u1", "g1", GroupRole.ADMIN)
    assert len(db.rows("group_members")) == 1
    assert store.has_group_role("u1", "g1") == GroupRole.MEMBER


def test_remove_missing_edges_not_found(store):
    with pytest.raises(NotFound):
        store.remove_group_membership("u1", "g1")
    with pytest.raises(NotFound):
        store.remove_event_membership("u1", "e1")
    with pytest.raises(NotFound):
        store.set_group_role("u1", "g1", GroupRole.ADMIN)


def test_event_edge_lifecycle(store):
    store.add_event_membership("u1", "e1", EventRole.ORGANIZER)
    store.add_event_membership("u2", "e1", EventRole.ATTENDEE)
    assert store.has_event_role("u1", "e1") == EventRole.ORGANIZER
    assert store.count_event_members("e1") == 2

    with pytest.raises(Conflict):
        store.add_event_membership("u2", "e1", EventRole.ATTENDEE)

    store.remove_event_membership("u2", "e1")
    assert [m.user_id for m in store.list_event_members("e1")] == ["u1"]


def test_store_outage_is_unavailable(store, db):
    db.unavailable = True
    with pytest.raises(Unavailable):
        store.has_group_role("u1", "g1")
    with pytest.raises(Unavailable):
        store.add_group_membership("u1", "g1", GroupRole.MEMBER)
