from concurrent.futures import ThreadPoolExecutor

import pytest

from gatherly.core.errors import Conflict, Forbidden, NotFound
from gatherly.modules.relationships.schemas import FriendshipStatus
from gatherly.modules.relationships.service import FollowService, FriendshipService


@pytest.fixture
def friendships(db):
    return FriendshipService(db)


@pytest.fixture
def follows(db):
    return FollowService(db)


@pytest.fixture
def pair(db):
    return db.create_user("ana")[0], db.create_user("ben")[0]


def test_friend_request_round_trip(friendships, pair):
    a, b = pair
    request = friendships.send_friend_request(a, b)
    assert request.status == FriendshipStatus.PENDING
    assert [r.user_id for r in friendships.list_pending_requests(b)] == [a]

    accepted = friendships.accept_friend_request(b, a)
    assert accepted.status == FriendshipStatus.ACCEPTED
    assert [f.id for f in friendships.list_friends(a)] == [b]
    assert [f.id for f in friendships.list_friends(b)] == [a]

    friendships.unfriend(b, a)
    assert friendships.find_edge(a, b) is None
    assert friendships.list_friends(a) == []


def test_duplicate_request_conflicts_both_ways(friendships, pair):
    a, b = pair
    friendships.send_friend_request(a, b)
    with pytest.raises(Conflict):
        friendships.send_friend_request(a, b)
    with pytest.raises(Conflict):
        friendships.send_friend_request(b, a)


def test_request_guards(friendships, pair):
    a, _ = pair
    with pytest.raises(Forbidden):
        friendships.send_friend_request(a, a)
    with pytest.raises(NotFound):
        friendships.send_friend_request(a, "ghost")


def test_only_target_resolves_request(friendships, pair):
    a, b = pair
    friendships.send_friend_request(a, b)
    with pytest.raises(NotFound):
        friendships.accept_friend_request(a, b)
    with pytest.raises(NotFound):
        friendships.reject_friend_request(a, b)


def test_rejected_edge_is_terminal(friendships, pair):
    a, b = pair
    friendships.send_friend_request(a, b)
    rejected = friendships.reject_friend_request(b, a)
    assert rejected.status == FriendshipStatus.REJECTED

    with pytest.raises(NotFound):
        friendships.accept_friend_request(b, a)
    with pytest.raises(Conflict):
        friendships.send_friend_request(a, b)
    with pytest.raises(Conflict):
        friendships.send_friend_request(b, a)
    with pytest.raises(NotFound):
        friendships.unfriend(a, b)
    with pytest.raises(NotFound):
        friendships.withdraw_friend_request(a, b)


def test_withdraw_pending_request(friendships, pair):
    a, b = pair
    friendships.send_friend_request(a, b)
    friendships.withdraw_friend_request(a, b)
    assert friendships.find_edge(a, b) is None
    # Sending again is allowed once withdrawn
    friendships.send_friend_request(b, a)


def test_unfriend_requires_accepted_edge(friendships, pair):
    a, b = pair
    with pytest.raises(NotFound):
        friendships.unfriend(a, b)
    friendships.send_friend_request(a, b)
    with pytest.raises(NotFound):
        friendships.unfriend(a, b)


def test_concurrent_opposite_requests_leave_one_edge(friendships, pair, db):
    a, b = pair

    def attempt(direction):
        try:
            return friendships.send_friend_request(*direction)
        except Conflict as exc:
            return exc

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, [(a, b), (b, a)]))

    assert sum(1 for r in results if isinstance(r, Conflict)) == 1
    assert len(db.rows("friendships")) == 1


def test_accept_reject_race_single_outcome(friendships, pair):
    a, b = pair
    friendships.send_friend_request(a, b)

    def resolve(action):
        try:
            return action(b, a).status
        except NotFound:
            return None

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(resolve, [friendships.accept_friend_request, friendships.reject_friend_request]))

    assert outcomes.count(None) == 1
    assert friendships.find_edge(a, b)["status"] in [s for s in outcomes if s]


def test_follow_lifecycle(follows, pair):
    a, b = pair
    follows.follow(a, b)
    assert follows.is_following(a, b)
    assert not follows.is_following(b, a)

    with pytest.raises(Conflict):
        follows.follow(a, b)

    data = follows.get_follow_data(b)
    assert data.followers_count == 1
    assert data.followers[0].id == a
    assert data.following_count == 0

    follows.unfollow(a, b)
    assert not follows.is_following(a, b)
    with pytest.raises(Conflict):
        follows.unfollow(a, b)


def test_self_follow_forbidden(follows, pair, db):
    a, _ = pair
    with pytest.raises(Forbidden):
        follows.follow(a, a)
    with pytest.raises(Forbidden):
        follows.unfollow(a, a)
    assert db.rows("follows") == []


def test_follow_unknown_user(follows, pair):
    a, _ = pair
    with pytest.raises(NotFound):
        follows.follow(a, "ghost")
    with pytest.raises(NotFound):
        follows.get_follow_data("ghost")
