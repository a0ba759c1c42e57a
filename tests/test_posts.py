import datetime as dt
from types import SimpleNamespace

import pytest

from gatherly.core.errors import Forbidden, NotFound, Unavailable
from gatherly.modules.events.schemas import EventCreate
from gatherly.modules.events.service import EventService
from gatherly.modules.groups.schemas import GroupCreate
from gatherly.modules.posts.schemas import PostCreate
from gatherly.modules.posts.service import PostService


@pytest.fixture
def posts(db):
    return PostService(db)


@pytest.fixture
def world(db, posts):
    admin, _ = db.create_user("admin")
    member, _ = db.create_user("member")
    outsider, _ = db.create_user("outsider")
    group = posts.groups.create_group(admin, GroupCreate(name="Book Club"))
    posts.groups.join_group(member, group.id)
    event = EventService(db).create_event(
        admin, group.id, EventCreate(name="Reading", date=dt.date(2026, 12, 1), time=dt.time(18, 0))
    )
    return admin, member, outsider, group.id, event.id


def test_members_post_to_group_feed(posts, world):
    _, member, outsider, group_id, _ = world
    post = posts.create_post(member, group_id, PostCreate(content="Hello all"))
    assert post.event_id is None

    with pytest.raises(NotFound):
        posts.create_post(outsider, group_id, PostCreate(content="Let me in"))

    assert [p.content for p in posts.list_group_posts(group_id)] == ["Hello all"]


def test_event_posts_need_attendance(posts, world, db):
    admin, member, _, group_id, event_id = world

    with pytest.raises(NotFound):
        posts.create_post(member, group_id, PostCreate(content="Count me in", event_id=event_id))

    EventService(db).attend_event(member, event_id)
    posts.create_post(member, group_id, PostCreate(content="Count me in", event_id=event_id))
    posts.create_post(admin, group_id, PostCreate(content="Group news"))

    assert [p.content for p in posts.list_event_posts(group_id, event_id)] == ["Count me in"]
    assert [p.content for p in posts.list_group_posts(group_id)] == ["Group news"]


def test_event_from_other_group_rejected(posts, world):
    admin, _, _, _, event_id = world
    other = posts.groups.create_group(admin, GroupCreate(name="Film Club"))
    with pytest.raises(NotFound):
        posts.create_post(admin, other.id, PostCreate(content="Wrong feed", event_id=event_id))


def test_delete_post_author_or_admin(posts, world, db):
    admin, member, _, group_id, _ = world
    mine = posts.create_post(member, group_id, PostCreate(content="First"))
    theirs = posts.create_post(admin, group_id, PostCreate(content="Second"))

    with pytest.raises(Forbidden):
        posts.delete_post(member, theirs.id)

    posts.delete_post(admin, mine.id)
    posts.delete_post(admin, theirs.id)
    assert db.rows("posts") == []

    with pytest.raises(NotFound):
        posts.delete_post(admin, mine.id)


def test_outsider_delete_is_not_found(posts, world):
    _, member, outsider, group_id, _ = world
    post = posts.create_post(member, group_id, PostCreate(content="Chapter one"))
    with pytest.raises(NotFound):
        posts.delete_post(outsider, post.id)


def test_post_insert_returning_nothing_is_unavailable(posts, world, db, monkeypatch):
    _, member, _, group_id, _ = world
    execute = db.execute

    def drop_post_rows(query):
        if query.table == "posts" and query.mode == "insert":
            return SimpleNamespace(data=[])
        return execute(query)

    monkeypatch.setattr(db, "execute", drop_post_rows)
    with pytest.raises(Unavailable):
        posts.create_post(member, group_id, PostCreate(content="Lost"))
