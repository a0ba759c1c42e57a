"""
In-memory stand-in for the Supabase client.

Covers the slice of the PostgREST query builder and Supabase Auth that the
services use. Every execute() runs under one lock, and inserts and updates
are checked against the same unique constraints the real tables declare, so
races resolve the way they do against Postgres: one writer wins and the rest
get a 23505 APIError.
"""

import re
import threading
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import httpx
from postgrest.exceptions import APIError

UNIQUE_CONSTRAINTS = {
    "user_profiles": [lambda r: ("username", r.get("username")), lambda r: ("email", r.get("email"))],
    "groups": [lambda r: r.get("name")],
    "group_members": [lambda r: (r.get("group_id"), r.get("user_id"))],
    "event_members": [lambda r: (r.get("event_id"), r.get("user_id"))],
    "friendships": [lambda r: frozenset((r.get("user_id"), r.get("friend_id")))],
    "follows": [lambda r: (r.get("follower_id"), r.get("following_id"))],
}


def _unique_violation(table):
    return APIError({
        "code": "23505",
        "message": f'duplicate key value violates unique constraint "{table}_key"',
        "hint": None,
        "details": None,
    })


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.mode = "select"
        self.columns = None
        self.payload = None
        self.filters = []
        self.ordering = []
        self._limit = None
        self._offset = 0

    # Operations

    def select(self, columns="*"):
        self.mode = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def insert(self, row):
        self.mode = "insert"
        self.payload = row
        return self

    def update(self, values):
        self.mode = "update"
        self.payload = values
        return self

    def delete(self):
        self.mode = "delete"
        return self

    # Filters

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda r: r.get(column) in values)
        return self

    def is_(self, column, value):
        assert value == "null"
        self.filters.append(lambda r: r.get(column) is None)
        return self

    def ilike(self, column, pattern):
        regex = re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("%")) + "$", re.IGNORECASE)
        self.filters.append(lambda r: r.get(column) is not None and bool(regex.match(r.get(column))))
        return self

    def ov(self, column, values):
        wanted = set(values)
        self.filters.append(lambda r: bool(set(r.get(column) or []) & wanted))
        return self

    def or_(self, filters):
        """PostgREST or=(...) with the eq and in operators, e.g. 'a.eq.x,b.in.(y,z)'"""
        clauses = []
        for column, op, value in re.findall(r"(\w+)\.(eq|in)\.(\([^)]*\)|[^,]+)", filters):
            if op == "in":
                clauses.append((column, value.strip("()").split(",")))
            else:
                clauses.append((column, [value]))
        self.filters.append(lambda r: any(r.get(column) in values for column, values in clauses))
        return self

    # Modifiers

    def order(self, column, desc=False):
        self.ordering.append((column, desc))
        return self

    def limit(self, n):
        self._limit = n
        return self

    def offset(self, n):
        self._offset = n
        return self

    def execute(self):
        return self.db.execute(self)

    def matches(self, row):
        return all(f(row) for f in self.filters)


class FakeAuth:
    def __init__(self, db):
        self.db = db
        self.accounts = {}  # email -> (user_id, password)
        self.tokens = {}  # token -> user_id
        self.expired = set()

    def issue_token(self, user_id):
        token = f"eyJhbGciOi.{uuid.uuid4().hex}.sig"
        self.tokens[token] = user_id
        return token

    def expire(self, token):
        self.expired.add(token)

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.accounts:
            raise Exception("User already registered")
        user_id = str(uuid.uuid4())
        self.accounts[email] = (user_id, credentials["password"])
        return SimpleNamespace(user=SimpleNamespace(id=user_id, email=email), session=None)

    def sign_in_with_password(self, credentials):
        account = self.accounts.get(credentials["email"])
        if account is None or account[1] != credentials["password"]:
            raise Exception("Invalid login credentials")
        user_id = account[0]
        return SimpleNamespace(
            user=SimpleNamespace(id=user_id, email=credentials["email"]),
            session=SimpleNamespace(access_token=self.issue_token(user_id)),
        )

    def get_user(self, jwt=None):
        if jwt in self.expired:
            raise Exception("invalid JWT: unable to parse or verify signature, token is expired")
        if jwt not in self.tokens:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[jwt], email=None))

    def sign_out(self):
        return None


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.lock = threading.Lock()
        self.auth = FakeAuth(self)
        self.unavailable = False
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def table(self, name):
        return FakeQuery(self, name)

    def rows(self, name):
        return self.tables.setdefault(name, [])

    def _now(self):
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def _check_unique(self, table, candidate, ignore=None):
        for key in UNIQUE_CONSTRAINTS.get(table, []):
            for row in self.rows(table):
                if row is ignore:
                    continue
                if key(row) == key(candidate):
                    raise _unique_violation(table)

    def execute(self, query):
        if self.unavailable:
            raise httpx.ConnectError("connection refused")
        with self.lock:
            rows = self.rows(query.table)
            if query.mode == "insert":
                row = {"id": str(uuid.uuid4()), "created_at": self._now(), "updated_at": None}
                row.update(query.payload)
                self._check_unique(query.table, row)
                rows.append(row)
                return SimpleNamespace(data=[dict(row)])

            matched = [r for r in rows if query.matches(r)]

            if query.mode == "update":
                updated = []
                for row in matched:
                    candidate = {**row, **query.payload}
                    self._check_unique(query.table, candidate, ignore=row)
                    row.update(query.payload)
                    updated.append(dict(row))
                return SimpleNamespace(data=updated)

            if query.mode == "delete":
                for row in matched:
                    rows.remove(row)
                return SimpleNamespace(data=[dict(r) for r in matched])

            for column, desc in reversed(query.ordering):
                matched.sort(key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
            matched = matched[query._offset:]
            if query._limit is not None:
                matched = matched[:query._limit]
            if query.columns:
                matched = [{c: r.get(c) for c in query.columns} for r in matched]
            else:
                matched = [dict(r) for r in matched]
            return SimpleNamespace(data=matched)

    # Seeding helpers

    def create_user(self, username):
        """Register a profile directly and hand back (user_id, bearer token)"""
        user_id = str(uuid.uuid4())
        self.table("user_profiles").insert({
            "id": user_id,
            "username": username,
            "email": f"{username}@example.com",
            "online": False,
        }).execute()
        return user_id, self.auth.issue_token(user_id)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
