"""Shared fixtures for playbook tests.

Provides:
- fake_db: patches supabase_client with an in-memory fake (tables + RPCs)
- fake_auth: in-memory Supabase Auth users
- client: sync TestClient wired to the FastAPI app
- login: sets a signed session cookie on the client
- sample data factories for profiles, surveys, friction logs
"""

import os
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

# Set env vars before any playbook imports
os.environ.setdefault("SUPABASE_URL", "https://fake.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "fake-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "fake-anon-key")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("RESEND_API_KEY", "")
os.environ.setdefault("ALLOWED_EMAILS", "philip@lightmilemedia.com")
os.environ.setdefault("ALLOWED_DOMAINS", "evolutionofsmooth.com")
os.environ.setdefault("FRICTION_MIN_POINTS", "1")


# ---------------------------------------------------------------------------
# In-memory fake Supabase
# ---------------------------------------------------------------------------

class FakeQueryResult:
    def __init__(self, data=None, count=None):
        self.data = data or []
        self.count = count


class FakeQueryBuilder:
    """Mimics the supabase-py query builder chain."""

    def __init__(self, store, table_name, fail=False):
        self._store = store
        self._table = table_name
        self._fail = fail
        self._filters = []
        self._order_col = None
        self._order_desc = False
        self._limit_val = None
        self._count_mode = None
        self._update_data = None
        self._insert_data = None

    def select(self, columns="*", count=None):
        self._count_mode = count
        return self

    def insert(self, data):
        self._insert_data = data
        return self

    def update(self, data):
        self._update_data = data
        return self

    def eq(self, col, val):
        self._filters.append(("eq", col, val))
        return self

    def in_(self, col, values):
        self._filters.append(("in", col, list(values)))
        return self

    def order(self, col, desc=False):
        self._order_col = col
        self._order_desc = desc
        return self

    def limit(self, n):
        self._limit_val = n
        return self

    def _match(self, row):
        for op, col, val in self._filters:
            row_val = row.get(col)
            if op == "eq" and row_val != val:
                return False
            if op == "in" and row_val not in val:
                return False
        return True

    def execute(self):
        if self._fail and (self._insert_data is not None or self._update_data is not None):
            raise RuntimeError(f"fake outage on {self._table}")

        table = self._store[self._table]

        if self._insert_data is not None:
            row = dict(self._insert_data)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            table.append(row)
            return FakeQueryResult(data=[row])

        if self._update_data is not None:
            updated = []
            for row in table:
                if self._match(row):
                    row.update(self._update_data)
                    updated.append(row)
            return FakeQueryResult(data=updated)

        # SELECT
        rows = [r for r in table if self._match(r)]
        if self._order_col:
            rows.sort(key=lambda r: r.get(self._order_col, ""), reverse=self._order_desc)
        total = len(rows)
        if self._limit_val is not None:
            rows = rows[:self._limit_val]
        return FakeQueryResult(data=rows, count=total if self._count_mode else None)


class FakeRpc:
    """Implements the Postgres functions in supabase/schema.sql.

    A function either fails before writing anything or commits all of its
    writes, like a single Postgres transaction.
    """

    def __init__(self, db, fn, params):
        self._db = db
        self._store = db.store
        self._fn = fn
        self._params = params

    def execute(self):
        handler = getattr(self, f"_{self._fn}")
        return FakeQueryResult(data=handler(**self._params))

    def _begin(self, *tables):
        for name in tables:
            if name in self._db.failing_writes:
                raise RuntimeError(f"fake outage on {name}; {self._fn} rolled back")

    def _insert(self, table, row):
        row = dict(row)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self._store[table].append(row)

    def _append_module_completed(self, p_user_id, p_module):
        for row in self._store["profiles"]:
            if row["user_id"] == p_user_id:
                modules = list(row.get("modules_completed") or [])
                if p_module not in modules:
                    modules.append(p_module)
                row["modules_completed"] = modules
                return modules
        return None

    def _submit_friction_log(self, p_user_id, p_struggle_1, p_struggle_2, p_struggle_3):
        self._begin("friction_logs", "profiles")
        self._insert("friction_logs", {
            "user_id": p_user_id,
            "struggle_1": p_struggle_1,
            "struggle_2": p_struggle_2,
            "struggle_3": p_struggle_3,
        })
        return self._append_module_completed(p_user_id, "friction")

    def _submit_makeover(self, p_user_id, p_redesign_description):
        self._begin("mundane_makeover", "profiles")
        self._insert("mundane_makeover", {
            "user_id": p_user_id,
            "redesign_description": p_redesign_description,
        })
        return self._append_module_completed(p_user_id, "makeover")

    def _submit_visibility_signal(self, p_user_id, p_colleague_name, p_impact_note):
        self._begin("visibility_signals", "profiles")
        self._insert("visibility_signals", {
            "user_id": p_user_id,
            "colleague_name": p_colleague_name,
            "impact_note": p_impact_note,
        })
        return self._append_module_completed(p_user_id, "visibility")

    def _submit_pulse_survey(self, p_user_id, p_type, p_scores, p_next_status):
        statuses = ["started", "survey_complete", "modules_complete"]
        self._begin("pulse_surveys", "profiles")
        row = {"user_id": p_user_id, "type": p_type}
        for i, score in enumerate(p_scores, start=1):
            row[f"q{i}_score"] = score
        self._insert("pulse_surveys", row)
        target = statuses.index(p_next_status)
        for profile in self._store["profiles"]:
            if profile["user_id"] == p_user_id and statuses.index(profile["status"]) < target:
                profile["status"] = p_next_status
        return p_next_status

    def _claim_access_code(self, code_to_claim):
        for row in self._store["access_codes"]:
            if row["code"] == code_to_claim.upper() and not row.get("is_claimed"):
                row["is_claimed"] = True
                row["claimed_at"] = datetime.now(timezone.utc).isoformat()
                return True
        return False

    def _claim_seat(self):
        for row in self._store["seat_inventory"]:
            row["claimed_seats"] = row.get("claimed_seats", 0) + 1
        return None

    def _generate_access_codes(self, p_count):
        codes = [uuid.uuid4().hex[:8].upper() for _ in range(p_count)]
        for code in codes:
            self._store["access_codes"].append({"code": code, "is_claimed": False})
        return codes


class FakeDB:
    """In-memory store keyed by table name. Records every table touched.

    Tables in ``failing_writes`` raise on insert/update, including inside RPCs.
    """

    def __init__(self):
        self.store = defaultdict(list)
        self.tables_queried = []
        self.failing_writes = set()

    def table(self, name):
        self.tables_queried.append(name)
        return FakeQueryBuilder(self.store, name, fail=name in self.failing_writes)

    def rpc(self, fn, params):
        return FakeRpc(self, fn, params)


@pytest.fixture
def fake_db():
    """Provides a clean in-memory DB and patches supabase_client._table/_rpc."""
    db = FakeDB()

    with patch("playbook.supabase_client._table", side_effect=db.table):
        with patch("playbook.supabase_client._rpc", side_effect=db.rpc):
            with patch("playbook.supabase_client.get_client", return_value=MagicMock()):
                yield db


class FakeAuth:
    """In-memory stand-in for the Supabase Auth calls in supabase_client."""

    def __init__(self):
        self.users = {}        # email -> user dict
        self.passwords = {}    # email -> password

    def find_user_by_email(self, email):
        return self.users.get(email.strip().lower())

    def create_confirmed_user(self, email, first_name, last_name):
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "user_metadata": {"first_name": first_name, "last_name": last_name},
        }
        self.users[email.lower()] = user
        return user

    def sign_in_with_password(self, email, password):
        user = self.users.get(email.lower())
        if not user or self.passwords.get(email.lower()) != password:
            raise ValueError("Invalid login credentials")
        return user

    def sign_up_with_password(self, email, password):
        if email.lower() in self.users:
            raise ValueError("User already registered")
        user = {"id": str(uuid.uuid4()), "email": email, "user_metadata": {}}
        self.users[email.lower()] = user
        self.passwords[email.lower()] = password
        return user


@pytest.fixture
def fake_auth(fake_db):
    auth = FakeAuth()
    with patch.multiple(
        "playbook.supabase_client",
        find_user_by_email=auth.find_user_by_email,
        create_confirmed_user=auth.create_confirmed_user,
        sign_in_with_password=auth.sign_in_with_password,
        sign_up_with_password=auth.sign_up_with_password,
    ):
        yield auth


@pytest.fixture
def client(fake_db, fake_auth):
    """Sync test client for the FastAPI app with mocked DB and auth."""
    from contextlib import asynccontextmanager

    from fastapi.testclient import TestClient

    from playbook.app import create_app

    @asynccontextmanager
    async def noop_lifespan(app):
        yield

    app = create_app()
    app.router.lifespan_context = noop_lifespan

    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client, fake_db):
    """Return a helper that stores a profile and signs the client in as it."""
    from playbook.config import SESSION_COOKIE
    from playbook.services.session import issue_token

    def _login(**profile_overrides):
        profile = make_profile(**profile_overrides)
        fake_db.store["profiles"].append(profile)
        client.cookies.set(SESSION_COOKIE, issue_token(profile["user_id"], profile.get("email", "")))
        return profile

    return _login


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------

def make_profile(**overrides):
    defaults = {
        "id": str(uuid.uuid4()),
        "user_id": str(uuid.uuid4()),
        "email": "maya@evolutionofsmooth.com",
        "first_name": "Maya",
        "last_name": "Okafor",
        "status": "started",
        "modules_completed": [],
        "access_code_used": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    defaults.update(overrides)
    return defaults


def make_survey(survey_type="pre", **overrides):
    defaults = {
        "id": str(uuid.uuid4()),
        "user_id": str(uuid.uuid4()),
        "type": survey_type,
        "q1_score": 3,
        "q2_score": 3,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    defaults.update(overrides)
    return defaults


def make_friction_log(**overrides):
    defaults = {
        "id": str(uuid.uuid4()),
        "user_id": str(uuid.uuid4()),
        "struggle_1": "[Process Complexity] approvals take 3 days",
        "struggle_2": None,
        "struggle_3": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    defaults.update(overrides)
    return defaults
