"""Supabase connection, auth admin calls and query helpers for the activation tables."""

import threading
from typing import Any

from supabase import Client, create_client

from playbook.config import PUBLIC_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_KEY, SUPABASE_URL

_client: Client | None = None
_client_lock = threading.Lock()

USERS_PER_PAGE = 1000


def get_client() -> Client:
    """Return the service-role Supabase client singleton (thread-safe)."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
                    raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
                _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _client


def _auth_client() -> Client:
    """Return a fresh anon-key client for end-user password auth.

    Never the singleton: a password sign-in stores the user's session on the
    client, and the service-role client must keep bypassing RLS.
    """
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------

def _table(name: str):
    """Return a table query builder."""
    return get_client().table(name)


def _rpc(fn: str, params: dict):
    """Return an RPC call builder."""
    return get_client().rpc(fn, params)


def rpc(fn: str, params: dict | None = None) -> Any:
    """Call a Postgres function and return its data."""
    result = _rpc(fn, params or {}).execute()
    return result.data


def insert(table: str, data: dict) -> dict:
    """Insert a row and return it."""
    result = _table(table).insert(data).execute()
    return result.data[0] if result.data else {}


def update(table: str, data: dict, match: dict) -> dict:
    """Update rows matching conditions."""
    q = _table(table).update(data)
    for k, v in match.items():
        q = q.eq(k, v)
    result = q.execute()
    return result.data[0] if result.data else {}


def select(table: str, columns: str = "*", match: dict | None = None,
           order: str | None = None, order_desc: bool = False,
           limit: int | None = None) -> list[dict]:
    """Select rows with optional filtering and ordering."""
    q = _table(table).select(columns)
    if match:
        for k, v in match.items():
            q = q.eq(k, v)
    if order:
        q = q.order(order, desc=order_desc)
    if limit:
        q = q.limit(limit)
    result = q.execute()
    return result.data or []


def select_one(table: str, columns: str = "*", match: dict | None = None) -> dict | None:
    """Select a single row."""
    rows = select(table, columns, match, limit=1)
    return rows[0] if rows else None


def count(table: str, match: dict | None = None) -> int:
    """Count rows matching conditions."""
    q = _table(table).select("*", count="exact")
    if match:
        for k, v in match.items():
            q = q.eq(k, v)
    result = q.execute()
    return result.count or 0


# ---------------------------------------------------------------------------
# Identity (Supabase Auth)
# ---------------------------------------------------------------------------

def _user_dict(user) -> dict:
    return {
        "id": str(user.id),
        "email": user.email or "",
        "user_metadata": dict(user.user_metadata or {}),
    }


def find_user_by_email(email: str) -> dict | None:
    """Look up an auth user by email, case-insensitive.

    The admin API is paged (GoTrue defaults to 50 per page), so walk pages
    until a short one comes back.
    """
    wanted = email.strip().lower()
    page = 1
    while True:
        users = get_client().auth.admin.list_users(page=page, per_page=USERS_PER_PAGE)
        for user in users:
            if (user.email or "").lower() == wanted:
                return _user_dict(user)
        if len(users) < USERS_PER_PAGE:
            return None
        page += 1


def create_confirmed_user(email: str, first_name: str, last_name: str) -> dict:
    """Create an auto-confirmed auth user carrying name metadata."""
    response = get_client().auth.admin.create_user({
        "email": email,
        "email_confirm": True,
        "user_metadata": {"first_name": first_name, "last_name": last_name},
    })
    return _user_dict(response.user)


def sign_in_with_password(email: str, password: str) -> dict:
    """Password sign-in. Raises the auth error on bad credentials."""
    response = _auth_client().auth.sign_in_with_password({"email": email, "password": password})
    return _user_dict(response.user)


def sign_up_with_password(email: str, password: str) -> dict | None:
    """Password sign-up. Returns the new user, or None when confirmation is pending."""
    response = _auth_client().auth.sign_up({
        "email": email,
        "password": password,
        "options": {"email_redirect_to": f"{PUBLIC_URL}/dashboard"},
    })
    return _user_dict(response.user) if response.user else None


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

def get_profile(user_id: str) -> dict | None:
    """Get the profile row for an auth user."""
    return select_one("profiles", match={"user_id": user_id})


def ensure_profile(user_id: str, first_name: str = "", last_name: str = "") -> dict:
    """Create the profile if missing and fill empty name fields."""
    profile = get_profile(user_id)
    if profile is None:
        return insert("profiles", {
            "user_id": user_id,
            "first_name": first_name or None,
            "last_name": last_name or None,
            "status": "started",
            "modules_completed": [],
            "access_code_used": None,
        })

    if not profile.get("first_name") and first_name and last_name:
        update_profile(user_id, {"first_name": first_name, "last_name": last_name})
        profile["first_name"] = first_name
        profile["last_name"] = last_name
    return profile


def update_profile(user_id: str, data: dict) -> dict:
    """Update a profile by user_id."""
    return update("profiles", data, {"user_id": user_id})


def count_profiles(status: str | None = None) -> int:
    """Count profiles with optional status filter."""
    match = {"status": status} if status else None
    return count("profiles", match)


# ---------------------------------------------------------------------------
# Exercise submissions (append-only)
#
# Each submit_* call is one Postgres function: the record insert and the
# set-union into modules_completed commit or roll back together.
# ---------------------------------------------------------------------------

def submit_friction_log(user_id: str, struggles: list[str | None]) -> list[str]:
    """Record a friction audit and mark friction complete."""
    padded = (list(struggles) + [None, None, None])[:3]
    return rpc("submit_friction_log", {
        "p_user_id": user_id,
        "p_struggle_1": padded[0],
        "p_struggle_2": padded[1],
        "p_struggle_3": padded[2],
    }) or []


def submit_makeover(user_id: str, redesign_description: str) -> list[str]:
    """Record a mundane makeover and mark makeover complete."""
    return rpc("submit_makeover", {
        "p_user_id": user_id,
        "p_redesign_description": redesign_description,
    }) or []


def submit_visibility_signal(user_id: str, colleague_name: str, impact_note: str) -> list[str]:
    """Record a visibility signal and mark visibility complete."""
    return rpc("submit_visibility_signal", {
        "p_user_id": user_id,
        "p_colleague_name": colleague_name,
        "p_impact_note": impact_note,
    }) or []


def get_friction_logs(limit: int = 50) -> list[dict]:
    """Get friction logs, newest first."""
    return select("friction_logs", order="created_at", order_desc=True, limit=limit)


# ---------------------------------------------------------------------------
# Pulse surveys
# ---------------------------------------------------------------------------

def submit_pulse_survey(user_id: str, survey_type: str, scores: list[int], next_status: str) -> str:
    """Record a pre/post pulse survey and advance the profile status.

    One Postgres function: the insert and the status move commit together,
    and the status update only matches earlier statuses so it never regresses.
    """
    return rpc("submit_pulse_survey", {
        "p_user_id": user_id,
        "p_type": survey_type,
        "p_scores": list(scores),
        "p_next_status": next_status,
    })


def get_pulse_surveys(survey_type: str) -> list[dict]:
    """Get all surveys of one type."""
    return select("pulse_surveys", match={"type": survey_type})


# ---------------------------------------------------------------------------
# Seats and access codes
# ---------------------------------------------------------------------------

def get_seat_inventory() -> dict | None:
    """Get the single seat inventory row."""
    return select_one("seat_inventory")


def claim_access_code(code: str) -> bool:
    """Atomically claim an access code. False if unknown or already claimed."""
    return bool(rpc("claim_access_code", {"code_to_claim": code.upper()}))


def claim_seat() -> None:
    """Increment claimed seats."""
    rpc("claim_seat")


def generate_access_codes(count_: int) -> list[str]:
    """Generate a batch of unclaimed access codes."""
    return list(rpc("generate_access_codes", {"p_count": count_}) or [])


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

def has_role(user_id: str, role: str) -> bool:
    """Check the user_roles table for a role grant."""
    return select_one("user_roles", match={"user_id": user_id, "role": role}) is not None


# ---------------------------------------------------------------------------
# Audit Log
# ---------------------------------------------------------------------------

def log_action(action: str, entity_type: str = "", entity_id: str = "", details: str = "") -> dict:
    """Log an operator action."""
    return insert("audit_log", {
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "details": details,
    })


def get_audit_log(limit: int = 20) -> list[dict]:
    """Get recent audit log entries."""
    return select("audit_log", order="created_at", order_desc=True, limit=limit)
