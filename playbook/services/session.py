"""Session provider — signed session cookie plus the caller's profile.

The token is ``base64(payload).signature`` where payload holds the user id,
email and expiry, signed with HMAC-SHA256 over SESSION_SECRET.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass, field

from fastapi import Request, Response

from playbook import supabase_client as db
from playbook.config import SESSION_COOKIE, SESSION_MAX_AGE_DAYS, SESSION_SECRET


@dataclass
class Session:
    user_id: str
    email: str
    profile: dict = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        first = (self.profile.get("first_name") or "").strip()
        last = (self.profile.get("last_name") or "").strip()
        full = f"{first} {last}".strip()
        return full or self.email


def _secret() -> bytes:
    if not SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET must be set to sign sessions")
    return SESSION_SECRET.encode()


def _sign(payload: str) -> str:
    return hmac.new(_secret(), payload.encode(), hashlib.sha256).hexdigest()


def issue_token(user_id: str, email: str, now: float | None = None) -> str:
    """Issue a signed session token for a verified user."""
    expires = int((now or time.time()) + SESSION_MAX_AGE_DAYS * 86400)
    raw = json.dumps({"uid": user_id, "email": email, "exp": expires}, separators=(",", ":"))
    payload = base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")
    return f"{payload}.{_sign(payload)}"


def read_token(token: str, now: float | None = None) -> dict | None:
    """Verify a token. Returns {uid, email, exp} or None if invalid or expired."""
    if not SESSION_SECRET or not token or token.count(".") != 1:
        return None
    payload, signature = token.split(".")
    if not hmac.compare_digest(_sign(payload), signature):
        return None
    try:
        padded = payload + "=" * (-len(payload) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode()))
    except (ValueError, TypeError):
        return None
    if not isinstance(data, dict) or not data.get("uid"):
        return None
    if data.get("exp", 0) < (now or time.time()):
        return None
    return data


def start(user: dict, first_name: str = "", last_name: str = "") -> tuple[Session, str]:
    """Sign-in event: make sure the profile exists and fill empty names.

    Returns the session and its signed token.
    """
    meta = user.get("user_metadata") or {}
    profile = db.ensure_profile(
        user["id"],
        first_name or meta.get("first_name", ""),
        last_name or meta.get("last_name", ""),
    )
    session = Session(user_id=user["id"], email=user["email"], profile=profile)
    return session, issue_token(user["id"], user["email"])


def establish(response: Response, user: dict, first_name: str = "", last_name: str = "") -> Session:
    """Start a session and set its cookie on the response."""
    session, token = start(user, first_name, last_name)
    set_cookie(response, token)
    return session


def set_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=SESSION_MAX_AGE_DAYS * 86400,
        httponly=True,
        samesite="lax",
    )


def clear(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE)


def current_session(request: Request) -> Session | None:
    """FastAPI dependency: the caller's session with a freshly loaded profile."""
    data = read_token(request.cookies.get(SESSION_COOKIE, ""))
    if not data:
        return None
    profile = db.get_profile(data["uid"])
    if profile is None:
        return None
    return Session(user_id=data["uid"], email=data.get("email", ""), profile=profile)
