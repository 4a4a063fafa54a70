"""Access gate — allow-list check and sign-in paths (instant, password, access code)."""

import logging

from playbook import supabase_client as db
from playbook.config import ALLOWED_DOMAINS, ALLOWED_EMAILS

logger = logging.getLogger(__name__)

RESTRICTED_MESSAGE = "this experience is limited to authorized email addresses"


def is_email_allowed(email: str, allowed_emails=None, allowed_domains=None) -> bool:
    """Exact match against the email list, or domain match. Case-insensitive."""
    emails = ALLOWED_EMAILS if allowed_emails is None else [e.lower() for e in allowed_emails]
    domains = ALLOWED_DOMAINS if allowed_domains is None else [d.lower() for d in allowed_domains]
    lower = (email or "").strip().lower()
    if lower in emails:
        return True
    if lower.count("@") != 1:
        return False
    return lower.split("@")[1] in domains


def check_gate(first_name: str, last_name: str, email: str) -> dict | None:
    """Return a failure dict, or None if the gate form may proceed."""
    if not (first_name or "").strip() or not (last_name or "").strip():
        return {"success": False, "error": "validation", "title": "name required",
                "message": "please enter your first and last name"}
    if not is_email_allowed(email):
        return {"success": False, "error": "restricted", "title": "access restricted",
                "message": RESTRICTED_MESSAGE}
    return None


def instant_sign_in(email: str, first_name: str, last_name: str) -> dict:
    """Find or create the identity for an allow-listed email.

    No password is derived or stored: the caller issues its own signed
    session token once this returns.
    """
    email = email.strip()
    user = db.find_user_by_email(email)
    if user is None:
        user = db.create_confirmed_user(email, first_name.strip(), last_name.strip())
        logger.info("Created user %s via instant sign-in", user["id"])
    return user


def password_sign_in(email: str, password: str) -> dict:
    """Returns {success, user} or {success: False, error, message}."""
    if not email or not password:
        return {"success": False, "error": "validation", "message": "email and password are required"}
    try:
        user = db.sign_in_with_password(email.strip(), password)
    except Exception as e:
        return {"success": False, "error": "auth", "message": str(e)}
    return {"success": True, "user": user}


def register_with_code(email: str, password: str, access_code: str) -> dict:
    """Sign up, claim the access code, take a seat, record the code on the profile."""
    code = (access_code or "").strip().upper()
    if not email or not password or not code:
        return {"success": False, "error": "validation",
                "message": "email, password and access code are required"}
    if not is_email_allowed(email):
        return {"success": False, "error": "restricted", "message": RESTRICTED_MESSAGE}

    try:
        user = db.sign_up_with_password(email.strip(), password)
    except Exception as e:
        return {"success": False, "error": "auth", "message": str(e)}
    if user is None:
        return {"success": False, "error": "auth", "message": "check your inbox to confirm your email."}

    try:
        claimed = db.claim_access_code(code)
    except Exception:
        logger.exception("Access code claim failed for %s", email)
        claimed = False
    if not claimed:
        return {"success": False, "error": "validation", "message": "Code invalid or already claimed."}

    db.claim_seat()
    db.ensure_profile(user["id"])
    db.update_profile(user["id"], {"access_code_used": code})
    db.log_action("access_code_claimed", "access_code", code, f"Claimed by {email}")
    return {"success": True, "user": user}
