"""Playbook configuration — loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


def _csv(value: str) -> list[str]:
    return [v.strip().lower() for v in value.split(",") if v.strip()]


# Jinja2 templates for the web UI
WEB_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
STATIC_DIR = Path(__file__).resolve().parent / "static"

# Supabase
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY", "")
# Anon key is only used for end-user password sign-in / sign-up
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")

# Resend (appreciation emails)
RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
RESEND_FROM_EMAIL = os.environ.get("RESEND_FROM_EMAIL", "onboarding@resend.dev")
RESEND_FROM_NAME = os.environ.get("RESEND_FROM_NAME", "eos Products")

# Session cookie signing
SESSION_SECRET = os.environ.get("SESSION_SECRET", "")
SESSION_COOKIE = os.environ.get("SESSION_COOKIE", "playbook_session")
SESSION_MAX_AGE_DAYS = int(os.environ.get("SESSION_MAX_AGE_DAYS", "30"))

# Access gate allow-list
ALLOWED_EMAILS = _csv(os.environ.get("ALLOWED_EMAILS", "philip@lightmilemedia.com"))
ALLOWED_DOMAINS = _csv(os.environ.get("ALLOWED_DOMAINS", "evolutionofsmooth.com"))

# Friction audit: how many of the three points must be filled in
FRICTION_MIN_POINTS = min(max(int(os.environ.get("FRICTION_MIN_POINTS", "1")), 1), 3)

# Seats assumed when the inventory row is missing
DEFAULT_TOTAL_SEATS = int(os.environ.get("DEFAULT_TOTAL_SEATS", "500"))

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
PUBLIC_URL = os.environ.get("PUBLIC_URL", f"http://localhost:{PORT}")
