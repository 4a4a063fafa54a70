"""Appreciation email — validate, render, send via Resend."""

import html
import logging
import re

from playbook.config import RESEND_API_KEY, RESEND_FROM_EMAIL, RESEND_FROM_NAME

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_SUBJECT_LEN = 200
MAX_MESSAGE_LEN = 5000
MAX_EMAIL_LEN = 255


def validate_email_request(to: str, subject: str, message: str, sender_email: str) -> str | None:
    """Return an error message, or None when the request is sendable."""
    if not to or not subject or not message or not sender_email:
        return "Missing required fields: to, subject, message, senderEmail"
    if not EMAIL_RE.match(to) or not EMAIL_RE.match(sender_email):
        return "Invalid email address format"
    if (len(subject) > MAX_SUBJECT_LEN or len(message) > MAX_MESSAGE_LEN
            or len(sender_email) > MAX_EMAIL_LEN or len(to) > MAX_EMAIL_LEN):
        return "Input exceeds maximum length"
    return None


def render_appreciation_html(message: str, display_name: str) -> str:
    """Render the email body. Both values are HTML-escaped."""
    return (
        '<div style="font-family: -apple-system, BlinkMacSystemFont, \'Segoe UI\', sans-serif;'
        ' max-width: 600px; margin: 0 auto; padding: 32px;">'
        '<p style="font-size: 16px; line-height: 1.6; color: #333; white-space: pre-wrap;">'
        f"{html.escape(message)}</p>"
        '<hr style="border: none; border-top: 1px solid #eee; margin: 24px 0;" />'
        '<p style="font-size: 13px; color: #999;">'
        f"Sent with appreciation by {html.escape(display_name)} via "
        f'<strong style="color: #E91E8C;">{html.escape(RESEND_FROM_NAME)}</strong></p>'
        "</div>"
    )


def send_appreciation_email(
    to: str,
    subject: str,
    message: str,
    sender_email: str,
    sender_name: str = "",
) -> dict:
    """Send one appreciation email.

    Returns:
        dict with keys: success, id (if sent), error (if not).
    """
    error = validate_email_request(to, subject, message, sender_email)
    if error:
        return {"success": False, "error": error, "invalid": True}

    if not RESEND_API_KEY:
        return {"success": False, "error": "RESEND_API_KEY is not configured"}

    display_name = sender_name or sender_email

    try:
        import resend
        resend.api_key = RESEND_API_KEY

        result = resend.Emails.send({
            "from": f"{display_name} via {RESEND_FROM_NAME} <{RESEND_FROM_EMAIL}>",
            "to": [to],
            "reply_to": sender_email,
            "subject": subject,
            "html": render_appreciation_html(message, display_name),
        })
    except Exception as e:
        logger.warning("Appreciation email to %s failed: %s", to, e)
        return {"success": False, "error": f"Send failed: {e}"}

    return {"success": True, "id": result.get("id", "")}
