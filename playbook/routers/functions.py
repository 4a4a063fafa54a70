"""JSON functions — instant sign-in and appreciation email, callable by token holders."""

import logging
import time

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from playbook.services import session as sessions
from playbook.services.access_gate import is_email_allowed, instant_sign_in
from playbook.services.mailer import send_appreciation_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions")

# In-memory rate limiter: {ip: [timestamp, ...]}
_rate_buckets: dict[str, list[float]] = {}
_RATE_LIMIT = 30       # max requests per window
_RATE_WINDOW = 60      # window in seconds


def _check_rate_limit(request: Request) -> None:
    """Raise 429 if IP exceeds rate limit. Simple sliding window.

    IPs with no request inside the window are dropped so the table only
    holds recently active clients.
    """
    ip = request.client.host if request.client else "unknown"
    now = time.monotonic()
    cutoff = now - _RATE_WINDOW
    for stale in [k for k, b in _rate_buckets.items() if not b or b[-1] <= cutoff]:
        del _rate_buckets[stale]
    bucket = _rate_buckets.setdefault(ip, [])
    bucket[:] = [t for t in bucket if t > cutoff]
    if len(bucket) >= _RATE_LIMIT:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    bucket.append(now)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    return body


@router.post("/instant-auth")
async def instant_auth(request: Request):
    """Body: { email, firstName, lastName }. Returns { token, email }."""
    _check_rate_limit(request)
    body = await _json_body(request)
    email = str(body.get("email") or "").strip()
    first_name = str(body.get("firstName") or "").strip()
    last_name = str(body.get("lastName") or "").strip()

    if not email or not first_name or not last_name:
        return _error(400, "Missing fields")
    if not is_email_allowed(email):
        return _error(403, "access restricted")

    try:
        user = instant_sign_in(email, first_name, last_name)
        _, token = sessions.start(user, first_name, last_name)
    except Exception as e:
        logger.exception("instant-auth failed for %s", email)
        return _error(500, str(e))

    return {"token": token, "email": email}


@router.post("/send-appreciation-email")
async def send_email(request: Request, authorization: str = Header("")):
    """Body: { to, subject, message, senderName? }.

    The sender address is always the caller's signed-in email; a
    senderEmail in the body is ignored.
    """
    _check_rate_limit(request)

    token = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else ""
    caller = sessions.read_token(token) if token else None
    if caller is not None:
        sender_email = caller.get("email", "")
    else:
        session = sessions.current_session(request)
        if session is None:
            raise HTTPException(status_code=401, detail="Sign in required")
        sender_email = session.email

    body = await _json_body(request)
    result = send_appreciation_email(
        to=str(body.get("to") or ""),
        subject=str(body.get("subject") or ""),
        message=str(body.get("message") or ""),
        sender_email=sender_email,
        sender_name=str(body.get("senderName") or ""),
    )

    if result["success"]:
        return {"success": True, "id": result["id"]}
    if result.get("invalid"):
        return _error(400, result["error"])
    return JSONResponse({"success": False, "error": result["error"]}, status_code=500)
