"""Exercise routes — exercise pages and submissions."""

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from playbook.config import FRICTION_MIN_POINTS, WEB_TEMPLATES_DIR
from playbook.routers.responses import alert, redirect
from playbook.services import session as sessions
from playbook.services.exercises import (
    ASSET_OPTIONS,
    CATEGORY_PLACEHOLDERS,
    DEFAULT_SIGNAL_SUBJECT,
    DESIGN_TAGS,
    EXERCISE_CONTENT,
    FRICTION_CATEGORIES,
    submit_exercise,
)
from playbook.services.progress import EXERCISES, LOCKED, exercise_status

router = APIRouter()
templates = Jinja2Templates(directory=str(WEB_TEMPLATES_DIR))


@router.get("/module/{exercise_id}")
async def legacy_module(exercise_id: str):
    return RedirectResponse(f"/exercise/{exercise_id}", status_code=301)


@router.get("/exercise/{exercise_id}")
async def exercise_page(request: Request, exercise_id: str):
    session = sessions.current_session(request)
    if not session:
        return redirect(request, "/")
    if exercise_id not in EXERCISES:
        return redirect(request, "/dashboard")
    if exercise_status(exercise_id, session.profile.get("modules_completed")) == LOCKED:
        return redirect(request, "/dashboard")

    return templates.TemplateResponse(request, "exercise.html", {
        "active_page": "exercise",
        "session": session,
        "exercise_id": exercise_id,
        "content": EXERCISE_CONTENT[exercise_id],
        "categories": FRICTION_CATEGORIES,
        "placeholders": CATEGORY_PLACEHOLDERS,
        "min_points": FRICTION_MIN_POINTS,
        "assets": ASSET_OPTIONS,
        "tags": DESIGN_TAGS,
        "default_subject": DEFAULT_SIGNAL_SUBJECT,
    })


@router.post("/exercise/{exercise_id}")
async def exercise_submit(request: Request, exercise_id: str):
    session = sessions.current_session(request)
    if not session:
        return alert("your session has expired. please sign in again.", status_code=401)

    form = await request.form()
    data = {k: v for k, v in form.items() if k != "tags"}
    data["tags"] = form.getlist("tags")

    # Visibility submissions call Resend; keep the event loop free
    result = await asyncio.to_thread(
        submit_exercise,
        session.user_id,
        exercise_id,
        data,
        sender_email=session.email,
        sender_name=session.display_name,
    )

    if result["success"] and result["error"] == "mail":
        return alert(result["message"], kind="warning", title="partly done",
                     link=("/dashboard", "back to dashboard"))
    if result["success"]:
        return alert(result["message"], kind="success", title="exercise complete!",
                     link=("/dashboard", "back to dashboard"))
    if result["error"] == "locked":
        return alert(result["message"], title="locked", status_code=403)
    title = "please complete all fields" if result["error"] == "validation" else "error"
    return alert(result["message"], title=title)
