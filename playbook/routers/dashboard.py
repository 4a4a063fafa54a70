"""Dashboard routes — progress view, pulse surveys, certificate download."""

from fastapi import APIRouter, Form, Request
from fastapi.responses import Response
from fastapi.templating import Jinja2Templates

from playbook.config import WEB_TEMPLATES_DIR
from playbook.routers.responses import alert, redirect
from playbook.services import session as sessions
from playbook.services.certificate import FILENAME, generate_certificate_pdf
from playbook.services.exercises import EXERCISE_CONTENT
from playbook.services.progress import EXERCISES, progress_state
from playbook.services.surveys import QUESTIONS, submit_survey

router = APIRouter()
templates = Jinja2Templates(directory=str(WEB_TEMPLATES_DIR))


@router.get("/dashboard")
async def dashboard(request: Request):
    session = sessions.current_session(request)
    if not session:
        return redirect(request, "/")

    state = progress_state(session.profile)
    cards = [
        {"key": key, "number": i, "status": state["exercises"][key], **EXERCISE_CONTENT[key]}
        for i, key in enumerate(EXERCISES, start=1)
    ]

    return templates.TemplateResponse(request, "dashboard.html", {
        "active_page": "dashboard",
        "session": session,
        "state": state,
        "cards": cards,
        "questions": QUESTIONS,
    })


@router.post("/dashboard/pulse/{survey_type}")
async def pulse_submit(
    request: Request,
    survey_type: str,
    q1: str = Form(""),
    q2: str = Form(""),
):
    session = sessions.current_session(request)
    if not session:
        return alert("your session has expired. please sign in again.", status_code=401)

    result = submit_survey(session.user_id, survey_type, [q1, q2])
    if not result["success"]:
        return alert(result["message"])

    return redirect(request, "/dashboard")


@router.get("/certificate")
async def certificate(request: Request):
    session = sessions.current_session(request)
    if not session:
        return redirect(request, "/")
    if not progress_state(session.profile)["certificate_ready"]:
        return redirect(request, "/dashboard")

    pdf = generate_certificate_pdf(session.display_name)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{FILENAME}"'},
    )
