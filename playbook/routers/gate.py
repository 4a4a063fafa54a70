"""Gate routes — instant sign-in, password sign-in, access-code registration, sign-out."""

import logging

from fastapi import APIRouter, Form, Request
from fastapi.templating import Jinja2Templates

from playbook.config import WEB_TEMPLATES_DIR
from playbook.routers.responses import alert, redirect
from playbook.services import session as sessions
from playbook.services.access_gate import (
    check_gate,
    instant_sign_in,
    password_sign_in,
    register_with_code,
)

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(WEB_TEMPLATES_DIR))


@router.get("/")
async def gate_page(request: Request):
    if sessions.current_session(request):
        return redirect(request, "/dashboard")
    return templates.TemplateResponse(request, "gate.html", {"active_page": "gate"})


@router.post("/")
async def gate_submit(
    request: Request,
    first_name: str = Form(""),
    last_name: str = Form(""),
    email: str = Form(""),
):
    failure = check_gate(first_name, last_name, email)
    if failure:
        return alert(failure["message"], title=failure["title"])

    try:
        user = instant_sign_in(email, first_name, last_name)
    except Exception as e:
        logger.warning("Instant sign-in failed for %s: %s", email, e)
        return alert(str(e), title="something went wrong")

    response = redirect(request, "/dashboard")
    sessions.establish(response, user, first_name.strip(), last_name.strip())
    return response


@router.get("/login")
async def login_page(request: Request):
    return templates.TemplateResponse(request, "login.html", {"active_page": "login"})


@router.post("/login")
async def login_submit(request: Request, email: str = Form(""), password: str = Form("")):
    result = password_sign_in(email, password)
    if not result["success"]:
        return alert(result["message"], title="sign in failed")

    response = redirect(request, "/dashboard")
    sessions.establish(response, result["user"])
    return response


@router.get("/register")
async def register_page(request: Request):
    return templates.TemplateResponse(request, "register.html", {"active_page": "register"})


@router.post("/register")
async def register_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    access_code: str = Form(""),
):
    result = register_with_code(email, password, access_code)
    if not result["success"]:
        title = "access restricted" if result["error"] == "restricted" else "registration failed"
        return alert(result["message"], title=title)

    response = redirect(request, "/dashboard")
    sessions.establish(response, result["user"])
    return response


@router.post("/logout")
async def logout(request: Request):
    response = redirect(request, "/")
    sessions.clear(response)
    return response
