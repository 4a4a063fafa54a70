"""Admin dashboard — seats, completion, survey deltas, friction heatmap, access codes."""

import html
import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from playbook.config import WEB_TEMPLATES_DIR
from playbook.routers.responses import alert
from playbook.services import session as sessions
from playbook.services.reporting import dashboard_report, generate_codes, is_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin-dashboard")
templates = Jinja2Templates(directory=str(WEB_TEMPLATES_DIR))


@router.get("")
async def admin_dashboard(request: Request):
    session = sessions.current_session(request)
    if not session or not is_admin(session.user_id):
        if session:
            logger.info("Admin access denied for %s", session.user_id)
        return templates.TemplateResponse(
            request, "admin/denied.html", {"active_page": "admin", "session": session},
            status_code=403,
        )

    report = dashboard_report()
    return templates.TemplateResponse(request, "admin/dashboard.html", {
        "active_page": "admin",
        "session": session,
        **report,
    })


@router.post("/codes")
async def admin_generate_codes(request: Request, count: int = Form(10)):
    session = sessions.current_session(request)
    if not session or not is_admin(session.user_id):
        return alert("access denied", status_code=403)

    result = generate_codes(count, session.user_id)
    if not result["success"]:
        return alert(result["message"])

    items = "".join(f"<li><code>{html.escape(str(code))}</code></li>" for code in result["codes"])
    return HTMLResponse(
        '<div class="pb-alert pb-alert--success">'
        f'<span class="pb-alert__message">{result["message"]}</span></div>'
        f'<ul class="pb-code-list">{items}</ul>'
    )
