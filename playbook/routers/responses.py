"""Shared response helpers for htmx and plain form posts."""

import html

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response


def is_htmx(request: Request) -> bool:
    return bool(request.headers.get("HX-Request"))


def redirect(request: Request, url: str) -> Response:
    """Full-page redirect that works for both htmx and non-htmx submits."""
    if is_htmx(request):
        return Response(status_code=200, headers={"HX-Redirect": url})
    return RedirectResponse(url, status_code=303)


def alert(message: str, kind: str = "error", title: str = "", status_code: int = 200,
          link: tuple[str, str] | None = None) -> HTMLResponse:
    """Render an alert partial. ``kind`` is error, warning or success."""
    label = f'<span class="pb-alert__label">{html.escape(title)}</span>' if title else ""
    extra = ""
    if link:
        extra = f' <a href="{html.escape(link[0])}">{html.escape(link[1])}</a>'
    return HTMLResponse(
        f'<div class="pb-alert pb-alert--{kind}" role="alert">{label}'
        f'<span class="pb-alert__message">{html.escape(message)}{extra}</span></div>',
        status_code=status_code,
    )
