"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from playbook.config import RESEND_API_KEY, SESSION_SECRET, STATIC_DIR
from playbook.routers import admin, dashboard, exercises, functions, gate

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup checks."""
    if not SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET must be set; refusing to start without a session signing key")
    if not RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not set; appreciation emails will fail to send")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="The Inventor's Playbook",
        description="Gated activation: pulse surveys, three exercises, admin reporting, certificate.",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Static files
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    for r in [gate, dashboard, exercises, admin]:
        app.include_router(r.router, include_in_schema=False)

    app.include_router(functions.router)

    return app
