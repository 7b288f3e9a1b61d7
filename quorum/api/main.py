"""
quorum.api.main — FastAPI application entry point
===================================================

Run with::

    uvicorn quorum.api.main:app --reload --port 8000

or ``python -m quorum``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from quorum.api.deps import get_context  # noqa: E402
from quorum.api.routes.boards import router as boards_router  # noqa: E402
from quorum.api.routes.suggestions import router as suggestions_router  # noqa: E402
from quorum.engine.errors import QuorumError  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — build the store and services once."""
    ctx = app.dependency_overrides.get(get_context, get_context)()
    logger.info(
        "Quorum API started — %s store, %s boards, %s economy",
        ctx.config.store, ctx.config.board_scope, ctx.config.economy_scope,
    )
    yield
    ctx.close()
    logger.info("Quorum API shutting down")


app = FastAPI(
    title="Quorum API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(QuorumError)
async def quorum_error_handler(request: Request, exc: QuorumError) -> JSONResponse:
    """Every domain failure becomes ``{"detail", "code"}`` with its own status."""
    if exc.http_status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s (%s)", request.method, request.url.path, exc, exc.code)
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": str(exc), "code": exc.code},
    )


# Mount routers
app.include_router(boards_router, prefix="/api")
app.include_router(suggestions_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
