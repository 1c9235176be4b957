"""
bountera.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn bountera.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from bountera import __version__  # noqa: E402
from bountera.api.deps import get_engine  # noqa: E402
from bountera.api.errors import install_exception_handlers  # noqa: E402
from bountera.api.routes.activities import router as activities_router  # noqa: E402
from bountera.api.routes.admin import router as admin_router  # noqa: E402
from bountera.api.routes.leaderboard import router as leaderboard_router  # noqa: E402
from bountera.api.routes.points import router as points_router  # noqa: E402
from bountera.api.routes.users import router as users_router  # noqa: E402

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
    """Startup/shutdown lifecycle — open the DB engine, dispose it on exit."""
    engine = get_engine()
    logger.info("Bountera API started — engine ready (%s)", engine.url.database)
    yield
    engine.dispose()
    logger.info("Bountera API shut down")


app = FastAPI(
    title="Bountera Points API",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# Mount routers
app.include_router(points_router, prefix="/api")
app.include_router(activities_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(leaderboard_router, prefix="/api")
app.include_router(admin_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
