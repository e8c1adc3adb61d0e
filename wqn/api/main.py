"""
FastAPI application for the wrong-question-notebook review service.

Provides REST API for:
- Starting and resuming review sessions on problem sets
- Recording answers, skips and heartbeats
- Completing sessions with delta-aware summaries
- Problem set status counts
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import get_settings
from wqn import __version__
from wqn.db.database import check_connection, init_db
from wqn.logging_config import configure_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging()
    logger.info("Starting review session service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down review session service...")


app = FastAPI(
    title="Wrong Question Notebook: Review Sessions",
    description="""
    Review session engine for the wrong question notebook.

    ## Flow

    ```
    POST /api/problem-sets/{id}/start-session
        ↓ session (resumed or new)
    PATCH /api/review-sessions/{id}/progress   (answer / skip / heartbeat)
        ↓
    POST /api/review-sessions/{id}/complete    → summary
    ```

    The acting user is read from the `X-User-Id` / `X-User-Email` headers set
    by the upstream identity layer.
    """,
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "wrong-question-notebook",
        "version": __version__,
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with a database connectivity test."""
    db_ok = check_connection()
    return {
        "status": "healthy" if db_ok else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "components": {"database": "ok" if db_ok else "error"},
    }


# ========================================
# Import and mount routers
# ========================================

from wqn.api.routers import problem_sets_router, review_sessions_router  # noqa: E402

app.include_router(problem_sets_router.router, prefix="/api/problem-sets", tags=["Problem Sets"])
app.include_router(review_sessions_router.router, prefix="/api/review-sessions", tags=["Review Sessions"])
