"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.exceptions import HTTPException

from eventdesk.api import archive, bulk
from eventdesk.api.errors import (
    APIError,
    RequestIDMiddleware,
    api_error_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from eventdesk.api.rate_limit import limiter, rate_limit_exceeded_handler
from eventdesk.config import settings
from eventdesk.db import init_db
from eventdesk.db.database import async_session, dispose_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    await init_db()
    logger.info("eventdesk started (environment=%s)", settings.environment)
    yield
    await dispose_engine()


app = FastAPI(
    title="eventdesk",
    description="Archive and restore administration for event registrations",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter

# Request ID middleware (must be added first to wrap all other middleware)
app.add_middleware(RequestIDMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(APIError, api_error_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(bulk.router, prefix="/admin", tags=["admin"])
api_v1.include_router(archive.router, prefix="/admin/archive", tags=["archive"])

app.include_router(api_v1)


@app.get("/health")
async def health() -> dict[str, str]:
    """Basic health check endpoint (liveness probe)."""
    return {"status": "healthy"}


@app.get("/health/ready")
async def health_ready() -> dict[str, str | bool]:
    """Readiness probe - verifies database connectivity."""
    try:
        async with async_session() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "ready", "database": True}
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        return {"status": "not_ready", "database": False, "error": str(e)}


@app.get("/health/live")
async def health_live() -> dict[str, str]:
    """Liveness probe - basic check that app is running."""
    return {"status": "alive"}


def run() -> None:
    """Run the API server.

    Called by the ``eventdesk`` console script defined in pyproject.toml.
    """
    logger.info("Starting eventdesk API on %s:%d", settings.api_host, settings.api_port)
    uvicorn.run(
        "eventdesk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    run()
