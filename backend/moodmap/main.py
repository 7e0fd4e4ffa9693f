"""
MoodMap API
===========
FastAPI application entry point. Mount routers here.

Run locally with:  uvicorn moodmap.main:app --port 3000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from moodmap.config import get_settings
from moodmap.models.common import ErrorEnvelope, HealthResponse
from moodmap.routers import mood, push, reports, support
from moodmap.services.errors import MoodMapError, crisis_resources_of
from moodmap.services.moodmap import get_moodmap_service
from moodmap.services.safety import utc_now

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    get_moodmap_service().load_seed_data(settings.seed_data_path)
    logger.info("%s API started (%s)", settings.app_name, settings.environment)
    yield
    logger.info("%s API shutting down", settings.app_name)


app = FastAPI(
    title="MoodMap API",
    description="Mood check-ins and nearby community support — prototype backend",
    version="0.1.0",
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mood.router)
app.include_router(support.router)
app.include_router(push.router)
app.include_router(reports.router)


# ---------------------------------------------------------------------------
# Error envelopes
# ---------------------------------------------------------------------------

def _error_response(status_code: int, envelope: ErrorEnvelope) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope, by_alias=True, exclude_none=True),
    )


@app.exception_handler(MoodMapError)
async def handle_moodmap_error(_: Request, exc: MoodMapError) -> JSONResponse:
    return _error_response(
        exc.status_code,
        ErrorEnvelope(message=exc.message, crisis_resources=crisis_resources_of(exc)),
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    # Malformed input is reported like a missing field: 400, not FastAPI's 422.
    errors = exc.errors()
    detail = "invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return _error_response(400, ErrorEnvelope(message=f"Invalid request: {detail}"))


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    return HealthResponse(
        message=f"{settings.app_name} API is running",
        timestamp=utc_now().isoformat(),
    )
