"""FastAPI application for the exam result extraction service."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from exam_extraction.config import get_settings
from exam_extraction.errors import ExamExtractionError
from exam_extraction.middleware.logging import (
    RequestLoggingMiddleware,
    configure_logging,
    get_request_id,
)
from exam_extraction.middleware.request_id import RequestIDMiddleware
from exam_extraction.routers import extraction
from exam_extraction.services.gemini_client import get_gemini_client

VERSION = "1.0.0"
COMMIT_HASH = "development"

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log the effective configuration on startup, without secrets."""
    settings = get_settings()
    logger.info(
        f"Starting Exam Extraction API v{VERSION} "
        f"(model={settings.model_name}, chunk_size={settings.chunk_size}, "
        f"max_attempts={settings.max_attempts}, "
        f"server_key_configured={settings.gemini_api_key is not None})"
    )
    yield
    logger.info("Shutting down Exam Extraction API")


app = FastAPI(
    title="Exam Extraction API",
    description="Extracts structured student exam results from file text with Gemini",
    version=VERSION,
    lifespan=lifespan,
)

# Added last runs first: the request ID must be set before the logger reads it
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: restrict to the dashboard origin once it has a fixed domain
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Student-Count", "X-Chunk-Count"],
)


@app.exception_handler(ExamExtractionError)
async def extraction_error_handler(request: Request, exc: ExamExtractionError) -> JSONResponse:
    """Turn pipeline failures into their HTTP status with a user-facing detail."""
    status_code = extraction.error_status_code(exc)
    logger.warning(
        f"[{get_request_id(request)}] {type(exc).__name__} -> {status_code}: {exc.message}"
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.get("/health", response_model=None)
async def health_check() -> JSONResponse:
    """
    Report whether a Gemini client can be built from the server configuration.

    Status Codes:
        200: Gemini client available
        503: No usable server-side API key
    """
    services: Dict[str, str] = {}
    try:
        get_gemini_client()
        services["gemini_api"] = "healthy"
    except ExamExtractionError as e:
        services["gemini_api"] = f"unhealthy: {e.message}"

    healthy = all(state == "healthy" for state in services.values())
    body: Dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
    }
    return JSONResponse(content=body, status_code=200 if healthy else 503)


@app.get("/version")
async def version_info() -> Dict[str, str]:
    """Return the API version and build commit."""
    return {"version": VERSION, "commit_hash": COMMIT_HASH}


app.include_router(extraction.router)
