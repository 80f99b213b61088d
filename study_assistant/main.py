"""FastAPI application for the Study Assistant service."""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Union

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded  # type: ignore[import-not-found]

from study_assistant.config import get_settings
from study_assistant.db.supabase_client import get_supabase_client
from study_assistant.middleware.logging import RequestLoggingMiddleware
from study_assistant.middleware.rate_limit import get_limiter, rate_limit_exceeded_handler
from study_assistant.routers import analysis, profile, resources
from study_assistant.services.gemini_client import get_gemini_client

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
COMMIT_HASH = "development"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Validate configuration on startup."""
    try:
        settings = get_settings()
        logger.info(f"Starting Study Assistant API v{VERSION}")
        logger.info(f"Model: {settings.model_name}")
        logger.info(f"Storage bucket configured: {bool(settings.firebase_storage_bucket)}")
    except Exception as e:
        logger.error(f"Startup validation failed: {e}")
        raise

    yield

    logger.info("Shutting down Study Assistant API")


app = FastAPI(
    title="Study Assistant API",
    description="Upload study PDFs and get subject, topics, revision summary and practice questions",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.state.limiter = get_limiter()
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to the frontend origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Analysis-Status", "X-Request-ID"],
)


@app.get("/health", response_model=None)
async def health_check() -> Union[Dict[str, Any], Response]:
    """
    Check that Gemini and Supabase are reachable.

    Status Codes:
        200: All services healthy
        503: One or more services unavailable
    """
    services: Dict[str, str] = {}
    overall_healthy = True

    try:
        if get_gemini_client():
            services["gemini_api"] = "healthy"
        else:
            services["gemini_api"] = "unhealthy: client is None"
            overall_healthy = False
    except Exception as e:
        services["gemini_api"] = f"unhealthy: {str(e)}"
        overall_healthy = False

    try:
        supabase_client = get_supabase_client()
        result = supabase_client.table("resources").select("id").limit(1).execute()
        if result is not None:
            services["supabase"] = "healthy"
        else:
            services["supabase"] = "unhealthy: no response"
            overall_healthy = False
    except Exception as e:
        services["supabase"] = f"unhealthy: {str(e)}"
        overall_healthy = False

    response_data: Dict[str, Any] = {
        "status": "healthy" if overall_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": services,
    }

    if not overall_healthy:
        return Response(
            content=json.dumps(response_data),
            status_code=503,
            media_type="application/json",
        )

    return response_data


@app.get("/version")
async def version_info() -> Dict[str, str]:
    """Version number and commit hash of the running build."""
    return {
        "version": VERSION,
        "commit_hash": COMMIT_HASH,
    }


app.include_router(resources.router)
app.include_router(analysis.router)
app.include_router(profile.router)
