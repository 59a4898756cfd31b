"""
ShipQuote API
FastAPI application entry point

- Quote fan-out across carriers with per-provider deadlines
- Cache-aside quote store (memory, Redis or database)
- Live carrier health status, plus an optional background health loop
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from shipquote import __version__
from shipquote.api import api_router
from shipquote.api.deps import get_health_service
from shipquote.core.config import settings
from shipquote.core.redis_client import close_redis
from shipquote.schemas.quote import ValidationErrorResponse
from shipquote.services.health_jobs import HealthCheckRunner

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_health_runner: Optional[HealthCheckRunner] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Start optional background jobs on startup, release connections on shutdown.
    """
    global _health_runner

    if settings.QUOTE_CACHE_BACKEND == "database":
        from shipquote.core.database import init_db
        await init_db()
        logger.info("Quote cache table ready")

    if settings.HEALTH_CHECK_ENABLED:
        _health_runner = HealthCheckRunner(
            get_health_service(),
            interval_seconds=settings.HEALTH_CHECK_INTERVAL_SECONDS,
        )
        await _health_runner.start()
        logger.info("Health check loop ENABLED")
    else:
        logger.info("Health check loop DISABLED via config")

    yield

    if _health_runner:
        await _health_runner.stop()
        _health_runner = None

    await close_redis()

    if settings.QUOTE_CACHE_BACKEND == "database":
        from shipquote.core.database import dispose_engine
        await dispose_engine()


app = FastAPI(
    lifespan=lifespan,
    title=f"{settings.APP_NAME} API",
    description="Shipping quote aggregation across carriers, with provider health status.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors: 400 with the first offending field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    # ("body", "weight", "int"): the body key comes first, union branches after it
    names = [part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"]
    value = first.get("input")
    body = ValidationErrorResponse(
        error=first.get("msg", "Invalid request"),
        field=names[0] if names else None,
        value=value if isinstance(value, (str, int, float, bool)) else None,
    )
    return JSONResponse(status_code=400, content=body.model_dump(by_alias=True, exclude_none=True))


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": __version__,
        "status": "operational"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness only; carrier status lives at /adapters/status."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
