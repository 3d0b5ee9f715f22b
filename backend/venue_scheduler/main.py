"""
Venue Scheduler API - Main Application Entry Point

Venues hold up to five scheduled events; events move between venues through
schedule/unschedule. A single-lock scheduling engine keeps the two-sided
Venue<->Event relationship consistent on a key-value store without
transactions.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from venue_scheduler.core.config import get_settings
from venue_scheduler.core.exceptions import SchedulingError
from venue_scheduler.core.logging import setup_logging, get_logger
from venue_scheduler.core.metrics import metrics_endpoint
from venue_scheduler.api.router import api_router
from venue_scheduler.api.middleware import RequestLoggingMiddleware
from venue_scheduler.infrastructure.redis_client import close_redis
from venue_scheduler.services.scheduling_engine import SchedulingEngine
from venue_scheduler.services.store_factory import build_stores

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        store=settings.STORE_BACKEND,
    )

    venues, events = await build_stores(settings)
    app.state.engine = SchedulingEngine(venues, events, capacity=settings.VENUE_CAPACITY)
    logger.info("engine_ready", capacity=settings.VENUE_CAPACITY)

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Venue and event scheduling API with a consistency-checked Venue<->Event relationship",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status_code, "error": exc.message},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"status": 500, "error": "Internal server error"},
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "store": settings.STORE_BACKEND,
    }


@app.get("/metrics", tags=["Health"])
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
