"""
FastAPI application entry point.

Run with:
    uvicorn backend.lifeline.main:app --port 5000

Or via the console script:
    lifeline
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# ── Core infrastructure ──
from backend.lifeline.core.config import Settings, settings
from backend.lifeline.core.database import Database
from backend.lifeline.core.errors import register_error_handlers
from backend.lifeline.core.health import run_health_check, HealthStatus
from backend.lifeline.core.logging_config import setup_logging
from backend.lifeline.core.middleware import RequestLoggingMiddleware
from backend.lifeline.records.store import RecordStore
from backend.lifeline.services.chat import ChatClient
from backend.lifeline.services.places import PlacesClient
from backend.lifeline.services.sms import SmsClient

# ── API routers ──
from backend.lifeline.api.chat import router as chat_router
from backend.lifeline.api.first_aid import router as first_aid_router
from backend.lifeline.api.hospitals import router as hospitals_router
from backend.lifeline.api.sos import router as sos_router
from backend.lifeline.api.dependencies import get_app_settings, get_store

setup_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build shared collaborators; refuse to start without a database."""
    logger.info(
        "Starting %s v%s [%s]",
        settings.APP_NAME, settings.APP_VERSION, settings.ENVIRONMENT,
    )

    database = Database(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        echo=settings.DATABASE_ECHO,
    )
    try:
        await database.connect(create_tables=settings.DATABASE_CREATE_TABLES)
    except Exception:
        logger.critical("Database connection error", exc_info=True)
        await database.dispose()
        raise

    app.state.settings = settings
    app.state.store = RecordStore(database)
    app.state.places_client = PlacesClient(settings)
    app.state.sms_client = SmsClient(settings)
    app.state.chat_client = ChatClient(settings)

    yield

    logger.info("Shutting down %s", settings.APP_NAME)
    await app.state.places_client.close()
    await app.state.sms_client.close()
    await app.state.chat_client.close()
    await database.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description=(
        "Emergency assistance backend: nearby hospital search, first-aid "
        "articles, SOS profiles with SMS alerts to emergency contacts, and "
        "a medical-advisor chat."
    ),
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ── Middleware stack (outermost first) ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

app.include_router(hospitals_router)
app.include_router(first_aid_router)
app.include_router(sos_router)
app.include_router(chat_router)


# ── Root & health endpoints ──

@app.get("/", tags=["root"])
async def root():
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs",
    }


@app.get("/health", tags=["health"])
async def health_check(
    store: RecordStore = Depends(get_store),
    app_settings: Settings = Depends(get_app_settings),
):
    """Deep health check — database ping plus provider configuration."""
    report = await run_health_check(store, app_settings)
    if report.status == HealthStatus.UNHEALTHY:
        return JSONResponse(status_code=503, content=report.to_dict())
    return report.to_dict()


@app.get("/health/live", tags=["health"])
async def liveness():
    return {"status": "alive"}


def run() -> None:
    """Console-script entry point."""
    import uvicorn

    uvicorn.run(
        "backend.lifeline.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_config=None,
    )
