# backend/drivigo/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .core.request_context import attach_request_id_filter
from .database import init_db
from .errors import register_error_handlers
from .middleware.request_id import RequestIdMiddlewareASGI
from .routes import (
    auth,
    bookings,
    devices,
    earnings,
    instructors,
    metrics,
    notifications,
    payments,
    progress,
    realtime,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info("%s API starting up...", BRAND_NAME)
    logger.info("Environment: %s", settings.environment)
    if settings.create_tables_on_startup:
        init_db()
    yield
    logger.info("%s API shutting down...", BRAND_NAME)


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
logger.info("CORS allow_origins=%s", settings.cors_origin_list)

# Outermost, so the request id is set before anything logs
app.add_middleware(RequestIdMiddlewareASGI)

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(instructors.router)
api_router.include_router(payments.router)
api_router.include_router(bookings.router)
api_router.include_router(notifications.router)
api_router.include_router(progress.router)
api_router.include_router(earnings.router)
api_router.include_router(devices.router)

app.include_router(api_router)
app.include_router(realtime.router)
app.include_router(metrics.router)


@app.get("/health", include_in_schema=False)
def health_check() -> Dict[str, str]:
    return {"status": "healthy", "service": f"{BRAND_NAME.lower()}-api"}


# Explicit export for ASGI servers (uvicorn drivigo.main:fastapi_app)
fastapi_app = app

__all__ = ["app", "fastapi_app"]
