"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures middleware and exception handlers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shortener.api import api_router
from shortener.api.errors import register_exception_handlers
from shortener.core.config import settings
from shortener.core.logging import setup_logging
from shortener.core.telemetry import setup_telemetry, shutdown_telemetry
from shortener.db.base import create_tables, engine
from shortener.middleware import RequestLoggingMiddleware, TracingMiddleware
from shortener.services.codes import ShortCodeGenerator

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run startup and shutdown tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    setup_telemetry()

    if settings.DB_CREATE_TABLES:
        await create_tables()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()
    shutdown_telemetry()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# One generator per application, shared by every request
app.state.code_generator = ShortCodeGenerator(
    alphabet=settings.URL_CODE_CHARS,
    length=settings.URL_CODE_LENGTH,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.OTEL_ENABLED:
    app.add_middleware(TracingMiddleware)

# Added last so it wraps the others and every response carries a request id
if settings.REQUEST_LOGGING_ENABLED:
    app.add_middleware(RequestLoggingMiddleware)

# Include API router
app.include_router(api_router)

# Add exception handlers
register_exception_handlers(app)
