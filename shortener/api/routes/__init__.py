"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from shortener.api.routes import shortener, redirect, health
from shortener.core.config import settings

# Create root router
api_router = APIRouter()

# Include shortener routes with API prefix
api_router.include_router(
    shortener.router,
    prefix=settings.API_PREFIX
)

# Short links resolve under the redirect prefix, e.g. /r/{short_code}
api_router.include_router(
    redirect.router,
    prefix=settings.REDIRECT_PREFIX
)

# Health probes live at the root
api_router.include_router(
    health.router
)

__all__ = ["api_router"]
