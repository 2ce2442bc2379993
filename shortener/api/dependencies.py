"""API dependencies for FastAPI.

This module provides dependency injection functions for FastAPI endpoints
to access repositories and service instances.
"""

from fastapi import Depends, Request

from shortener.core.config import settings
from shortener.repositories.url_repository import URLRepository
from shortener.services.allocator import ShortCodeAllocator
from shortener.services.codes import ShortCodeGenerator
from shortener.services.shortener import ShortenedURLService


async def get_url_repository() -> URLRepository:
    """Get an instance of the URL repository."""
    return URLRepository()


async def get_short_code_generator(request: Request) -> ShortCodeGenerator:
    """Get the code generator owned by the running application."""
    return request.app.state.code_generator


async def get_allocator(
    url_repo: URLRepository = Depends(get_url_repository),
    generator: ShortCodeGenerator = Depends(get_short_code_generator),
) -> ShortCodeAllocator:
    """Get a short code allocator bound to the request's repository."""
    return ShortCodeAllocator(
        url_repository=url_repo,
        generator=generator,
        max_attempts=settings.URL_CODE_MAX_ATTEMPTS,
    )


async def get_shortener_service(
    url_repo: URLRepository = Depends(get_url_repository),
    allocator: ShortCodeAllocator = Depends(get_allocator),
) -> ShortenedURLService:
    """Get an instance of the URL shortening service."""
    return ShortenedURLService(url_repository=url_repo, allocator=allocator)
