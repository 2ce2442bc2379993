"""Service layer for the URL shortener application.

This package contains service classes implementing the business logic of the application.
Services orchestrate interactions between repositories and provide domain-specific operations.
"""

from shortener.services.allocator import ShortCodeAllocator
from shortener.services.codes import ShortCodeGenerator
from shortener.services.shortener import ShortenedURLService

__all__ = ["ShortCodeAllocator", "ShortCodeGenerator", "ShortenedURLService"]
