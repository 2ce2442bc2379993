"""URL shortening service for the URL shortener application.

This module contains the ShortenedURLService class which implements the
create and lookup use cases.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.telemetry import get_meter
from shortener.db.session import db_transaction
from shortener.models.url import UrlRecord, original_url_errors
from shortener.repositories.base import DuplicateEntityError, RepositoryError
from shortener.repositories.url_repository import URLRepository
from shortener.services.allocator import ShortCodeAllocator
from shortener.services.exceptions import (
    ErrorKind,
    ShortCodeConflictError,
    URLCreationError,
    URLLookupError,
)
from shortener.services.results import ServiceResult

logger = logging.getLogger(__name__)

meter = get_meter("url_shortener.service")

url_counter = meter.create_counter(
    name="url_shortener.urls.created",
    description="Number of URLs shortened",
    unit="1",
)

# Field name reported in validation errors, as clients send it
ORIGINAL_URL_FIELD = "originalUrl"


class ShortenedURLService:
    """
    Service for URL shortening business logic.

    Expected outcomes come back as values: a failed ServiceResult for
    invalid input and None for an unknown code. Allocation exhaustion and
    storage failures raise ServiceError subclasses.
    """

    def __init__(self, url_repository: URLRepository, allocator: ShortCodeAllocator):
        """
        Initialize the URL shortening service.

        Args:
            url_repository: Repository for URL data access
            allocator: Picks unused short codes
        """
        self.url_repository = url_repository
        self.allocator = allocator

    @db_transaction(db_param_name="db")
    async def create_short_url(self, db: AsyncSession, original_url: str) -> ServiceResult[UrlRecord]:
        """
        Create a shortened URL.

        Args:
            db: Database session
            original_url: The original URL to shorten

        Returns:
            ServiceResult: The stored record, or a validation failure

        Raises:
            ShortCodeGenerationError: If a unique short code cannot be generated
            ShortCodeConflictError: If the store rejects the code as a duplicate
            URLCreationError: If storing the URL fails for other reasons
        """
        errors = original_url_errors(original_url)
        if errors:
            logger.info(f"Rejected URL for shortening: {errors[0]}")
            return ServiceResult.fail(
                ErrorKind.VALIDATION,
                "One or more validation errors occurred.",
                field_errors={ORIGINAL_URL_FIELD: errors},
            )

        try:
            short_code = await self.allocator.allocate(db)
            record = UrlRecord.create(original_url, short_code)
            stored = await self.url_repository.create_short_url(db, record)
        except DuplicateEntityError as e:
            logger.error(f"Duplicate entity error: {e}")
            raise ShortCodeConflictError(f"Short code '{e.value}' is already in use") from e
        except RepositoryError as e:
            logger.error(f"Error creating short URL: {e}")
            raise URLCreationError("Failed to create short URL") from e

        url_counter.add(1)
        logger.info(f"Created short URL {stored.short_code} -> {stored.original_url}")
        return ServiceResult.success(stored)

    async def get_url_by_code(self, db: AsyncSession, short_code: str) -> Optional[UrlRecord]:
        """
        Retrieve a URL by its short code.

        Args:
            db: Database session
            short_code: The short code to look up, matched exactly

        Returns:
            The record, or None if no URL uses this code

        Raises:
            URLLookupError: If the store cannot be read
        """
        try:
            return await self.url_repository.get_by_short_code(db, short_code)
        except RepositoryError as e:
            logger.error(f"Error retrieving URL by code: {e}")
            raise URLLookupError(f"Failed to retrieve URL with code '{short_code}'") from e
