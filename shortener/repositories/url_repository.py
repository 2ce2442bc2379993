"""URL Repository for the URL shortener application.

This module provides the URLRepository class, the record store behind the
shortening use cases. It maps ``ShortURL`` rows to immutable ``UrlRecord``
values so nothing above this layer touches ORM objects.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.models.url import ShortURL, UrlRecord
from shortener.repositories.base import BaseRepository, RepositoryError


class URLRepository(BaseRepository[ShortURL]):
    """
    Repository for stored short URLs.

    Supports the three operations the use cases need: insert a new record,
    find a record by its short code, and check whether a code is taken.
    """

    unique_field = "short_code"

    def __init__(self):
        """Initialize the repository with the ShortURL model type."""
        super().__init__(ShortURL)

    async def create_short_url(self, db: AsyncSession, record: UrlRecord) -> UrlRecord:
        """
        Persist a new shortened URL.

        Args:
            db: Database session
            record: The record to store

        Returns:
            The stored record

        Raises:
            DuplicateEntityError: If the short code is already stored
            RepositoryError: On other database errors
        """
        row = await self.add(db, record.to_row())
        return UrlRecord.from_row(row)

    async def get_by_short_code(self, db: AsyncSession, short_code: str) -> Optional[UrlRecord]:
        """
        Find a URL by its short code (exact, case-sensitive match).

        Args:
            db: Database session
            short_code: The unique short code to look up

        Returns:
            The UrlRecord if found, None otherwise

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = select(self.model_type).where(self.model_type.short_code == short_code)
            result = await db.execute(query)
            row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Error retrieving URL by short code: {e}") from e

        if row is None:
            return None
        return UrlRecord.from_row(row)

    async def short_code_exists(self, db: AsyncSession, short_code: str) -> bool:
        """
        Check if a short code is already in use.

        Raises:
            RepositoryError: On database errors
        """
        return await self.exists(db, short_code=short_code)
