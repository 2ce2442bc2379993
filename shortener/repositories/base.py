"""Base repository implementation for the URL shortener application.

This module provides a generic BaseRepository class that follows the Repository pattern
for database operations, serving as a foundation for more specific repositories.
"""

from typing import Any, Generic, Type, TypeVar
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

# Type variable for model types
T = TypeVar("T", bound=SQLModel)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class DuplicateEntityError(RepositoryError):
    """Exception raised when a unique constraint is violated."""

    def __init__(self, model_type: Type[SQLModel], field_name: str, value: Any):
        self.model_type = model_type
        self.field_name = field_name
        self.value = value
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} with {field_name}={value} already exists")


class BaseRepository(Generic[T]):
    """
    Base repository implementing the common operations for SQLModel entities.

    Every SQLAlchemy failure is re-raised as a RepositoryError so services
    never depend on driver exceptions.

    Type parameters:
        T: The SQLModel type this repository manages
    """

    # Column whose unique constraint a failed insert is reported against
    unique_field: str = "id"

    def __init__(self, model_type: Type[T]):
        """
        Initialize the repository with a specific model type.

        Args:
            model_type: The SQLModel class this repository will work with
        """
        self.model_type = model_type

    async def add(self, db: AsyncSession, entity: T) -> T:
        """
        Insert a new entity and flush it without committing.

        Args:
            db: Database session
            entity: The entity to insert

        Returns:
            The inserted entity

        Raises:
            DuplicateEntityError: If a unique constraint rejects the row
            RepositoryError: On other database errors
        """
        try:
            db.add(entity)
            await db.flush()
            return entity
        except IntegrityError as e:
            value = getattr(entity, self.unique_field, None)
            logger.warning(f"Unique constraint rejected {self.model_type.__name__} {self.unique_field}={value}")
            raise DuplicateEntityError(self.model_type, self.unique_field, value) from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error creating entity: {e}") from e

    async def count(self, db: AsyncSession) -> int:
        """
        Count the total number of entities.

        Raises:
            RepositoryError: On database errors
        """
        try:
            query = select(func.count()).select_from(self.model_type)
            result = await db.execute(query)
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.model_type.__name__} records: {e}")
            raise RepositoryError(f"Database error counting entities: {e}") from e

    async def exists(self, db: AsyncSession, **kwargs) -> bool:
        """
        Check if an entity exists with the given filters.

        Args:
            db: Database session
            **kwargs: Field=value pairs to filter by

        Returns:
            True if entity exists, False otherwise

        Raises:
            RepositoryError: On database errors
        """
        conditions = [getattr(self.model_type, field) == value for field, value in kwargs.items()]
        if not conditions:
            raise ValueError("No conditions provided for exists check")

        try:
            query = select(func.count()).select_from(self.model_type).where(*conditions)
            result = await db.execute(query)
            return result.scalar_one() > 0
        except SQLAlchemyError as e:
            logger.error(f"Error checking existence of {self.model_type.__name__}: {e}")
            raise RepositoryError(f"Database error checking entity existence: {e}") from e
