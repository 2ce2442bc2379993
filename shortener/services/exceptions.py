"""Exceptions for the URL shortener service layer.

This module contains the exception hierarchy for the service layer,
providing domain-specific exceptions that abstract underlying implementation details.
Each exception is tagged with an ``ErrorKind`` which the HTTP boundary
maps to a response.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Categories of service failures."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    ALLOCATION_EXHAUSTED = "allocation_exhausted"
    STORAGE = "storage"


class ServiceError(Exception):
    """Base exception for all service-level errors."""

    kind: ErrorKind = ErrorKind.STORAGE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class URLError(ServiceError):
    """Base exception for URL-related errors."""
    pass


class URLCreationError(URLError):
    """Storing a new URL failed."""
    kind = ErrorKind.STORAGE


class URLLookupError(URLError):
    """Reading a URL from the store failed."""
    kind = ErrorKind.STORAGE


class ShortCodeGenerationError(URLCreationError):
    """Failed to generate a unique short code."""
    kind = ErrorKind.ALLOCATION_EXHAUSTED


class ShortCodeConflictError(URLCreationError):
    """The store rejected a short code that another request stored first."""
    kind = ErrorKind.CONFLICT
