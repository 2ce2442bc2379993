"""
Data models for the URL shortener application.

This module exports the domain record and the SQLModel table it is stored as.
"""

from shortener.models.url import (
    MAX_URL_LENGTH,
    SHORT_CODE_MAX_LENGTH,
    ShortURL,
    UrlRecord,
    original_url_errors,
)

__all__ = [
    "MAX_URL_LENGTH",
    "SHORT_CODE_MAX_LENGTH",
    "ShortURL",
    "UrlRecord",
    "original_url_errors",
]
