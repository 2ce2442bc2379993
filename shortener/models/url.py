"""URL shortener data models.

This module defines the immutable ``UrlRecord`` domain type and the
``ShortURL`` table model the store persists it as.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

MAX_URL_LENGTH = 2048
SHORT_CODE_MAX_LENGTH = 20
ALLOWED_SCHEMES = ("http", "https")

URL_REQUIRED_MESSAGE = "URL is required."
URL_FORMAT_MESSAGE = "URL must be a valid absolute URI with http or https scheme."
URL_LENGTH_MESSAGE = f"URL must not exceed {MAX_URL_LENGTH} characters."


def original_url_errors(value: Optional[str]) -> List[str]:
    """Return validation messages for a candidate original URL.

    An empty list means the value is an absolute ``http``/``https`` URI
    with a host, no embedded whitespace and a length within bounds.
    """
    if value is None or not str(value).strip():
        return [URL_REQUIRED_MESSAGE]

    value = str(value)
    if len(value) > MAX_URL_LENGTH:
        return [URL_LENGTH_MESSAGE]
    if any(ch.isspace() for ch in value):
        return [URL_FORMAT_MESSAGE]

    try:
        parts = urlsplit(value)
        # Accessing the port validates it
        parts.port
    except ValueError:
        return [URL_FORMAT_MESSAGE]

    if parts.scheme not in ALLOWED_SCHEMES or not parts.hostname:
        return [URL_FORMAT_MESSAGE]
    return []


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UrlRecord(BaseModel):
    """A shortened URL.

    Records are immutable once built. New records come from ``create``,
    which assigns the identifier and creation time; the field validators
    hold the same invariants for records rebuilt from storage.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    original_url: str
    short_code: str
    created_at: datetime

    @field_validator("original_url")
    def check_original_url(cls, v: str) -> str:
        errors = original_url_errors(v)
        if errors:
            raise ValueError(errors[0])
        return v

    @field_validator("short_code")
    def check_short_code(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("short code must not be blank")
        if len(v) > SHORT_CODE_MAX_LENGTH:
            raise ValueError(f"short code must not exceed {SHORT_CODE_MAX_LENGTH} characters")
        return v

    @field_validator("created_at")
    def ensure_utc(cls, v: datetime) -> datetime:
        # SQLite hands back naive values; they were written as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @classmethod
    def create(cls, original_url: str, short_code: str) -> "UrlRecord":
        """Build a new record with a fresh identifier and creation time.

        Raises:
            pydantic.ValidationError: If the URL or short code is invalid
        """
        return cls(
            id=uuid.uuid4(),
            original_url=original_url,
            short_code=short_code,
            created_at=utc_now(),
        )

    @classmethod
    def from_row(cls, row: "ShortURL") -> "UrlRecord":
        return cls(
            id=row.id,
            original_url=row.original_url,
            short_code=row.short_code,
            created_at=row.created_at,
        )

    def to_row(self) -> "ShortURL":
        return ShortURL(
            id=self.id,
            original_url=self.original_url,
            short_code=self.short_code,
            created_at=self.created_at,
        )


class ShortURL(SQLModel, table=True):
    """
    Table model for stored short URLs.

    The unique index on ``short_code`` rejects duplicate codes even when two
    allocations race past the existence check.
    """

    __tablename__ = "urls"

    id: uuid.UUID = Field(primary_key=True)
    original_url: str = Field(max_length=MAX_URL_LENGTH, nullable=False)
    short_code: str = Field(
        max_length=SHORT_CODE_MAX_LENGTH,
        nullable=False,
        unique=True,
        index=True,  # Together with unique=True: ix_urls_short_code
    )
    created_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
