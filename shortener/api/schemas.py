"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization. JSON field names are camelCase.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shortener.models.url import UrlRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class URLCreateRequest(CamelModel):
    """Request schema for creating a shortened URL."""
    # Checked by the service so a missing value reports the same field error
    original_url: Optional[str] = None


class URLResponse(CamelModel):
    """Response schema for URL information."""
    id: uuid.UUID
    original_url: str
    short_code: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: UrlRecord) -> "URLResponse":
        return cls(
            id=record.id,
            original_url=record.original_url,
            short_code=record.short_code,
            created_at=record.created_at,
        )


class ProblemDetails(CamelModel):
    """Error body returned for every failed request."""
    type: str
    title: str
    status: int
    detail: str
    instance: str
    trace_id: str
    errors: Optional[Dict[str, List[str]]] = None
