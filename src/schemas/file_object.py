"""Pydantic schemas for file object endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from schemas.base import ApiModel
from schemas.validators import URL_PATTERN


class FileObjectCreate(ApiModel):
    """Schema for registering a stored file."""

    content_url: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1, max_length=255)
    size: int = Field(..., ge=0)

    @field_validator("content_url")
    @classmethod
    def check_content_url(cls, v: str) -> str:
        """Validate the content URL is absolute."""
        if not URL_PATTERN.match(v):
            raise ValueError(f"Invalid content URL: '{v}'")
        return v


class FileObjectResponse(ApiModel):
    """Schema for file object responses."""

    id: UUID
    content_url: str
    mime_type: str
    size: int
    created_at: datetime
