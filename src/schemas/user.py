"""Pydantic schemas for the current user's account."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from schemas.base import ApiModel


class UserResponse(ApiModel):
    """Schema for the authenticated user's account."""

    id: UUID
    username: str
    email: str | None
    is_public: bool
    meta: dict[str, Any]
    created_at: datetime


class UserUpdate(ApiModel):
    """
    Schema for updating the authenticated user's account.

    The username is the token subject and cannot be changed here. `meta` is
    merged into the stored metadata rather than replacing it.
    """

    email: str | None = Field(default=None, max_length=255)
    is_public: bool | None = None
    meta: dict[str, Any] | None = None
