"""Pydantic schemas for tag endpoints."""
from typing import Any

from pydantic import Field, field_validator

from schemas.base import ApiModel
from schemas.validators import validate_and_normalize_tag


class PublicTagCount(ApiModel):
    """Schema for a public tag with the number of public bookmarks using it."""

    name: str
    count: int


class TagCount(PublicTagCount):
    """Schema for a tag with the number of current bookmarks using it."""

    is_public: bool


class TagListResponse(ApiModel):
    """Schema for the tags list response."""

    tags: list[TagCount]


class PublicTagListResponse(ApiModel):
    """Schema for the tags listed on a public profile."""

    tags: list[PublicTagCount]


class TagResponse(ApiModel):
    """Schema for a single tag of the current user."""

    name: str
    is_public: bool
    meta: dict[str, Any]


class TagCreate(ApiModel):
    """Schema for creating a tag without attaching it to a bookmark."""

    name: str = Field(..., min_length=1, max_length=100)
    is_public: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Normalize and validate the tag name."""
        if not isinstance(v, str):
            raise ValueError("Tag name must be a string")
        return validate_and_normalize_tag(v)


class TagUpdate(ApiModel):
    """
    Schema for updating a tag.

    `meta` is merged into the stored metadata rather than replacing it.
    """

    name: str | None = Field(default=None, min_length=1, max_length=100)
    is_public: bool | None = None
    meta: dict[str, Any] | None = None

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        """Normalize and validate the new tag name."""
        if v is None:
            return v
        if not isinstance(v, str):
            raise ValueError("Tag name must be a string")
        return validate_and_normalize_tag(v)
