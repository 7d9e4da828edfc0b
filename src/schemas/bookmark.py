"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import field_validator, model_validator

from schemas.base import ApiModel
from schemas.file_object import FileObjectResponse
from schemas.validators import validate_and_normalize_tags, validate_title, validate_url


class BookmarkCreate(ApiModel):
    """
    Schema for creating a new bookmark.

    Saving a URL that already has a current bookmark creates a new version and
    outdates the previous one.
    """

    title: str
    url: str
    is_public: bool | None = None
    tags: list[str] = []
    main_image: UUID | None = None
    archive: UUID | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Validate title is present and within length limits."""
        return validate_title(v)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Validate URL shape."""
        return validate_url(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str]:
        """Normalize and validate tags."""
        if v is None:
            return []
        return validate_and_normalize_tags(v)


class BookmarkUpdate(ApiModel):
    """
    Schema for updating an existing bookmark.

    The URL of a bookmark never changes; a `url` field in the body is ignored.
    Omitted fields are left unchanged, `tags: []` clears tags and
    `mainImage: null` / `archive: null` detach the file.
    """

    title: str | None = None
    is_public: bool | None = None
    tags: list[str] | None = None
    main_image: UUID | None = None
    archive: UUID | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        """Validate title if provided."""
        if v is None:
            return None
        return validate_title(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize and validate tags if provided."""
        if v is None:
            return None
        return validate_and_normalize_tags(v)


def _bookmark_to_dict(data: Any, fields: tuple[str, ...]) -> Any:
    """
    Flatten a Bookmark ORM object into a dict for validation.

    Only reads relationships that are already loaded (present in __dict__) to
    avoid triggering lazy loads outside the async context.
    """
    if not hasattr(data, "__dict__") or isinstance(data, dict):
        return data

    data_dict = {key: getattr(data, key) for key in fields if hasattr(data, key)}
    data_dict["owner"] = data.user_id

    loaded = data.__dict__
    data_dict["tags"] = sorted(tag.name for tag in loaded.get("tag_objects") or [])
    data_dict["main_image"] = loaded.get("main_image")
    data_dict["archive"] = loaded.get("archive")
    return data_dict


class BookmarkPublicResponse(ApiModel):
    """Bookmark projection shown to anyone (public profile listings)."""

    id: UUID
    created_at: datetime
    title: str
    url: str
    domain: str
    owner: UUID
    tags: list[str]
    main_image: FileObjectResponse | None = None
    archive: FileObjectResponse | None = None

    @model_validator(mode="before")
    @classmethod
    def from_orm_object(cls, data: Any) -> Any:
        """Extract tag names and file objects from loaded relationships."""
        return _bookmark_to_dict(data, ("id", "created_at", "title", "url", "domain"))


class BookmarkResponse(BookmarkPublicResponse):
    """
    Bookmark projection shown to its owner.

    This is also the record the client-side search index stores.
    """

    is_public: bool
    outdated: bool

    @model_validator(mode="before")
    @classmethod
    def from_orm_object(cls, data: Any) -> Any:
        """Extract tag names and file objects from loaded relationships."""
        return _bookmark_to_dict(
            data, ("id", "created_at", "title", "url", "domain", "is_public", "outdated"),
        )


class BookmarkPageResponse(ApiModel):
    """Cursor-paginated page of bookmarks."""

    collection: list[BookmarkResponse]
    prev_page: str | None = None  # Pages are forward-only
    next_page: str | None
    total: int | None


class PublicBookmarkPageResponse(ApiModel):
    """Cursor-paginated page of public bookmarks."""

    collection: list[BookmarkPublicResponse]
    prev_page: str | None = None
    next_page: str | None
    total: int | None


class BookmarkCollectionResponse(ApiModel):
    """Unpaginated list of bookmarks (version history)."""

    collection: list[BookmarkResponse]
