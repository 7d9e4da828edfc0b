"""Pydantic schemas for the bookmark search index endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field

from models.bookmark_index_action import BookmarkIndexActionType
from schemas.base import ApiModel
from schemas.bookmark import BookmarkPageResponse


class BookmarkIndexPageResponse(BookmarkPageResponse):
    """
    Snapshot page used to bootstrap a client-side index.

    `cursor` is only set on the first page: it is the id of the newest index
    action at the time the snapshot was taken (null if the log is empty).
    Clients continue with the diff endpoint from there once every page has
    been fetched.
    """

    cursor: UUID | None = None


class BookmarkIndexActionResponse(ApiModel):
    """Schema for a single index action."""

    id: UUID
    type: BookmarkIndexActionType
    bookmark_id: UUID
    created_at: datetime
    owner: UUID = Field(validation_alias=AliasChoices("owner", "user_id"))


class BookmarkIndexDiffResponse(ApiModel):
    """
    Index actions after a cursor, oldest first.

    When has_more is true, request again with `before` set to the id of the
    last action of this page.
    """

    collection: list[BookmarkIndexActionResponse]
    has_more: bool
