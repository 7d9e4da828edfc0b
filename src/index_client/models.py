"""Pydantic models for the data the index client reads and stores."""
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

INDEX_FORMAT_VERSION = 1


class ClientModel(BaseModel):
    """camelCase on the wire and on disk, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FileReference(ClientModel):
    """A file attached to a bookmark (archive or main image)."""

    id: UUID
    content_url: str
    mime_type: str
    size: int
    created_at: datetime


class IndexEntry(ClientModel):
    """Local copy of a bookmark as returned to its owner."""

    id: UUID
    created_at: datetime
    title: str
    url: str
    domain: str
    owner: UUID
    tags: list[str] = []
    is_public: bool
    outdated: bool
    main_image: FileReference | None = None
    archive: FileReference | None = None


class ActionType(StrEnum):
    """Type of an entry in the server's index action log."""

    CREATED = "created"
    UPDATED = "updated"
    OUTDATED = "outdated"
    DELETED = "deleted"


class IndexAction(ClientModel):
    """One entry of the server's index action log."""

    id: UUID
    type: ActionType
    bookmark_id: UUID
    created_at: datetime
    owner: UUID


class SnapshotPage(ClientModel):
    """A page of the index snapshot endpoint."""

    collection: list[IndexEntry]
    prev_page: str | None = None
    next_page: str | None = None
    total: int | None = None
    cursor: UUID | None = None


class DiffPage(ClientModel):
    """A page of the index diff endpoint."""

    collection: list[IndexAction]
    has_more: bool = False


class IndexState(ClientModel):
    """Everything persisted by the local index store."""

    version: int = INDEX_FORMAT_VERSION
    entries: list[IndexEntry] = []
    cursor: UUID | None = None
    last_synced_at: datetime | None = None
