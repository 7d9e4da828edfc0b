"""SQLAlchemy declarative base with common mixins."""
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid6 import uuid7

# Free-form JSON metadata: JSONB on PostgreSQL, plain JSON elsewhere (tests)
JsonMeta = JSON().with_variant(JSONB(), "postgresql")


def uuid7_datetime(value: UUID) -> datetime:
    """
    Extract the creation time embedded in a UUIDv7.

    The first 48 bits of a UUIDv7 are a Unix timestamp in milliseconds, which
    is what makes these IDs sortable by creation time.
    """
    timestamp_ms = value.int >> 80
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDv7Mixin:
    """
    Mixin that adds a time-ordered UUIDv7 primary key.

    IDs are generated client-side at flush time. Sorting by id is equivalent to
    sorting by creation time, which the cursor-based pagination relies on.
    """

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid7)

    @property
    def created_at(self) -> datetime:
        """Creation time derived from the UUIDv7 id."""
        return uuid7_datetime(self.id)

