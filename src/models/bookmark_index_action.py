"""BookmarkIndexAction model - append-only log of bookmark state transitions."""
from enum import StrEnum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, UUIDv7Mixin


class BookmarkIndexActionType(StrEnum):
    """Type of state transition recorded for a bookmark."""

    CREATED = "created"
    UPDATED = "updated"
    OUTDATED = "outdated"
    DELETED = "deleted"


class BookmarkIndexAction(Base, UUIDv7Mixin):
    """
    One entry of a user's bookmark index log.

    Clients replay this log after a cursor (an entry id) to keep a local search
    index in sync. Entries are immutable; the id is a UUIDv7 so ascending id
    order is chronological order.

    bookmark_id is a plain column rather than a foreign key: the entry must
    outlive the bookmark it describes (deleted actions point to rows that no
    longer exist).
    """

    __tablename__ = "bookmark_index_actions"
    __table_args__ = (
        # Primary query: a user's log after a cursor, ascending
        Index("ix_bookmark_index_actions_user_id_id", "user_id", "id"),
    )

    # id provided by UUIDv7Mixin
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    bookmark_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
