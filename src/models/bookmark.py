"""Bookmark model for storing user bookmarks."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, UUIDv7Mixin
from models.tag import bookmark_tags

if TYPE_CHECKING:
    from models.file_object import FileObject
    from models.tag import Tag
    from models.user import User


class Bookmark(Base, UUIDv7Mixin):
    """
    Bookmark model - a saved URL at a point in time.

    Saving the same (normalized) URL again creates a new bookmark and marks the
    previous one as outdated, so every URL has a chain of versions of which at
    most one is current.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Version chain lookups: latest/outdated versions of a URL for a user.
        # Not unique: concurrent creates of the same URL are not guarded.
        Index("ix_bookmarks_user_normalized_url", "user_id", "normalized_url"),
    )

    # id provided by UUIDv7Mixin
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    normalized_url: Mapped[str] = mapped_column(Text, nullable=False)
    domain: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    outdated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )

    main_image_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("file_objects.id", ondelete="SET NULL"), nullable=True,
    )
    archive_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("file_objects.id", ondelete="SET NULL"), nullable=True,
    )

    user: Mapped["User"] = relationship(back_populates="bookmarks")
    tag_objects: Mapped[list["Tag"]] = relationship(
        secondary=bookmark_tags,
        back_populates="bookmarks",
        order_by="Tag.name",
    )
    main_image: Mapped["FileObject | None"] = relationship(foreign_keys=[main_image_id])
    archive: Mapped["FileObject | None"] = relationship(foreign_keys=[archive_id])
