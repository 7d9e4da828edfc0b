"""User model for storing authenticated users."""
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, JsonMeta, UUIDv7Mixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark
    from models.tag import Tag


class User(Base, UUIDv7Mixin):
    """User model - owner of bookmarks, tags, files and the bookmark index log."""

    __tablename__ = "users"

    # id provided by UUIDv7Mixin
    username: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        comment="JWT 'sub' claim - unique identifier of the account",
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    meta: Mapped[dict[str, Any]] = mapped_column(JsonMeta, nullable=False, default=dict)

    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
    tags: Mapped[list["Tag"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
    )
