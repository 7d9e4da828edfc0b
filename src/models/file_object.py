"""FileObject model for archive snapshots and preview images attached to bookmarks."""
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, UUIDv7Mixin


class FileObject(Base, UUIDv7Mixin):
    """
    Reference to a stored file owned by a user.

    Only the metadata lives here; the bytes are served from content_url by
    whatever storage backend uploaded them.
    """

    __tablename__ = "file_objects"

    # id provided by UUIDv7Mixin
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content_url: Mapped[str] = mapped_column(Text, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
