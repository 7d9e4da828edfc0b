"""SQLAlchemy models."""
from models.base import Base, UUIDv7Mixin
from models.tag import Tag, bookmark_tags  # Must be before bookmark due to import
from models.bookmark import Bookmark
from models.bookmark_index_action import BookmarkIndexAction, BookmarkIndexActionType
from models.file_object import FileObject
from models.user import User

__all__ = [
    "Base",
    "Bookmark",
    "BookmarkIndexAction",
    "BookmarkIndexActionType",
    "FileObject",
    "Tag",
    "UUIDv7Mixin",
    "User",
    "bookmark_tags",
]
