"""Shared exceptions for service layer operations."""
from uuid import UUID


class FileObjectNotFoundError(Exception):
    """
    Raised when a referenced file object does not exist or belongs to another user.

    Surfaces as a validation error: the client sent an unusable reference.
    """

    def __init__(self, file_object_id: UUID) -> None:
        self.file_object_id = file_object_id
        super().__init__(f"File object {file_object_id} not found")


class IndexCursorExpiredError(Exception):
    """
    Raised when a diff cursor is older than the index action retention window.

    Actions after the cursor may already have been pruned, so the log can no
    longer bring the client up to date: it has to rebuild its index from a
    snapshot.
    """

    def __init__(self, cursor: UUID) -> None:
        self.cursor = cursor
        super().__init__(f"Index cursor {cursor} is older than the retention window")
