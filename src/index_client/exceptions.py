"""Exceptions raised by the index client."""
from uuid import UUID


class IndexClientError(Exception):
    """Base class for index client errors."""


class UnauthenticatedError(IndexClientError):
    """Raised when the API rejects the configured token (401). Retrying will not help."""

    def __init__(self, message: str = "Invalid or expired API token") -> None:
        super().__init__(message)


class ResyncRequiredError(IndexClientError):
    """
    Raised when the server can no longer serve a diff for the local cursor (410).

    The local index has to be rebuilt from a snapshot.
    """

    def __init__(self, cursor: UUID | None) -> None:
        self.cursor = cursor
        super().__init__(f"Cursor {cursor} has expired, a full resync is required")


class InconsistentIndexError(IndexClientError):
    """Raised when the action log names a bookmark the API no longer returns."""

    def __init__(self, bookmark_id: UUID) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark {bookmark_id} from the action log could not be fetched")


class MalformedResponseError(IndexClientError):
    """Raised when a successful response body is not the expected JSON document."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        super().__init__(f"Unexpected response from {url}: {detail}")
