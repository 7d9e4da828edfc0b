"""HTTP client for the bookmark index endpoints of the HiveCache API."""
import logging
from types import TracebackType
from typing import Any, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel, ValidationError

from index_client.config import ClientSettings
from index_client.exceptions import (
    MalformedResponseError,
    ResyncRequiredError,
    UnauthenticatedError,
)
from index_client.models import DiffPage, IndexEntry, SnapshotPage

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SNAPSHOT_PATH = "/users/me/bookmarks/search/index"
DIFF_PATH = "/users/me/bookmarks/search/diff"
BOOKMARK_PATH = "/users/me/bookmarks/{bookmark_id}"


def next_page_cursor(next_page: str | None) -> UUID | None:
    """Extract the `after` cursor from a `nextPage` URL."""
    if not next_page:
        return None
    after = httpx.URL(next_page).params.get("after")
    return UUID(after) if after else None


def _parse(response: httpx.Response, model: type[ModelT]) -> ModelT:
    """Validate a JSON body, raising MalformedResponseError for anything else."""
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        raise MalformedResponseError(str(response.url), f"{e.error_count()} validation errors") from e


class IndexApiClient:
    """
    Thin async wrapper around the snapshot, diff and bookmark endpoints.

    Maps 401 to UnauthenticatedError, 410 to ResyncRequiredError and bodies
    that do not validate to MalformedResponseError; other failures surface as
    httpx errors.
    """

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._token = token

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "IndexApiClient":
        """Create a client with its own connection pool."""
        client = httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=httpx.Timeout(settings.request_timeout),
        )
        return cls(client, settings.api_token)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "IndexApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def _get_headers(self) -> dict[str, str]:
        headers = {"X-Request-Source": "index-client"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        response = await self._client.get(path, params=params, headers=self._get_headers())
        if response.status_code == 401:
            raise UnauthenticatedError
        return response

    async def fetch_snapshot_page(self, after: UUID | None = None) -> SnapshotPage:
        """Fetch one page of the index snapshot, newest bookmarks first."""
        params = {"after": str(after)} if after is not None else None
        response = await self._get(SNAPSHOT_PATH, params=params)
        response.raise_for_status()
        return _parse(response, SnapshotPage)

    async def fetch_diff_page(self, before: UUID | None = None) -> DiffPage:
        """
        Fetch the index actions recorded after `before`, oldest first.

        Raises:
            ResyncRequiredError: If the server no longer retains actions after `before`.
        """
        params = {"before": str(before)} if before is not None else None
        response = await self._get(DIFF_PATH, params=params)
        if response.status_code == 410:
            raise ResyncRequiredError(before)
        response.raise_for_status()
        return _parse(response, DiffPage)

    async def fetch_bookmark(self, bookmark_id: UUID) -> IndexEntry | None:
        """Fetch the owner's projection of a bookmark, or None if it no longer exists."""
        response = await self._get(BOOKMARK_PATH.format(bookmark_id=bookmark_id))
        if response.status_code == 404:
            logger.debug("Bookmark %s not found", bookmark_id)
            return None
        response.raise_for_status()
        return _parse(response, IndexEntry)
