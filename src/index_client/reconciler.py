"""
Keeps the local bookmark index in sync with the server.

The first sync downloads a snapshot of every current bookmark. Later syncs
replay the server's index action log from the stored cursor:

- created / updated: fetch the bookmark and upsert it (or drop it if the
  fetched version is already outdated)
- outdated / deleted: drop the bookmark

Applying the same actions twice gives the same result, so a sync interrupted
after fetching but before saving can simply be repeated.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

import httpx

from index_client.api_client import IndexApiClient, next_page_cursor
from index_client.exceptions import (
    InconsistentIndexError,
    MalformedResponseError,
    ResyncRequiredError,
)
from index_client.models import ActionType, IndexAction, IndexEntry, IndexState
from index_client.store import IndexStore

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of one reconciliation."""

    ok: bool
    bootstrapped: bool = False
    actions_applied: int = 0
    entry_count: int = 0
    cursor: UUID | None = None
    error: str | None = None


def coalesce_actions(actions: list[IndexAction]) -> dict[UUID, ActionType]:
    """
    Reduce a page of actions to the last action type per bookmark.

    Bookmarks keep the position of their last action, so the result is still
    in log order.
    """
    latest: dict[UUID, ActionType] = {}
    for action in actions:
        latest.pop(action.bookmark_id, None)
        latest[action.bookmark_id] = action.type
    return latest


def _sorted_entries(entries: dict[UUID, IndexEntry]) -> list[IndexEntry]:
    # UUIDv7: id order is creation order
    return sorted(entries.values(), key=lambda entry: entry.id, reverse=True)


class IndexReconciler:
    """Runs bootstrap and incremental syncs, one at a time."""

    def __init__(self, api: IndexApiClient, store: IndexStore) -> None:
        self._api = api
        self._store = store
        self._lock = asyncio.Lock()

    @property
    def in_progress(self) -> bool:
        """Whether a sync is currently running."""
        return self._lock.locked()

    async def sync(self) -> SyncResult:
        """
        Bring the local index up to date.

        A call made while another sync is running waits for it, then runs.

        Transient HTTP failures and unexpected response bodies are logged and
        reported as a failed result. Pages applied before the failure stay
        saved; the next call retries from the stored cursor.

        Raises:
            UnauthenticatedError: If the API rejects the token.
        """
        async with self._lock:
            try:
                return await self._sync()
            except (httpx.HTTPError, MalformedResponseError) as e:
                logger.warning("Index sync failed, will retry on next trigger: %s", e)
                return SyncResult(ok=False, error=str(e) or type(e).__name__)

    async def _sync(self) -> SyncResult:
        state = self._store.load()
        if state is None:
            return await self._bootstrap()
        try:
            return await self._apply_diff(state)
        except (ResyncRequiredError, InconsistentIndexError) as e:
            logger.warning("Rebuilding local index: %s", e)
            return await self._bootstrap()

    async def _bootstrap(self) -> SyncResult:
        """Rebuild the index from a full snapshot, then catch up with the log."""
        logger.info("Bootstrapping local index")
        entries: dict[UUID, IndexEntry] = {}

        page = await self._api.fetch_snapshot_page()
        # Actions after this cursor may not be part of the pages read below
        cursor = page.cursor
        while True:
            for entry in page.collection:
                entries[entry.id] = entry
            after = next_page_cursor(page.next_page)
            if after is None:
                break
            page = await self._api.fetch_snapshot_page(after)

        state = IndexState(
            entries=_sorted_entries(entries),
            cursor=cursor,
            last_synced_at=datetime.now(UTC),
        )
        self._store.save(state)
        logger.info("Local index bootstrapped with %d bookmarks", len(entries))

        try:
            result = await self._apply_diff(state)
        except (ResyncRequiredError, InconsistentIndexError) as e:
            # Snapshot is saved; the next sync starts over from it
            logger.warning("Catch-up after bootstrap failed: %s", e)
            return SyncResult(
                ok=False,
                bootstrapped=True,
                entry_count=len(entries),
                cursor=cursor,
                error=str(e),
            )
        result.bootstrapped = True
        return result

    async def _apply_diff(self, state: IndexState) -> SyncResult:
        """Replay the action log after the stored cursor, saving after every page."""
        entries = {entry.id: entry for entry in state.entries}
        cursor = state.cursor
        applied = 0

        while True:
            page = await self._api.fetch_diff_page(cursor)
            if not page.collection:
                break

            for bookmark_id, action_type in coalesce_actions(page.collection).items():
                if action_type in (ActionType.CREATED, ActionType.UPDATED):
                    entry = await self._api.fetch_bookmark(bookmark_id)
                    if entry is None:
                        raise InconsistentIndexError(bookmark_id)
                    if entry.outdated:
                        entries.pop(bookmark_id, None)
                    else:
                        entries[bookmark_id] = entry
                else:
                    entries.pop(bookmark_id, None)

            cursor = page.collection[-1].id
            applied += len(page.collection)
            state = IndexState(
                entries=_sorted_entries(entries),
                cursor=cursor,
                last_synced_at=datetime.now(UTC),
            )
            self._store.save(state)

            if not page.has_more:
                break

        if applied == 0:
            state = state.model_copy(update={"last_synced_at": datetime.now(UTC)})
            self._store.save(state)
        else:
            logger.info("Applied %d index actions, cursor is now %s", applied, cursor)

        return SyncResult(
            ok=True,
            actions_applied=applied,
            entry_count=len(entries),
            cursor=cursor,
        )
