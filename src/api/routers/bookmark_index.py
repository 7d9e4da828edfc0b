"""
Bookmark search index endpoints.

Clients keep a local copy of their bookmarks for offline search. They build it
once from the snapshot endpoint, then keep it current by replaying the index
action log from the diff endpoint.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from api.helpers import bookmark_page
from core.config import Settings
from models.user import User
from schemas.bookmark import BookmarkResponse
from schemas.bookmark_index import (
    BookmarkIndexActionResponse,
    BookmarkIndexDiffResponse,
    BookmarkIndexPageResponse,
)
from services import bookmark_service, index_action_service
from services.exceptions import IndexCursorExpiredError

router = APIRouter(prefix="/users/me/bookmarks/search", tags=["bookmark-index"])


@router.get("/index", response_model=BookmarkIndexPageResponse)
async def get_index_snapshot(
    request: Request,
    after: UUID | None = Query(default=None, description="Cursor: id of the last bookmark seen"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkIndexPageResponse:
    """
    Snapshot of the current user's current bookmarks, newest first.

    Public and private bookmarks are both included. The first page carries the
    id of the newest index action as `cursor`; read the diff from there once
    every page has been fetched.
    """
    # Read the cursor first: anything recorded while paging shows up in the diff
    cursor = None
    if after is None:
        cursor = await index_action_service.get_latest_action_id(db, current_user.id)

    bookmarks, total = await bookmark_service.list_bookmarks(
        db,
        current_user.id,
        limit=settings.index_page_size,
        after=after,
        with_total=True,
    )
    return bookmark_page(
        request, bookmarks, settings.index_page_size, total,
        BookmarkIndexPageResponse, BookmarkResponse, cursor=cursor,
    )


@router.get("/diff", response_model=BookmarkIndexDiffResponse)
async def get_index_diff(
    before: UUID | None = Query(
        default=None,
        description="Id of the last index action applied; actions after it are returned",
    ),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkIndexDiffResponse:
    """
    Index actions recorded after `before`, oldest first.

    At most DIFF_PAGE_SIZE actions are returned. When `hasMore` is true, call
    again with `before` set to the id of the last returned action.

    Returns 410 when `before` is older than the action retention window: the
    log may have been pruned and the client has to rebuild from the snapshot.
    """
    try:
        actions, has_more = await index_action_service.list_actions_after(
            db,
            current_user.id,
            cursor=before,
            limit=settings.diff_page_size,
            retention_days=settings.index_action_retention_days,
        )
    except IndexCursorExpiredError as e:
        raise HTTPException(status_code=410, detail=str(e))
    return BookmarkIndexDiffResponse(
        collection=[BookmarkIndexActionResponse.model_validate(a) for a in actions],
        has_more=has_more,
    )
