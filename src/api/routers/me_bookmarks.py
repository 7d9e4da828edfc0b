"""Bookmark endpoints for the authenticated user."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from api.helpers import bookmark_page, parse_tags_query
from core.config import Settings
from models.user import User
from schemas.bookmark import (
    BookmarkCollectionResponse,
    BookmarkCreate,
    BookmarkPageResponse,
    BookmarkResponse,
    BookmarkUpdate,
)
from services import bookmark_service
from services.exceptions import FileObjectNotFoundError

router = APIRouter(prefix="/users/me/bookmarks", tags=["bookmarks"])


@router.post("", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Create a new bookmark.

    If the URL (after normalization) is already bookmarked, the existing
    bookmark is marked as outdated and the new one inherits its tags and
    public flag.
    """
    try:
        bookmark = await bookmark_service.create_bookmark(db, current_user.id, data)
    except FileObjectNotFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return BookmarkResponse.model_validate(bookmark)


@router.get("", response_model=BookmarkPageResponse)
async def list_bookmarks(
    request: Request,
    tags: str | None = Query(default=None, description="Comma-separated tags, all required"),
    after: UUID | None = Query(default=None, description="Cursor: id of the last bookmark seen"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkPageResponse:
    """List the current user's current bookmarks, newest first."""
    tag_names = parse_tags_query(tags)
    bookmarks, total = await bookmark_service.list_bookmarks(
        db,
        current_user.id,
        limit=settings.bookmark_page_size,
        after=after,
        tags=tag_names,
    )
    return bookmark_page(
        request, bookmarks, settings.bookmark_page_size, total,
        BookmarkPageResponse, BookmarkResponse,
    )


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID, including outdated versions."""
    bookmark = await bookmark_service.get_bookmark(db, current_user.id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.get("/{bookmark_id}/history", response_model=BookmarkCollectionResponse)
async def get_bookmark_history(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkCollectionResponse:
    """Get the outdated versions of a bookmark's URL, newest first."""
    bookmark = await bookmark_service.get_bookmark(db, current_user.id, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    history = await bookmark_service.get_bookmark_history(db, current_user.id, bookmark)
    return BookmarkCollectionResponse(
        collection=[BookmarkResponse.model_validate(b) for b in history],
    )


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Update a bookmark. The URL cannot be changed."""
    try:
        bookmark = await bookmark_service.update_bookmark(
            db, current_user.id, bookmark_id, data,
        )
    except FileObjectNotFoundError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a bookmark and every other version of its URL."""
    deleted = await bookmark_service.delete_bookmark(db, current_user.id, bookmark_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
