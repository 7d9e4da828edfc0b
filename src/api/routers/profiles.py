"""Public profile endpoints (no authentication)."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from api.helpers import bookmark_page, parse_tags_query
from core.config import Settings
from models.user import User
from schemas.bookmark import BookmarkPublicResponse, PublicBookmarkPageResponse
from schemas.tag import PublicTagCount, PublicTagListResponse
from services import bookmark_service
from services.tag_service import get_tag_by_name, get_user_tags_with_counts

router = APIRouter(prefix="/profile", tags=["profiles"])


async def _get_profile_user(db: AsyncSession, username: str) -> User:
    user = await bookmark_service.get_user_by_username(db, username)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/{username}/bookmarks", response_model=PublicBookmarkPageResponse)
async def list_public_bookmarks(
    request: Request,
    username: str,
    tags: str | None = Query(default=None, description="Comma-separated tags, all required"),
    after: UUID | None = Query(default=None, description="Cursor: id of the last bookmark seen"),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> PublicBookmarkPageResponse:
    """List a user's public, current bookmarks, newest first."""
    user = await _get_profile_user(db, username)

    tag_names = parse_tags_query(tags)
    bookmarks, total = await bookmark_service.list_bookmarks(
        db,
        user.id,
        limit=settings.bookmark_page_size,
        after=after,
        tags=tag_names,
        only_public=True,
    )
    return bookmark_page(
        request, bookmarks, settings.bookmark_page_size, total,
        PublicBookmarkPageResponse, BookmarkPublicResponse,
    )


@router.get("/{username}/bookmarks/{bookmark_id}", response_model=BookmarkPublicResponse)
async def get_public_bookmark(
    username: str,
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkPublicResponse:
    """Get one public bookmark of a user. Private bookmarks are reported as 404."""
    user = await _get_profile_user(db, username)
    bookmark = await bookmark_service.get_bookmark(db, user.id, bookmark_id, only_public=True)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkPublicResponse.model_validate(bookmark)


@router.get("/{username}/tags", response_model=PublicTagListResponse)
async def list_public_tags(
    username: str,
    db: AsyncSession = Depends(get_async_session),
) -> PublicTagListResponse:
    """
    List a user's public tags.

    Counts only include public, current bookmarks. Sorted by count desc, then
    name asc.
    """
    user = await _get_profile_user(db, username)
    tags = await get_user_tags_with_counts(db, user.id, only_public=True)
    return PublicTagListResponse(
        tags=[PublicTagCount(name=tag.name, count=tag.count) for tag in tags],
    )


@router.get("/{username}/tags/{tag_name}", response_model=PublicTagCount)
async def get_public_tag(
    username: str,
    tag_name: str,
    db: AsyncSession = Depends(get_async_session),
) -> PublicTagCount:
    """Get one public tag of a user with its public bookmark count."""
    user = await _get_profile_user(db, username)
    tag = await get_tag_by_name(db, user.id, tag_name, only_public=True)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    tags = await get_user_tags_with_counts(db, user.id, only_public=True)
    count = next(t.count for t in tags if t.name == tag.name)
    return PublicTagCount(name=tag.name, count=count)
