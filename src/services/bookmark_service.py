"""
Service layer for bookmark operations.

Every mutation appends the matching index action (see index_action_service)
in the same session, so the bookmark change and its log entry are committed
or rolled back together.
"""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from models.bookmark import Bookmark
from models.bookmark_index_action import BookmarkIndexActionType
from models.tag import Tag
from models.user import User
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from services.file_object_service import resolve_file_object
from services.index_action_service import record_action
from services.tag_service import get_or_create_tags
from services.utils import calculate_domain, normalize_url

logger = logging.getLogger(__name__)


def _eager_options() -> tuple:
    """Loader options for everything a bookmark projection reads."""
    return (
        selectinload(Bookmark.tag_objects),
        selectinload(Bookmark.main_image),
        selectinload(Bookmark.archive),
    )


def _filter_by_tags(query: Select, tags: list[str]) -> Select:
    """Require every tag in `tags` (AND semantics)."""
    for tag_name in tags:
        query = query.where(Bookmark.tag_objects.any(Tag.name == tag_name))
    return query


async def _get_current_version(
    db: AsyncSession,
    user_id: UUID,
    normalized_url: str,
) -> Bookmark | None:
    """Latest non-outdated bookmark for a normalized URL, if any."""
    result = await db.execute(
        select(Bookmark)
        .options(*_eager_options())
        .where(
            Bookmark.user_id == user_id,
            Bookmark.normalized_url == normalized_url,
            Bookmark.outdated.is_(False),
        )
        .order_by(Bookmark.id.desc())
        .limit(1),
    )
    return result.scalar_one_or_none()


async def create_bookmark(
    db: AsyncSession,
    user_id: UUID,
    data: BookmarkCreate,
) -> Bookmark:
    """
    Create a new bookmark, outdating the previous version of the same URL.

    Flow:
    1. Look up the current bookmark for the normalized URL
    2. If there is one: mark it outdated and record `outdated` for it, then
       carry its tags and public flag over to the new version
    3. Insert the new bookmark and record `created`

    The `outdated` action is always recorded before `created`, so a client
    replaying the log never holds two current versions of the same URL.

    Raises:
        FileObjectNotFoundError: If mainImage or archive is not one of the user's files.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    main_image = await resolve_file_object(db, user_id, data.main_image)
    archive = await resolve_file_object(db, user_id, data.archive)

    normalized_url = normalize_url(data.url)
    tag_names = list(data.tags)
    is_public = bool(data.is_public)

    previous = await _get_current_version(db, user_id, normalized_url)
    if previous is not None:
        previous.outdated = True
        await record_action(db, previous, BookmarkIndexActionType.OUTDATED)
        tag_names += [tag.name for tag in previous.tag_objects if tag.name not in tag_names]
        # Once public, a URL stays public across versions
        is_public = is_public or previous.is_public
        logger.info("Bookmark %s outdated by a new version of %s", previous.id, normalized_url)

    tags = await get_or_create_tags(db, user_id, tag_names)

    bookmark = Bookmark(
        user_id=user_id,
        url=data.url,
        normalized_url=normalized_url,
        domain=calculate_domain(data.url),
        title=data.title,
        is_public=is_public,
        outdated=False,
        main_image=main_image,
        archive=archive,
        tag_objects=tags,
    )
    db.add(bookmark)
    await db.flush()
    await record_action(db, bookmark, BookmarkIndexActionType.CREATED)
    return bookmark


async def get_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    only_public: bool = False,
) -> Bookmark | None:
    """
    Get a bookmark by ID, scoped to user. Returns None if not found or wrong user.

    Outdated versions are returned too. With only_public, private bookmarks
    are treated as not found.
    """
    query = (
        select(Bookmark)
        .options(*_eager_options())
        .where(
            Bookmark.id == bookmark_id,
            Bookmark.user_id == user_id,
        )
    )
    if only_public:
        query = query.where(Bookmark.is_public.is_(True))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def list_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    limit: int,
    after: UUID | None = None,
    tags: list[str] | None = None,
    only_public: bool = False,
    with_total: bool = False,
) -> tuple[list[Bookmark], int | None]:
    """
    Get a page of a user's current (non-outdated) bookmarks, newest first.

    Args:
        db: Database session.
        user_id: User ID to scope bookmarks.
        limit: Page size.
        after: Cursor - only bookmarks with an id lower than this one.
        tags: Only bookmarks carrying all of these tags.
        only_public: Only public bookmarks.
        with_total: Also count every bookmark matching the filters (ignoring
            the cursor).

    Returns:
        Tuple of (bookmarks, total). total is None unless with_total is set.
    """
    base_query = select(Bookmark).where(
        Bookmark.user_id == user_id,
        Bookmark.outdated.is_(False),
    )
    if only_public:
        base_query = base_query.where(Bookmark.is_public.is_(True))
    if tags:
        base_query = _filter_by_tags(base_query, tags)

    total = None
    if with_total:
        count_query = select(func.count()).select_from(base_query.subquery())
        total = (await db.execute(count_query)).scalar_one()

    page_query = base_query.options(*_eager_options())
    if after is not None:
        page_query = page_query.where(Bookmark.id < after)
    page_query = page_query.order_by(Bookmark.id.desc()).limit(limit)

    result = await db.execute(page_query)
    return list(result.scalars().all()), total


async def get_bookmark_history(
    db: AsyncSession,
    user_id: UUID,
    bookmark: Bookmark,
) -> list[Bookmark]:
    """
    Get the outdated versions of a bookmark's URL, newest first.

    The given bookmark is excluded even when it is itself outdated.
    """
    result = await db.execute(
        select(Bookmark)
        .options(*_eager_options())
        .where(
            Bookmark.user_id == user_id,
            Bookmark.normalized_url == bookmark.normalized_url,
            Bookmark.outdated.is_(True),
            Bookmark.id != bookmark.id,
        )
        .order_by(Bookmark.id.desc()),
    )
    return list(result.scalars().all())


async def update_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    data: BookmarkUpdate,
) -> Bookmark | None:
    """
    Update a bookmark. Returns None if not found or wrong user.

    The URL is never changed. Fields absent from the request are left as they
    are; `tags: []` removes every tag.

    Raises:
        FileObjectNotFoundError: If mainImage or archive is not one of the user's files.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return None

    update_data = data.model_dump(exclude_unset=True)

    if update_data.get("title") is not None:
        bookmark.title = update_data["title"]
    if update_data.get("is_public") is not None:
        bookmark.is_public = update_data["is_public"]
    if update_data.get("tags") is not None:
        bookmark.tag_objects = await get_or_create_tags(db, user_id, update_data["tags"])
    if "main_image" in update_data:
        bookmark.main_image = await resolve_file_object(db, user_id, update_data["main_image"])
    if "archive" in update_data:
        bookmark.archive = await resolve_file_object(db, user_id, update_data["archive"])

    await db.flush()
    await record_action(db, bookmark, BookmarkIndexActionType.UPDATED)
    return bookmark


async def delete_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> list[UUID] | None:
    """
    Delete a bookmark together with every version of its URL.

    One `deleted` action is recorded per removed version, oldest version first.

    Returns:
        IDs of the deleted bookmarks, or None if not found or wrong user.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        return None

    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.tag_objects))
        .where(
            Bookmark.user_id == user_id,
            Bookmark.normalized_url == bookmark.normalized_url,
        )
        .order_by(Bookmark.id.asc()),
    )
    lineage = list(result.scalars().all())

    deleted_ids = []
    for version in lineage:
        await record_action(db, version, BookmarkIndexActionType.DELETED)
        await db.delete(version)
        deleted_ids.append(version.id)

    await db.flush()
    logger.info("Deleted %d version(s) of %s", len(deleted_ids), bookmark.normalized_url)
    return deleted_ids


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Get a user by username. Returns None if not found."""
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()
