"""
Service layer for tag operations.

Renaming or deleting a tag changes how every bookmark carrying it is
projected, so those bookmarks get an `updated` index action.
"""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.bookmark import Bookmark
from models.bookmark_index_action import BookmarkIndexActionType
from models.tag import Tag, bookmark_tags
from schemas.tag import TagCount, TagCreate, TagUpdate
from schemas.validators import validate_and_normalize_tags
from services.index_action_service import record_action

logger = logging.getLogger(__name__)


class TagNotFoundError(Exception):
    """Raised when a tag is not found."""

    def __init__(self, tag_name: str) -> None:
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' not found")


class TagAlreadyExistsError(Exception):
    """Raised when trying to rename a tag to a name that already exists."""

    def __init__(self, tag_name: str) -> None:
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' already exists")


class TagLimitExceededError(Exception):
    """Raised when a user already owns the maximum number of tags."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"You have reached the {limit} tags limit")


async def get_or_create_tags(
    db: AsyncSession,
    user_id: UUID,
    tag_names: list[str],
) -> list[Tag]:
    """
    Get existing tags or create new ones.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        tag_names: List of tag names to get or create.

    Returns:
        List of Tag objects (existing or newly created), in the order of
        tag_names after normalization.
    """
    if not tag_names:
        return []

    normalized = validate_and_normalize_tags(tag_names)
    if not normalized:
        return []

    # Fetch existing tags
    result = await db.execute(
        select(Tag).where(
            Tag.user_id == user_id,
            Tag.name.in_(normalized),
        ),
    )
    existing_tags = {tag.name: tag for tag in result.scalars()}

    # Create missing tags
    tags = []
    for name in normalized:
        if name in existing_tags:
            tags.append(existing_tags[name])
        else:
            new_tag = Tag(user_id=user_id, name=name)
            db.add(new_tag)
            tags.append(new_tag)

    await db.flush()
    return tags


async def get_user_tags_with_counts(
    db: AsyncSession,
    user_id: UUID,
    only_public: bool = False,
) -> list[TagCount]:
    """
    Get all tags for a user with their usage counts.

    Counts only include current bookmarks (outdated versions are ignored), so
    a tag only used by old versions of a URL reports zero.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        only_public: Only public tags, counting only public bookmarks. Used
            for profile pages.

    Returns:
        List of TagCount objects sorted by count desc, then name asc.
    """
    counted = Bookmark.outdated.is_(False)
    if only_public:
        counted = counted & Bookmark.is_public.is_(True)
    # LEFT JOIN keeps tags with zero count; COUNT ignores the NULLs it produces
    count = func.count(bookmark_tags.c.bookmark_id).filter(counted)
    query = (
        select(Tag.name, Tag.is_public, count.label("count"))
        .outerjoin(bookmark_tags, Tag.id == bookmark_tags.c.tag_id)
        .outerjoin(Bookmark, bookmark_tags.c.bookmark_id == Bookmark.id)
        .where(Tag.user_id == user_id)
    )
    if only_public:
        query = query.where(Tag.is_public.is_(True))
    result = await db.execute(
        query.group_by(Tag.id, Tag.name, Tag.is_public)
        .order_by(count.desc(), Tag.name.asc()),
    )
    return [
        TagCount(name=row.name, count=row.count, is_public=row.is_public)
        for row in result
    ]


async def get_tag_by_name(
    db: AsyncSession,
    user_id: UUID,
    name: str,
    only_public: bool = False,
) -> Tag | None:
    """Get a tag by its (normalized) name. Returns None if not found."""
    query = select(Tag).where(Tag.user_id == user_id, Tag.name == name.lower().strip())
    if only_public:
        query = query.where(Tag.is_public.is_(True))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def create_tag(
    db: AsyncSession,
    user_id: UUID,
    data: TagCreate,
    max_tags: int,
) -> tuple[Tag, bool]:
    """
    Create a tag that is not attached to any bookmark yet.

    If the user already has a tag with that name it is returned unchanged.

    Returns:
        Tuple of (tag, created).

    Raises:
        TagLimitExceededError: If the user already owns `max_tags` tags.
    """
    existing = await get_tag_by_name(db, user_id, data.name)
    if existing is not None:
        return existing, False

    owned = await db.scalar(
        select(func.count()).select_from(Tag).where(Tag.user_id == user_id),
    )
    if owned >= max_tags:
        raise TagLimitExceededError(max_tags)

    tag = Tag(user_id=user_id, name=data.name, is_public=data.is_public, meta=data.meta)
    db.add(tag)
    await db.flush()
    return tag, True


async def _bookmarks_with_tag(db: AsyncSession, tag: Tag) -> list[Bookmark]:
    """Every version of every bookmark carrying a tag, oldest first."""
    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.tag_objects))
        .where(
            Bookmark.user_id == tag.user_id,
            Bookmark.tag_objects.any(Tag.id == tag.id),
        )
        .order_by(Bookmark.id.asc()),
    )
    return list(result.scalars().all())


async def _record_tag_change(db: AsyncSession, bookmarks: list[Bookmark]) -> None:
    # Outdated versions are not part of any client index
    for bookmark in bookmarks:
        if not bookmark.outdated:
            await record_action(db, bookmark, BookmarkIndexActionType.UPDATED)


async def update_tag(
    db: AsyncSession,
    user_id: UUID,
    name: str,
    data: TagUpdate,
) -> Tag:
    """
    Update a tag's name, visibility or metadata.

    Metadata is merged into the stored keys. A rename records an `updated`
    index action for every current bookmark carrying the tag.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
        TagAlreadyExistsError: If a tag with the new name already exists.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    tag = await get_tag_by_name(db, user_id, name)
    if tag is None:
        raise TagNotFoundError(name.lower().strip())

    update_data = data.model_dump(exclude_unset=True)
    renamed = False
    new_name = update_data.get("name")
    if new_name is not None and new_name != tag.name:
        if await get_tag_by_name(db, user_id, new_name) is not None:
            raise TagAlreadyExistsError(new_name)
        logger.info("Renaming tag %s to %s", tag.name, new_name)
        tag.name = new_name
        renamed = True
    if update_data.get("is_public") is not None:
        tag.is_public = update_data["is_public"]
    if update_data.get("meta") is not None:
        # New dict so the JSON column is flagged as changed
        tag.meta = {**tag.meta, **update_data["meta"]}

    await db.flush()
    if renamed:
        await _record_tag_change(db, await _bookmarks_with_tag(db, tag))
    return tag


async def delete_tag(db: AsyncSession, user_id: UUID, name: str) -> None:
    """
    Delete a tag, removing it from every bookmark that carries it.

    Records an `updated` index action for every current bookmark that lost
    the tag.

    Raises:
        TagNotFoundError: If the tag doesn't exist.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    tag = await get_tag_by_name(db, user_id, name)
    if tag is None:
        raise TagNotFoundError(name.lower().strip())

    bookmarks = await _bookmarks_with_tag(db, tag)
    for bookmark in bookmarks:
        bookmark.tag_objects = [t for t in bookmark.tag_objects if t.id != tag.id]
    await db.flush()
    await _record_tag_change(db, bookmarks)

    await db.delete(tag)
    await db.flush()
    logger.info("Deleted tag %s from %d bookmark(s)", tag.name, len(bookmarks))
