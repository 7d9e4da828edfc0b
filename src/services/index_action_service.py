"""
Service layer for the bookmark index action log.

Every bookmark state transition appends one BookmarkIndexAction in the same
session as the mutation itself. Clients that keep a local search index replay
the log after their cursor instead of downloading every bookmark again.
"""
import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import uuid7_datetime
from models.bookmark import Bookmark
from models.bookmark_index_action import BookmarkIndexAction, BookmarkIndexActionType
from services.exceptions import IndexCursorExpiredError

logger = logging.getLogger(__name__)


def retention_cutoff(retention_days: int, now: datetime | None = None) -> datetime:
    """Point in time before which index actions may have been pruned."""
    if now is None:
        now = datetime.now(UTC)
    return now - timedelta(days=retention_days)


async def record_action(
    db: AsyncSession,
    bookmark: Bookmark,
    action_type: BookmarkIndexActionType,
) -> BookmarkIndexAction:
    """
    Append an index action for a bookmark.

    Flushes immediately so the action's UUIDv7 id is allocated now: the order
    in which actions are recorded is the order clients will replay them in.

    Note:
        Does not commit. Caller (session generator) handles commit at request end,
        which keeps the action atomic with the bookmark mutation.
    """
    action = BookmarkIndexAction(
        user_id=bookmark.user_id,
        bookmark_id=bookmark.id,
        type=action_type.value,
    )
    db.add(action)
    await db.flush()
    logger.debug(
        "Recorded %s index action %s for bookmark %s", action_type.value, action.id, bookmark.id,
    )
    return action


async def _action_exists(db: AsyncSession, user_id: UUID, action_id: UUID) -> bool:
    # Pruning deletes by id prefix: if this row survived, nothing after it was pruned
    result = await db.execute(
        select(BookmarkIndexAction.id).where(
            BookmarkIndexAction.id == action_id,
            BookmarkIndexAction.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none() is not None


async def list_actions_after(
    db: AsyncSession,
    user_id: UUID,
    cursor: UUID | None,
    limit: int,
    retention_days: int | None = None,
) -> tuple[list[BookmarkIndexAction], bool]:
    """
    Get a user's index actions strictly after a cursor, oldest first.

    Args:
        db: Database session.
        user_id: User ID to scope the log.
        cursor: Id of the last action the client applied. None means from the
            beginning of the retained log.
        limit: Maximum number of actions to return.
        retention_days: If set, reject cursors older than the retention window
            whose action has already been pruned.

    Returns:
        Tuple of (actions, has_more). has_more is True if more actions exist
        after the last returned one.

    Raises:
        IndexCursorExpiredError: If the cursor predates the retention window and
            its action is gone, so later actions may have been pruned too.
    """
    if (
        cursor is not None
        and retention_days is not None
        and uuid7_datetime(cursor) < retention_cutoff(retention_days)
        and not await _action_exists(db, user_id, cursor)
    ):
        raise IndexCursorExpiredError(cursor)

    query = select(BookmarkIndexAction).where(BookmarkIndexAction.user_id == user_id)
    if cursor is not None:
        query = query.where(BookmarkIndexAction.id > cursor)
    # Fetch one extra row to know whether another page exists
    query = query.order_by(BookmarkIndexAction.id.asc()).limit(limit + 1)

    result = await db.execute(query)
    actions = list(result.scalars().all())
    has_more = len(actions) > limit
    return actions[:limit], has_more


async def get_latest_action_id(db: AsyncSession, user_id: UUID) -> UUID | None:
    """Id of a user's newest index action, or None if the log is empty."""
    result = await db.execute(
        select(BookmarkIndexAction.id)
        .where(BookmarkIndexAction.user_id == user_id)
        .order_by(BookmarkIndexAction.id.desc())
        .limit(1),
    )
    return result.scalar_one_or_none()


async def delete_actions_older_than(
    db: AsyncSession,
    retention_days: int,
    now: datetime | None = None,
) -> int:
    """
    Delete index actions older than the retention window, for all users.

    Works on ids alone: a UUIDv7 built from the cutoff timestamp (with the
    random bits cleared) sorts before every id generated at or after it.

    Returns:
        Number of deleted actions.

    Note:
        Does not commit.
    """
    cutoff = retention_cutoff(retention_days, now)
    cutoff_ms = int(cutoff.timestamp() * 1000)
    cutoff_id = UUID(int=(cutoff_ms << 80) | (0x7 << 76) | (0x2 << 62))

    result = await db.execute(
        delete(BookmarkIndexAction).where(BookmarkIndexAction.id < cutoff_id),
    )
    return result.rowcount or 0
