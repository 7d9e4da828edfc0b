"""Tests for the bookmark index action log service."""
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.bookmark_index_action import BookmarkIndexAction, BookmarkIndexActionType
from models.user import User
from schemas.bookmark import BookmarkCreate
from services.bookmark_service import create_bookmark
from services.exceptions import IndexCursorExpiredError
from services.index_action_service import (
    delete_actions_older_than,
    get_latest_action_id,
    list_actions_after,
    retention_cutoff,
)


def uuid7_at(moment: datetime) -> UUID:
    """A UUIDv7 whose timestamp is `moment` (random bits taken from a fresh uuid7)."""
    timestamp_ms = int(moment.timestamp() * 1000)
    random_bits = uuid7().int & ((1 << 80) - 1)
    return UUID(int=(timestamp_ms << 80) | random_bits)


def action_at(user: User, moment: datetime, action_type: str = "created") -> BookmarkIndexAction:
    return BookmarkIndexAction(
        id=uuid7_at(moment),
        user_id=user.id,
        bookmark_id=uuid7(),
        type=action_type,
    )


async def create_many(db: AsyncSession, user: User, count: int) -> None:
    for i in range(count):
        await create_bookmark(
            db, user.id, BookmarkCreate(url=f"https://example.com/{i}", title=f"Bookmark {i}"),
        )


async def test__list_actions_after__returns_all_from_beginning(
    db_session: AsyncSession, test_user: User,
) -> None:
    await create_many(db_session, test_user, 3)

    actions, has_more = await list_actions_after(db_session, test_user.id, None, limit=10)

    assert len(actions) == 3
    assert has_more is False
    assert all(a.type == BookmarkIndexActionType.CREATED for a in actions)
    assert [a.id for a in actions] == sorted(a.id for a in actions)


async def test__list_actions_after__pages_with_has_more(
    db_session: AsyncSession, test_user: User,
) -> None:
    await create_many(db_session, test_user, 5)

    first, has_more = await list_actions_after(db_session, test_user.id, None, limit=2)
    assert len(first) == 2
    assert has_more is True

    second, has_more = await list_actions_after(db_session, test_user.id, first[-1].id, limit=2)
    assert len(second) == 2
    assert has_more is True

    third, has_more = await list_actions_after(db_session, test_user.id, second[-1].id, limit=2)
    assert len(third) == 1
    assert has_more is False

    ids = [a.id for a in first + second + third]
    assert len(set(ids)) == 5

    rest, has_more = await list_actions_after(db_session, test_user.id, third[-1].id, limit=2)
    assert rest == []
    assert has_more is False


async def test__list_actions_after__scoped_to_user(
    db_session: AsyncSession, test_user: User, other_user: User,
) -> None:
    await create_many(db_session, test_user, 2)
    await create_many(db_session, other_user, 1)

    actions, _ = await list_actions_after(db_session, other_user.id, None, limit=10)
    assert len(actions) == 1
    assert actions[0].user_id == other_user.id


async def test__list_actions_after__rejects_cursor_older_than_retention(
    db_session: AsyncSession, test_user: User,
) -> None:
    old_cursor = uuid7_at(datetime.now(UTC) - timedelta(days=31))

    with pytest.raises(IndexCursorExpiredError) as exc_info:
        await list_actions_after(db_session, test_user.id, old_cursor, limit=10, retention_days=30)
    assert exc_info.value.cursor == old_cursor

    # Without a retention window the cursor is accepted
    actions, _ = await list_actions_after(db_session, test_user.id, old_cursor, limit=10)
    assert actions == []


async def test__get_latest_action_id(db_session: AsyncSession, test_user: User) -> None:
    assert await get_latest_action_id(db_session, test_user.id) is None

    await create_many(db_session, test_user, 3)
    actions, _ = await list_actions_after(db_session, test_user.id, None, limit=10)
    assert await get_latest_action_id(db_session, test_user.id) == actions[-1].id


async def test__delete_actions_older_than__keeps_recent_actions(
    db_session: AsyncSession, test_user: User,
) -> None:
    now = datetime.now(UTC)
    db_session.add_all([
        action_at(test_user, now - timedelta(days=45)),
        action_at(test_user, now - timedelta(days=31)),
        action_at(test_user, now - timedelta(days=29)),
        action_at(test_user, now - timedelta(hours=1)),
    ])
    await db_session.flush()

    deleted = await delete_actions_older_than(db_session, retention_days=30, now=now)

    assert deleted == 2
    remaining = await db_session.scalar(select(func.count()).select_from(BookmarkIndexAction))
    assert remaining == 2


def test__retention_cutoff() -> None:
    now = datetime(2026, 3, 31, 12, 0, tzinfo=UTC)
    assert retention_cutoff(30, now) == datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


async def test__list_actions_after__accepts_old_cursor_that_was_not_pruned(
    db_session: AsyncSession, test_user: User,
) -> None:
    """An idle user's newest action may be old; nothing after it can be missing."""
    now = datetime.now(UTC)
    old = action_at(test_user, now - timedelta(days=45))
    db_session.add(old)
    await db_session.flush()

    actions, has_more = await list_actions_after(
        db_session, test_user.id, old.id, limit=10, retention_days=30,
    )
    assert actions == []
    assert has_more is False

    await create_many(db_session, test_user, 1)
    actions, _ = await list_actions_after(
        db_session, test_user.id, old.id, limit=10, retention_days=30,
    )
    assert len(actions) == 1


async def test__list_actions_after__rejects_old_cursor_of_another_user(
    db_session: AsyncSession, test_user: User, other_user: User,
) -> None:
    old = action_at(other_user, datetime.now(UTC) - timedelta(days=45))
    db_session.add(old)
    await db_session.flush()

    with pytest.raises(IndexCursorExpiredError):
        await list_actions_after(db_session, test_user.id, old.id, limit=10, retention_days=30)
