"""Tests for UUIDv7Mixin."""
import time
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.base import uuid7_datetime
from models.user import User


class TestUUIDv7Mixin:
    """Tests for the UUIDv7Mixin class."""

    def test__uuid7__is_version_7(self) -> None:
        """Test that uuid7() generates version 7 UUIDs."""
        generated = uuid7()
        assert isinstance(generated, UUID)
        # Format: xxxxxxxx-xxxx-Mxxx-xxxx-xxxxxxxxxxxx where M is version
        assert str(generated)[14] == "7"

    def test__uuid7__is_time_ordered(self) -> None:
        """Later ids sort after earlier ones, numerically and as strings."""
        uuid1 = uuid7()
        time.sleep(0.002)  # 2ms
        uuid2 = uuid7()
        assert uuid2 > uuid1
        assert str(uuid2) > str(uuid1)

    def test__uuid7__is_ordered_within_same_millisecond(self) -> None:
        """Index actions recorded back to back must keep their order."""
        uuids = [uuid7() for _ in range(200)]
        assert uuids == sorted(uuids)
        assert len(set(uuids)) == 200

    def test__uuid7_datetime__known_value(self) -> None:
        value = UUID(int=(1_700_000_000_000 << 80) | (0x7 << 76))
        assert uuid7_datetime(value) == datetime.fromtimestamp(1_700_000_000, tz=UTC)


async def test__created_at__derived_from_id(db_session: AsyncSession) -> None:
    user = User(username="created-at")
    db_session.add(user)
    await db_session.flush()

    assert isinstance(user.id, UUID)
    assert user.created_at == uuid7_datetime(user.id)
