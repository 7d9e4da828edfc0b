"""
Scheduled cleanup task.

Prunes the bookmark index action log. Designed to run as a cron job
(e.g., daily at 3 AM).

Usage:
    python -m tasks.cleanup

Actions older than INDEX_ACTION_RETENTION_DAYS are deleted. Clients whose
sync cursor is older than that get 410 from the diff endpoint and rebuild
their index from a snapshot.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from db.session import async_session_factory
from services.index_action_service import delete_actions_older_than, retention_cutoff

logger = logging.getLogger(__name__)


@dataclass
class CleanupStats:
    """Statistics from a cleanup run."""

    expired_actions_deleted: int = 0
    retention_days: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to simple dict for logging/return."""
        return {
            "expired_actions_deleted": self.expired_actions_deleted,
            "retention_days": self.retention_days,
        }


async def cleanup_expired_index_actions(
    db: AsyncSession,
    now: datetime | None = None,
    retention_days: int | None = None,
) -> CleanupStats:
    """
    Delete index actions older than the retention period.

    Args:
        db: Database session.
        now: Current time for cutoff calculation. Defaults to datetime.now(UTC).
             Inject a specific time for testing boundary conditions.
        retention_days: Overrides INDEX_ACTION_RETENTION_DAYS.

    Returns:
        CleanupStats with the number of deleted actions.
    """
    if now is None:
        now = datetime.now(UTC)
    if retention_days is None:
        retention_days = get_settings().index_action_retention_days

    deleted = await delete_actions_older_than(db, retention_days, now=now)
    await db.commit()

    if deleted > 0:
        logger.info(
            "Deleted %d expired index actions (cutoff=%s)",
            deleted,
            retention_cutoff(retention_days, now).isoformat(),
        )
    return CleanupStats(expired_actions_deleted=deleted, retention_days=retention_days)


async def run_cleanup(
    db: AsyncSession | None = None,
    now: datetime | None = None,
) -> CleanupStats:
    """
    Run all cleanup tasks.

    Args:
        db: Database session. If None, creates one from async_session_factory.
        now: Current time for cutoff calculation. Defaults to datetime.now(UTC).
    """
    logger.info("Starting cleanup task")

    if db is not None:
        stats = await cleanup_expired_index_actions(db, now=now)
    else:
        async with async_session_factory() as session:
            stats = await cleanup_expired_index_actions(session, now=now)

    logger.info("Cleanup complete: %s", stats.to_dict())
    return stats


def main() -> None:
    """Entry point for running cleanup as a script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_cleanup())


if __name__ == "__main__":
    main()
