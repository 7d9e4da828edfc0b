"""Tests for the background sync scheduler."""
import asyncio

import pytest

from index_client.exceptions import UnauthenticatedError
from index_client.reconciler import SyncResult
from index_client.scheduler import SyncScheduler


class FakeReconciler:
    """Counts syncs; optionally takes a while or raises instead of syncing."""

    def __init__(self, error: Exception | None = None, duration: float = 0) -> None:
        self.calls = 0
        self.completed = 0
        self.error = error
        self.duration = duration

    async def sync(self) -> SyncResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        await asyncio.sleep(self.duration)
        self.completed += 1
        return SyncResult(ok=True, actions_applied=self.calls)


async def test__notify_mutation__debounces_bursts() -> None:
    reconciler = FakeReconciler()
    scheduler = SyncScheduler(reconciler, interval=3600, mutation_delay=0.05)

    for _ in range(5):
        scheduler.notify_mutation()
    await asyncio.sleep(0.3)

    assert reconciler.calls == 1
    assert scheduler.last_result.ok is True
    await scheduler.stop()


async def test__start__syncs_immediately_and_periodically() -> None:
    reconciler = FakeReconciler()
    scheduler = SyncScheduler(reconciler, interval=0.05, mutation_delay=0)

    scheduler.start()
    scheduler.start()
    await asyncio.sleep(0.01)
    assert reconciler.calls == 1
    assert scheduler.running is True

    await asyncio.sleep(0.3)
    assert reconciler.calls >= 3

    await scheduler.stop()
    assert scheduler.running is False
    calls = reconciler.calls
    await asyncio.sleep(0.1)
    assert reconciler.calls == calls


async def test__stop__cancels_pending_mutation_sync() -> None:
    reconciler = FakeReconciler()
    scheduler = SyncScheduler(reconciler, interval=3600, mutation_delay=0.2)

    scheduler.notify_mutation()
    await scheduler.stop()
    await asyncio.sleep(0.3)

    assert reconciler.calls == 0


async def test__auth_error__stops_scheduling() -> None:
    reconciler = FakeReconciler(error=UnauthenticatedError())
    scheduler = SyncScheduler(reconciler, interval=0.01, mutation_delay=0)

    scheduler.start()
    with pytest.raises(UnauthenticatedError):
        await asyncio.wait_for(scheduler.wait(), timeout=1)

    assert reconciler.calls == 1
    assert scheduler.running is False
    assert scheduler.auth_error is not None

    scheduler.notify_mutation()
    await asyncio.sleep(0.05)
    assert reconciler.calls == 1


async def test__notify_mutation__does_not_cancel_running_sync() -> None:
    reconciler = FakeReconciler(duration=0.2)
    scheduler = SyncScheduler(reconciler, interval=3600, mutation_delay=0.01)

    scheduler.notify_mutation()
    await asyncio.sleep(0.05)
    assert reconciler.calls == 1

    # Edits during the sync queue exactly one follow-up sync
    scheduler.notify_mutation()
    scheduler.notify_mutation()
    await asyncio.sleep(0.6)

    assert reconciler.completed == 2
    assert reconciler.calls == 2
    await scheduler.stop()


async def test__unexpected_error__keeps_scheduling() -> None:
    reconciler = FakeReconciler(error=RuntimeError("boom"))
    scheduler = SyncScheduler(reconciler, interval=0.01, mutation_delay=0)

    scheduler.start()
    await asyncio.sleep(0.1)

    assert scheduler.running is True
    assert reconciler.calls >= 2
    assert scheduler.last_result.ok is False
    assert "boom" in scheduler.last_result.error
    await scheduler.stop()
