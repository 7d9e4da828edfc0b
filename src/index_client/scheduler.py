"""Background scheduling of index syncs."""
import asyncio
import contextlib
import logging

from index_client.exceptions import UnauthenticatedError
from index_client.reconciler import IndexReconciler, SyncResult

logger = logging.getLogger(__name__)


class SyncScheduler:
    """
    Runs a sync every `interval` seconds and shortly after local mutations.

    Mutation notifications are debounced: a burst of edits triggers a single
    sync `mutation_delay` seconds after the last one. A notification that
    arrives while that sync is already running schedules one more sync after
    it instead of interrupting it. If the API rejects the token, scheduling
    stops and `auth_error` is set.
    """

    def __init__(
        self,
        reconciler: IndexReconciler,
        interval: float,
        mutation_delay: float,
    ) -> None:
        self._reconciler = reconciler
        self._interval = interval
        self._mutation_delay = mutation_delay
        self._periodic_task: asyncio.Task | None = None
        self._debounce_task: asyncio.Task | None = None
        # True while the debounce task is still in its delay
        self._debounce_waiting = False
        self._mutation_pending = False
        self.auth_error: UnauthenticatedError | None = None
        self.last_result: SyncResult | None = None

    @property
    def running(self) -> bool:
        return self._periodic_task is not None and not self._periodic_task.done()

    def start(self) -> None:
        """Start periodic syncing. The first sync runs immediately."""
        if self.running:
            return
        self._periodic_task = asyncio.create_task(self._run_periodic())

    def notify_mutation(self) -> None:
        """Schedule a sync after a local bookmark change."""
        if self.auth_error is not None:
            return
        if self._debounce_task is not None and not self._debounce_task.done():
            if not self._debounce_waiting:
                self._mutation_pending = True
                return
            self._debounce_task.cancel()
        self._debounce_waiting = True
        self._debounce_task = asyncio.create_task(self._run_debounced())

    async def stop(self) -> None:
        """Cancel pending and periodic syncs and wait for them to finish."""
        for task in (self._debounce_task, self._periodic_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._debounce_task = None
        self._periodic_task = None

    async def wait(self) -> None:
        """
        Wait until periodic syncing ends.

        Raises:
            UnauthenticatedError: If syncing stopped because the token was rejected.
        """
        if self._periodic_task is not None:
            await self._periodic_task
        if self.auth_error is not None:
            raise self.auth_error

    async def _sync(self) -> bool:
        """Run one sync. Returns False once the token has been rejected."""
        try:
            self.last_result = await self._reconciler.sync()
        except UnauthenticatedError as e:
            logger.error("Stopping index sync: %s", e)
            self.auth_error = e
            return False
        except Exception as e:
            logger.exception("Index sync crashed, will retry on next trigger")
            self.last_result = SyncResult(ok=False, error=repr(e))
        return True

    async def _run_periodic(self) -> None:
        while await self._sync():
            await asyncio.sleep(self._interval)

    async def _run_debounced(self) -> None:
        while True:
            self._debounce_waiting = True
            await asyncio.sleep(self._mutation_delay)
            self._debounce_waiting = False
            self._mutation_pending = False
            if not await self._sync() or not self._mutation_pending:
                return
