"""
Command line interface for the local bookmark index.

Usage:
    python -m index_client sync
    python -m index_client watch
    python -m index_client search "python async" --tag reference
    python -m index_client reset
"""
import argparse
import asyncio
import logging
import signal

from index_client.api_client import IndexApiClient
from index_client.config import ClientSettings, get_client_settings
from index_client.exceptions import UnauthenticatedError
from index_client.reconciler import IndexReconciler
from index_client.scheduler import SyncScheduler
from index_client.search import search_entries
from index_client.store import IndexStore

logger = logging.getLogger(__name__)


async def run_sync(settings: ClientSettings) -> int:
    """Run one reconciliation. Returns the process exit code."""
    async with IndexApiClient.from_settings(settings) as api:
        reconciler = IndexReconciler(api, IndexStore(settings.index_path))
        try:
            result = await reconciler.sync()
        except UnauthenticatedError as e:
            logger.error("%s", e)
            return 2

    if not result.ok:
        return 1
    print(
        f"Synced: {result.entry_count} bookmarks, {result.actions_applied} actions applied"
        + (" (rebuilt from snapshot)" if result.bootstrapped else ""),
    )
    return 0


async def run_watch(settings: ClientSettings) -> int:
    """
    Keep syncing on the configured interval until interrupted.

    SIGUSR1 asks for a sync after local edits, for example from an editor hook:
    `kill -USR1 <pid>`.
    """
    async with IndexApiClient.from_settings(settings) as api:
        reconciler = IndexReconciler(api, IndexStore(settings.index_path))
        scheduler = SyncScheduler(
            reconciler,
            interval=settings.sync_interval_seconds,
            mutation_delay=settings.mutation_sync_delay_seconds,
        )
        if hasattr(signal, "SIGUSR1"):
            asyncio.get_running_loop().add_signal_handler(
                signal.SIGUSR1, scheduler.notify_mutation,
            )
        scheduler.start()
        try:
            await scheduler.wait()
        except UnauthenticatedError:
            return 2
        finally:
            await scheduler.stop()
    return 0


def run_search(settings: ClientSettings, query: str, tags: list[str], limit: int) -> int:
    """Print matching entries of the local index."""
    state = IndexStore(settings.index_path).load()
    if state is None:
        print("No local index yet. Run `python -m index_client sync` first.")
        return 1

    for entry in search_entries(state.entries, query, tags=tags, limit=limit):
        tag_list = f"  [{', '.join(entry.tags)}]" if entry.tags else ""
        print(f"{entry.created_at:%Y-%m-%d}  {entry.title}\n    {entry.url}{tag_list}")
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Local HiveCache bookmark index.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Bring the local index up to date once")
    subparsers.add_parser("watch", help="Keep the local index up to date")

    search_parser = subparsers.add_parser("search", help="Search the local index")
    search_parser.add_argument("query", nargs="?", default="", help="Words that must all match")
    search_parser.add_argument(
        "--tag", action="append", default=[], help="Required tag (repeatable)",
    )
    search_parser.add_argument("--limit", type=int, default=20, help="Maximum results")

    subparsers.add_parser("reset", help="Delete the local index")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    settings = get_client_settings()

    if args.command == "sync":
        code = asyncio.run(run_sync(settings))
    elif args.command == "watch":
        try:
            code = asyncio.run(run_watch(settings))
        except KeyboardInterrupt:
            code = 0
    elif args.command == "search":
        code = run_search(settings, args.query, args.tag, args.limit)
    else:
        IndexStore(settings.index_path).clear()
        print(f"Removed {settings.index_path}")
        code = 0

    raise SystemExit(code)


if __name__ == "__main__":
    main()
