"""Seed script to populate the local dev database with realistic test data.

Bookmarks are created through the service layer, so the index action log is
filled exactly as it would be by the API (including outdated versions).

Usage:
    PYTHONPATH=src python scripts/seed_data.py populate
    PYTHONPATH=src python scripts/seed_data.py populate --force
    PYTHONPATH=src python scripts/seed_data.py clear
"""

import argparse
import asyncio

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.auth import DEV_USERNAME, create_access_token, get_or_create_user
from core.config import get_settings
from models import Base, Bookmark, BookmarkIndexAction, FileObject, Tag, User
from schemas.bookmark import BookmarkCreate
from schemas.file_object import FileObjectCreate
from services import bookmark_service, file_object_service

# ---------------------------------------------------------------------------
# Bookmark data
# ---------------------------------------------------------------------------

BOOKMARKS = [
    {
        'url': 'https://docs.python.org/3/',
        'title': 'Python Official Documentation',
        'tags': ['python', 'reference'],
        'public': True,
    },
    {
        'url': 'https://developer.mozilla.org/en-US/docs/Web/JavaScript',
        'title': 'MDN Web Docs - JavaScript',
        'tags': ['javascript', 'web-dev', 'reference'],
        'public': True,
    },
    {
        'url': 'https://doc.rust-lang.org/book/',
        'title': 'The Rust Programming Language',
        'tags': ['rust', 'tutorial'],
    },
    {
        'url': 'https://fastapi.tiangolo.com/tutorial/',
        'title': 'FastAPI Tutorial - User Guide',
        'tags': ['python', 'api-design', 'tutorial'],
        'public': True,
    },
    {
        'url': 'https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html',
        'title': 'SQLAlchemy Asynchronous I/O',
        'tags': ['python', 'database'],
    },
    {
        'url': 'https://www.postgresql.org/docs/current/indexes.html',
        'title': 'PostgreSQL: Indexes',
        'tags': ['database', 'performance'],
    },
    {
        'url': 'https://owasp.org/www-project-top-ten/',
        'title': 'OWASP Top Ten',
        'tags': ['security', 'web-dev'],
        'public': True,
    },
    {
        'url': 'https://docs.pytest.org/en/stable/how-to/fixtures.html',
        'title': 'How to use fixtures - pytest documentation',
        'tags': ['python', 'testing'],
    },
    {
        'url': 'https://12factor.net/',
        'title': 'The Twelve-Factor App',
        'tags': ['devops', 'reference'],
    },
    {
        'url': 'https://github.com/trending?since=weekly&utm_source=newsletter',
        'title': 'Trending repositories on GitHub',
        'tags': ['open-source', 'tools'],
    },
]

# Saved again later: each entry outdates the matching bookmark above
NEW_VERSIONS = [
    {
        'url': 'https://docs.python.org/3',
        'title': 'Python 3 Documentation',
        'tags': ['documentation'],
    },
    {
        'url': 'https://m.github.com/trending?since=weekly',
        'title': 'GitHub Trending (weekly)',
        'tags': [],
    },
]

ARCHIVES = [
    {
        'url': 'https://12factor.net/',
        'content_url': 'https://files.hivecache.test/archives/12factor.html',
        'mime_type': 'text/html',
        'size': 48_213,
    },
]


async def get_or_create_dev_user(session: AsyncSession) -> User:
    """Get or create the dev mode user."""
    user = await get_or_create_user(session, username=DEV_USERNAME, email='dev@localhost')
    print(f'  Using dev user: {user.id}')
    return user


async def create_bookmarks(session: AsyncSession, user: User) -> None:
    """Create seed bookmarks, then new versions of some of them."""
    archives_by_url = {}
    for data in ARCHIVES:
        file_object = await file_object_service.create_file_object(
            session,
            user.id,
            FileObjectCreate(
                content_url=data['content_url'],
                mime_type=data['mime_type'],
                size=data['size'],
            ),
        )
        archives_by_url[data['url']] = file_object.id

    for data in BOOKMARKS + NEW_VERSIONS:
        await bookmark_service.create_bookmark(
            session,
            user.id,
            BookmarkCreate(
                url=data['url'],
                title=data['title'],
                tags=data['tags'],
                is_public=data.get('public', False),
                archive=archives_by_url.get(data['url']),
            ),
        )
    print(
        f'  Created {len(BOOKMARKS) + len(NEW_VERSIONS)} bookmarks '
        f'({len(NEW_VERSIONS)} outdating an earlier version), {len(ARCHIVES)} archives'
    )


async def clear_data(session: AsyncSession) -> None:
    """Clear all data for the dev user."""
    result = await session.execute(select(User).where(User.username == DEV_USERNAME))
    user = result.scalar_one_or_none()
    if user is None:
        print('No dev user found, nothing to clear.')
        return

    user_id = user.id
    print(f'Clearing data for dev user {user_id}...')

    bm_count = (await session.execute(
        select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user_id)
    )).scalar()
    action_count = (await session.execute(
        select(func.count()).select_from(BookmarkIndexAction)
        .where(BookmarkIndexAction.user_id == user_id)
    )).scalar()

    # Delete entities (CASCADE handles junction tables).
    await session.execute(delete(BookmarkIndexAction).where(BookmarkIndexAction.user_id == user_id))
    await session.execute(delete(Bookmark).where(Bookmark.user_id == user_id))
    await session.execute(delete(FileObject).where(FileObject.user_id == user_id))
    await session.execute(delete(Tag).where(Tag.user_id == user_id))
    await session.flush()

    print(f'  Deleted {bm_count} bookmarks and {action_count} index actions')
    print('Clear complete.')


async def populate(force: bool = False) -> None:
    """Populate the database with seed data and print a token for the dev user."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with session_factory() as session:
        try:
            user = await get_or_create_dev_user(session)

            bm_count = (await session.execute(
                select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user.id)
            )).scalar()

            if bm_count and bm_count > 0:
                if force:
                    print('Existing data found, clearing first (--force)...')
                    await clear_data(session)
                    await session.flush()
                else:
                    print(
                        f'Data already exists ({bm_count} bookmarks). '
                        f'Use --force to clear and re-seed.'
                    )
                    return

            print('Populating seed data...')
            await create_bookmarks(session, user)
            await session.commit()
            print('Seed data created successfully.')
            print(f'Bearer token: {create_access_token(user.username, settings)}')
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Clear all dev user data."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            await clear_data(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    if not settings.dev_mode:
        print(
            "ERROR: Seed script requires DEV_MODE=true.\n"
            "This script modifies data directly and must only run against a local dev database."
        )
        raise SystemExit(1)

    parser = argparse.ArgumentParser(description='Seed the dev database with test data.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    populate_parser = subparsers.add_parser('populate', help='Populate database with test data')
    populate_parser.add_argument(
        '--force', action='store_true',
        help='Clear existing data before populating',
    )

    subparsers.add_parser('clear', help='Remove all dev user data')

    args = parser.parse_args()

    if args.command == 'populate':
        asyncio.run(populate(force=args.force))
    elif args.command == 'clear':
        asyncio.run(clear())


if __name__ == '__main__':
    main()
