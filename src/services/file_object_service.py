"""Service layer for file object references (archives and preview images)."""
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.file_object import FileObject
from schemas.file_object import FileObjectCreate
from services.exceptions import FileObjectNotFoundError


async def create_file_object(
    db: AsyncSession,
    user_id: UUID,
    data: FileObjectCreate,
) -> FileObject:
    """
    Register a stored file for a user.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    file_object = FileObject(
        user_id=user_id,
        content_url=data.content_url,
        mime_type=data.mime_type,
        size=data.size,
    )
    db.add(file_object)
    await db.flush()
    return file_object


async def get_file_object(
    db: AsyncSession,
    user_id: UUID,
    file_object_id: UUID,
) -> FileObject | None:
    """Get a file object by ID, scoped to user. Returns None if not found or wrong user."""
    result = await db.execute(
        select(FileObject).where(
            FileObject.id == file_object_id,
            FileObject.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def resolve_file_object(
    db: AsyncSession,
    user_id: UUID,
    file_object_id: UUID | None,
) -> FileObject | None:
    """
    Resolve a file reference sent in a bookmark body.

    Returns None for a None reference.

    Raises:
        FileObjectNotFoundError: If the file does not exist or belongs to another user.
    """
    if file_object_id is None:
        return None
    file_object = await get_file_object(db, user_id, file_object_id)
    if file_object is None:
        raise FileObjectNotFoundError(file_object_id)
    return file_object
