"""File object endpoints (archives and preview images referenced by bookmarks)."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from models.user import User
from schemas.file_object import FileObjectCreate, FileObjectResponse
from services import file_object_service

router = APIRouter(prefix="/users/me/files", tags=["files"])


@router.post("", response_model=FileObjectResponse, status_code=201)
async def create_file_object(
    data: FileObjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> FileObjectResponse:
    """Register a stored file so bookmarks can reference it."""
    file_object = await file_object_service.create_file_object(db, current_user.id, data)
    return FileObjectResponse.model_validate(file_object)


@router.get("/{file_object_id}", response_model=FileObjectResponse)
async def get_file_object(
    file_object_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> FileObjectResponse:
    """Get a file object by ID."""
    file_object = await file_object_service.get_file_object(db, current_user.id, file_object_id)
    if file_object is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileObjectResponse.model_validate(file_object)
