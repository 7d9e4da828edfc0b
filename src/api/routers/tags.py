"""Tag management endpoints for the current user."""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user, get_settings
from core.config import Settings
from models.user import User
from schemas.tag import TagCreate, TagListResponse, TagResponse, TagUpdate
from services.tag_service import (
    TagAlreadyExistsError,
    TagLimitExceededError,
    TagNotFoundError,
    create_tag,
    delete_tag,
    get_tag_by_name,
    get_user_tags_with_counts,
    update_tag,
)

router = APIRouter(prefix="/users/me/tags", tags=["tags"])


@router.get("", response_model=TagListResponse)
async def list_tags(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TagListResponse:
    """
    Get all tags for the current user with usage counts.

    Counts only include current bookmarks. Sorted by count desc, then name asc.
    """
    tags = await get_user_tags_with_counts(db, current_user.id)
    return TagListResponse(tags=tags)


@router.post("", response_model=TagResponse)
async def create_tag_endpoint(
    data: TagCreate,
    response: Response,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> TagResponse:
    """
    Create a tag.

    Returns 201 with the new tag, or 200 with the existing tag of the same
    name. Returns 422 once the user owns the maximum number of tags.
    """
    try:
        tag, created = await create_tag(db, current_user.id, data, settings.max_tags_per_user)
    except TagLimitExceededError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    if created:
        response.status_code = status.HTTP_201_CREATED
    return TagResponse.model_validate(tag)


@router.get("/{tag_name}", response_model=TagResponse)
async def get_tag(
    tag_name: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TagResponse:
    """Get one of the current user's tags."""
    tag = await get_tag_by_name(db, current_user.id, tag_name)
    if tag is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    return TagResponse.model_validate(tag)


@router.patch("/{tag_name}", response_model=TagResponse)
async def update_tag_endpoint(
    tag_name: str,
    data: TagUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TagResponse:
    """
    Rename a tag, change its visibility or merge metadata into it.

    Bookmarks carrying a renamed tag reflect the new name and show up in the
    index diff as updated.

    Returns 404 if the tag doesn't exist.
    Returns 409 if a tag with the new name already exists.
    """
    try:
        tag = await update_tag(db, current_user.id, tag_name, data)
    except TagNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e
    except TagAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        ) from e
    return TagResponse.model_validate(tag)


@router.delete("/{tag_name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag_endpoint(
    tag_name: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete a tag.

    This removes the tag from all bookmarks, then deletes the tag itself.
    Returns 204 if successful, 404 if the tag doesn't exist.
    """
    try:
        await delete_tag(db, current_user.id, tag_name)
    except TagNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        ) from e
