"""Cursor pagination helpers shared by bookmark list endpoints."""
from fastapi import HTTPException, Request
from pydantic import BaseModel

from models.bookmark import Bookmark
from schemas.validators import validate_and_normalize_tags


def parse_tags_query(tags: str | None) -> list[str]:
    """
    Parse a comma-separated `tags` query parameter into normalized tag names.

    Raises:
        HTTPException: 422 if a tag has an invalid format.
    """
    if not tags:
        return []
    try:
        return validate_and_normalize_tags(tags.split(","))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def next_page_url(request: Request, items: list[Bookmark], page_size: int) -> str | None:
    """
    URL of the page after `items`, or None when this page is the last one.

    Pages are keyed on the id of their last item. A page shorter than
    page_size means there is nothing after it. Other query parameters
    (such as `tags`) are kept.
    """
    if len(items) < page_size:
        return None
    return str(request.url.include_query_params(after=str(items[-1].id)))


def bookmark_page(
    request: Request,
    items: list[Bookmark],
    page_size: int,
    total: int | None,
    response_model: type[BaseModel],
    item_model: type[BaseModel],
    **extra: object,
) -> BaseModel:
    """Build a `{collection, prevPage, nextPage, total}` page response."""
    return response_model(
        collection=[item_model.model_validate(item) for item in items],
        next_page=next_page_url(request, items, page_size),
        total=total,
        **extra,
    )
