"""Liveness and readiness endpoint for load balancers."""
import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from core.config import Settings
from schemas.base import ApiModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(ApiModel):
    """Service status and the sync parameters clients depend on."""

    status: str
    database: str
    index_action_retention_days: int


@router.get("/health", response_model=HealthResponse)
async def health_check(
    response: Response,
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """
    Report whether the database is reachable.

    Responds 503 when it is not, so instances without a database are taken
    out of rotation.
    """
    database = "ok"
    try:
        await db.scalar(select(1))
    except SQLAlchemyError:
        logger.exception("Database unreachable")
        database = "unreachable"
        response.status_code = 503

    return HealthResponse(
        status="ok" if database == "ok" else "unavailable",
        database=database,
        index_action_retention_days=settings.index_action_retention_days,
    )
