"""Service layer for the current user's account."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from schemas.user import UserUpdate

logger = logging.getLogger(__name__)


async def update_user(db: AsyncSession, user: User, data: UserUpdate) -> User:
    """
    Apply a partial update to a user's account.

    Fields absent from the request are left as they are. Metadata keys are
    merged into the stored ones.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    update_data = data.model_dump(exclude_unset=True)

    if "email" in update_data:
        user.email = update_data["email"]
    if update_data.get("is_public") is not None:
        user.is_public = update_data["is_public"]
    if update_data.get("meta") is not None:
        # New dict so the JSON column is flagged as changed
        user.meta = {**user.meta, **update_data["meta"]}

    await db.flush()
    logger.info("Updated account of %s", user.username)
    return user
