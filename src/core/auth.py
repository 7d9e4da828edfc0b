"""Authentication module for HS256 JWT bearer tokens."""
import logging
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings
from db.session import get_async_session
from models.user import User

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

DEV_USERNAME = "dev"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    username: str,
    settings: Settings,
    email: str | None = None,
    ttl_seconds: int | None = None,
) -> str:
    """
    Issue a signed access token for a username.

    Login is handled elsewhere; this is used by the seed script and tests.
    """
    now = datetime.now(UTC)
    ttl = ttl_seconds if ttl_seconds is not None else settings.jwt_access_token_ttl_seconds
    payload = {"sub": username, "iat": now, "exp": now + timedelta(seconds=ttl)}
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate a JWT bearer token.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.PyJWTError as e:
        raise _unauthorized(f"Invalid token: {e}")


async def get_or_create_user(
    db: AsyncSession,
    username: str,
    email: str | None = None,
) -> User:
    """
    Get existing user or create new one from token claims.

    The token's email claim only fills in a missing email: once set, the
    account email is changed through PATCH /users/me.

    Two first requests of the same new user can race on the insert; the loser
    re-reads the row the winner created.

    Note: Uses flush(), not commit. Session generator handles commit at request end.
    """
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(username=username, email=email)
        db.add(user)
        try:
            await db.flush()
            logger.info("Created user %s", username)
        except IntegrityError:
            # Nothing else has been written in this request yet
            await db.rollback()
            result = await db.execute(select(User).where(User.username == username))
            user = result.scalar_one()
    elif email and user.email is None:
        user.email = email
        await db.flush()

    return user


async def get_or_create_dev_user(db: AsyncSession) -> User:
    """Get or create a development user for DEV_MODE."""
    return await get_or_create_user(db, username=DEV_USERNAME, email="dev@localhost")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Dependency that validates the bearer token and returns the current user.

    In DEV_MODE, bypasses auth and returns a development user.
    """
    if settings.dev_mode:
        return await get_or_create_dev_user(db)

    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_jwt(credentials.credentials, settings)

    username = payload.get("sub")
    if not username:
        raise _unauthorized("Invalid token: missing sub claim")

    return await get_or_create_user(db, username=username, email=payload.get("email"))
