"""Reusable endpoint guards as FastAPI dependencies."""

from fastapi import Depends, HTTPException, Request

from .config import settings
from .database import async_session
from .errors import InvalidTokenError
from .facebook import FacebookTokenValidator
from .models.user import User
from .store import UserStore


def get_store() -> UserStore:
    return UserStore(async_session)


def get_token_validator() -> FacebookTokenValidator:
    return FacebookTokenValidator.from_settings(settings)


async def get_current_user(
    request: Request,
    store: UserStore = Depends(get_store),
    validator: FacebookTokenValidator = Depends(get_token_validator),
) -> User:
    """Resolve the caller from an ``Authorization: Bearer <facebook token>`` header.

    Only users that already exist locally are accepted; this never signs
    anyone up.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        identity = await validator.validate(token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=401, detail="Invalid or expired Facebook access token."
        )

    user = await store.get_by_facebook_id(identity.facebook_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
