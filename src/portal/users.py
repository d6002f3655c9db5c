"""Signup/login reconciliation and role administration."""

import logging

from .errors import NotFoundOrProtectedError, ValidationError
from .facebook import FacebookIdentity
from .models.user import ASSIGNABLE_ROLES, Role, User
from .store import UserStore

logger = logging.getLogger(__name__)


async def reconcile(store: UserStore, identity: FacebookIdentity) -> tuple[User, bool]:
    """Return the local user for ``identity``, creating it on first login.

    The very first user ever stored becomes ``admin``; everyone after is a
    ``member``. Existing rows are returned untouched, profile fields are not
    refreshed. The boolean is True when a row was inserted.

    The count and the insert are separate statements. Two concurrent first
    signups can both see an empty table; the single-admin index rejects the
    second insert, which surfaces as ``ConflictError`` (as does a duplicate
    ``facebook_id``). Callers should retry once, which resolves as a lookup
    or a member signup.
    """
    user = await store.get_by_facebook_id(identity.facebook_id)
    if user is not None:
        logger.info("User '%s' (id=%s) logged in", user.name, user.id)
        return user, False

    logger.info("New user '%s' signing up", identity.name)
    is_first_user = await store.count() == 0
    role = Role.ADMIN if is_first_user else Role.MEMBER

    user = await store.insert(
        facebook_id=identity.facebook_id,
        name=identity.name,
        email=identity.email,
        picture=identity.picture,
        role=role.value,
    )
    logger.info("Created user '%s' (id=%s) with role %s", user.name, user.id, user.role)
    return user, True


async def set_role(store: UserStore, user_id: int, new_role: str) -> User:
    """Change a non-admin user's role to ``convenor`` or ``member``.

    Raises:
        ValidationError: ``new_role`` is not an assignable role.
        NotFoundOrProtectedError: no such user, or the user is an admin.
    """
    if new_role not in ASSIGNABLE_ROLES:
        raise ValidationError(
            "Invalid role specified. Can only be 'convenor' or 'member'."
        )

    user = await store.update_role(user_id, new_role)
    if user is None:
        raise NotFoundOrProtectedError()

    logger.info("User %s role set to %s", user.id, user.role)
    return user
