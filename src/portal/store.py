"""Async access to the ``users`` table.

Every call opens its own session and issues a fresh query; nothing is cached
between calls. Role is the only column that can change after insert.
"""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .errors import ConflictError
from .models.user import Role, User

logger = logging.getLogger(__name__)

# users.id is a Postgres SERIAL (int4); larger ids cannot exist.
MAX_USER_ID = 2**31 - 1

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION:
        return True
    # sqlite3 reports no SQLSTATE
    return "UNIQUE constraint failed" in str(orig)


def _valid_id(user_id: int) -> bool:
    return 1 <= user_id <= MAX_USER_ID


class UserStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(
        self,
        facebook_id: str,
        name: str,
        email: str | None,
        picture: str | None,
        role: str,
    ) -> User:
        """Insert a new user row.

        Raises:
            ConflictError: the row violates a unique constraint, either a
                duplicate ``facebook_id`` or a second admin. Other integrity
                errors (check or not-null violations) propagate unchanged.
        """
        user = User(
            facebook_id=facebook_id,
            name=name,
            email=email,
            picture=picture,
            role=role,
        )
        async with self._session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                if not _is_unique_violation(exc):
                    raise
                logger.warning(
                    "Insert for facebook_id=%s conflicted: %s",
                    facebook_id, exc.orig,
                )
                raise ConflictError() from exc
            await session.refresh(user)
        return user

    async def get(self, user_id: int) -> User | None:
        if not _valid_id(user_id):
            return None
        async with self._session_factory() as session:
            return await session.get(User, user_id)

    async def get_by_facebook_id(self, facebook_id: str) -> User | None:
        async with self._session_factory() as session:
            return (
                await session.execute(
                    select(User).where(User.facebook_id == facebook_id)
                )
            ).scalar_one_or_none()

    async def count(self) -> int:
        async with self._session_factory() as session:
            return (
                await session.execute(select(func.count()).select_from(User))
            ).scalar_one()

    async def list_all(self) -> list[User]:
        """All users, newest first."""
        async with self._session_factory() as session:
            users = (
                await session.execute(
                    select(User).order_by(User.created_at.desc(), User.id.desc())
                )
            ).scalars().all()
            return list(users)

    async def update_role(self, user_id: int, role: str) -> User | None:
        """Set ``role`` on a non-admin user.

        The admin check is part of the UPDATE itself, so an admin row can
        never be matched. Returns None when no row matched.
        """
        if not _valid_id(user_id):
            return None
        async with self._session_factory() as session:
            user = (
                await session.execute(
                    update(User)
                    .where(User.id == user_id, User.role != Role.ADMIN.value)
                    .values(role=role)
                    .returning(User)
                )
            ).scalar_one_or_none()
            await session.commit()
            return user
