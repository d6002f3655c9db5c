from pathlib import Path

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from portal.errors import InvalidTokenError, UpstreamUnavailableError
from portal.facebook import FacebookIdentity
from portal.models import Base
from portal.store import UserStore


def make_identity(facebook_id: str, name: str, email: str | None = None) -> FacebookIdentity:
    return FacebookIdentity(
        facebook_id=facebook_id,
        name=name,
        email=email,
        picture=f"https://cdn.example.com/{facebook_id}.jpg",
    )


class FakeValidator:
    """Stands in for FacebookTokenValidator; maps tokens to identities."""

    def __init__(self, identities: dict[str, FacebookIdentity] | None = None):
        self.identities = dict(identities or {})
        self.unavailable_tokens: set[str] = set()
        self.calls: list[str] = []

    async def validate(self, access_token: str) -> FacebookIdentity:
        self.calls.append(access_token)
        if access_token in self.unavailable_tokens:
            raise UpstreamUnavailableError()
        if access_token not in self.identities:
            raise InvalidTokenError()
        return self.identities[access_token]


@pytest_asyncio.fixture
async def session_factory(tmp_path: Path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def store(session_factory) -> UserStore:
    return UserStore(session_factory)
