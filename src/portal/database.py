from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from .config import settings

connect_args = {"ssl": "require"} if settings.database_ssl else {}

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,
    connect_args=connect_args,
)

async_session = async_sessionmaker(engine, expire_on_commit=False)
