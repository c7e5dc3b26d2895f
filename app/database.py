import ssl
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config import settings

DB_URL = settings.DATABASE_URL
if not DB_URL:
    raise RuntimeError("DATABASE_URL not set")

connect_args = {}
if settings.is_postgres and settings.DATABASE_SSL:
    # Managed Postgres terminates TLS with certificates we don't pin
    ssl_ctx = ssl.create_default_context()
    ssl_ctx.check_hostname = False
    ssl_ctx.verify_mode = ssl.CERT_NONE
    connect_args["ssl"] = ssl_ctx

# Single shared engine; sessions are request scoped
engine = create_async_engine(
    DB_URL,
    poolclass=NullPool,
    connect_args=connect_args,
)

AsyncSessionFactory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionFactory() as session:
        yield session
