"""Async SQLAlchemy engine and session factory.

PostgreSQL (asyncpg) in production. A ``sqlite+aiosqlite`` URL is accepted
for local runs and tests; an in-memory SQLite database must share a single
connection, so it gets a StaticPool instead of a sized pool.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from memehub.config import settings


def make_engine(url: str) -> AsyncEngine:
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        url,
        echo=False,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
    )


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Services keep using rows after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.DATABASE_URL)
async_session = make_session_factory(engine)
