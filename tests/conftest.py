"""Shared fixtures for MemeHub tests."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

# Ensure BOT_TOKEN is set before any module triggers Settings validation
os.environ.setdefault("BOT_TOKEN", "0:TEST_TOKEN")
os.environ.setdefault("ADMIN_USER_IDS", "1")

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis_aioredis
from sqlalchemy.ext.asyncio import AsyncSession

import memehub.models  # noqa: F401
from memehub.db.base import Base
from memehub.db.engine import make_engine, make_session_factory
from memehub.db.repositories.meme_repo import MemeRepo
from memehub.db.repositories.user_repo import UserRepo
from memehub.utils.enums import Role

# Well-known ids used across tests. ADMIN comes from ADMIN_USER_IDS.
ADMIN = 1
MODERATOR = 300
ALICE = 100
BOB = 200

NOW = datetime(2026, 3, 7, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite database, fresh for each test."""
    engine = make_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = make_session_factory(engine)
    try:
        yield factory
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncSession:
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def users(session: AsyncSession) -> dict[str, int]:
    """Register Alice, Bob, a moderator and the configured admin."""
    repo = UserRepo(session)
    await repo.upsert_user(ALICE, "alice", "Alice")
    await repo.upsert_user(BOB, "bob", "Bob")
    await repo.upsert_user(MODERATOR, "mod", "Mod")
    await repo.upsert_user(ADMIN, "root", "Root")
    await repo.set_role(MODERATOR, Role.MODERATOR.value, ADMIN, NOW)
    await session.commit()
    return {"alice": ALICE, "bob": BOB, "moderator": MODERATOR, "admin": ADMIN}


@pytest_asyncio.fixture
async def meme(session: AsyncSession, users) -> int:
    """A meme posted by Bob."""
    created = await MemeRepo(session).create(BOB, "Distracted boyfriend", "file_1", ["classic"], NOW)
    await session.commit()
    return created.id


@pytest_asyncio.fixture
async def fake_redis():
    client = fakeredis_aioredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushall()
        await client.aclose()


@pytest.fixture
def make_message():
    """Factory to create a mock aiogram Message with desired attributes."""

    def _make(
        text: str | None = None,
        from_user_id: int = ALICE,
        is_bot: bool = False,
        caption: str | None = None,
        photo: list | None = None,
        reply_to_user_id: int | None = None,
    ):
        msg = MagicMock()
        msg.message_id = 1
        msg.chat = MagicMock()
        msg.chat.id = from_user_id
        msg.chat.type = "private"
        msg.text = text
        msg.caption = caption
        msg.photo = photo
        msg.from_user = MagicMock()
        msg.from_user.id = from_user_id
        msg.from_user.is_bot = is_bot
        if reply_to_user_id is None:
            msg.reply_to_message = None
        else:
            msg.reply_to_message = MagicMock()
            msg.reply_to_message.from_user = MagicMock()
            msg.reply_to_message.from_user.id = reply_to_user_id
            msg.reply_to_message.from_user.is_bot = False
        msg.answer = AsyncMock()
        return msg

    return _make


@pytest.fixture
def make_command():
    """Factory for a CommandObject-like mock carrying ``args``."""

    def _make(args: str | None = None):
        cmd = MagicMock()
        cmd.args = args
        return cmd

    return _make


@pytest.fixture
def make_callback(make_message):
    """Factory to create a mock aiogram CallbackQuery."""

    def _make(data: str, from_user_id: int = ALICE):
        cb = MagicMock()
        cb.data = data
        cb.from_user = MagicMock()
        cb.from_user.id = from_user_id
        cb.from_user.is_bot = False
        cb.message = make_message(from_user_id=from_user_id)
        cb.message.edit_reply_markup = AsyncMock()
        cb.answer = AsyncMock()
        return cb

    return _make


def answers(msg) -> list[str]:
    """All texts passed to ``msg.answer``."""
    return [c.args[0] for c in msg.answer.await_args_list]
