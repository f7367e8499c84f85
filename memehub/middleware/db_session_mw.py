"""DB session middleware – one async session per update."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from memehub.db.engine import async_session


class DbSessionMiddleware(BaseMiddleware):
    """Inject a fresh DB session into ``data["session"]`` for each update.

    Service operations commit their own work; whatever is still pending
    when a handler raises is rolled back.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] = async_session) -> None:
        self._session_factory = session_factory

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        async with self._session_factory() as session:
            data["session"] = session
            try:
                return await handler(event, data)
            except Exception:
                await session.rollback()
                raise
