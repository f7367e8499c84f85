"""User registry middleware – keeps the users table in step with Telegram profiles."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, User

from memehub.db.repositories.user_repo import UserRepo

logger = logging.getLogger(__name__)


class UserRegistryMiddleware(BaseMiddleware):
    """Upsert the sender of each update before handlers run.

    Needs ``data["session"]`` from :class:`DbSessionMiddleware`.
    """

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        user: User | None = data.get("event_from_user")
        session = data.get("session")
        if user is not None and not user.is_bot and session is not None:
            repo = UserRepo(session)
            known = await repo.get_user(user.id)
            if known is None or (known.username, known.display_name) != (user.username, user.full_name):
                await repo.upsert_user(user.id, user.username, user.full_name)
                await session.commit()
                if known is None:
                    logger.info("New user registered: %d", user.id)
        return await handler(event, data)
