"""Logging middleware – structured logging per update."""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable

from aiogram import BaseMiddleware
from aiogram.types import TelegramObject, Update

from memehub.errors import ModerationError

logger = logging.getLogger("memehub.updates")


class LoggingMiddleware(BaseMiddleware):
    """Log each update with timing and basic metadata."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        start = time.perf_counter()

        update: Update | None = data.get("event_update")
        update_type = "unknown"
        user_id = None

        if isinstance(event, Update):
            update = event

        if update:
            if update.message:
                update_type = "message"
                user_id = update.message.from_user.id if update.message.from_user else None
            elif update.callback_query:
                update_type = "callback_query"
                user_id = update.callback_query.from_user.id
            elif update.edited_message:
                update_type = "edited_message"

        try:
            result = await handler(event, data)
            elapsed = (time.perf_counter() - start) * 1000
            logger.info(
                "update=%s user=%s elapsed=%.1fms",
                update_type,
                user_id,
                elapsed,
            )
            return result
        except ModerationError as e:
            elapsed = (time.perf_counter() - start) * 1000
            logger.info(
                "update=%s user=%s elapsed=%.1fms refused=%s",
                update_type,
                user_id,
                elapsed,
                e.kind,
            )
            raise
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception(
                "update=%s user=%s elapsed=%.1fms failed",
                update_type,
                user_id,
                elapsed,
            )
            raise
