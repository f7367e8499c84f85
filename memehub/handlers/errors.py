"""Error handler – turns moderation errors into replies to the caller."""

from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import ErrorEvent

from memehub.errors import ModerationError

logger = logging.getLogger(__name__)

errors_router = Router(name="errors")


@errors_router.errors(ExceptionTypeFilter(ModerationError))
async def on_moderation_error(event: ErrorEvent) -> bool:
    exc: ModerationError = event.exception  # type: ignore[assignment]
    update = event.update

    if update.callback_query is not None:
        await update.callback_query.answer(exc.message, show_alert=True)
        user_id = update.callback_query.from_user.id
    elif update.message is not None:
        await update.message.answer(f"❌ {exc.message}")
        user_id = update.message.from_user.id if update.message.from_user else None
    else:
        user_id = None

    logger.info("Refused %s for user %s: %s", exc.kind, user_id, exc.message)
    return True
