"""Application factory – builds the Bot, Dispatcher, registers routers/middleware,
and starts either webhook or polling mode."""

from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.webhook.aiohttp_server import (
    SimpleRequestHandler,
    setup_application,
)
from aiohttp import web

from memehub.config import settings

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]


def _create_bot() -> Bot:
    return Bot(
        token=settings.BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML),
    )


def _register_routers(dp: Dispatcher) -> None:
    """Import and include all routers."""
    from memehub.handlers.errors import errors_router
    from memehub.handlers.start import start_router
    from memehub.handlers.moderation import moderation_router
    from memehub.handlers.reports import reports_router
    from memehub.handlers.account import account_router
    from memehub.handlers.callbacks import callbacks_router
    from memehub.handlers.content import content_router

    dp.include_router(errors_router)
    dp.include_router(start_router)
    dp.include_router(moderation_router)
    dp.include_router(reports_router)
    dp.include_router(account_router)
    dp.include_router(callbacks_router)
    dp.include_router(content_router)  # photo catch-all last


def _register_middleware(dp: Dispatcher) -> None:
    """Register all middleware on the dispatcher."""
    from memehub.middleware.logging_mw import LoggingMiddleware
    from memehub.middleware.db_session_mw import DbSessionMiddleware
    from memehub.middleware.user_mw import UserRegistryMiddleware

    dp.update.outer_middleware(LoggingMiddleware())
    dp.update.outer_middleware(DbSessionMiddleware())
    dp.update.outer_middleware(UserRegistryMiddleware())


async def _on_startup(bot: Bot, redis: aioredis.Redis, dp: Dispatcher) -> None:
    """Run on startup – create tables if needed."""
    from memehub.db.engine import engine
    from memehub.db.base import Base

    # Import models so they register on metadata
    import memehub.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables ensured.")

    dp["redis"] = redis
    dp["bot_info"] = await bot.get_me()

    bot_info = dp["bot_info"]
    logger.info("Bot @%s (id=%d) started.", bot_info.username, bot_info.id)


async def _on_shutdown(dp: Dispatcher) -> None:
    """Graceful shutdown – close pools."""
    logger.info("Shutting down…")
    redis: aioredis.Redis | None = dp.get("redis")
    if redis:
        await redis.aclose()

    from memehub.db.engine import engine

    await engine.dispose()
    logger.info("Shutdown complete.")


async def main() -> None:
    """Entry point."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    bot = _create_bot()
    dp = Dispatcher()
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    dp["redis"] = redis

    _register_middleware(dp)
    _register_routers(dp)

    async def on_startup(*_args: object, **_kwargs: object) -> None:
        await _on_startup(bot, redis, dp)

    async def on_shutdown(*_args: object, **_kwargs: object) -> None:
        await _on_shutdown(dp)

    dp.startup.register(on_startup)
    dp.shutdown.register(on_shutdown)

    if settings.BOT_MODE == "webhook":
        await _run_webhook(bot, dp)
    else:
        await _run_polling(bot, dp)


async def _run_polling(bot: Bot, dp: Dispatcher) -> None:
    """Long-polling mode (development)."""
    logger.info("Starting in POLLING mode.")
    await bot.delete_webhook(drop_pending_updates=True)
    await dp.start_polling(bot, allowed_updates=ALLOWED_UPDATES)


async def _health_handler(request: web.Request) -> web.Response:
    """Health check endpoint for monitoring / container probes."""
    dp: Dispatcher | None = request.app.get("dp")
    info: dict = {"status": "ok"}
    if dp:
        redis_conn = dp.get("redis")
        if redis_conn:
            try:
                await redis_conn.ping()
                info["redis"] = "ok"
            except aioredis.RedisError:
                info["redis"] = "error"
    return web.json_response(info)


async def _run_webhook(bot: Bot, dp: Dispatcher) -> None:
    """Webhook mode (production)."""
    logger.info("Starting in WEBHOOK mode at %s", settings.webhook_url)
    await bot.set_webhook(
        url=settings.webhook_url,
        secret_token=settings.WEBHOOK_SECRET or None,
        allowed_updates=ALLOWED_UPDATES,
        drop_pending_updates=True,
    )
    app = web.Application()
    app.router.add_get("/health", _health_handler)

    handler = SimpleRequestHandler(dispatcher=dp, bot=bot, secret_token=settings.WEBHOOK_SECRET or None)
    handler.register(app, path=settings.WEBHOOK_PATH)
    setup_application(app, dp, bot=bot)
    app["dp"] = dp
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host="0.0.0.0", port=settings.WEBHOOK_PORT)
    await site.start()
    logger.info("Webhook server listening on port %d", settings.WEBHOOK_PORT)
    await asyncio.Event().wait()


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())
