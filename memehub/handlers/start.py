"""Start/help handlers for all users."""

from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.services.identity import has_role, resolve_caller_id
from memehub.services.keyboards import build_help_menu, build_main_menu
from memehub.utils.enums import Role

logger = logging.getLogger(__name__)

start_router = Router(name="start")


@start_router.message(Command("start"))
async def cmd_start(message: Message) -> None:
    await message.answer(
        "Hey! 👋 <b>Welcome to MemeHub.</b>\n\n"
        "Send me a photo with a caption and it becomes a meme on the feed. "
        "Add tags with #hashtags in the caption.\n\n"
        "Use /help to see everything you can do.",
        reply_markup=build_main_menu(),
    )


@start_router.message(Command("help"))
async def cmd_help(message: Message, session: AsyncSession) -> None:
    """Show role-aware help."""
    user_id = resolve_caller_id(message.from_user)
    moderator = user_id is not None and await has_role(session, user_id, Role.MODERATOR)
    admin = user_id is not None and await has_role(session, user_id, Role.ADMIN)

    lines = [
        "📖 <b>Help</b>",
        "",
        "<b>Posting</b>",
        "Send a photo with a caption — Post a meme",
        "/comment &lt;meme_id&gt; &lt;text&gt; — Comment on a meme",
        "/reply &lt;comment_id&gt; &lt;text&gt; — Reply to a comment",
        "/delcomment &lt;comment_id&gt; — Delete your comment",
        "/delmeme &lt;meme_id&gt; — Delete your meme",
        "/limits — Posting limit for this hour",
        "",
        "<b>Reporting</b>",
        "/report &lt;meme_id&gt; &lt;reason&gt; [details]",
        "/reportuser &lt;user_id&gt; &lt;reason&gt; [details]",
        "/myreports — Reports you filed",
        "",
        "<b>Account</b>",
        "/status — Your moderation status",
        "/warnings — Active warnings and restrictions",
        "/dismiss &lt;id&gt; — Dismiss a warning",
        "/block, /unblock &lt;user_id&gt; — Manage your hidden list",
        "/blocked — Users you have hidden",
    ]
    if moderator:
        lines += [
            "",
            "<b>Moderation</b>",
            "/reports [status] — Content reports",
            "/userreports [status] — User reports",
            "/reported — Most reported users",
            "/resolve &lt;report_id&gt; &lt;status&gt; [action] [notes]",
            "/resolveuser &lt;report_id&gt; &lt;status&gt; [action] [notes]",
            "/warn, /strike, /mute &lt;user_id&gt; &lt;reason&gt;",
            "/suspend &lt;user_id&gt; &lt;7d|30d|90d|forever&gt; &lt;reason&gt;",
            "/unmute, /unsuspend &lt;user_id&gt;",
            "/history &lt;user_id&gt;",
            "/modstatus &lt;user_id&gt; [user_id...]",
        ]
    if admin:
        lines.append("/setrole &lt;user_id&gt; &lt;user|moderator|admin&gt;")

    await message.answer("\n".join(lines), reply_markup=build_help_menu(moderator))
