"""Account handlers – own status, warnings and viewer mutes."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from aiogram.utils.text_decorations import html_decoration as hd
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.services import action_log, mutes
from memehub.services.identity import require_caller, resolve_caller_id
from memehub.services.keyboards import build_warning_actions
from memehub.services.moderation import get_cached_status
from memehub.services.policy import can_post, check_auth_suspension
from memehub.services.sweeper import clear_expired_suspension
from memehub.utils.text import format_date, utcnow

logger = logging.getLogger(__name__)

account_router = Router(name="account")

_TYPE_ICONS = {"warning": "⚠️", "strike": "🟥", "mute": "🔇", "suspend": "⛔"}


async def render_status(session: AsyncSession, redis: aioredis.Redis, caller_id: int | None) -> str:
    """Lift a lapsed suspension, then describe where the caller stands."""
    caller_id = require_caller(caller_id)
    now = utcnow()
    await clear_expired_suspension(session, caller_id, now, redis)
    status = await get_cached_status(redis, session, caller_id)

    check = check_auth_suspension(status, now)
    permission = can_post(status, now)
    lines = [
        "📊 <b>Your status</b>",
        "",
        f"Warnings: <b>{status.warning_count}</b>",
        f"Strikes: <b>{status.strike_count}</b>",
    ]
    if check.reason:
        lines.append(f"\n{check.reason}")
    lines.append("\n✅ You can post and comment." if permission.allowed else "\n🚫 Posting is blocked.")
    return "\n".join(lines)


@account_router.message(Command("status"))
async def cmd_status(message: Message, session: AsyncSession, redis: aioredis.Redis) -> None:
    await message.answer(await render_status(session, redis, resolve_caller_id(message.from_user)))


async def send_warnings(message: Message, session: AsyncSession, caller_id: int | None) -> None:
    """List active actions against the caller and mark them as seen."""
    warnings = await action_log.list_my_active_warnings(session, caller_id)
    if not warnings:
        await message.answer("No active warnings. 👍")
        return

    for w in warnings:
        new = "🆕 " if not w.seen_by_user else ""
        expiry = f"\nUntil {format_date(w.expires_at)}" if w.expires_at else ""
        notes = f"\n<i>{hd.quote(w.notes)}</i>" if w.notes else ""
        await message.answer(
            f"{new}{_TYPE_ICONS.get(w.action_type, '')} <b>{w.action_type.capitalize()}</b> "
            f"<code>#{w.id}</code> · {format_date(w.created_at)}\n"
            f"{hd.quote(w.reason)}{notes}{expiry}",
            reply_markup=build_warning_actions(w.id, w.action_type),
        )
    await action_log.mark_seen(session, caller_id, [w.id for w in warnings if not w.seen_by_user])


@account_router.message(Command("warnings"))
async def cmd_warnings(message: Message, session: AsyncSession) -> None:
    await send_warnings(message, session, resolve_caller_id(message.from_user))


@account_router.message(Command("dismiss"))
async def cmd_dismiss(message: Message, command: CommandObject, session: AsyncSession) -> None:
    try:
        action_id = int((command.args or "").strip())
    except ValueError:
        await message.answer("Usage: /dismiss &lt;warning_id&gt;")
        return
    await action_log.dismiss_warning(session, resolve_caller_id(message.from_user), action_id)
    await message.answer("✔️ Warning dismissed.")


# ── Viewer mutes ──────────────────────────────────────────────────────


def _parse_user_id(args: str | None) -> int | None:
    try:
        return int((args or "").strip())
    except ValueError:
        return None


@account_router.message(Command("block"))
async def cmd_block(message: Message, command: CommandObject, session: AsyncSession) -> None:
    user_id = _parse_user_id(command.args)
    if user_id is None:
        await message.answer("Usage: /block &lt;user_id&gt;")
        return
    await mutes.mute(session, resolve_caller_id(message.from_user), user_id)
    await message.answer(f"🙈 <code>{user_id}</code> added to your hidden list.")


@account_router.message(Command("unblock"))
async def cmd_unblock(message: Message, command: CommandObject, session: AsyncSession) -> None:
    user_id = _parse_user_id(command.args)
    if user_id is None:
        await message.answer("Usage: /unblock &lt;user_id&gt;")
        return
    await mutes.unmute(session, resolve_caller_id(message.from_user), user_id)
    await message.answer(f"👀 <code>{user_id}</code> removed from your hidden list.")


@account_router.message(Command("blocked"))
async def cmd_blocked(message: Message, session: AsyncSession) -> None:
    entries = await mutes.list_muted(session, resolve_caller_id(message.from_user))
    if not entries:
        await message.answer("You haven't hidden anyone.")
        return
    lines = ["🙈 <b>Hidden users</b>", ""]
    for e in entries:
        lines.append(
            f"• {hd.quote(e.user.label)} (<code>{e.user.user_id}</code>) since {format_date(e.muted_at)}"
        )
    await message.answer("\n".join(lines))
