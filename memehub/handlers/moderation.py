"""Moderator command handlers – warnings, strikes, mutes, suspensions, roles."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from aiogram.utils.text_decorations import html_decoration as hd
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.services import moderation
from memehub.services.action_log import list_history
from memehub.services.identity import assign_role, get_displays, resolve_caller_id
from memehub.services.keyboards import build_moderation_actions
from memehub.services.policy import compute_effective_status
from memehub.utils.enums import Role
from memehub.utils.text import format_date, truncate, utcnow

logger = logging.getLogger(__name__)

moderation_router = Router(name="moderation")

HISTORY_LIMIT = 15


def _resolve_target_user(message: Message, args: str | None) -> tuple[int | None, str]:
    """Resolve a user ID from either a reply or command arguments.

    Priority:
    1. If reply to a non-bot message → reply.from_user.id, all args are the rest
    2. If args provided → parse first token as int

    Returns ``(user_id, remaining_args)``.
    """
    text = (args or "").strip()
    reply = message.reply_to_message
    if reply and reply.from_user and not reply.from_user.is_bot:
        return reply.from_user.id, text

    parts = text.split(maxsplit=1)
    if not parts:
        return None, ""
    try:
        return int(parts[0]), parts[1] if len(parts) > 1 else ""
    except ValueError:
        return None, ""


# ── /warn /strike /mute ───────────────────────────────────────────────


@moderation_router.message(Command("warn"))
async def cmd_warn(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    """Usage: /warn <user_id> <reason> (or reply to a message)"""
    target, reason = _resolve_target_user(message, command.args)
    if target is None or not reason:
        await message.answer("Usage: /warn &lt;user_id&gt; &lt;reason&gt;")
        return
    action_id = await moderation.issue_warning(
        session, resolve_caller_id(message.from_user), target, reason, redis_client=redis
    )
    await message.answer(f"⚠️ Warning <code>#{action_id}</code> issued to <code>{target}</code>.")


@moderation_router.message(Command("strike"))
async def cmd_strike(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    target, reason = _resolve_target_user(message, command.args)
    if target is None or not reason:
        await message.answer("Usage: /strike &lt;user_id&gt; &lt;reason&gt;")
        return
    action_id = await moderation.issue_strike(
        session, resolve_caller_id(message.from_user), target, reason, redis_client=redis
    )
    status = await moderation.get_status(session, target)
    await message.answer(
        f"🟥 Strike <code>#{action_id}</code> issued to <code>{target}</code> "
        f"(strike {status.strike_count})."
    )


@moderation_router.message(Command("mute"))
async def cmd_mute(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    target, reason = _resolve_target_user(message, command.args)
    if target is None or not reason:
        await message.answer("Usage: /mute &lt;user_id&gt; &lt;reason&gt;")
        return
    await moderation.mute_user(
        session, resolve_caller_id(message.from_user), target, reason, redis_client=redis
    )
    await message.answer(f"🔇 User <code>{target}</code> can no longer post or comment.")


@moderation_router.message(Command("unmute"))
async def cmd_unmute(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    target, _ = _resolve_target_user(message, command.args)
    if target is None:
        await message.answer("Usage: /unmute &lt;user_id&gt;")
        return
    await moderation.unmute_user(session, resolve_caller_id(message.from_user), target, redis)
    await message.answer(f"🔊 User <code>{target}</code> has been unmuted.")


# ── /suspend /unsuspend ───────────────────────────────────────────────


@moderation_router.message(Command("suspend"))
async def cmd_suspend(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    """Usage: /suspend <user_id> <7d|30d|90d|forever> <reason>"""
    usage = "Usage: /suspend &lt;user_id&gt; &lt;7d|30d|90d|forever&gt; &lt;reason&gt;"
    target, rest = _resolve_target_user(message, command.args)
    parts = rest.split(maxsplit=1)
    if target is None or len(parts) < 2:
        await message.answer(usage)
        return
    duration = moderation.parse_suspension_duration(parts[0])
    if duration is None:
        await message.answer(f"❌ Invalid duration: <code>{hd.quote(parts[0])}</code>\n{usage}")
        return

    await moderation.suspend_user(
        session, resolve_caller_id(message.from_user), target, parts[1], duration,
        redis_client=redis,
    )
    status = await moderation.get_status(session, target)
    until = (
        f"until {format_date(status.suspended_until)}"
        if status.suspended_until is not None
        else "indefinitely"
    )
    await message.answer(f"⛔ User <code>{target}</code> suspended {until}.")


@moderation_router.message(Command("unsuspend"))
async def cmd_unsuspend(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    target, _ = _resolve_target_user(message, command.args)
    if target is None:
        await message.answer("Usage: /unsuspend &lt;user_id&gt;")
        return
    await moderation.unsuspend_user(session, resolve_caller_id(message.from_user), target, redis)
    await message.answer(f"✅ User <code>{target}</code> is no longer suspended.")


# ── /history /modstatus ───────────────────────────────────────────────


async def render_history(session: AsyncSession, caller_id: int | None, user_id: int) -> str:
    entries = await list_history(session, caller_id, user_id)
    if not entries:
        return f"No moderation history for <code>{user_id}</code>."

    lines = [f"📜 <b>History for</b> <code>{user_id}</code> ({len(entries)})", ""]
    for e in entries[:HISTORY_LIMIT]:
        state = "active" if e.is_active else "inactive"
        expiry = f" · until {format_date(e.expires_at)}" if e.expires_at else ""
        lines.append(
            f"#{e.id} <b>{e.action_type}</b> · {state}{expiry} · {format_date(e.created_at)}\n"
            f"   {hd.quote(truncate(e.reason, 120))} — by {hd.quote(e.moderator.label)}"
        )
    if len(entries) > HISTORY_LIMIT:
        lines.append(f"…and {len(entries) - HISTORY_LIMIT} older.")
    return "\n".join(lines)


@moderation_router.message(Command("history"))
async def cmd_history(message: Message, command: CommandObject, session: AsyncSession) -> None:
    target, _ = _resolve_target_user(message, command.args)
    if target is None:
        await message.answer("Usage: /history &lt;user_id&gt;")
        return
    await message.answer(await render_history(session, resolve_caller_id(message.from_user), target))


@moderation_router.message(Command("modstatus"))
async def cmd_modstatus(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /modstatus <user_id> [user_id...]"""
    ids: list[int] = []
    for token in (command.args or "").split():
        try:
            ids.append(int(token))
        except ValueError:
            continue
    if not ids:
        await message.answer("Usage: /modstatus &lt;user_id&gt; [user_id...]")
        return

    statuses = await moderation.get_users_status(session, resolve_caller_id(message.from_user), ids)
    displays = await get_displays(session, ids)
    now = utcnow()
    for uid, status in statuses.items():
        effective = compute_effective_status(status, now)
        await message.answer(
            f"👤 {hd.quote(displays[uid].label)} (<code>{uid}</code>)\n"
            f"{moderation.describe_status(status, now)}",
            reply_markup=build_moderation_actions(uid, effective.is_muted, effective.is_suspended),
        )


# ── /setrole (admin) ──────────────────────────────────────────────────


@moderation_router.message(Command("setrole"))
async def cmd_setrole(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /setrole <user_id> <user|moderator|admin>"""
    target, rest = _resolve_target_user(message, command.args)
    role = rest.strip().lower()
    if target is None or not role:
        roles = "|".join(r.value for r in Role)
        await message.answer(f"Usage: /setrole &lt;user_id&gt; &lt;{roles}&gt;")
        return
    new_role = await assign_role(session, resolve_caller_id(message.from_user), target, role)
    await message.answer(f"✅ <code>{target}</code> is now <b>{new_role.value}</b>.")
