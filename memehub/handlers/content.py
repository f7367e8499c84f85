"""Content handlers – posting memes, comments and replies."""

from __future__ import annotations

import logging
import re

import redis.asyncio as aioredis
from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.db.repositories.meme_repo import CommentRepo
from memehub.services import content
from memehub.services.identity import resolve_caller_id
from memehub.services.keyboards import build_meme_actions
from memehub.utils.text import format_date

logger = logging.getLogger(__name__)

content_router = Router(name="content")

_TAG_RE = re.compile(r"#(\w+)")


def split_caption(caption: str) -> tuple[str, list[str]]:
    """Split a caption into a title and its #hashtags."""
    tags = _TAG_RE.findall(caption)
    title = " ".join(_TAG_RE.sub("", caption).split())
    return title, tags


def _parse_id_and_text(args: str | None) -> tuple[int | None, str]:
    parts = (args or "").strip().split(maxsplit=1)
    if not parts:
        return None, ""
    try:
        target = int(parts[0])
    except ValueError:
        return None, ""
    return target, parts[1] if len(parts) > 1 else ""


# ── Memes ─────────────────────────────────────────────────────────────


@content_router.message(F.photo)
async def on_photo(message: Message, session: AsyncSession, redis: aioredis.Redis) -> None:
    """A photo with a caption becomes a meme."""
    title, tags = split_caption(message.caption or "")
    if not title:
        await message.answer("Add a caption to your photo — it becomes the meme title.")
        return

    meme_id = await content.create_meme(
        session,
        resolve_caller_id(message.from_user),
        title,
        message.photo[-1].file_id,
        tags,
        redis_client=redis,
    )
    await message.answer(
        f"✅ Meme <code>#{meme_id}</code> posted.", reply_markup=build_meme_actions(meme_id)
    )


@content_router.message(Command("delmeme"))
async def cmd_delmeme(message: Message, command: CommandObject, session: AsyncSession) -> None:
    meme_id, _ = _parse_id_and_text(command.args)
    if meme_id is None:
        await message.answer("Usage: /delmeme &lt;meme_id&gt;")
        return
    await content.delete_meme(session, resolve_caller_id(message.from_user), meme_id)
    await message.answer(f"🗑 Meme <code>#{meme_id}</code> deleted.")


@content_router.message(Command("limits"))
async def cmd_limits(message: Message, session: AsyncSession) -> None:
    status = await content.rate_limit_status(session, resolve_caller_id(message.from_user))
    if status.limit is None:
        await message.answer("You have no posting limit.")
        return
    lines = [f"Posts this hour: <b>{status.posts_in_window}/{status.limit}</b>"]
    if status.reset_at is not None:
        lines.append(f"Next slot frees up at {status.reset_at:%H:%M} UTC, {format_date(status.reset_at)}")
    await message.answer("\n".join(lines))


# ── Comments ──────────────────────────────────────────────────────────


@content_router.message(Command("comment"))
async def cmd_comment(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    meme_id, text = _parse_id_and_text(command.args)
    if meme_id is None or not text:
        await message.answer("Usage: /comment &lt;meme_id&gt; &lt;text&gt;")
        return
    comment_id = await content.add_comment(
        session, resolve_caller_id(message.from_user), meme_id, text, redis_client=redis
    )
    await message.answer(f"💬 Comment <code>#{comment_id}</code> added.")


@content_router.message(Command("reply"))
async def cmd_reply(
    message: Message, command: CommandObject, session: AsyncSession, redis: aioredis.Redis
) -> None:
    parent_id, text = _parse_id_and_text(command.args)
    if parent_id is None or not text:
        await message.answer("Usage: /reply &lt;comment_id&gt; &lt;text&gt;")
        return
    parent = await CommentRepo(session).get(parent_id)
    if parent is None:
        await message.answer("Comment not found.")
        return
    comment_id = await content.add_comment(
        session,
        resolve_caller_id(message.from_user),
        parent.meme_id,
        text,
        parent_id=parent_id,
        redis_client=redis,
    )
    await message.answer(f"💬 Reply <code>#{comment_id}</code> added.")


@content_router.message(Command("delcomment"))
async def cmd_delcomment(message: Message, command: CommandObject, session: AsyncSession) -> None:
    comment_id, _ = _parse_id_and_text(command.args)
    if comment_id is None:
        await message.answer("Usage: /delcomment &lt;comment_id&gt;")
        return
    await content.delete_comment(session, resolve_caller_id(message.from_user), comment_id)
    await message.answer("🗑 Comment deleted.")
