"""Content service – posting memes and comments under enforcement."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.config import settings
from memehub.db.repositories.meme_repo import CommentRepo, MemeRepo
from memehub.errors import Forbidden, InvalidArgument, NotFound, RateLimited
from memehub.services.identity import has_role, require_caller
from memehub.services.moderation import get_status, invalidate_status_cache
from memehub.services.policy import enforce_can_post
from memehub.services.sweeper import reconcile
from memehub.utils.enums import Role
from memehub.utils.text import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitStatus:
    posts_in_window: int
    limit: int | None  # None for exempt roles
    remaining: int | None
    is_limited: bool
    reset_at: datetime | None = None


async def _gate(
    session: AsyncSession,
    caller_id: int,
    now: datetime,
    redis_client: aioredis.Redis | None,
) -> None:
    """Reconcile an expired suspension, then enforce posting rights.

    A lifted suspension is committed before anything else can refuse the request.
    """
    if await reconcile(session, caller_id, now):
        await session.commit()
        await invalidate_status_cache(redis_client, caller_id)
    enforce_can_post(await get_status(session, caller_id), now)


def _window() -> timedelta:
    return timedelta(minutes=settings.POST_RATE_WINDOW_MINUTES)


async def rate_limit_status(
    session: AsyncSession, caller_id: int | None, now: datetime | None = None
) -> RateLimitStatus:
    """How many memes the caller may still post in the current window."""
    caller_id = require_caller(caller_id)
    if await has_role(session, caller_id, Role.MODERATOR):
        return RateLimitStatus(0, None, None, False)

    now = now or utcnow()
    recent = await MemeRepo(session).recent_by_author(caller_id, now - _window())
    limit = settings.POST_RATE_LIMIT
    remaining = max(0, limit - len(recent))
    reset_at = as_utc(recent[0]) + _window() if recent else None
    return RateLimitStatus(len(recent), limit, remaining, remaining == 0, reset_at)


async def create_meme(
    session: AsyncSession,
    caller_id: int | None,
    title: str,
    file_id: str,
    tags: list[str] | None = None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    """Post a meme and return its id."""
    caller_id = require_caller(caller_id)
    title = (title or "").strip()
    if not title:
        raise InvalidArgument("A title is required")
    now = now or utcnow()

    await _gate(session, caller_id, now, redis_client)

    limits = await rate_limit_status(session, caller_id, now)
    if limits.is_limited:
        raise RateLimited(
            f"Rate limit exceeded. You can only post {limits.limit} memes per hour. "
            "Please try again later."
        )

    clean_tags = [t.strip().lower() for t in tags or [] if t.strip()]
    meme = await MemeRepo(session).create(caller_id, title, file_id, clean_tags, now)
    await session.commit()

    logger.info("User %d posted meme %d", caller_id, meme.id)
    return meme.id


async def delete_meme(session: AsyncSession, caller_id: int | None, meme_id: int) -> None:
    """Authors remove their own memes, comments included."""
    caller_id = require_caller(caller_id)
    memes = MemeRepo(session)
    meme = await memes.get(meme_id)
    if meme is None:
        raise NotFound("Meme not found")
    if meme.author_id != caller_id:
        raise Forbidden("You can only delete your own memes")

    await memes.delete(meme_id)
    await session.commit()
    logger.info("User %d deleted meme %d", caller_id, meme_id)


async def add_comment(
    session: AsyncSession,
    caller_id: int | None,
    meme_id: int,
    content: str,
    parent_id: int | None = None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    """Comment on a meme, or reply to a comment when *parent_id* is given."""
    caller_id = require_caller(caller_id)
    content = (content or "").strip()
    if not content:
        raise InvalidArgument("Comment cannot be empty")
    if len(content) > settings.MAX_COMMENT_LENGTH:
        raise InvalidArgument(
            f"Comment is too long (max {settings.MAX_COMMENT_LENGTH} characters)"
        )
    now = now or utcnow()

    await _gate(session, caller_id, now, redis_client)

    memes = MemeRepo(session)
    comments = CommentRepo(session)
    meme = await memes.get(meme_id)
    if meme is None:
        raise NotFound("Meme not found")
    if parent_id is not None:
        parent = await comments.get(parent_id)
        if parent is None or parent.meme_id != meme_id:
            raise NotFound("Comment not found")

    comment = await comments.create(meme_id, caller_id, content, parent_id, now)
    await memes.patch(meme_id, comments=(meme.comments or 0) + 1)
    await session.commit()

    logger.debug("User %d commented %d on meme %d", caller_id, comment.id, meme_id)
    return comment.id


async def delete_comment(session: AsyncSession, caller_id: int | None, comment_id: int) -> None:
    caller_id = require_caller(caller_id)
    comments = CommentRepo(session)
    comment = await comments.get(comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    if comment.author_id != caller_id:
        raise Forbidden("Not authorized to delete this comment")

    meme_id = comment.meme_id
    await comments.delete(comment)
    memes = MemeRepo(session)
    meme = await memes.get(meme_id)
    if meme is not None:
        await memes.patch(meme.id, comments=max(0, (meme.comments or 0) - 1))
    await session.commit()
