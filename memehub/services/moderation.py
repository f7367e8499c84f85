"""Moderation service – warnings, strikes, mutes and suspensions.

Every mutation authorizes the caller, runs the enforcement policy over the
stored status, persists the result and appends to the action log inside a
single transaction, then drops the cached status for the target.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.config import settings
from memehub.db.repositories.action_repo import ActionRepo
from memehub.db.repositories.status_repo import StatusRepo, to_snapshot
from memehub.errors import InvalidArgument, NotFound
from memehub.services import policy
from memehub.services.identity import require_role
from memehub.services.policy import StatusSnapshot
from memehub.utils.enums import ActionType, ReportKind, Role, SuspensionDuration
from memehub.utils.text import utcnow

logger = logging.getLogger(__name__)


def _cache_key(user_id: int) -> str:
    return f"modstatus:{user_id}"


# ── Status reads ─────────────────────────────────────────────────────────


async def get_status(session: AsyncSession, user_id: int) -> StatusSnapshot:
    """Raw stored status, or a clean snapshot when the user was never moderated."""
    row = await StatusRepo(session).get(user_id)
    if row is None:
        return StatusSnapshot(user_id=user_id)
    return to_snapshot(row)


async def get_cached_status(
    redis_client: aioredis.Redis, session: AsyncSession, user_id: int
) -> StatusSnapshot:
    """Read path for status displays.

    Uses a Redis cache (``modstatus:{user_id}``) holding the raw snapshot.
    Mutations never read from here.
    """
    cache_key = _cache_key(user_id)
    cached = await redis_client.get(cache_key)
    if cached is not None:
        raw = cached if isinstance(cached, str) else cached.decode()
        return StatusSnapshot.from_dict(json.loads(raw))

    snapshot = await get_status(session, user_id)
    await redis_client.set(
        cache_key, json.dumps(snapshot.to_dict()), ex=settings.STATUS_CACHE_TTL
    )
    return snapshot


async def invalidate_status_cache(redis_client: aioredis.Redis | None, user_id: int) -> None:
    """Delete the status cache key after a moderation mutation."""
    if redis_client is None:
        return
    await redis_client.delete(_cache_key(user_id))


async def get_users_status(
    session: AsyncSession, caller_id: int | None, user_ids: list[int]
) -> dict[int, StatusSnapshot]:
    """Moderator batch lookup; ids without a record map to a clean snapshot."""
    await require_role(session, caller_id, Role.MODERATOR)
    rows = await StatusRepo(session).get_many(user_ids)
    return {
        uid: to_snapshot(rows[uid]) if uid in rows else StatusSnapshot(user_id=uid)
        for uid in user_ids
    }


# ── Mutations ────────────────────────────────────────────────────────────


async def _apply(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    action_type: ActionType,
    reason: str,
    notes: str | None,
    related_report_id: int | None,
    related_report_type: ReportKind | str | None,
    now: datetime | None,
    duration: SuspensionDuration | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    await require_role(session, caller_id, Role.MODERATOR)
    reason = (reason or "").strip()
    if not reason:
        raise InvalidArgument("A reason is required")
    if related_report_type is not None:
        related_report_type = ReportKind(related_report_type).value
    now = now or utcnow()

    expires_at = policy.suspension_expiry(duration, now) if duration is not None else None

    statuses = StatusRepo(session)
    row = await statuses.get_or_create(user_id)
    new_status = policy.apply_action(to_snapshot(row), action_type, now, expires_at)
    await statuses.save(row, new_status)

    action = await ActionRepo(session).record(
        user_id=user_id,
        moderator_id=caller_id,
        action_type=action_type.value,
        reason=reason,
        created_at=now,
        notes=notes,
        related_report_id=related_report_id,
        related_report_type=related_report_type,
        expires_at=expires_at,
    )
    await session.commit()
    await invalidate_status_cache(redis_client, user_id)

    logger.info(
        "Moderator %d issued %s #%d to user %d", caller_id, action_type.value, action.id, user_id
    )
    return action.id


async def issue_warning(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    reason: str,
    notes: str | None = None,
    related_report_id: int | None = None,
    related_report_type: ReportKind | str | None = None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    return await _apply(
        session, caller_id, user_id, ActionType.WARNING, reason, notes,
        related_report_id, related_report_type, now, redis_client=redis_client,
    )


async def issue_strike(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    reason: str,
    notes: str | None = None,
    related_report_id: int | None = None,
    related_report_type: ReportKind | str | None = None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    # Reaching two strikes does not escalate on its own.
    return await _apply(
        session, caller_id, user_id, ActionType.STRIKE, reason, notes,
        related_report_id, related_report_type, now, redis_client=redis_client,
    )


async def mute_user(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    reason: str,
    notes: str | None = None,
    related_report_id: int | None = None,
    related_report_type: ReportKind | str | None = None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    return await _apply(
        session, caller_id, user_id, ActionType.MUTE, reason, notes,
        related_report_id, related_report_type, now, redis_client=redis_client,
    )


async def suspend_user(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    reason: str,
    duration: SuspensionDuration | str,
    notes: str | None = None,
    related_report_id: int | None = None,
    related_report_type: ReportKind | str | None = None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> int:
    try:
        duration = SuspensionDuration(duration)
    except ValueError:
        raise InvalidArgument(f"Unknown suspension duration: {duration}") from None
    return await _apply(
        session, caller_id, user_id, ActionType.SUSPEND, reason, notes,
        related_report_id, related_report_type, now,
        duration=duration, redis_client=redis_client,
    )


async def unmute_user(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    redis_client: aioredis.Redis | None = None,
) -> int:
    """Lift a mute and deactivate every active mute action.

    Returns the number of actions deactivated.
    """
    await require_role(session, caller_id, Role.MODERATOR)
    statuses = StatusRepo(session)
    row = await statuses.get(user_id)
    if row is None:
        raise NotFound("User has no moderation status")

    await statuses.save(row, policy.clear_mute(to_snapshot(row)))
    count = await ActionRepo(session).deactivate_active(user_id, ActionType.MUTE.value)
    await session.commit()
    await invalidate_status_cache(redis_client, user_id)

    logger.info("Moderator %d unmuted user %d (%d actions closed)", caller_id, user_id, count)
    return count


async def unsuspend_user(
    session: AsyncSession,
    caller_id: int | None,
    user_id: int,
    redis_client: aioredis.Redis | None = None,
) -> int:
    """Lift a suspension and deactivate every active suspend action."""
    await require_role(session, caller_id, Role.MODERATOR)
    statuses = StatusRepo(session)
    row = await statuses.get(user_id)
    if row is None:
        raise NotFound("User has no moderation status")

    await statuses.save(row, policy.clear_suspension(to_snapshot(row)))
    count = await ActionRepo(session).deactivate_active(user_id, ActionType.SUSPEND.value)
    await session.commit()
    await invalidate_status_cache(redis_client, user_id)

    logger.info("Moderator %d unsuspended user %d (%d actions closed)", caller_id, user_id, count)
    return count


# ── Helpers ──────────────────────────────────────────────────────────────

_DURATION_ALIASES = {
    "7d": SuspensionDuration.SEVEN_DAYS,
    "30d": SuspensionDuration.THIRTY_DAYS,
    "90d": SuspensionDuration.NINETY_DAYS,
    "forever": SuspensionDuration.INDEFINITE,
    "perm": SuspensionDuration.INDEFINITE,
}


def parse_suspension_duration(text: str) -> SuspensionDuration | None:
    """Parse ``7d``/``30d``/``90d``/``forever`` or a canonical value like ``7_days``.

    Returns ``None`` on invalid input.
    """
    text = text.strip().lower()
    if text in _DURATION_ALIASES:
        return _DURATION_ALIASES[text]
    try:
        return SuspensionDuration(text)
    except ValueError:
        return None


def describe_status(status: StatusSnapshot, now: datetime | None = None) -> str:
    """One-line human summary of a status, as it reads at *now*."""
    now = now or utcnow()
    effective = policy.compute_effective_status(status, now)
    parts = [f"warnings: {effective.warning_count}", f"strikes: {effective.strike_count}"]
    if effective.is_muted:
        parts.append("muted")
    if effective.is_suspended:
        parts.append(policy.can_post(effective, now).reason or "suspended")
    if len(parts) == 2:
        parts.append("in good standing")
    return ", ".join(parts)
