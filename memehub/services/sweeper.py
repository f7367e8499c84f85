"""Suspension expiry sweeper – persists the lifting of lapsed suspensions.

There is no timer. Expiry is reconciled when the affected user asks for it
or inline in content-creating mutations; read paths only compute it.
"""

from __future__ import annotations

import logging
from datetime import datetime

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.db.repositories.action_repo import ActionRepo
from memehub.db.repositories.status_repo import StatusRepo, to_snapshot
from memehub.services.identity import require_caller
from memehub.services.moderation import invalidate_status_cache
from memehub.services.policy import compute_effective_status, suspension_expired
from memehub.utils.enums import ActionType
from memehub.utils.text import utcnow

logger = logging.getLogger(__name__)


async def reconcile(session: AsyncSession, user_id: int, now: datetime) -> bool:
    """Write back an expired suspension for *user_id* without committing.

    Returns True if the stored status changed.
    """
    statuses = StatusRepo(session)
    row = await statuses.get(user_id)
    if row is None:
        return False

    raw = to_snapshot(row)
    if not suspension_expired(raw, now):
        return False

    await statuses.save(row, compute_effective_status(raw, now))
    closed = await ActionRepo(session).deactivate_active(user_id, ActionType.SUSPEND.value)
    logger.info("Suspension of user %d expired (%d actions closed)", user_id, closed)
    return True


async def clear_expired_suspension(
    session: AsyncSession,
    caller_id: int | None,
    now: datetime | None = None,
    redis_client: aioredis.Redis | None = None,
) -> bool:
    """Self-service reconciliation; a no-op unless the caller's suspension lapsed."""
    caller_id = require_caller(caller_id)
    changed = await reconcile(session, caller_id, now or utcnow())
    if changed:
        await session.commit()
        await invalidate_status_cache(redis_client, caller_id)
    return changed
