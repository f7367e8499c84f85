"""Action log service – moderator history views and the target's own warnings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from memehub.db.repositories.action_repo import ActionRepo
from memehub.errors import Forbidden, InvalidActionType, NotFound
from memehub.models.moderation_action import ModerationAction
from memehub.services.identity import UserDisplay, get_displays, require_caller, require_role
from memehub.utils.enums import ActionType, Role
from memehub.utils.text import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    id: int
    user_id: int
    action_type: str
    reason: str
    notes: str | None
    related_report_id: int | None
    related_report_type: str | None
    expires_at: datetime | None
    is_active: bool
    seen_by_user: bool | None
    created_at: datetime
    moderator: UserDisplay


@dataclass(frozen=True)
class MyWarning:
    """What the affected user is shown; carries no moderator identity."""

    id: int
    action_type: str
    reason: str
    notes: str | None
    expires_at: datetime | None
    seen_by_user: bool | None
    created_at: datetime


async def list_history(
    session: AsyncSession, caller_id: int | None, user_id: int
) -> list[HistoryEntry]:
    """Full action history of *user_id*, newest first."""
    await require_role(session, caller_id, Role.MODERATOR)
    actions = await ActionRepo(session).list_for_user(user_id)
    displays = await get_displays(session, [a.moderator_id for a in actions])
    return [
        HistoryEntry(
            id=a.id,
            user_id=a.user_id,
            action_type=a.action_type,
            reason=a.reason,
            notes=a.notes,
            related_report_id=a.related_report_id,
            related_report_type=a.related_report_type,
            expires_at=as_utc(a.expires_at),
            is_active=a.is_active,
            seen_by_user=a.seen_by_user,
            created_at=as_utc(a.created_at),
            moderator=displays[a.moderator_id],
        )
        for a in actions
    ]


async def list_my_active_warnings(
    session: AsyncSession, caller_id: int | None
) -> list[MyWarning]:
    """Every action still in force against the caller, of any type."""
    caller_id = require_caller(caller_id)
    actions = await ActionRepo(session).list_active_for_user(caller_id)
    return [_my_warning(a) for a in actions]


def _my_warning(action: ModerationAction) -> MyWarning:
    return MyWarning(
        id=action.id,
        action_type=action.action_type,
        reason=action.reason,
        notes=action.notes,
        expires_at=as_utc(action.expires_at),
        seen_by_user=action.seen_by_user,
        created_at=as_utc(action.created_at),
    )


async def mark_seen(session: AsyncSession, caller_id: int | None, action_ids: list[int]) -> int:
    """Acknowledge actions; ids that are missing or not the caller's are skipped."""
    caller_id = require_caller(caller_id)
    count = await ActionRepo(session).mark_seen(caller_id, action_ids)
    await session.commit()
    return count


async def dismiss_warning(session: AsyncSession, caller_id: int | None, action_id: int) -> None:
    """Let the target of a warning close it. Other action types stay with moderators."""
    caller_id = require_caller(caller_id)
    action = await ActionRepo(session).get(action_id)
    if action is None:
        raise NotFound("Warning not found")
    if action.user_id != caller_id:
        raise Forbidden("Not authorized to dismiss this warning")
    if action.action_type != ActionType.WARNING.value:
        raise InvalidActionType()

    action.is_active = False
    await session.commit()
    logger.info("User %d dismissed warning #%d", caller_id, action_id)
