"""Moderation action repository – append-only action history."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.models.moderation_action import ModerationAction


class ActionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def record(
        self,
        user_id: int,
        moderator_id: int,
        action_type: str,
        reason: str,
        created_at: datetime,
        notes: str | None = None,
        related_report_id: int | None = None,
        related_report_type: str | None = None,
        expires_at: datetime | None = None,
    ) -> ModerationAction:
        """Append a new, active action."""
        action = ModerationAction(
            user_id=user_id,
            moderator_id=moderator_id,
            action_type=action_type,
            reason=reason,
            notes=notes,
            related_report_id=related_report_id,
            related_report_type=related_report_type,
            expires_at=expires_at,
            is_active=True,
            created_at=created_at,
        )
        self._s.add(action)
        await self._s.flush()
        return action

    async def get(self, action_id: int) -> ModerationAction | None:
        result = await self._s.execute(
            select(ModerationAction).where(ModerationAction.id == action_id)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> list[ModerationAction]:
        """Full history for a user, newest first."""
        result = await self._s.execute(
            select(ModerationAction)
            .where(ModerationAction.user_id == user_id)
            .order_by(ModerationAction.created_at.desc(), ModerationAction.id.desc())
        )
        return list(result.scalars().all())

    async def list_active_for_user(self, user_id: int) -> list[ModerationAction]:
        """Actions currently in force for a user, newest first."""
        result = await self._s.execute(
            select(ModerationAction)
            .where(
                ModerationAction.user_id == user_id,
                ModerationAction.is_active == True,  # noqa: E712
            )
            .order_by(ModerationAction.created_at.desc(), ModerationAction.id.desc())
        )
        return list(result.scalars().all())

    async def deactivate_active(self, user_id: int, action_type: str) -> int:
        """Deactivate every active action of *action_type* for a user.

        Returns the number of actions deactivated.
        """
        result = await self._s.execute(
            update(ModerationAction)
            .where(
                ModerationAction.user_id == user_id,
                ModerationAction.action_type == action_type,
                ModerationAction.is_active == True,  # noqa: E712
            )
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def mark_seen(self, user_id: int, action_ids: list[int]) -> int:
        """Set seen_by_user on the given actions that belong to *user_id*."""
        if not action_ids:
            return 0
        result = await self._s.execute(
            update(ModerationAction)
            .where(
                ModerationAction.id.in_(set(action_ids)),
                ModerationAction.user_id == user_id,
            )
            .values(seen_by_user=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
