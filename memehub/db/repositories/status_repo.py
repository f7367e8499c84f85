"""Moderation status repository – the per-user enforcement record."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.models.moderation_status import ModerationStatus
from memehub.services.policy import StatusSnapshot
from memehub.utils.text import as_utc


def to_snapshot(row: ModerationStatus) -> StatusSnapshot:
    """Read a stored row into the immutable shape the policy works on."""
    return StatusSnapshot(
        user_id=row.user_id,
        warning_count=row.warning_count,
        strike_count=row.strike_count,
        is_muted=row.is_muted,
        is_suspended=row.is_suspended,
        suspended_until=as_utc(row.suspended_until),
        last_warning_at=as_utc(row.last_warning_at),
        last_strike_at=as_utc(row.last_strike_at),
    )


class StatusRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def get(self, user_id: int) -> ModerationStatus | None:
        result = await self._s.execute(
            select(ModerationStatus).where(ModerationStatus.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: int) -> ModerationStatus:
        """Return the status row, inserting a zeroed one if none exists."""
        row = await self.get(user_id)
        if row is not None:
            return row
        row = ModerationStatus(
            user_id=user_id,
            warning_count=0,
            strike_count=0,
            is_muted=False,
            is_suspended=False,
        )
        self._s.add(row)
        await self._s.flush()
        return row

    async def get_many(self, user_ids: list[int]) -> dict[int, ModerationStatus]:
        if not user_ids:
            return {}
        result = await self._s.execute(
            select(ModerationStatus).where(ModerationStatus.user_id.in_(set(user_ids)))
        )
        return {row.user_id: row for row in result.scalars().all()}

    async def save(self, row: ModerationStatus, snapshot: StatusSnapshot) -> ModerationStatus:
        """Write a policy-computed snapshot back onto its row."""
        row.warning_count = snapshot.warning_count
        row.strike_count = snapshot.strike_count
        row.is_muted = snapshot.is_muted
        row.is_suspended = snapshot.is_suspended
        row.suspended_until = snapshot.suspended_until
        row.last_warning_at = snapshot.last_warning_at
        row.last_strike_at = snapshot.last_strike_at
        await self._s.flush()
        return row
