"""Mute repository – per-viewer muted user pairs."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.models.muted_user import MutedUser


class MuteRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def get(self, user_id: int, muted_user_id: int) -> MutedUser | None:
        result = await self._s.execute(
            select(MutedUser).where(
                MutedUser.user_id == user_id,
                MutedUser.muted_user_id == muted_user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, user_id: int, muted_user_id: int) -> MutedUser:
        row = MutedUser(user_id=user_id, muted_user_id=muted_user_id)
        self._s.add(row)
        await self._s.flush()
        return row

    async def remove(self, row: MutedUser) -> None:
        await self._s.delete(row)
        await self._s.flush()

    async def list_for_user(self, user_id: int) -> list[MutedUser]:
        result = await self._s.execute(
            select(MutedUser)
            .where(MutedUser.user_id == user_id)
            .order_by(MutedUser.created_at.desc(), MutedUser.id.desc())
        )
        return list(result.scalars().all())
