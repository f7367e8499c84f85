"""User repository – identity records and role assignments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.models.user import User, UserRole


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def upsert_user(
        self,
        user_id: int,
        username: str | None = None,
        display_name: str | None = None,
    ) -> User:
        """Insert a user or refresh their username/display name."""
        user = await self.get_user(user_id)
        if user is None:
            user = User(user_id=user_id, username=username, display_name=display_name)
            self._s.add(user)
        else:
            user.username = username
            user.display_name = display_name
        await self._s.flush()
        return user

    async def get_user(self, user_id: int) -> User | None:
        result = await self._s.execute(select(User).where(User.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_users(self, user_ids: list[int]) -> dict[int, User]:
        """Bulk lookup keyed by user_id; unknown ids are simply absent."""
        ids = {uid for uid in user_ids if uid is not None}
        if not ids:
            return {}
        result = await self._s.execute(select(User).where(User.user_id.in_(ids)))
        return {u.user_id: u for u in result.scalars().all()}

    async def exists(self, user_id: int) -> bool:
        result = await self._s.execute(select(User.user_id).where(User.user_id == user_id))
        return result.scalar_one_or_none() is not None

    async def get_role(self, user_id: int) -> str | None:
        """Return the stored role string, or None when no role record exists."""
        result = await self._s.execute(
            select(UserRole.role).where(UserRole.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def set_role(
        self,
        user_id: int,
        role: str,
        assigned_by: int | None,
        assigned_at: datetime,
    ) -> UserRole:
        result = await self._s.execute(select(UserRole).where(UserRole.user_id == user_id))
        row = result.scalar_one_or_none()
        if row is None:
            row = UserRole(user_id=user_id, role=role)
            self._s.add(row)
        row.role = role
        row.assigned_by = assigned_by
        row.assigned_at = assigned_at
        await self._s.flush()
        return row

    async def list_by_role(self, role: str) -> list[int]:
        result = await self._s.execute(
            select(UserRole.user_id).where(UserRole.role == role).order_by(UserRole.user_id)
        )
        return list(result.scalars().all())
