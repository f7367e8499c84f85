"""Identity gate – caller resolution, role lookup and capability checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from aiogram.types import User as TgUser
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.config import settings
from memehub.db.repositories.user_repo import UserRepo
from memehub.errors import Forbidden, InvalidArgument, NotFound, Unauthenticated
from memehub.utils.enums import Role
from memehub.utils.text import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserDisplay:
    user_id: int
    username: str | None
    display_name: str | None

    @property
    def label(self) -> str:
        if self.username:
            return f"@{self.username}"
        return self.display_name or str(self.user_id)


def resolve_caller_id(user: TgUser | None) -> int | None:
    """Telegram sender → user id, or None for anonymous updates."""
    if user is None or user.is_bot:
        return None
    return user.id


def require_caller(caller_id: int | None) -> int:
    if caller_id is None:
        raise Unauthenticated()
    return caller_id


async def resolve_caller_role(session: AsyncSession, user_id: int) -> Role:
    """Role of *user_id*; configured admin ids always resolve to admin."""
    if user_id in settings.admin_ids:
        return Role.ADMIN
    stored = await UserRepo(session).get_role(user_id)
    if stored is None:
        return Role.USER
    try:
        return Role(stored)
    except ValueError:
        logger.warning("Unknown role %r stored for user %d", stored, user_id)
        return Role.USER


async def has_role(session: AsyncSession, user_id: int, minimum: Role) -> bool:
    role = await resolve_caller_role(session, user_id)
    return role.level >= minimum.level


async def require_role(
    session: AsyncSession,
    caller_id: int | None,
    minimum: Role = Role.MODERATOR,
) -> Role:
    """Raise unless the caller holds *minimum* or a higher role."""
    caller_id = require_caller(caller_id)
    role = await resolve_caller_role(session, caller_id)
    if role.level < minimum.level:
        raise Forbidden()
    return role


async def get_displays(session: AsyncSession, user_ids: list[int]) -> dict[int, UserDisplay]:
    """Display data for every id; unknown users get a bare id label."""
    users = await UserRepo(session).get_users(user_ids)
    out: dict[int, UserDisplay] = {}
    for uid in user_ids:
        if uid is None or uid in out:
            continue
        user = users.get(uid)
        if user is None:
            out[uid] = UserDisplay(uid, None, None)
        else:
            out[uid] = UserDisplay(uid, user.username, user.display_name)
    return out


async def assign_role(
    session: AsyncSession,
    caller_id: int | None,
    target_id: int,
    role: Role | str,
    now: datetime | None = None,
) -> Role:
    """Admin-only role assignment; admins cannot change their own role."""
    caller_id = require_caller(caller_id)
    if await resolve_caller_role(session, caller_id) is not Role.ADMIN:
        raise Forbidden("Only admins can assign roles")
    if target_id == caller_id:
        raise Forbidden("Cannot change your own role")
    try:
        role = Role(role)
    except ValueError:
        raise InvalidArgument(f"Unknown role: {role}") from None

    repo = UserRepo(session)
    if not await repo.exists(target_id):
        raise NotFound("User not found")

    await repo.set_role(target_id, role.value, caller_id, now or utcnow())
    await session.commit()
    logger.info("User %d set role of %d to %s", caller_id, target_id, role.value)
    return role
