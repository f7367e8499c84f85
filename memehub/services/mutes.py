"""Viewer mutes – a personal list of users whose memes the viewer hides.

These never affect what the muted user may post; enforcement mutes live in
:mod:`memehub.services.moderation`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.db.repositories.mute_repo import MuteRepo
from memehub.db.repositories.user_repo import UserRepo
from memehub.errors import AlreadyMuted, NotFound, NotMuted, SelfMute
from memehub.services.identity import UserDisplay, get_displays, require_caller
from memehub.utils.text import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutedEntry:
    user: UserDisplay
    muted_at: datetime


async def mute(session: AsyncSession, caller_id: int | None, muted_user_id: int) -> None:
    caller_id = require_caller(caller_id)
    if caller_id == muted_user_id:
        raise SelfMute()
    repo = MuteRepo(session)
    if await repo.get(caller_id, muted_user_id) is not None:
        raise AlreadyMuted()
    if not await UserRepo(session).exists(muted_user_id):
        raise NotFound("User not found")

    try:
        await repo.add(caller_id, muted_user_id)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AlreadyMuted() from None
    logger.debug("User %d muted %d", caller_id, muted_user_id)


async def unmute(session: AsyncSession, caller_id: int | None, muted_user_id: int) -> None:
    caller_id = require_caller(caller_id)
    repo = MuteRepo(session)
    row = await repo.get(caller_id, muted_user_id)
    if row is None:
        raise NotMuted()
    await repo.remove(row)
    await session.commit()


async def list_muted(session: AsyncSession, caller_id: int | None) -> list[MutedEntry]:
    caller_id = require_caller(caller_id)
    rows = await MuteRepo(session).list_for_user(caller_id)
    displays = await get_displays(session, [r.muted_user_id for r in rows])
    return [MutedEntry(displays[r.muted_user_id], as_utc(r.created_at)) for r in rows]

