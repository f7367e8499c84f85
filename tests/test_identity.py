"""Tests for the identity gate and viewer mutes."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from memehub.db.repositories.user_repo import UserRepo
from memehub.errors import (
    AlreadyMuted,
    Forbidden,
    InvalidArgument,
    NotFound,
    NotMuted,
    SelfMute,
    SelfReport,
    Unauthenticated,
)
from memehub.services.content import create_meme
from memehub.services.identity import (
    assign_role,
    get_displays,
    has_role,
    require_caller,
    require_role,
    resolve_caller_id,
    resolve_caller_role,
)
from memehub.services.mutes import list_muted, mute, unmute
from memehub.services.reports import file_user_report
from memehub.utils.enums import Role
from tests.conftest import ADMIN, ALICE, BOB, MODERATOR


# ── Caller resolution ────────────────────────────────────────────────


def test_resolve_caller_id():
    user = MagicMock(id=42, is_bot=False)
    assert resolve_caller_id(user) == 42


def test_bots_and_missing_senders_are_anonymous():
    assert resolve_caller_id(None) is None
    assert resolve_caller_id(MagicMock(id=42, is_bot=True)) is None


def test_require_caller():
    assert require_caller(5) == 5
    with pytest.raises(Unauthenticated) as exc:
        require_caller(None)
    assert exc.value.message == "Must be logged in"


# ── Roles ────────────────────────────────────────────────────────────


async def test_roles(session, users):
    assert await resolve_caller_role(session, ALICE) is Role.USER
    assert await resolve_caller_role(session, MODERATOR) is Role.MODERATOR
    assert await resolve_caller_role(session, ADMIN) is Role.ADMIN


async def test_unregistered_user_defaults_to_user(session):
    assert await resolve_caller_role(session, 777) is Role.USER


async def test_unknown_stored_role_defaults_to_user(session, users, now):
    await UserRepo(session).set_role(BOB, "overlord", ADMIN, now)
    await session.commit()
    assert await resolve_caller_role(session, BOB) is Role.USER


async def test_role_hierarchy(session, users):
    assert await has_role(session, ADMIN, Role.MODERATOR) is True
    assert await has_role(session, MODERATOR, Role.ADMIN) is False
    assert await has_role(session, ALICE, Role.USER) is True


async def test_require_role(session, users):
    assert await require_role(session, MODERATOR) is Role.MODERATOR
    with pytest.raises(Forbidden):
        await require_role(session, ALICE)
    with pytest.raises(Unauthenticated):
        await require_role(session, None)


async def test_assign_role(session, users, now):
    role = await assign_role(session, ADMIN, ALICE, "moderator", now=now)
    assert role is Role.MODERATOR
    assert await has_role(session, ALICE, Role.MODERATOR) is True


async def test_assign_role_demotes(session, users, now):
    await assign_role(session, ADMIN, MODERATOR, Role.USER, now=now)
    with pytest.raises(Forbidden):
        await require_role(session, MODERATOR)


async def test_only_admins_assign_roles(session, users, now):
    with pytest.raises(Forbidden) as exc:
        await assign_role(session, MODERATOR, ALICE, "moderator", now=now)
    assert exc.value.message == "Only admins can assign roles"


async def test_admin_cannot_change_own_role(session, users, now):
    with pytest.raises(Forbidden) as exc:
        await assign_role(session, ADMIN, ADMIN, "user", now=now)
    assert exc.value.message == "Cannot change your own role"


async def test_assign_unknown_role(session, users, now):
    with pytest.raises(InvalidArgument):
        await assign_role(session, ADMIN, ALICE, "overlord", now=now)


async def test_assign_role_to_unknown_user(session, users, now):
    with pytest.raises(NotFound):
        await assign_role(session, ADMIN, 31337, "moderator", now=now)


async def test_get_displays(session, users):
    displays = await get_displays(session, [ALICE, 999, ALICE])
    assert list(displays) == [ALICE, 999]
    assert displays[ALICE].label == "@alice"
    assert displays[999].label == "999"


# ── Viewer mutes ─────────────────────────────────────────────────────


async def test_mute_and_list(session, users):
    await mute(session, ALICE, BOB)
    assert await list_muted(session, BOB) == []

    entries = await list_muted(session, ALICE)
    assert [e.user.user_id for e in entries] == [BOB]
    assert entries[0].muted_at is not None


async def test_mute_self(session, users):
    with pytest.raises(SelfMute):
        await mute(session, ALICE, ALICE)


async def test_mute_twice(session, users):
    await mute(session, ALICE, BOB)
    with pytest.raises(AlreadyMuted):
        await mute(session, ALICE, BOB)


async def test_mute_unknown_user(session, users):
    with pytest.raises(NotFound):
        await mute(session, ALICE, 999)


async def test_unmute(session, users):
    await mute(session, ALICE, BOB)
    await unmute(session, ALICE, BOB)
    assert await list_muted(session, ALICE) == []
    with pytest.raises(NotMuted):
        await unmute(session, ALICE, BOB)


async def test_viewer_mute_does_not_restrict_posting(session, users, now):
    await mute(session, ALICE, BOB)
    assert await create_meme(session, BOB, "still here", "f", now=now) > 0


async def test_anonymous_cannot_mute(session, users):
    with pytest.raises(Unauthenticated):
        await mute(session, None, BOB)


async def test_self_mute_and_self_report_fail_for_admins(session, users, now):
    with pytest.raises(SelfMute):
        await mute(session, ADMIN, ADMIN)
    with pytest.raises(SelfReport):
        await file_user_report(session, ADMIN, ADMIN, "spam", now=now)
