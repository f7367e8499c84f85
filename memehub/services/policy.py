"""Enforcement policy – pure decisions over a user's moderation status.

Nothing here touches the database or the cache. Callers read a raw
:class:`StatusSnapshot`, ask the policy what it means at a given moment
(or what it becomes after an action), and persist the result themselves.

Expiry rule: a suspension with a deadline is over once
``suspended_until <= now``. A suspension without a deadline never expires
on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from memehub.errors import Muted, Suspended
from memehub.utils.enums import ActionType, SuspensionDuration
from memehub.utils.text import format_date

MUTED_REASON = "You are muted and cannot post or comment"
SUSPENDED_INDEFINITELY = "Suspended indefinitely"


@dataclass(frozen=True)
class StatusSnapshot:
    """Raw enforcement record for one user, as stored."""

    user_id: int | None = None
    warning_count: int = 0
    strike_count: int = 0
    is_muted: bool = False
    is_suspended: bool = False
    suspended_until: datetime | None = None
    last_warning_at: datetime | None = None
    last_strike_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "warning_count": self.warning_count,
            "strike_count": self.strike_count,
            "is_muted": self.is_muted,
            "is_suspended": self.is_suspended,
            "suspended_until": _iso(self.suspended_until),
            "last_warning_at": _iso(self.last_warning_at),
            "last_strike_at": _iso(self.last_strike_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> StatusSnapshot:
        return cls(
            user_id=data.get("user_id"),
            warning_count=data.get("warning_count", 0),
            strike_count=data.get("strike_count", 0),
            is_muted=data.get("is_muted", False),
            is_suspended=data.get("is_suspended", False),
            suspended_until=_from_iso(data.get("suspended_until")),
            last_warning_at=_from_iso(data.get("last_warning_at")),
            last_strike_at=_from_iso(data.get("last_strike_at")),
        )


# Returned for users that were never moderated.
CLEAN = StatusSnapshot()


@dataclass(frozen=True)
class PostPermission:
    allowed: bool
    reason: str | None = None


@dataclass(frozen=True)
class SuspensionCheck:
    is_suspended: bool
    is_muted: bool
    reason: str | None = None
    suspended_until: datetime | None = None


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ── Reading a status ─────────────────────────────────────────────────────


def suspension_expired(raw: StatusSnapshot, now: datetime) -> bool:
    """True when *raw* is suspended with a deadline that has passed."""
    return (
        raw.is_suspended
        and raw.suspended_until is not None
        and raw.suspended_until <= now
    )


def compute_effective_status(raw: StatusSnapshot, now: datetime) -> StatusSnapshot:
    """Return *raw* as it should read at *now*, with an expired suspension lifted."""
    if suspension_expired(raw, now):
        return clear_suspension(raw)
    return raw


def _suspension_reason(effective: StatusSnapshot) -> str:
    if effective.suspended_until is None:
        return SUSPENDED_INDEFINITELY
    return f"Suspended until {format_date(effective.suspended_until)}"


def can_post(raw: StatusSnapshot, now: datetime) -> PostPermission:
    """Decide whether the user may post or comment at *now*.

    Suspension is checked before mute. A stale suspension whose deadline
    has passed reads as allowed; nothing is written back.
    """
    effective = compute_effective_status(raw, now)
    if effective.is_suspended:
        return PostPermission(False, _suspension_reason(effective))
    if effective.is_muted:
        return PostPermission(False, MUTED_REASON)
    return PostPermission(True)


def check_auth_suspension(raw: StatusSnapshot, now: datetime) -> SuspensionCheck:
    """Summary used at sign-in checkpoints.

    Both flags are reported; the reason describes the suspension when there
    is one, otherwise the mute.
    """
    effective = compute_effective_status(raw, now)
    if effective.is_suspended:
        if effective.suspended_until is None:
            reason = "Your account is suspended indefinitely"
        else:
            reason = f"Your account is suspended until {format_date(effective.suspended_until)}"
        return SuspensionCheck(True, effective.is_muted, reason, effective.suspended_until)
    if effective.is_muted:
        return SuspensionCheck(False, True, MUTED_REASON)
    return SuspensionCheck(False, False)


def enforce_can_post(raw: StatusSnapshot, now: datetime) -> None:
    """Raise :class:`Suspended` or :class:`Muted` when posting is blocked."""
    permission = can_post(raw, now)
    if permission.allowed:
        return
    effective = compute_effective_status(raw, now)
    if effective.is_suspended:
        raise Suspended(permission.reason)
    raise Muted(permission.reason)


# ── Transitions ──────────────────────────────────────────────────────────


def suspension_expiry(duration: SuspensionDuration | str, now: datetime) -> datetime | None:
    """Deadline for a suspension of *duration* starting at *now*; None if indefinite."""
    delta = SuspensionDuration(duration).delta
    return now + delta if delta is not None else None


def apply_action(
    raw: StatusSnapshot,
    action_type: ActionType | str,
    now: datetime,
    expires_at: datetime | None = None,
) -> StatusSnapshot:
    """Return the status after a moderator applies *action_type* at *now*."""
    action_type = ActionType(action_type)
    if action_type is ActionType.WARNING:
        return replace(raw, warning_count=raw.warning_count + 1, last_warning_at=now)
    if action_type is ActionType.STRIKE:
        return replace(raw, strike_count=raw.strike_count + 1, last_strike_at=now)
    if action_type is ActionType.MUTE:
        return replace(raw, is_muted=True)
    return replace(raw, is_suspended=True, suspended_until=expires_at)


def clear_mute(raw: StatusSnapshot) -> StatusSnapshot:
    return replace(raw, is_muted=False)


def clear_suspension(raw: StatusSnapshot) -> StatusSnapshot:
    return replace(raw, is_suspended=False, suspended_until=None)
