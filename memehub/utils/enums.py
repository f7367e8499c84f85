"""Enums used across the hub."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum


class Role(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"

    @property
    def level(self) -> int:
        return _ROLE_LEVELS[self]


_ROLE_LEVELS = {Role.USER: 0, Role.MODERATOR: 1, Role.ADMIN: 2}


class ActionType(str, Enum):
    WARNING = "warning"
    STRIKE = "strike"
    MUTE = "mute"
    SUSPEND = "suspend"


class SuspensionDuration(str, Enum):
    SEVEN_DAYS = "7_days"
    THIRTY_DAYS = "30_days"
    NINETY_DAYS = "90_days"
    INDEFINITE = "indefinite"

    @property
    def delta(self) -> timedelta | None:
        return _DURATION_DELTAS[self]


_DURATION_DELTAS = {
    SuspensionDuration.SEVEN_DAYS: timedelta(days=7),
    SuspensionDuration.THIRTY_DAYS: timedelta(days=30),
    SuspensionDuration.NINETY_DAYS: timedelta(days=90),
    SuspensionDuration.INDEFINITE: None,
}


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportKind(str, Enum):
    CONTENT = "content"
    USER = "user"


class ContentReportReason(str, Enum):
    SPAM = "spam"
    INAPPROPRIATE = "inappropriate"
    HARASSMENT = "harassment"
    COPYRIGHT = "copyright"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class UserReportReason(str, Enum):
    SPAM = "spam"
    HARASSMENT = "harassment"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    IMPERSONATION = "impersonation"
    OTHER = "other"


class ContentAction(str, Enum):
    NONE = "none"
    WARNING = "warning"
    CONTENT_REMOVED = "content_removed"
    USER_SUSPENDED = "user_suspended"


class UserReportAction(str, Enum):
    NONE = "none"
    WARNING = "warning"
    USER_MUTED = "user_muted"
    USER_SUSPENDED = "user_suspended"
