"""Named error kinds raised by the moderation core.

Every public operation either returns its typed result or raises one of
these. The bot's error router turns them into a reply to the caller.
"""

from __future__ import annotations


class ModerationError(Exception):
    """Base class; ``kind`` is the stable error name exposed to callers."""

    kind = "ModerationError"
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class Unauthenticated(ModerationError):
    kind = "Unauthenticated"
    default_message = "Must be logged in"


class Forbidden(ModerationError):
    kind = "Forbidden"
    default_message = "Not authorized"


class NotFound(ModerationError):
    kind = "NotFound"
    default_message = "Not found"


class AlreadyReported(ModerationError):
    kind = "AlreadyReported"
    default_message = "You have already reported this"


class SelfReport(ModerationError):
    kind = "SelfReport"
    default_message = "You cannot report yourself"


class SelfMute(ModerationError):
    kind = "SelfMute"
    default_message = "You cannot mute yourself"


class InvalidActionType(ModerationError):
    kind = "InvalidActionType"
    default_message = "Only warnings can be dismissed"


class Suspended(ModerationError):
    kind = "Suspended"
    default_message = "Suspended indefinitely"


class Muted(ModerationError):
    kind = "Muted"
    default_message = "You are muted and cannot post or comment"


class AlreadyMuted(ModerationError):
    kind = "AlreadyMuted"
    default_message = "User is already muted"


class NotMuted(ModerationError):
    kind = "NotMuted"
    default_message = "User is not muted"


class RateLimited(ModerationError):
    kind = "RateLimited"
    default_message = "Rate limit exceeded"


class InvalidArgument(ModerationError):
    kind = "InvalidArgument"
    default_message = "Invalid argument"
