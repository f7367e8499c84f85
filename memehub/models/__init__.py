"""Import every model so they register on ``Base.metadata``."""

from memehub.models.meme import Comment, Meme
from memehub.models.moderation_action import ModerationAction
from memehub.models.moderation_status import ModerationStatus
from memehub.models.muted_user import MutedUser
from memehub.models.report import ContentReport, UserReport
from memehub.models.user import User, UserRole

__all__ = [
    "Comment",
    "ContentReport",
    "Meme",
    "ModerationAction",
    "ModerationStatus",
    "MutedUser",
    "User",
    "UserReport",
    "UserRole",
]
