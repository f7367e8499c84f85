"""ModerationAction model – append-only history of moderator actions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from memehub.db.base import Base, BigIntPK
from memehub.utils.text import utcnow


class ModerationAction(Base):
    __tablename__ = "moderation_actions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    moderator_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    action_type: Mapped[str] = mapped_column(String(10), nullable=False)  # warning/strike/mute/suspend
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    related_report_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    related_report_type: Mapped[str | None] = mapped_column(String(10), nullable=True)  # content/user
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    seen_by_user: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_mod_action_user", "user_id"),
        Index("idx_mod_action_user_active", "user_id", "is_active"),
        Index("idx_mod_action_type", "action_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<ModerationAction id={self.id} user={self.user_id} "
            f"type={self.action_type} active={self.is_active}>"
        )
