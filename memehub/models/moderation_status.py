"""ModerationStatus model – per-user aggregate enforcement record."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from memehub.db.base import Base, BigIntPK


class ModerationStatus(Base):
    __tablename__ = "moderation_status"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    warning_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    strike_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_muted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_suspended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # NULL while suspended = indefinite
    suspended_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_warning_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_strike_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<ModerationStatus user={self.user_id} warnings={self.warning_count} "
            f"strikes={self.strike_count} muted={self.is_muted} suspended={self.is_suspended}>"
        )
