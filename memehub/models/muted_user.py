"""MutedUser model – per-viewer content filter, separate from enforcement mutes."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from memehub.db.base import Base, BigIntPK
from memehub.utils.text import utcnow


class MutedUser(Base):
    __tablename__ = "muted_users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    muted_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "muted_user_id", name="uq_muted_users_pair"),
    )

    def __repr__(self) -> str:
        return f"<MutedUser user={self.user_id} muted={self.muted_user_id}>"
