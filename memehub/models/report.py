"""ContentReport and UserReport models – the report ledger."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from memehub.db.base import Base, BigIntPK
from memehub.utils.text import utcnow


class ContentReport(Base):
    __tablename__ = "content_reports"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reporter_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    target_content_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(10), default="pending", nullable=False)
    moderator_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    moderator_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_taken: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("reporter_id", "target_content_id", name="uq_content_report_reporter_target"),
        Index("idx_content_report_status", "status"),
        Index("idx_content_report_target", "target_content_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ContentReport id={self.id} meme={self.target_content_id} "
            f"status={self.status}>"
        )


class UserReport(Base):
    __tablename__ = "user_reports"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    reporter_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reported_user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reason: Mapped[str] = mapped_column(String(30), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(10), default="pending", nullable=False)
    moderator_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    moderator_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    action_taken: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("reporter_id", "reported_user_id", name="uq_user_report_reporter_target"),
        Index("idx_user_report_status", "status"),
        Index("idx_user_report_reported", "reported_user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserReport id={self.id} user={self.reported_user_id} "
            f"status={self.status}>"
        )
