"""User and UserRole models – the identity records the moderation core reads."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from memehub.db.base import Base, BigIntPK
from memehub.utils.text import utcnow


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    @property
    def label(self) -> str:
        if self.username:
            return f"@{self.username}"
        return self.display_name or str(self.user_id)

    def __repr__(self) -> str:
        return f"<User {self.user_id} username={self.username}>"


class UserRole(Base):
    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(10), nullable=False)  # user / moderator / admin
    assigned_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    assigned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("idx_user_roles_role", "role"),)

    def __repr__(self) -> str:
        return f"<UserRole user={self.user_id} role={self.role}>"
