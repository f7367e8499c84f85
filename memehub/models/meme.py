"""Meme and Comment models – the content store the moderation core acts on."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from memehub.db.base import Base, BigIntPK
from memehub.utils.text import utcnow


class Meme(Base):
    __tablename__ = "memes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    author_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_id: Mapped[str] = mapped_column(String(255), nullable=False)  # opaque media reference
    tags: Mapped[str] = mapped_column(Text, default="", nullable=False)  # comma-joined
    comments: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (Index("idx_memes_author_created", "author_id", "created_at"),)

    @property
    def tag_list(self) -> list[str]:
        return [t for t in self.tags.split(",") if t]

    def __repr__(self) -> str:
        return f"<Meme id={self.id} author={self.author_id} title={self.title!r}>"


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    meme_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    author_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    parent_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("idx_comments_meme", "meme_id"),
        Index("idx_comments_parent", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<Comment id={self.id} meme={self.meme_id} parent={self.parent_id}>"
