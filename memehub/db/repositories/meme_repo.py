"""Content store repositories – memes and their comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.models.meme import Comment, Meme


class MemeRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def get(self, meme_id: int) -> Meme | None:
        result = await self._s.execute(select(Meme).where(Meme.id == meme_id))
        return result.scalar_one_or_none()

    async def get_many(self, meme_ids: list[int]) -> dict[int, Meme]:
        if not meme_ids:
            return {}
        result = await self._s.execute(select(Meme).where(Meme.id.in_(set(meme_ids))))
        return {m.id: m for m in result.scalars().all()}

    async def create(
        self,
        author_id: int,
        title: str,
        file_id: str,
        tags: list[str],
        created_at: datetime,
    ) -> Meme:
        meme = Meme(
            author_id=author_id,
            title=title,
            file_id=file_id,
            tags=",".join(tags),
            comments=0,
            created_at=created_at,
        )
        self._s.add(meme)
        await self._s.flush()
        return meme

    async def patch(self, meme_id: int, **fields: object) -> Meme | None:
        """Update selected columns of a meme; returns None if it is gone."""
        meme = await self.get(meme_id)
        if meme is None:
            return None
        for key, value in fields.items():
            setattr(meme, key, value)
        await self._s.flush()
        return meme

    async def delete(self, meme_id: int) -> bool:
        """Delete a meme together with its comments.

        Returns True if the meme existed.
        """
        meme = await self.get(meme_id)
        if meme is None:
            return False
        await self._s.execute(delete(Comment).where(Comment.meme_id == meme_id))
        await self._s.delete(meme)
        await self._s.flush()
        return True

    async def recent_by_author(self, author_id: int, since: datetime) -> list[datetime]:
        """Creation times of the author's memes posted at or after *since*, oldest first."""
        result = await self._s.execute(
            select(Meme.created_at)
            .where(Meme.author_id == author_id, Meme.created_at >= since)
            .order_by(Meme.created_at.asc())
        )
        return list(result.scalars().all())

    async def count_by_author(self, author_id: int) -> int:
        result = await self._s.execute(
            select(func.count()).select_from(Meme).where(Meme.author_id == author_id)
        )
        return result.scalar_one()


class CommentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def get(self, comment_id: int) -> Comment | None:
        result = await self._s.execute(select(Comment).where(Comment.id == comment_id))
        return result.scalar_one_or_none()

    async def create(
        self,
        meme_id: int,
        author_id: int,
        content: str,
        parent_id: int | None,
        created_at: datetime,
    ) -> Comment:
        comment = Comment(
            meme_id=meme_id,
            author_id=author_id,
            content=content,
            parent_id=parent_id,
            created_at=created_at,
        )
        self._s.add(comment)
        await self._s.flush()
        return comment

    async def delete(self, comment: Comment) -> None:
        await self._s.delete(comment)
        await self._s.flush()

    async def list_for_meme(self, meme_id: int) -> list[Comment]:
        result = await self._s.execute(
            select(Comment)
            .where(Comment.meme_id == meme_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(result.scalars().all())
