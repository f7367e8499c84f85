"""Report repositories – content reports and user reports."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.models.report import ContentReport, UserReport


class ContentReportRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def find_existing(self, reporter_id: int, target_content_id: int) -> ContentReport | None:
        result = await self._s.execute(
            select(ContentReport).where(
                ContentReport.reporter_id == reporter_id,
                ContentReport.target_content_id == target_content_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        reporter_id: int,
        target_content_id: int,
        reason: str,
        description: str | None,
        created_at: datetime,
    ) -> ContentReport:
        report = ContentReport(
            reporter_id=reporter_id,
            target_content_id=target_content_id,
            reason=reason,
            description=description,
            status="pending",
            created_at=created_at,
        )
        self._s.add(report)
        await self._s.flush()
        return report

    async def get(self, report_id: int) -> ContentReport | None:
        result = await self._s.execute(select(ContentReport).where(ContentReport.id == report_id))
        return result.scalar_one_or_none()

    async def list_reports(self, status: str | None = None, limit: int = 50) -> list[ContentReport]:
        """Newest first, optionally filtered by status."""
        stmt = select(ContentReport)
        if status is not None:
            stmt = stmt.where(ContentReport.status == status)
        result = await self._s.execute(
            stmt.order_by(ContentReport.created_at.desc(), ContentReport.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def list_by_reporter(self, reporter_id: int) -> list[ContentReport]:
        result = await self._s.execute(
            select(ContentReport)
            .where(ContentReport.reporter_id == reporter_id)
            .order_by(ContentReport.created_at.desc(), ContentReport.id.desc())
        )
        return list(result.scalars().all())


class UserReportRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def find_existing(self, reporter_id: int, reported_user_id: int) -> UserReport | None:
        result = await self._s.execute(
            select(UserReport).where(
                UserReport.reporter_id == reporter_id,
                UserReport.reported_user_id == reported_user_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        reporter_id: int,
        reported_user_id: int,
        reason: str,
        description: str | None,
        created_at: datetime,
    ) -> UserReport:
        report = UserReport(
            reporter_id=reporter_id,
            reported_user_id=reported_user_id,
            reason=reason,
            description=description,
            status="pending",
            created_at=created_at,
        )
        self._s.add(report)
        await self._s.flush()
        return report

    async def get(self, report_id: int) -> UserReport | None:
        result = await self._s.execute(select(UserReport).where(UserReport.id == report_id))
        return result.scalar_one_or_none()

    async def list_reports(self, status: str | None = None, limit: int = 50) -> list[UserReport]:
        """Newest first, optionally filtered by status."""
        stmt = select(UserReport)
        if status is not None:
            stmt = stmt.where(UserReport.status == status)
        result = await self._s.execute(
            stmt.order_by(UserReport.created_at.desc(), UserReport.id.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[UserReport]:
        """Every user report in insertion order."""
        result = await self._s.execute(select(UserReport).order_by(UserReport.id.asc()))
        return list(result.scalars().all())
