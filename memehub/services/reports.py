"""Report ledger – filing, reviewing and listing content and user reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.config import settings
from memehub.db.repositories.meme_repo import MemeRepo
from memehub.db.repositories.report_repo import ContentReportRepo, UserReportRepo
from memehub.db.repositories.user_repo import UserRepo
from memehub.errors import AlreadyReported, InvalidArgument, NotFound, SelfReport
from memehub.models.report import ContentReport, UserReport
from memehub.services.identity import UserDisplay, get_displays, require_caller, require_role
from memehub.utils.enums import (
    ContentAction,
    ContentReportReason,
    ReportStatus,
    Role,
    UserReportAction,
    UserReportReason,
)
from memehub.utils.text import as_utc, utcnow

logger = logging.getLogger(__name__)


# ── Result shapes ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ContentReportView:
    id: int
    target_content_id: int
    meme_title: str | None  # None once the meme is gone
    reason: str
    description: str | None
    status: str
    action_taken: str | None
    moderator_notes: str | None
    created_at: datetime
    reporter: UserDisplay
    moderator: UserDisplay | None


@dataclass(frozen=True)
class UserReportView:
    id: int
    reason: str
    description: str | None
    status: str
    action_taken: str | None
    moderator_notes: str | None
    created_at: datetime
    reporter: UserDisplay
    reported_user: UserDisplay
    moderator: UserDisplay | None


@dataclass(frozen=True)
class ReportedUserSummary:
    user: UserDisplay
    report_count: int
    pending_reports: int


@dataclass(frozen=True)
class MyReport:
    id: int
    target_content_id: int
    meme_title: str | None
    reason: str
    status: str
    created_at: datetime


# ── Duplicate detection ──────────────────────────────────────────────────

_PENDING_MSG = "Your report has already been submitted and is pending review"
_REVIEWED_MSG = "Your report has been submitted and is currently under review"
_CLOSED_MSG = (
    "You have already reported this {target}. "
    "The report was reviewed and {status} by our moderation team"
)


def duplicate_message(status: str, target: str) -> str:
    """User-facing text for a second report; *target* is ``content`` or ``user``."""
    if status == ReportStatus.PENDING.value:
        return _PENDING_MSG
    if status == ReportStatus.REVIEWED.value:
        return _REVIEWED_MSG
    if status in (ReportStatus.RESOLVED.value, ReportStatus.DISMISSED.value):
        return _CLOSED_MSG.format(target=target, status=status)
    return f"You have already reported this {target}"


def _parse(enum_cls, value, what: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidArgument(f"Unknown {what}: {value}") from None


# ── Filing ───────────────────────────────────────────────────────────────


async def file_content_report(
    session: AsyncSession,
    reporter_id: int | None,
    target_content_id: int,
    reason: ContentReportReason | str,
    description: str | None = None,
    now: datetime | None = None,
) -> int:
    """File a report against a meme and return its id."""
    reporter_id = require_caller(reporter_id)
    reason = _parse(ContentReportReason, reason, "report reason")
    repo = ContentReportRepo(session)

    existing = await repo.find_existing(reporter_id, target_content_id)
    if existing is not None:
        raise AlreadyReported(duplicate_message(existing.status, "content"))
    if await MemeRepo(session).get(target_content_id) is None:
        raise NotFound("Meme not found")

    try:
        report = await repo.create(
            reporter_id, target_content_id, reason.value, description, now or utcnow()
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AlreadyReported(duplicate_message(ReportStatus.PENDING.value, "content")) from None

    logger.info("User %d reported meme %d (%s)", reporter_id, target_content_id, reason.value)
    return report.id


async def file_user_report(
    session: AsyncSession,
    reporter_id: int | None,
    reported_user_id: int,
    reason: UserReportReason | str,
    description: str | None = None,
    now: datetime | None = None,
) -> int:
    """File a report against an account and return its id."""
    reporter_id = require_caller(reporter_id)
    if reporter_id == reported_user_id:
        raise SelfReport()
    reason = _parse(UserReportReason, reason, "report reason")
    repo = UserReportRepo(session)

    existing = await repo.find_existing(reporter_id, reported_user_id)
    if existing is not None:
        raise AlreadyReported(duplicate_message(existing.status, "user"))
    if not await UserRepo(session).exists(reported_user_id):
        raise NotFound("User not found")

    try:
        report = await repo.create(
            reporter_id, reported_user_id, reason.value, description, now or utcnow()
        )
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise AlreadyReported(duplicate_message(ReportStatus.PENDING.value, "user")) from None

    logger.info("User %d reported user %d (%s)", reporter_id, reported_user_id, reason.value)
    return report.id


# ── Review ───────────────────────────────────────────────────────────────


async def update_report_status(
    session: AsyncSession,
    caller_id: int | None,
    report_id: int,
    status: ReportStatus | str,
    moderator_notes: str | None = None,
    action_taken: ContentAction | str | None = None,
) -> int:
    """Record a moderator decision on a content report.

    Resolving with ``content_removed`` deletes the meme and its comments in
    the same transaction.
    """
    await require_role(session, caller_id, Role.MODERATOR)
    status = _parse(ReportStatus, status, "report status")
    if action_taken is not None:
        action_taken = _parse(ContentAction, action_taken, "action")

    report = await ContentReportRepo(session).get(report_id)
    if report is None:
        raise NotFound("Report not found")

    report.status = status.value
    report.moderator_id = caller_id
    report.moderator_notes = moderator_notes
    report.action_taken = action_taken.value if action_taken is not None else None

    if action_taken is ContentAction.CONTENT_REMOVED:
        removed = await MemeRepo(session).delete(report.target_content_id)
        if removed:
            logger.info("Meme %d removed via report #%d", report.target_content_id, report_id)

    await session.commit()
    logger.info("Moderator %d set content report #%d to %s", caller_id, report_id, status.value)
    return report.id


async def update_user_report_status(
    session: AsyncSession,
    caller_id: int | None,
    report_id: int,
    status: ReportStatus | str,
    moderator_notes: str | None = None,
    action_taken: UserReportAction | str | None = None,
) -> int:
    await require_role(session, caller_id, Role.MODERATOR)
    status = _parse(ReportStatus, status, "report status")
    if action_taken is not None:
        action_taken = _parse(UserReportAction, action_taken, "action")

    report = await UserReportRepo(session).get(report_id)
    if report is None:
        raise NotFound("Report not found")

    report.status = status.value
    report.moderator_id = caller_id
    report.moderator_notes = moderator_notes
    report.action_taken = action_taken.value if action_taken is not None else None

    await session.commit()
    logger.info("Moderator %d set user report #%d to %s", caller_id, report_id, status.value)
    return report.id


# ── Listing ──────────────────────────────────────────────────────────────


async def list_reports(
    session: AsyncSession,
    caller_id: int | None,
    status: ReportStatus | str | None = None,
    limit: int | None = None,
) -> list[ContentReportView]:
    """Content reports newest first, with reporter, moderator and meme title."""
    await require_role(session, caller_id, Role.MODERATOR)
    if status is not None:
        status = _parse(ReportStatus, status, "report status").value

    reports = await ContentReportRepo(session).list_reports(
        status, limit or settings.REPORT_LIST_LIMIT
    )
    memes = await MemeRepo(session).get_many([r.target_content_id for r in reports])
    displays = await get_displays(
        session,
        [r.reporter_id for r in reports] + [r.moderator_id for r in reports if r.moderator_id],
    )
    return [_content_view(r, memes, displays) for r in reports]


def _content_view(
    report: ContentReport, memes: dict, displays: dict[int, UserDisplay]
) -> ContentReportView:
    meme = memes.get(report.target_content_id)
    return ContentReportView(
        id=report.id,
        target_content_id=report.target_content_id,
        meme_title=meme.title if meme is not None else None,
        reason=report.reason,
        description=report.description,
        status=report.status,
        action_taken=report.action_taken,
        moderator_notes=report.moderator_notes,
        created_at=as_utc(report.created_at),
        reporter=displays[report.reporter_id],
        moderator=displays.get(report.moderator_id) if report.moderator_id else None,
    )


async def list_user_reports(
    session: AsyncSession,
    caller_id: int | None,
    status: ReportStatus | str | None = None,
    limit: int | None = None,
) -> list[UserReportView]:
    await require_role(session, caller_id, Role.MODERATOR)
    if status is not None:
        status = _parse(ReportStatus, status, "report status").value

    reports = await UserReportRepo(session).list_reports(
        status, limit or settings.REPORT_LIST_LIMIT
    )
    ids: list[int] = []
    for r in reports:
        ids += [r.reporter_id, r.reported_user_id]
        if r.moderator_id:
            ids.append(r.moderator_id)
    displays = await get_displays(session, ids)
    return [_user_view(r, displays) for r in reports]


def _user_view(report: UserReport, displays: dict[int, UserDisplay]) -> UserReportView:
    return UserReportView(
        id=report.id,
        reason=report.reason,
        description=report.description,
        status=report.status,
        action_taken=report.action_taken,
        moderator_notes=report.moderator_notes,
        created_at=as_utc(report.created_at),
        reporter=displays[report.reporter_id],
        reported_user=displays[report.reported_user_id],
        moderator=displays.get(report.moderator_id) if report.moderator_id else None,
    )


async def get_reported_users_summary(
    session: AsyncSession, caller_id: int | None
) -> list[ReportedUserSummary]:
    """Per reported user: total and pending report counts, most pending first."""
    await require_role(session, caller_id, Role.MODERATOR)
    counts: dict[int, list[int]] = {}  # user_id -> [total, pending]
    for report in await UserReportRepo(session).list_all():
        entry = counts.setdefault(report.reported_user_id, [0, 0])
        entry[0] += 1
        if report.status == ReportStatus.PENDING.value:
            entry[1] += 1

    displays = await get_displays(session, list(counts))
    summary = [
        ReportedUserSummary(displays[uid], total, pending)
        for uid, (total, pending) in counts.items()
    ]
    # sorted() is stable, so ties keep first-seen order
    summary = sorted(summary, key=lambda s: (-s.pending_reports, -s.report_count))
    return summary


async def list_my_reports(session: AsyncSession, caller_id: int | None) -> list[MyReport]:
    """The caller's own content reports, newest first."""
    caller_id = require_caller(caller_id)
    reports = await ContentReportRepo(session).list_by_reporter(caller_id)
    memes = await MemeRepo(session).get_many([r.target_content_id for r in reports])
    return [
        MyReport(
            id=r.id,
            target_content_id=r.target_content_id,
            meme_title=memes[r.target_content_id].title if r.target_content_id in memes else None,
            reason=r.reason,
            status=r.status,
            created_at=as_utc(r.created_at),
        )
        for r in reports
    ]
