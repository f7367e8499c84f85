"""Unified callback query handler for all inline buttons."""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from aiogram import F, Router
from aiogram.types import CallbackQuery
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.db.repositories.report_repo import UserReportRepo
from memehub.handlers.account import render_status, send_warnings
from memehub.handlers.moderation import render_history
from memehub.handlers.reports import render_my_reports, send_content_queue, send_user_queue
from memehub.services import action_log, moderation, reports
from memehub.services.identity import resolve_caller_id
from memehub.utils.enums import (
    ContentAction,
    ReportKind,
    ReportStatus,
    SuspensionDuration,
    UserReportAction,
)

logger = logging.getLogger(__name__)

callbacks_router = Router(name="callbacks")

# rr:<report_id>:<choice> → (status, action_taken)
_CONTENT_DECISIONS = {
    "reviewed": (ReportStatus.REVIEWED, None),
    "dismissed": (ReportStatus.DISMISSED, ContentAction.NONE),
    "resolved": (ReportStatus.RESOLVED, ContentAction.NONE),
    "removed": (ReportStatus.RESOLVED, ContentAction.CONTENT_REMOVED),
}


async def _drop_keyboard(callback: CallbackQuery) -> None:
    try:
        await callback.message.edit_reply_markup(reply_markup=None)  # type: ignore[union-attr]
    except Exception:
        logger.debug("Could not remove keyboard from message", exc_info=True)


# ── Own account ──────────────────────────────────────────────────────


@callbacks_router.callback_query(F.data == "me:status")
async def cb_my_status(callback: CallbackQuery, session: AsyncSession, redis: aioredis.Redis) -> None:
    text = await render_status(session, redis, resolve_caller_id(callback.from_user))
    await callback.message.answer(text)  # type: ignore[union-attr]
    await callback.answer()


@callbacks_router.callback_query(F.data == "me:warnings")
async def cb_my_warnings(callback: CallbackQuery, session: AsyncSession) -> None:
    await send_warnings(callback.message, session, resolve_caller_id(callback.from_user))  # type: ignore[arg-type]
    await callback.answer()


@callbacks_router.callback_query(F.data == "me:reports")
async def cb_my_reports(callback: CallbackQuery, session: AsyncSession) -> None:
    text = await render_my_reports(session, resolve_caller_id(callback.from_user))
    await callback.message.answer(text)  # type: ignore[union-attr]
    await callback.answer()


@callbacks_router.callback_query(F.data.regexp(r"^wd:\d+$"))
async def cb_dismiss_warning(callback: CallbackQuery, session: AsyncSession) -> None:
    action_id = int(callback.data.split(":")[1])  # type: ignore[union-attr]
    await action_log.dismiss_warning(session, resolve_caller_id(callback.from_user), action_id)
    await _drop_keyboard(callback)
    await callback.answer("Warning dismissed.")


# ── Reporting from a meme card ───────────────────────────────────────


@callbacks_router.callback_query(F.data.regexp(r"^rp:\d+:\w+$"))
async def cb_report_meme(callback: CallbackQuery, session: AsyncSession) -> None:
    _, meme_id, reason = callback.data.split(":")  # type: ignore[union-attr]
    await reports.file_content_report(
        session, resolve_caller_id(callback.from_user), int(meme_id), reason
    )
    await callback.answer("Thanks — your report was submitted.", show_alert=True)


# ── Moderator: queues ────────────────────────────────────────────────


@callbacks_router.callback_query(F.data.in_({"rq:content", "rq:user"}))
async def cb_queue(callback: CallbackQuery, session: AsyncSession) -> None:
    caller_id = resolve_caller_id(callback.from_user)
    if callback.data == "rq:content":
        await send_content_queue(callback.message, session, caller_id, ReportStatus.PENDING.value)  # type: ignore[arg-type]
    else:
        await send_user_queue(callback.message, session, caller_id, ReportStatus.PENDING.value)  # type: ignore[arg-type]
    await callback.answer()


# ── Moderator: content report decisions ──────────────────────────────


@callbacks_router.callback_query(F.data.regexp(r"^rr:\d+:\w+$"))
async def cb_review_content(callback: CallbackQuery, session: AsyncSession) -> None:
    _, report_id, choice = callback.data.split(":")  # type: ignore[union-attr]
    decision = _CONTENT_DECISIONS.get(choice)
    if decision is None:
        await callback.answer("Unknown action.", show_alert=True)
        return

    status, action = decision
    await reports.update_report_status(
        session, resolve_caller_id(callback.from_user), int(report_id), status, action_taken=action
    )
    if status is not ReportStatus.REVIEWED:
        await _drop_keyboard(callback)
    label = "Meme removed" if action is ContentAction.CONTENT_REMOVED else f"Marked {status.value}"
    await callback.answer(f"{label}.")


# ── Moderator: user report decisions ─────────────────────────────────


@callbacks_router.callback_query(F.data.regexp(r"^ur:\d+:\w+$"))
async def cb_review_user(callback: CallbackQuery, session: AsyncSession, redis: aioredis.Redis) -> None:
    """Act on a user report and resolve it in one tap."""
    _, raw_id, choice = callback.data.split(":")  # type: ignore[union-attr]
    report_id = int(raw_id)
    caller_id = resolve_caller_id(callback.from_user)

    if choice == "dismiss":
        await reports.update_user_report_status(
            session, caller_id, report_id, ReportStatus.DISMISSED, action_taken=UserReportAction.NONE
        )
        await _drop_keyboard(callback)
        await callback.answer("Report dismissed.")
        return

    report = await UserReportRepo(session).get(report_id)
    if report is None:
        await callback.answer("Report not found.", show_alert=True)
        return

    target = report.reported_user_id
    reason = f"Reported for {report.reason}"
    related = {"related_report_id": report_id, "related_report_type": ReportKind.USER}
    if choice == "warn":
        await moderation.issue_warning(session, caller_id, target, reason, redis_client=redis, **related)
        action = UserReportAction.WARNING
    elif choice == "mute":
        await moderation.mute_user(session, caller_id, target, reason, redis_client=redis, **related)
        action = UserReportAction.USER_MUTED
    elif choice == "suspend":
        await moderation.suspend_user(
            session, caller_id, target, reason, SuspensionDuration.SEVEN_DAYS,
            redis_client=redis, **related,
        )
        action = UserReportAction.USER_SUSPENDED
    else:
        await callback.answer("Unknown action.", show_alert=True)
        return

    await reports.update_user_report_status(
        session, caller_id, report_id, ReportStatus.RESOLVED, action_taken=action
    )
    await _drop_keyboard(callback)
    await callback.answer(f"Done: {action.value.replace('_', ' ')}.")


# ── Moderator: status card actions ───────────────────────────────────


@callbacks_router.callback_query(F.data.regexp(r"^um:\d+$"))
async def cb_unmute(callback: CallbackQuery, session: AsyncSession, redis: aioredis.Redis) -> None:
    user_id = int(callback.data.split(":")[1])  # type: ignore[union-attr]
    await moderation.unmute_user(session, resolve_caller_id(callback.from_user), user_id, redis)
    await _drop_keyboard(callback)
    await callback.answer("Unmuted.")


@callbacks_router.callback_query(F.data.regexp(r"^us:\d+$"))
async def cb_unsuspend(callback: CallbackQuery, session: AsyncSession, redis: aioredis.Redis) -> None:
    user_id = int(callback.data.split(":")[1])  # type: ignore[union-attr]
    await moderation.unsuspend_user(session, resolve_caller_id(callback.from_user), user_id, redis)
    await _drop_keyboard(callback)
    await callback.answer("Suspension lifted.")


@callbacks_router.callback_query(F.data.regexp(r"^hi:\d+$"))
async def cb_history(callback: CallbackQuery, session: AsyncSession) -> None:
    user_id = int(callback.data.split(":")[1])  # type: ignore[union-attr]
    text = await render_history(session, resolve_caller_id(callback.from_user), user_id)
    await callback.message.answer(text)  # type: ignore[union-attr]
    await callback.answer()
