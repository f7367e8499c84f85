"""Report handlers – filing reports and the moderator review queue."""

from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from aiogram.utils.text_decorations import html_decoration as hd
from sqlalchemy.ext.asyncio import AsyncSession

from memehub.services import reports
from memehub.services.identity import resolve_caller_id
from memehub.services.keyboards import build_report_review, build_user_report_review
from memehub.services.reports import ContentReportView, UserReportView
from memehub.utils.enums import (
    ContentAction,
    ContentReportReason,
    ReportStatus,
    UserReportAction,
    UserReportReason,
)
from memehub.utils.text import format_date, truncate

logger = logging.getLogger(__name__)

reports_router = Router(name="reports")

MAX_REVIEW_CARDS = 10

_OPEN = {ReportStatus.PENDING.value, ReportStatus.REVIEWED.value}
_STATUS_ICONS = {"pending": "🕓", "reviewed": "👀", "resolved": "✅", "dismissed": "🙅"}


# ── Formatting ────────────────────────────────────────────────────────


def format_content_report(view: ContentReportView) -> str:
    title = hd.quote(view.meme_title) if view.meme_title else "<i>(removed)</i>"
    lines = [
        f"{_STATUS_ICONS.get(view.status, '')} <b>Report #{view.id}</b> · {view.status}",
        f"Meme <code>#{view.target_content_id}</code>: {title}",
        f"Reason: <b>{view.reason}</b>",
        f"By {hd.quote(view.reporter.label)} on {format_date(view.created_at)}",
    ]
    if view.description:
        lines.append(f"“{hd.quote(truncate(view.description, 200))}”")
    if view.moderator is not None:
        action = f" ({view.action_taken})" if view.action_taken else ""
        lines.append(f"Handled by {hd.quote(view.moderator.label)}{action}")
    return "\n".join(lines)


def format_user_report(view: UserReportView) -> str:
    lines = [
        f"{_STATUS_ICONS.get(view.status, '')} <b>User report #{view.id}</b> · {view.status}",
        f"Reported: {hd.quote(view.reported_user.label)} "
        f"(<code>{view.reported_user.user_id}</code>)",
        f"Reason: <b>{view.reason}</b>",
        f"By {hd.quote(view.reporter.label)} on {format_date(view.created_at)}",
    ]
    if view.description:
        lines.append(f"“{hd.quote(truncate(view.description, 200))}”")
    if view.moderator is not None:
        action = f" ({view.action_taken})" if view.action_taken else ""
        lines.append(f"Handled by {hd.quote(view.moderator.label)}{action}")
    return "\n".join(lines)


def _split_report_args(args: str | None) -> tuple[int | None, str, str]:
    """``<target_id> <reason> [details]`` → (target, reason, details)."""
    parts = (args or "").strip().split(maxsplit=2)
    if len(parts) < 2:
        return None, "", ""
    try:
        target = int(parts[0])
    except ValueError:
        return None, "", ""
    return target, parts[1].lower(), parts[2] if len(parts) > 2 else ""


def parse_resolution(args: str | None, actions: set[str]) -> tuple[int, str, str | None, str | None] | None:
    """``<report_id> <status> [action] [notes]`` → (id, status, action, notes)."""
    parts = (args or "").strip().split(maxsplit=2)
    if len(parts) < 2:
        return None
    try:
        report_id = int(parts[0])
    except ValueError:
        return None
    status = parts[1].lower()
    action = None
    notes = None
    if len(parts) > 2:
        rest = parts[2].split(maxsplit=1)
        if rest[0].lower() in actions:
            action = rest[0].lower()
            notes = rest[1] if len(rest) > 1 else None
        else:
            notes = parts[2]
    return report_id, status, action, notes


# ── Filing ────────────────────────────────────────────────────────────


@reports_router.message(Command("report"))
async def cmd_report(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /report <meme_id> <reason> [details]"""
    meme_id, reason, details = _split_report_args(command.args)
    if meme_id is None:
        reasons = ", ".join(r.value for r in ContentReportReason)
        await message.answer(f"Usage: /report &lt;meme_id&gt; &lt;reason&gt; [details]\nReasons: {reasons}")
        return

    report_id = await reports.file_content_report(
        session, resolve_caller_id(message.from_user), meme_id, reason, details or None
    )
    await message.answer(
        f"🚩 Thanks — report <code>#{report_id}</code> was submitted for review."
    )


@reports_router.message(Command("reportuser"))
async def cmd_reportuser(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /reportuser <user_id> <reason> [details]"""
    user_id, reason, details = _split_report_args(command.args)
    if user_id is None:
        reasons = ", ".join(r.value for r in UserReportReason)
        await message.answer(f"Usage: /reportuser &lt;user_id&gt; &lt;reason&gt; [details]\nReasons: {reasons}")
        return

    report_id = await reports.file_user_report(
        session, resolve_caller_id(message.from_user), user_id, reason, details or None
    )
    await message.answer(
        f"🚩 Thanks — user report <code>#{report_id}</code> was submitted for review."
    )


@reports_router.message(Command("myreports"))
async def cmd_myreports(message: Message, session: AsyncSession) -> None:
    await message.answer(await render_my_reports(session, resolve_caller_id(message.from_user)))


async def render_my_reports(session: AsyncSession, caller_id: int | None) -> str:
    mine = await reports.list_my_reports(session, caller_id)
    if not mine:
        return "You haven't reported anything."
    lines = ["📝 <b>Your reports</b>", ""]
    for r in mine:
        title = hd.quote(truncate(r.meme_title, 40)) if r.meme_title else "<i>(removed)</i>"
        lines.append(
            f"{_STATUS_ICONS.get(r.status, '')} #{r.id} · meme <code>#{r.target_content_id}</code> "
            f"{title} · {r.reason} · {r.status}"
        )
    return "\n".join(lines)


# ── Review queue (moderators) ─────────────────────────────────────────


async def send_content_queue(
    message: Message, session: AsyncSession, caller_id: int | None, status: str | None
) -> None:
    views = await reports.list_reports(session, caller_id, status)
    if not views:
        await message.answer("No reports. 🎉")
        return

    await message.answer(f"📥 <b>Content reports</b> ({len(views)})")
    for view in views[:MAX_REVIEW_CARDS]:
        kb = build_report_review(view.id) if view.status in _OPEN else None
        await message.answer(format_content_report(view), reply_markup=kb)
    if len(views) > MAX_REVIEW_CARDS:
        await message.answer(f"…and {len(views) - MAX_REVIEW_CARDS} more.")


async def send_user_queue(
    message: Message, session: AsyncSession, caller_id: int | None, status: str | None
) -> None:
    views = await reports.list_user_reports(session, caller_id, status)
    if not views:
        await message.answer("No user reports. 🎉")
        return

    await message.answer(f"👤 <b>User reports</b> ({len(views)})")
    for view in views[:MAX_REVIEW_CARDS]:
        kb = build_user_report_review(view.id) if view.status in _OPEN else None
        await message.answer(format_user_report(view), reply_markup=kb)
    if len(views) > MAX_REVIEW_CARDS:
        await message.answer(f"…and {len(views) - MAX_REVIEW_CARDS} more.")


@reports_router.message(Command("reports"))
async def cmd_reports(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /reports [pending|reviewed|resolved|dismissed]"""
    status = (command.args or "").strip().lower() or None
    await send_content_queue(message, session, resolve_caller_id(message.from_user), status)


@reports_router.message(Command("userreports"))
async def cmd_userreports(message: Message, command: CommandObject, session: AsyncSession) -> None:
    status = (command.args or "").strip().lower() or None
    await send_user_queue(message, session, resolve_caller_id(message.from_user), status)


@reports_router.message(Command("reported"))
async def cmd_reported(message: Message, session: AsyncSession) -> None:
    """Most reported users, most pending reports first."""
    summary = await reports.get_reported_users_summary(session, resolve_caller_id(message.from_user))
    if not summary:
        await message.answer("Nobody has been reported.")
        return

    lines = ["🚨 <b>Reported users</b>", ""]
    for entry in summary[:20]:
        lines.append(
            f"• {hd.quote(entry.user.label)} (<code>{entry.user.user_id}</code>) — "
            f"{entry.pending_reports} pending / {entry.report_count} total"
        )
    await message.answer("\n".join(lines))


@reports_router.message(Command("resolve"))
async def cmd_resolve(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /resolve <report_id> <status> [action] [notes]"""
    parsed = parse_resolution(command.args, {a.value for a in ContentAction})
    if parsed is None:
        await message.answer(
            "Usage: /resolve &lt;report_id&gt; &lt;status&gt; [action] [notes]\n"
            f"Actions: {', '.join(a.value for a in ContentAction)}"
        )
        return

    report_id, status, action, notes = parsed
    await reports.update_report_status(
        session, resolve_caller_id(message.from_user), report_id, status, notes, action
    )
    await message.answer(f"✅ Report <code>#{report_id}</code> marked <b>{status}</b>.")


@reports_router.message(Command("resolveuser"))
async def cmd_resolveuser(message: Message, command: CommandObject, session: AsyncSession) -> None:
    """Usage: /resolveuser <report_id> <status> [action] [notes]"""
    parsed = parse_resolution(command.args, {a.value for a in UserReportAction})
    if parsed is None:
        await message.answer(
            "Usage: /resolveuser &lt;report_id&gt; &lt;status&gt; [action] [notes]\n"
            f"Actions: {', '.join(a.value for a in UserReportAction)}"
        )
        return

    report_id, status, action, notes = parsed
    await reports.update_user_report_status(
        session, resolve_caller_id(message.from_user), report_id, status, notes, action
    )
    await message.answer(f"✅ User report <code>#{report_id}</code> marked <b>{status}</b>.")
