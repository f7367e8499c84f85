"""Centralized inline keyboard builders for every command interaction."""

from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from memehub.utils.enums import ActionType


# ── Helpers ──────────────────────────────────────────────────────────

def _btn(text: str, data: str) -> InlineKeyboardButton:
    """Shortcut to create a callback button."""
    return InlineKeyboardButton(text=text, callback_data=data)


# ── User: Main menu (shown after /start) ────────────────────────────

def build_main_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_btn("📊 My Status", "me:status"), _btn("⚠️ Warnings", "me:warnings")],
        [_btn("📝 My Reports", "me:reports")],
    ])


# ── User: Help menu ─────────────────────────────────────────────────

def build_help_menu(is_moderator: bool) -> InlineKeyboardMarkup:
    rows = [[_btn("📊 My Status", "me:status"), _btn("⚠️ Warnings", "me:warnings")]]
    if is_moderator:
        rows.append([_btn("📥 Pending Reports", "rq:content"), _btn("👤 User Reports", "rq:user")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


# ── User: Report a meme (attached to posted memes) ──────────────────

def build_meme_actions(meme_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_btn("🚩 Spam", f"rp:{meme_id}:spam"), _btn("🚩 Inappropriate", f"rp:{meme_id}:inappropriate")],
        [_btn("🚩 Harassment", f"rp:{meme_id}:harassment"), _btn("🚩 Copyright", f"rp:{meme_id}:copyright")],
    ])


# ── User: Warning acknowledgement ───────────────────────────────────

def build_warning_actions(action_id: int, action_type: str) -> InlineKeyboardMarkup | None:
    """Only warnings can be dismissed by their target; other types get no button."""
    if action_type != ActionType.WARNING.value:
        return None
    return InlineKeyboardMarkup(inline_keyboard=[
        [_btn("✔️ Dismiss", f"wd:{action_id}")],
    ])


# ── Moderator: Content report review ────────────────────────────────

def build_report_review(report_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_btn("👀 Reviewing", f"rr:{report_id}:reviewed"), _btn("🙅 Dismiss", f"rr:{report_id}:dismissed")],
        [_btn("✅ Resolve", f"rr:{report_id}:resolved"), _btn("🗑 Remove Meme", f"rr:{report_id}:removed")],
    ])


# ── Moderator: User report review ───────────────────────────────────

def build_user_report_review(report_id: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [_btn("⚠️ Warn", f"ur:{report_id}:warn"), _btn("🔇 Mute", f"ur:{report_id}:mute")],
        [_btn("⛔ Suspend 7d", f"ur:{report_id}:suspend"), _btn("🙅 Dismiss", f"ur:{report_id}:dismiss")],
    ])


# ── Moderator: Actions after /modstatus ─────────────────────────────

def build_moderation_actions(user_id: int, is_muted: bool, is_suspended: bool) -> InlineKeyboardMarkup:
    row = []
    if is_muted:
        row.append(_btn("🔊 Unmute", f"um:{user_id}"))
    if is_suspended:
        row.append(_btn("✅ Unsuspend", f"us:{user_id}"))
    rows = [row] if row else []
    rows.append([_btn("📜 History", f"hi:{user_id}")])
    return InlineKeyboardMarkup(inline_keyboard=rows)
