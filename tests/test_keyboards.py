"""Tests for keyboard builders and callback data conventions."""

from __future__ import annotations

import re

from memehub.services.keyboards import (
    build_help_menu,
    build_main_menu,
    build_meme_actions,
    build_moderation_actions,
    build_report_review,
    build_user_report_review,
    build_warning_actions,
)


# ── Helpers ──────────────────────────────────────────────────────────


def _all_buttons(kb):
    """Flatten all buttons from an InlineKeyboardMarkup."""
    return [btn for row in kb.inline_keyboard for btn in row]


def _all_callback_data(kb):
    """Get all callback_data values from a keyboard."""
    return [btn.callback_data for btn in _all_buttons(kb) if btn.callback_data]


# ── User keyboards ───────────────────────────────────────────────────


def test_main_menu_callbacks():
    assert _all_callback_data(build_main_menu()) == ["me:status", "me:warnings", "me:reports"]


def test_help_menu_regular_user():
    data = _all_callback_data(build_help_menu(False))
    assert "rq:content" not in data


def test_help_menu_moderator():
    data = _all_callback_data(build_help_menu(True))
    assert {"rq:content", "rq:user"} <= set(data)


def test_meme_actions_match_report_pattern():
    data = _all_callback_data(build_meme_actions(42))
    assert data == ["rp:42:spam", "rp:42:inappropriate", "rp:42:harassment", "rp:42:copyright"]
    assert all(re.match(r"^rp:\d+:\w+$", d) for d in data)


def test_warning_actions_only_for_warnings():
    assert _all_callback_data(build_warning_actions(7, "warning")) == ["wd:7"]
    assert build_warning_actions(7, "mute") is None
    assert build_warning_actions(7, "suspend") is None


# ── Moderator keyboards ──────────────────────────────────────────────


def test_report_review():
    assert _all_callback_data(build_report_review(3)) == [
        "rr:3:reviewed", "rr:3:dismissed", "rr:3:resolved", "rr:3:removed",
    ]


def test_user_report_review():
    assert _all_callback_data(build_user_report_review(3)) == [
        "ur:3:warn", "ur:3:mute", "ur:3:suspend", "ur:3:dismiss",
    ]


def test_moderation_actions_clean_user():
    assert _all_callback_data(build_moderation_actions(9, False, False)) == ["hi:9"]


def test_moderation_actions_restricted_user():
    assert _all_callback_data(build_moderation_actions(9, True, True)) == ["um:9", "us:9", "hi:9"]


def test_all_callback_data_within_64_bytes():
    """Telegram rejects callback_data longer than 64 bytes."""
    big = 10**15
    keyboards = [
        build_main_menu(),
        build_help_menu(True),
        build_meme_actions(big),
        build_warning_actions(big, "warning"),
        build_report_review(big),
        build_user_report_review(big),
        build_moderation_actions(big, True, True),
    ]
    for kb in keyboards:
        for data in _all_callback_data(kb):
            assert len(data.encode()) <= 64, data
