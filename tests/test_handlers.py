"""Tests for bot handlers, called directly with mocked Telegram objects."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from memehub.db.repositories.action_repo import ActionRepo
from memehub.db.repositories.meme_repo import MemeRepo
from memehub.errors import AlreadyReported, Forbidden, Muted
from memehub.handlers.account import cmd_block, cmd_status, cmd_warnings
from memehub.handlers.callbacks import cb_dismiss_warning, cb_review_content, cb_review_user
from memehub.handlers.content import cmd_comment, cmd_limits, on_photo, split_caption
from memehub.handlers.errors import on_moderation_error
from memehub.handlers.moderation import (
    _resolve_target_user,
    cmd_history,
    cmd_modstatus,
    cmd_suspend,
    cmd_warn,
)
from memehub.handlers.reports import cmd_report, cmd_reports, parse_resolution
from memehub.handlers.start import cmd_help
from memehub.services.moderation import get_status, issue_warning, mute_user, suspend_user
from memehub.services.mutes import list_muted
from memehub.services.reports import file_content_report, file_user_report, list_user_reports
from tests.conftest import ALICE, BOB, MODERATOR, answers


# ── Parsing helpers ──────────────────────────────────────────────────


def test_split_caption():
    assert split_caption("When the code works #dev #Mood") == ("When the code works", ["dev", "Mood"])
    assert split_caption("#onlytags") == ("", ["onlytags"])


def test_parse_resolution_with_action_and_notes():
    actions = {"none", "warning", "content_removed"}
    assert parse_resolution("5 resolved content_removed nsfw meme", actions) == (
        5, "resolved", "content_removed", "nsfw meme",
    )


def test_parse_resolution_notes_only():
    assert parse_resolution("5 dismissed looks fine", {"none"}) == (5, "dismissed", None, "looks fine")
    assert parse_resolution("5", {"none"}) is None
    assert parse_resolution("x resolved", {"none"}) is None


def test_resolve_target_from_args(make_message):
    msg = make_message("/warn 200 spam links")
    assert _resolve_target_user(msg, "200 spam links") == (200, "spam links")
    assert _resolve_target_user(msg, "bob spam") == (None, "")


def test_resolve_target_from_reply(make_message):
    msg = make_message("/warn spam", reply_to_user_id=BOB)
    assert _resolve_target_user(msg, "spam") == (BOB, "spam")


# ── Content ──────────────────────────────────────────────────────────


async def test_photo_becomes_meme(session, users, fake_redis, make_message):
    photo = [MagicMock(file_id="small"), MagicMock(file_id="large")]
    msg = make_message(caption="Monday again #mood", photo=photo)

    await on_photo(msg, session, fake_redis)

    text = answers(msg)[0]
    assert "posted" in text
    kb = msg.answer.await_args.kwargs["reply_markup"]
    assert kb.inline_keyboard[0][0].callback_data.startswith("rp:")
    meme = (await MemeRepo(session).get_many([1]))[1]
    assert meme.file_id == "large"
    assert meme.tags == "mood"


async def test_photo_without_caption(session, users, fake_redis, make_message):
    msg = make_message(caption=None, photo=[MagicMock(file_id="f")])
    await on_photo(msg, session, fake_redis)
    assert "caption" in answers(msg)[0]
    assert await MemeRepo(session).count_by_author(ALICE) == 0


async def test_muted_user_photo_raises(session, users, fake_redis, make_message, now):
    await mute_user(session, MODERATOR, ALICE, "spam", now=now)
    msg = make_message(caption="hi", photo=[MagicMock(file_id="f")])
    with pytest.raises(Muted):
        await on_photo(msg, session, fake_redis)


async def test_comment_usage(session, users, fake_redis, make_message, make_command):
    msg = make_message("/comment")
    await cmd_comment(msg, make_command(None), session, fake_redis)
    assert answers(msg) == ["Usage: /comment &lt;meme_id&gt; &lt;text&gt;"]


async def test_comment(session, meme, fake_redis, make_message, make_command):
    msg = make_message()
    await cmd_comment(msg, make_command(f"{meme} so true"), session, fake_redis)
    assert "Comment <code>#1</code> added" in answers(msg)[0]


async def test_limits(session, users, make_message):
    msg = make_message("/limits")
    await cmd_limits(msg, session)
    assert answers(msg) == ["Posts this hour: <b>0/5</b>"]


# ── Moderation commands ──────────────────────────────────────────────


async def test_warn_usage(session, users, fake_redis, make_message, make_command):
    msg = make_message(from_user_id=MODERATOR)
    await cmd_warn(msg, make_command("200"), session, fake_redis)
    assert answers(msg)[0].startswith("Usage: /warn")


async def test_warn(session, users, fake_redis, make_message, make_command):
    msg = make_message(from_user_id=MODERATOR)
    await cmd_warn(msg, make_command(f"{BOB} stop spamming"), session, fake_redis)
    assert (await get_status(session, BOB)).warning_count == 1
    assert f"issued to <code>{BOB}</code>" in answers(msg)[0]


async def test_warn_by_reply(session, users, fake_redis, make_message, make_command):
    msg = make_message(from_user_id=MODERATOR, reply_to_user_id=BOB)
    await cmd_warn(msg, make_command("rude"), session, fake_redis)
    history = await ActionRepo(session).list_for_user(BOB)
    assert history[0].reason == "rude"


async def test_warn_by_regular_user(session, users, fake_redis, make_message, make_command):
    msg = make_message(from_user_id=ALICE)
    with pytest.raises(Forbidden):
        await cmd_warn(msg, make_command(f"{BOB} stop"), session, fake_redis)


async def test_suspend_invalid_duration(session, users, fake_redis, make_message, make_command):
    msg = make_message(from_user_id=MODERATOR)
    await cmd_suspend(msg, make_command(f"{BOB} 3d raid"), session, fake_redis)
    assert "Invalid duration" in answers(msg)[0]
    assert (await get_status(session, BOB)).is_suspended is False


async def test_suspend_forever(session, users, fake_redis, make_message, make_command):
    msg = make_message(from_user_id=MODERATOR)
    await cmd_suspend(msg, make_command(f"{BOB} forever ban evasion"), session, fake_redis)
    assert answers(msg) == [f"⛔ User <code>{BOB}</code> suspended indefinitely."]
    history = await ActionRepo(session).list_for_user(BOB)
    assert history[0].reason == "ban evasion"


async def test_modstatus_card(session, users, make_message, make_command, now):
    await suspend_user(session, MODERATOR, BOB, "x", "indefinite", now=now)
    msg = make_message(from_user_id=MODERATOR)

    await cmd_modstatus(msg, make_command(f"{BOB} {ALICE}"), session)

    assert msg.answer.await_count == 2
    first = msg.answer.await_args_list[0]
    assert "@bob" in first.args[0]
    data = [b.callback_data for row in first.kwargs["reply_markup"].inline_keyboard for b in row]
    assert data == [f"us:{BOB}", f"hi:{BOB}"]


async def test_modstatus_hides_unsuspend_after_lapse(
    session, users, make_message, make_command, now
):
    # the handler reads the wall clock, long past a week after the fixture date
    await suspend_user(session, MODERATOR, BOB, "x", "7_days", now=now)
    msg = make_message(from_user_id=MODERATOR)

    await cmd_modstatus(msg, make_command(str(BOB)), session)

    card = msg.answer.await_args_list[0]
    assert "in good standing" in card.args[0]
    data = [b.callback_data for row in card.kwargs["reply_markup"].inline_keyboard for b in row]
    assert data == [f"hi:{BOB}"]


async def test_history(session, users, make_message, make_command, now):
    await issue_warning(session, MODERATOR, BOB, "<b>bold</b> reason", now=now)
    msg = make_message(from_user_id=MODERATOR)
    await cmd_history(msg, make_command(str(BOB)), session)
    text = answers(msg)[0]
    assert "&lt;b&gt;bold&lt;/b&gt; reason" in text
    assert "@mod" in text


# ── Account ──────────────────────────────────────────────────────────


async def test_status_for_suspended_user(session, users, fake_redis, make_message, now):
    await suspend_user(session, MODERATOR, ALICE, "x", "indefinite", now=now)
    msg = make_message("/status")
    await cmd_status(msg, session, fake_redis)
    text = answers(msg)[0]
    assert "Your account is suspended indefinitely" in text
    assert "Posting is blocked" in text


async def test_status_clean(session, users, fake_redis, make_message):
    msg = make_message("/status")
    await cmd_status(msg, session, fake_redis)
    assert "You can post and comment" in answers(msg)[0]


async def test_warnings_are_marked_seen(session, users, make_message, now):
    action_id = await issue_warning(session, MODERATOR, ALICE, "be nice", now=now)
    msg = make_message("/warnings")

    await cmd_warnings(msg, session)

    assert "🆕" in answers(msg)[0]
    kb = msg.answer.await_args.kwargs["reply_markup"]
    assert kb.inline_keyboard[0][0].callback_data == f"wd:{action_id}"
    assert (await ActionRepo(session).get(action_id)).seen_by_user is True


async def test_no_warnings(session, users, make_message):
    msg = make_message("/warnings")
    await cmd_warnings(msg, session)
    assert answers(msg) == ["No active warnings. 👍"]


async def test_block(session, users, make_message, make_command):
    msg = make_message("/block")
    await cmd_block(msg, make_command(str(BOB)), session)
    assert [e.user.user_id for e in await list_muted(session, ALICE)] == [BOB]
    assert answers(msg) == [f"🙈 <code>{BOB}</code> added to your hidden list."]


async def test_help_for_moderator_lists_queue(session, users, make_message):
    msg = make_message("/help", from_user_id=MODERATOR)
    await cmd_help(msg, session)
    assert "/reports" in answers(msg)[0]
    assert "/setrole" not in answers(msg)[0]


async def test_help_for_user_hides_moderation(session, users, make_message):
    msg = make_message("/help")
    await cmd_help(msg, session)
    assert "<b>Moderation</b>" not in answers(msg)[0]


# ── Reports ──────────────────────────────────────────────────────────


async def test_report_and_duplicate(session, meme, make_message, make_command):
    msg = make_message()
    await cmd_report(msg, make_command(f"{meme} spam reposted"), session)
    assert "submitted for review" in answers(msg)[0]

    with pytest.raises(AlreadyReported):
        await cmd_report(make_message(), make_command(f"{meme} spam"), session)


async def test_reports_queue_has_review_keyboard(session, meme, make_message, make_command, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", now=now)
    msg = make_message(from_user_id=MODERATOR)

    await cmd_reports(msg, make_command(None), session)

    assert answers(msg)[0] == "📥 <b>Content reports</b> (1)"
    card = msg.answer.await_args_list[1]
    assert f"Report #{report_id}" in card.args[0]
    assert card.kwargs["reply_markup"].inline_keyboard[0][0].callback_data == f"rr:{report_id}:reviewed"


# ── Callbacks ────────────────────────────────────────────────────────


async def test_dismiss_callback(session, users, make_callback, now):
    action_id = await issue_warning(session, MODERATOR, ALICE, "w", now=now)
    cb = make_callback(f"wd:{action_id}")

    await cb_dismiss_warning(cb, session)

    cb.answer.assert_awaited_once_with("Warning dismissed.")
    cb.message.edit_reply_markup.assert_awaited_once()
    assert (await ActionRepo(session).get(action_id)).is_active is False


async def test_remove_meme_callback(session, meme, make_callback, now):
    report_id = await file_content_report(session, ALICE, meme, "copyright", now=now)
    cb = make_callback(f"rr:{report_id}:removed", from_user_id=MODERATOR)

    await cb_review_content(cb, session)

    cb.answer.assert_awaited_once_with("Meme removed.")
    assert await MemeRepo(session).get(meme) is None


async def test_user_report_mute_callback(session, users, fake_redis, make_callback, now):
    report_id = await file_user_report(session, ALICE, BOB, "harassment", now=now)
    cb = make_callback(f"ur:{report_id}:mute", from_user_id=MODERATOR)

    await cb_review_user(cb, session, fake_redis)

    assert (await get_status(session, BOB)).is_muted is True
    action = (await ActionRepo(session).list_for_user(BOB))[0]
    assert action.related_report_id == report_id
    assert action.related_report_type == "user"
    view = (await list_user_reports(session, MODERATOR))[0]
    assert view.status == "resolved"
    assert view.action_taken == "user_muted"


async def test_user_report_callback_requires_moderator(session, users, fake_redis, make_callback, now):
    report_id = await file_user_report(session, ALICE, BOB, "spam", now=now)
    cb = make_callback(f"ur:{report_id}:warn", from_user_id=ALICE)
    with pytest.raises(Forbidden):
        await cb_review_user(cb, session, fake_redis)


# ── Error router ─────────────────────────────────────────────────────


async def test_error_handler_replies_to_message(make_message):
    msg = make_message()
    event = MagicMock()
    event.exception = Muted()
    event.update.callback_query = None
    event.update.message = msg

    assert await on_moderation_error(event) is True
    assert answers(msg) == ["❌ You are muted and cannot post or comment"]


async def test_error_handler_alerts_callback(make_callback):
    cb = make_callback("wd:1")
    event = MagicMock()
    event.exception = Forbidden("Not authorized to dismiss this warning")
    event.update.callback_query = cb

    await on_moderation_error(event)

    cb.answer.assert_awaited_once_with("Not authorized to dismiss this warning", show_alert=True)
