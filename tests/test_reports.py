"""Tests for the report ledger."""

from __future__ import annotations

from datetime import timedelta

import pytest

from memehub.db.repositories.meme_repo import CommentRepo, MemeRepo
from memehub.db.repositories.user_repo import UserRepo
from memehub.errors import AlreadyReported, Forbidden, InvalidArgument, NotFound, SelfReport
from memehub.services.reports import (
    duplicate_message,
    file_content_report,
    file_user_report,
    get_reported_users_summary,
    list_my_reports,
    list_reports,
    list_user_reports,
    update_report_status,
    update_user_report_status,
)
from tests.conftest import ALICE, BOB, MODERATOR


# ── Duplicate messages ───────────────────────────────────────────────


@pytest.mark.parametrize(
    "status,target,expected",
    [
        ("pending", "content", "Your report has already been submitted and is pending review"),
        ("reviewed", "user", "Your report has been submitted and is currently under review"),
        (
            "resolved",
            "content",
            "You have already reported this content. "
            "The report was reviewed and resolved by our moderation team",
        ),
        (
            "dismissed",
            "user",
            "You have already reported this user. "
            "The report was reviewed and dismissed by our moderation team",
        ),
        ("weird", "user", "You have already reported this user"),
    ],
)
def test_duplicate_message(status, target, expected):
    assert duplicate_message(status, target) == expected


# ── Content reports ──────────────────────────────────────────────────


async def test_file_content_report(session, meme, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", "bot account", now=now)

    reports = await list_reports(session, MODERATOR)
    assert [r.id for r in reports] == [report_id]
    view = reports[0]
    assert view.status == "pending"
    assert view.reason == "spam"
    assert view.description == "bot account"
    assert view.meme_title == "Distracted boyfriend"
    assert view.reporter.username == "alice"
    assert view.moderator is None


async def test_second_content_report_is_rejected(session, meme, now):
    await file_content_report(session, ALICE, meme, "spam", now=now)
    with pytest.raises(AlreadyReported) as exc:
        await file_content_report(session, ALICE, meme, "copyright", now=now)
    assert exc.value.message == "Your report has already been submitted and is pending review"


async def test_duplicate_after_resolution_mentions_outcome(session, meme, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", now=now)
    await update_report_status(session, MODERATOR, report_id, "dismissed")
    with pytest.raises(AlreadyReported) as exc:
        await file_content_report(session, ALICE, meme, "spam", now=now)
    assert "dismissed by our moderation team" in exc.value.message


async def test_different_reporters_may_report_same_meme(session, meme, now):
    await file_content_report(session, ALICE, meme, "spam", now=now)
    await file_content_report(session, MODERATOR, meme, "spam", now=now)
    assert len(await list_reports(session, MODERATOR)) == 2


async def test_report_missing_meme(session, users, now):
    with pytest.raises(NotFound):
        await file_content_report(session, ALICE, 12345, "spam", now=now)


async def test_report_unknown_reason(session, meme, now):
    with pytest.raises(InvalidArgument):
        await file_content_report(session, ALICE, meme, "boring", now=now)


async def test_list_reports_requires_moderator(session, meme):
    with pytest.raises(Forbidden):
        await list_reports(session, ALICE)


async def test_list_reports_filter_and_order(session, meme, now):
    first = await file_content_report(session, ALICE, meme, "spam", now=now)
    second = await file_content_report(session, MODERATOR, meme, "other", now=now + timedelta(seconds=1))
    await update_report_status(session, MODERATOR, first, "reviewed")

    assert [r.id for r in await list_reports(session, MODERATOR)] == [second, first]
    pending = await list_reports(session, MODERATOR, status="pending")
    assert [r.id for r in pending] == [second]
    assert [r.id for r in await list_reports(session, MODERATOR, limit=1)] == [second]


async def test_update_status_records_moderator(session, meme, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", now=now)
    await update_report_status(session, MODERATOR, report_id, "resolved", "handled", "warning")

    view = (await list_reports(session, MODERATOR))[0]
    assert view.status == "resolved"
    assert view.action_taken == "warning"
    assert view.moderator_notes == "handled"
    assert view.moderator.user_id == MODERATOR


async def test_content_removed_deletes_meme_and_comments(session, meme, now):
    await CommentRepo(session).create(meme, ALICE, "lol", None, now)
    await session.commit()
    report_id = await file_content_report(session, ALICE, meme, "copyright", now=now)

    await update_report_status(session, MODERATOR, report_id, "resolved", action_taken="content_removed")

    assert await MemeRepo(session).get(meme) is None
    assert await CommentRepo(session).list_for_meme(meme) == []
    view = (await list_reports(session, MODERATOR))[0]
    assert view.meme_title is None
    assert view.action_taken == "content_removed"


async def test_update_missing_report(session, users):
    with pytest.raises(NotFound) as exc:
        await update_report_status(session, MODERATOR, 99, "resolved")
    assert exc.value.message == "Report not found"


async def test_update_requires_moderator(session, meme, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", now=now)
    with pytest.raises(Forbidden):
        await update_report_status(session, BOB, report_id, "dismissed")


async def test_update_with_unknown_status(session, meme, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", now=now)
    with pytest.raises(InvalidArgument):
        await update_report_status(session, MODERATOR, report_id, "closed")


async def test_list_my_reports(session, meme, now):
    report_id = await file_content_report(session, ALICE, meme, "spam", now=now)
    mine = await list_my_reports(session, ALICE)
    assert [r.id for r in mine] == [report_id]
    assert mine[0].meme_title == "Distracted boyfriend"
    assert await list_my_reports(session, BOB) == []


# ── User reports ─────────────────────────────────────────────────────


async def test_file_user_report(session, users, now):
    report_id = await file_user_report(session, ALICE, BOB, "harassment", "dm spam", now=now)
    views = await list_user_reports(session, MODERATOR)
    assert [v.id for v in views] == [report_id]
    assert views[0].reported_user.label == "@bob"
    assert views[0].reporter.label == "@alice"


async def test_self_report(session, users, now):
    with pytest.raises(SelfReport):
        await file_user_report(session, ALICE, ALICE, "spam", now=now)


async def test_report_unknown_user(session, users, now):
    with pytest.raises(NotFound) as exc:
        await file_user_report(session, ALICE, 424242, "spam", now=now)
    assert exc.value.message == "User not found"


async def test_second_user_report_is_rejected(session, users, now):
    await file_user_report(session, ALICE, BOB, "spam", now=now)
    with pytest.raises(AlreadyReported):
        await file_user_report(session, ALICE, BOB, "impersonation", now=now)


async def test_update_user_report(session, users, now):
    report_id = await file_user_report(session, ALICE, BOB, "spam", now=now)
    await update_user_report_status(session, MODERATOR, report_id, "resolved", "muted", "user_muted")
    view = (await list_user_reports(session, MODERATOR, status="resolved"))[0]
    assert view.action_taken == "user_muted"
    assert view.moderator.user_id == MODERATOR


async def test_update_user_report_rejects_content_action(session, users, now):
    report_id = await file_user_report(session, ALICE, BOB, "spam", now=now)
    with pytest.raises(InvalidArgument):
        await update_user_report_status(session, MODERATOR, report_id, "resolved", action_taken="content_removed")


async def test_reported_users_summary_ordering(session, users, now):
    repo = UserRepo(session)
    for uid in (400, 500, 600):
        await repo.upsert_user(uid, None, f"User {uid}")
    await session.commit()

    # BOB: 2 reports, 1 pending. 400: 1 pending. 500: 2 reports, none pending.
    first = await file_user_report(session, ALICE, BOB, "spam", now=now)
    await file_user_report(session, 400, BOB, "spam", now=now)
    await file_user_report(session, ALICE, 400, "spam", now=now)
    r1 = await file_user_report(session, ALICE, 500, "spam", now=now)
    r2 = await file_user_report(session, BOB, 500, "spam", now=now)
    await update_user_report_status(session, MODERATOR, first, "reviewed")
    await update_user_report_status(session, MODERATOR, r1, "dismissed")
    await update_user_report_status(session, MODERATOR, r2, "dismissed")

    summary = await get_reported_users_summary(session, MODERATOR)

    assert [(s.user.user_id, s.report_count, s.pending_reports) for s in summary] == [
        (BOB, 2, 1),
        (400, 1, 1),
        (500, 2, 0),
    ]
    assert summary[1].user.label == "User 400"


async def test_summary_requires_moderator(session, users):
    with pytest.raises(Forbidden):
        await get_reported_users_summary(session, ALICE)
