"""Text and time utilities – truncation, UTC normalisation, display dates."""

from __future__ import annotations

from datetime import datetime, timezone


def truncate(text: str, max_len: int, suffix: str = "...") -> str:
    """Truncate *text* to *max_len* characters, appending *suffix* if cut."""
    if len(text) <= max_len:
        return text
    return text[: max_len - len(suffix)] + suffix


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from the database."""
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def format_date(dt: datetime) -> str:
    """Format a date like ``07 Mar 2026``."""
    return dt.strftime("%d %b %Y")
