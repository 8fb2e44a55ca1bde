# Overview: UTC clock, ISO-8601 parsing and serialization shared by models and filters.

"""
All timestamps are stored UTC-naive. Anything offset-aware coming in is
converted to UTC first; anything going out is rendered with a trailing "Z".
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc_naive(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse "2026-03-01", "2026-03-01T08:30", "2026-03-01T08:30:00Z" or an
    explicit offset. Naive input is taken as UTC; blank input gives None.
    Raises ValueError for anything else.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"
    return _as_utc_naive(datetime.fromisoformat(text))


def is_date_only(value: Optional[str]) -> bool:
    """True for a bare calendar date such as "2026-03-01"."""
    try:
        date.fromisoformat((value or "").strip())
    except ValueError:
        return False
    return True


def end_of_day(moment: datetime) -> datetime:
    """Last representable instant of moment's calendar day."""
    return datetime.combine(moment.date(), time.max)


def to_utc_z(moment: Optional[datetime]) -> Optional[str]:
    if moment is None:
        return None
    stamp = _as_utc_naive(moment).replace(microsecond=0)
    return f"{stamp.isoformat()}Z"
