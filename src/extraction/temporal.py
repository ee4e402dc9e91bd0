"""Due-date resolution from natural-language cues."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

Clock = Callable[[], datetime]

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_NEXT_WEEKDAY_RE = re.compile(r"\bnext\s+(" + "|".join(WEEKDAYS) + r")\b", re.IGNORECASE)
_TOMORROW_RE = re.compile(r"tomorrow", re.IGNORECASE)
_NEXT_WEEK_RE = re.compile(r"next\s+week", re.IGNORECASE)


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(UTC)


def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=0, microsecond=0)


def next_weekday(weekday: str, now: datetime) -> datetime:
    """Next occurrence of ``weekday`` after today, at 23:59:00.

    Today never counts: asking for "friday" on a Friday yields the Friday
    one week later.
    """
    target = WEEKDAYS.index(weekday.lower())
    days_until = (target - now.weekday() + 7) % 7
    if days_until == 0:
        days_until = 7
    return _end_of_day(now + timedelta(days=days_until))


def resolve_due_date(
    candidate: datetime | None,
    text: str,
    now: datetime,
) -> datetime | None:
    """Resolve a due date that is missing or not in the future.

    A ``candidate`` strictly after ``now`` is returned unchanged. Otherwise
    ``text`` is searched for, in order, "next <weekday>", "tomorrow" and
    "next week"; the first cue found decides the date (always 23:59:00 in
    ``now``'s timezone). Without a cue, ``candidate`` comes back exactly as
    supplied, even if it is still in the past.
    """
    if candidate is not None and candidate > now:
        return candidate

    weekday_match = _NEXT_WEEKDAY_RE.search(text)
    if weekday_match:
        return next_weekday(weekday_match.group(1), now)
    if _TOMORROW_RE.search(text):
        return _end_of_day(now + timedelta(days=1))
    if _NEXT_WEEK_RE.search(text):
        return _end_of_day(now + timedelta(days=7))
    return candidate
