"""Time resolution for new log entries.

Events may carry a relative `timeDelta` token — an ISO-8601 duration such as
"P1DT2H" or "PT30M" — that moves the stored timestamp away from "now".
apply_time_delta() never raises: a token that doesn't match the duration
grammar leaves the base instant unchanged, so a corrupt token can't block
ingestion.

Grammar accepted (case-insensitive designators):

    P[nY][nM][nW][nD][T[nH][nM][nS]]

At least one component must be present, and a "T" must be followed by at
least one time component. Numbers may carry a fraction ("PT1.5H"). Years and
months are applied on the calendar, clamping the day to the target month's
length; everything else is a fixed timedelta.
"""

from __future__ import annotations

import calendar
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta

_NUM = r"(\d+(?:[.,]\d+)?)"

_DURATION_RE = re.compile(
    rf"^P(?!$)(?:{_NUM}Y)?(?:{_NUM}M)?(?:{_NUM}W)?(?:{_NUM}D)?"
    rf"(?:T(?=\d)(?:{_NUM}H)?(?:{_NUM}M)?(?:{_NUM}S)?)?$",
    re.IGNORECASE,
)

_DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


@dataclass(frozen=True)
class Duration:
    years: int = 0
    months: int = 0
    delta: timedelta = timedelta()


def _num(text: str | None) -> float:
    if not text:
        return 0.0
    return float(text.replace(",", "."))


def parse_duration(token: object) -> Duration | None:
    """Parse an ISO-8601 duration token. Returns None if it doesn't match."""
    if not isinstance(token, str):
        return None
    match = _DURATION_RE.match(token.strip())
    if match is None:
        return None
    values = [_num(g) for g in match.groups()]
    if not all(math.isfinite(v) for v in values):
        return None
    years, months, weeks, days, hours, minutes, seconds = values
    if years != int(years) or months != int(months):
        # Fractional calendar units have no fixed length
        return None
    try:
        delta = timedelta(
            weeks=weeks, days=days, hours=hours, minutes=minutes, seconds=seconds
        )
    except OverflowError:
        return None
    return Duration(years=int(years), months=int(months), delta=delta)


def _add_months(base: datetime, months: int) -> datetime:
    index = base.month - 1 + months
    year = base.year + index // 12
    month = index % 12 + 1
    day = min(base.day, calendar.monthrange(year, month)[1])
    return base.replace(year=year, month=month, day=day)


def apply_time_delta(base: datetime, token: object) -> datetime:
    """Return `base` advanced by the duration in `token`, or `base` unchanged."""
    duration = parse_duration(token)
    if duration is None:
        return base
    try:
        shifted = _add_months(base, duration.years * 12 + duration.months)
        return shifted + duration.delta
    except (OverflowError, ValueError):
        return base


def format_game_time(date: datetime) -> str:
    """Human-readable in-game clock, e.g. "Sunday, 5 March, 2024, 3:07 pm"."""
    hour = date.hour % 12 or 12
    ampm = "pm" if date.hour >= 12 else "am"
    return (
        f"{_DAY_NAMES[date.weekday()]}, {date.day} {calendar.month_name[date.month]}, "
        f"{date.year}, {hour}:{date.minute:02d} {ampm}"
    )
