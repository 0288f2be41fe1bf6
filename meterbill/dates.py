"""Billing period and timestamp helpers.

A billing period is a calendar month written as ``YYYY-MM``. Timestamps are
naive local datetimes, matching how readings are keyed in by an operator.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time

from meterbill.constants import DATE_FORMAT, DATETIME_FORMAT, PERIOD_FORMAT
from meterbill.errors import ParseError


def now() -> datetime:
    return datetime.now()


def current_period(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def parse_period(text: str | None) -> str:
    """Parse ``YYYY-MM`` into its canonical form. Blank input means the current month."""
    text = (text or "").strip()
    if not text:
        return current_period()
    try:
        parsed = datetime.strptime(text, PERIOD_FORMAT)
    except ValueError as exc:
        raise ParseError(f"Invalid period '{text}', expected YYYY-MM", segment=text) from exc
    return f"{parsed.year:04d}-{parsed.month:02d}"


def period_bounds(period: str) -> tuple[datetime, datetime]:
    """Return the first and last instant of a period.

    The last instant is 23:59:59 on the final day of the month.
    """
    period = parse_period(period)
    year, month = (int(part) for part in period.split("-"))
    last_day = calendar.monthrange(year, month)[1]
    start = datetime.combine(date(year, month, 1), time.min)
    end = datetime.combine(date(year, month, last_day), time(23, 59, 59))
    return start, end


def parse_timestamp(text: str | None) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM``. Blank input means now."""
    text = (text or "").strip()
    if not text:
        return now()
    try:
        return datetime.strptime(text, DATETIME_FORMAT)
    except ValueError as exc:
        raise ParseError(f"Invalid date-time '{text}', expected YYYY-MM-DD HH:MM", segment=text) from exc


def parse_date(text: str | None) -> date:
    text = (text or "").strip()
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as exc:
        raise ParseError(f"Invalid date '{text}', expected YYYY-MM-DD", segment=text) from exc


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime(DATETIME_FORMAT)
