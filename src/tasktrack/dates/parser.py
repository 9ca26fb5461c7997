# src/tasktrack/dates/parser.py

"""
Natural-language due date parser.

Turns free-form user input ("tomorrow", "in 3 weeks", "next fri", "2024-05-01")
into a calendar date. Unrecognized input is always a failure with a message the
console can show before re-prompting; it never silently falls back to today.

Only blank input resolves to today.
"""

from __future__ import annotations

import calendar
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

MAX_YEARS_IN_FUTURE = 10

_WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tue": 1,
    "wednesday": 2,
    "wed": 2,
    "thursday": 3,
    "thu": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}

_SUNDAY = 6

# (format, has_year). Year-less forms resolve in the current year.
_EXPLICIT_FORMATS: tuple[tuple[str, bool], ...] = (
    ("%Y-%m-%d", True),
    ("%m/%d/%Y", True),
    ("%d/%m/%Y", True),
    ("%d-%b", False),
    ("%d-%b-%Y", True),
    ("%d %b", False),
    ("%d %b %Y", True),
)

_INVALID_FORMAT_HINT = (
    "Please use one of the following formats: YYYY-MM-DD, MM/DD/YYYY, DD/MM/YYYY, "
    "or enter natural language like 'tomorrow', 'next week', 'in 3 days', etc."
)


class DateExpressionError(ValueError):
    """Raised internally by the rule helpers; converted to a failed DateParseResult."""


@dataclass(frozen=True, slots=True)
class DateParseResult:
    success: bool
    date: date | None = None
    error: str = ""

    @classmethod
    def ok(cls, value: date) -> DateParseResult:
        return cls(success=True, date=value)

    @classmethod
    def fail(cls, message: str) -> DateParseResult:
        return cls(success=False, date=None, error=message)


def _next_weekday(today: date, weekday: int) -> date:
    # strictly after today: same weekday -> one week out
    days = (weekday - today.weekday() + 7) % 7
    if days == 0:
        days = 7
    return today + timedelta(days=days)


def _end_of_week(today: date) -> date:
    # upcoming Sunday; today itself if today is Sunday
    return today + timedelta(days=(_SUNDAY - today.weekday() + 7) % 7)


def _end_of_month(today: date) -> date:
    last = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=last)


def _literal_phrases(today: date) -> dict[str, Callable[[], date]]:
    return {
        "today": lambda: today,
        "tomorrow": lambda: today + timedelta(days=1),
        "yesterday": lambda: today - timedelta(days=1),
        "next week": lambda: today + timedelta(days=7),
        "next month": lambda: today + relativedelta(months=1),
        "next year": lambda: today + relativedelta(years=1),
        "end of week": lambda: _end_of_week(today),
        "end of month": lambda: _end_of_month(today),
        "end of year": lambda: date(today.year, 12, 31),
    }


def _parse_relative(rest: str, today: date) -> date:
    """Handle the part after "in ": "<N> <unit>"."""
    parts = rest.split()
    if len(parts) != 2:
        raise DateExpressionError(
            "Invalid relative date format. Use 'in X days/weeks/months/years'."
        )
    try:
        amount = int(parts[0])
    except ValueError:
        raise DateExpressionError(
            "Invalid relative date format. Use 'in X days/weeks/months/years'."
        ) from None

    if amount <= 0:
        raise DateExpressionError("Time amount must be positive.")

    unit = parts[1]
    if unit in ("day", "days"):
        return today + timedelta(days=amount)
    if unit in ("week", "weeks"):
        return today + timedelta(days=amount * 7)
    if unit in ("month", "months"):
        return today + relativedelta(months=amount)
    if unit in ("year", "years"):
        return today + relativedelta(years=amount)
    raise DateExpressionError(f"Unknown time unit '{unit}'.")


def _parse_next(token: str, today: date) -> date:
    """Handle the part after "next ": a weekday or week/month/year."""
    if token in _WEEKDAYS:
        return _next_weekday(today, _WEEKDAYS[token])
    if token == "week":
        return today + timedelta(days=7)
    if token == "month":
        return today + relativedelta(months=1)
    if token == "year":
        return today + relativedelta(years=1)
    raise DateExpressionError(f"Unknown occurrence '{token}'.")


def _lenient_parse(text: str, today: date) -> date | None:
    """
    dateutil fallback. Day and month must come from the text: parsing against
    two defaults that differ in both has to agree on them. A weekday word in
    the text has to match the resulting date.
    """
    first = datetime(today.year, today.month, today.day)
    second = first + relativedelta(months=1, days=1)
    try:
        a = dateutil_parser.parse(text, default=first).date()
        b = dateutil_parser.parse(text, default=second).date()
    except (ValueError, OverflowError):
        return None
    if (a.month, a.day) != (b.month, b.day):
        return None

    for word in re.findall(r"[a-z]+", text):
        wd = _WEEKDAYS.get(word)
        if wd is not None and wd != a.weekday():
            raise DateExpressionError(
                f"{a.isoformat()} is a {calendar.day_name[a.weekday()]}, "
                f"not a {calendar.day_name[wd]}."
            )
    return a


def _parse_structured(text: str, today: date) -> date:
    for fmt, has_year in _EXPLICIT_FORMATS:
        candidate, pattern = (text, fmt) if has_year else (f"{text} {today.year}", f"{fmt} %Y")
        try:
            return datetime.strptime(candidate, pattern).date()
        except ValueError:
            continue

    parsed = _lenient_parse(text, today)
    if parsed is not None:
        return parsed
    logger.debug("No date format matched %r", text)

    raise DateExpressionError(f"Invalid date format '{text}'. {_INVALID_FORMAT_HINT}")


def _resolve(text: str, today: date) -> date:
    phrases = _literal_phrases(today)
    if text in phrases:
        return phrases[text]()
    if text in _WEEKDAYS:
        return _next_weekday(today, _WEEKDAYS[text])
    if text.startswith("in "):
        return _parse_relative(text[3:].strip(), today)
    if text.startswith("next "):
        return _parse_next(text[5:].strip(), today)
    return _parse_structured(text, today)


def parse_date(text: str | None, *, today: date | None = None) -> DateParseResult:
    """
    Parse a free-form due date expression.

    Returns a DateParseResult; never raises. Dates more than
    MAX_YEARS_IN_FUTURE years after today are rejected whichever rule produced them.
    """
    if today is None:
        today = date.today()

    if text is None or not text.strip():
        return DateParseResult.ok(today)

    normalized = text.strip().lower()

    try:
        resolved = _resolve(normalized, today)
    except DateExpressionError as e:
        return DateParseResult.fail(str(e))
    except (ValueError, OverflowError):
        logger.debug("Date arithmetic failed for %r", normalized, exc_info=True)
        return DateParseResult.fail("Invalid date format. Please try again.")

    if resolved > today + relativedelta(years=MAX_YEARS_IN_FUTURE):
        return DateParseResult.fail(
            f"Date cannot be more than {MAX_YEARS_IN_FUTURE} years in the future."
        )

    return DateParseResult.ok(resolved)
