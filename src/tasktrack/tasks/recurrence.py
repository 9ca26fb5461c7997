# src/tasktrack/tasks/recurrence.py

from __future__ import annotations

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from .task_models import Recurrence

_SATURDAY = 5


def _is_weekend(d: date) -> bool:
    return d.weekday() >= _SATURDAY


def next_due_date(current: date, recurrence: Recurrence) -> date:
    """
    Advance a due date by one step of the recurrence rule.

    Monthly/yearly steps are calendar-aware (Jan 31 + 1 month -> end of February).
    Weekdays/Weekends always move at least one day forward.
    """
    if recurrence == Recurrence.DAILY:
        return current + timedelta(days=1)
    if recurrence == Recurrence.WEEKLY:
        return current + timedelta(days=7)
    if recurrence == Recurrence.MONTHLY:
        return current + relativedelta(months=1)
    if recurrence == Recurrence.YEARLY:
        return current + relativedelta(years=1)
    if recurrence == Recurrence.WEEKDAYS:
        nxt = current + timedelta(days=1)
        while _is_weekend(nxt):
            nxt += timedelta(days=1)
        return nxt
    if recurrence == Recurrence.WEEKENDS:
        nxt = current + timedelta(days=1)
        while not _is_weekend(nxt):
            nxt += timedelta(days=1)
        return nxt
    return current
