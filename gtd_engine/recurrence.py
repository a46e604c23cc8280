"""
Recurrence

Next-occurrence dates for recurring tasks. The engine only computes dates
and field values; creating the follow-up task is the caller's job.
"""

import calendar
import logging
from datetime import date, timedelta
from typing import Optional, Dict, Any

from .task_model import RecurrencePattern, RecurrenceType, Task, TaskStatus

logger = logging.getLogger("recurrence")


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _add_months(base: date, months: int, day: Optional[int] = None) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = base.month - 1 + months
    year = base.year + month_index // 12
    month = month_index % 12 + 1
    target_day = day if day is not None else base.day
    return date(year, month, min(target_day, _days_in_month(year, month)))


def _next_weekly(base: date, pattern: RecurrencePattern) -> date:
    if not pattern.days_of_week:
        return base + timedelta(days=7)
    for offset in range(1, 8):
        candidate = base + timedelta(days=offset)
        if candidate.isoweekday() in pattern.days_of_week:
            return candidate
    return base + timedelta(days=7)


def _next_monthly(base: date, pattern: RecurrencePattern) -> date:
    if pattern.day_of_month:
        return _add_months(base, 1, pattern.day_of_month)
    if pattern.nth_weekday:
        n, weekday = pattern.nth_weekday
        first = _add_months(base, 1, 1)
        offset = (weekday - first.isoweekday()) % 7
        target_day = 1 + offset + (n - 1) * 7
        return first.replace(day=min(target_day, _days_in_month(first.year, first.month)))
    return _add_months(base, 1)


def _next_yearly(base: date, pattern: RecurrencePattern) -> date:
    if pattern.month_day:
        month, day = pattern.month_day
        year = base.year + 1
        return date(year, month, min(day, _days_in_month(year, month)))
    return _add_months(base, 12)


def next_occurrence_date(task: Task, today: date) -> Optional[date]:
    """
    Next due date for a recurring task.

    Counts from the task's due date, or from `today` when it has none.
    Returns None for non-recurring tasks.
    """
    pattern = task.recurrence
    if pattern is None:
        return None

    base = task.due_date or today
    if pattern.type == RecurrenceType.DAILY:
        return base + timedelta(days=1)
    if pattern.type == RecurrenceType.WEEKLY:
        return _next_weekly(base, pattern)
    if pattern.type == RecurrenceType.BIWEEKLY:
        return base + timedelta(days=14)
    if pattern.type == RecurrenceType.MONTHLY:
        return _next_monthly(base, pattern)
    if pattern.type == RecurrenceType.YEARLY:
        return _next_yearly(base, pattern)

    logger.warning(f"Unhandled recurrence type for task {task.id}: {pattern.type}")
    return None


def should_recurrence_end(task: Task, today: date) -> bool:
    """True once the recurrence end date is in the past."""
    return task.recurrence_end_date is not None and task.recurrence_end_date < today


def next_instance_fields(task: Task, today: date) -> Optional[Dict[str, Any]]:
    """
    Field values for the follow-up instance of a recurring task.

    Returns None when the task does not recur or its recurrence has ended.
    The mapping is accepted by Task.from_dict.
    """
    if not task.is_recurring() or should_recurrence_end(task, today):
        return None

    next_due = next_occurrence_date(task, today)
    status = TaskStatus.INBOX if task.is_done else task.status
    return {
        "title": task.title,
        "description": task.description,
        "status": status.value,
        "energy": task.energy.value if task.energy else None,
        "time": task.time,
        "project_id": task.project_id,
        "contexts": list(task.contexts),
        "due_date": next_due.isoformat() if next_due else None,
        "recurrence": task.recurrence.to_dict(),
        "recurrence_end_date": task.recurrence_end_date.isoformat() if task.recurrence_end_date else None,
        "recurrence_parent_id": task.recurrence_parent_id or task.id,
    }
