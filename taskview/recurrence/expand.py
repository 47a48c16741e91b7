"""Expand recurring tasks into concrete TaskInstance occurrences."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, Iterator, List, Optional, Tuple

from taskview.models.constants import (
    DEFAULT_DAY_OF_MONTH,
    DEFAULT_DAY_OF_YEAR,
    DEFAULT_HORIZON_DAYS,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_MONTH,
    DEFAULT_WEEK_INTERVAL,
)
from taskview.models.state import TimeContext
from taskview.models.task import RecurrencePattern, Task, TaskInstance, TaskType

logger = logging.getLogger(__name__)


def _weekday_index(d: date) -> int:
    # Python weekday: Monday=0 ... Sunday=6; recurrence rules use Sunday=0
    return (d.weekday() + 1) % 7


def _daterange(start: date, end_inclusive: date) -> Iterable[date]:
    cur = start
    while cur <= end_inclusive:
        yield cur
        cur = cur + timedelta(days=1)


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    """date(year, month, day), or None when that day does not exist."""
    try:
        return date(year, month, day)
    except (ValueError, OverflowError):
        return None


def expansion_window(
    task: Task,
    context: TimeContext,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> Optional[Tuple[date, date]]:
    """Inclusive (first_day, last_day) a task may recur in, or None if empty.

    The window is [max(start, today - lookback), min(end, today + horizon)],
    in calendar days of `context`.
    """
    if task.recurrence_start_date is None:
        return None
    today = context.today

    first = max(context.calendar_date(task.recurrence_start_date), today - timedelta(days=lookback_days))
    last = today + timedelta(days=horizon_days)
    if task.recurrence_end_date is not None:
        last = min(last, context.calendar_date(task.recurrence_end_date))
    if first > last:
        return None
    return first, last


def _daily(task: Task, first: date, last: date) -> Iterator[date]:
    days = set(task.recurrence_days_of_week)
    if not days:
        return
    for day in _daterange(first, last):
        if _weekday_index(day) in days:
            yield day


def _weekly(task: Task, first: date, last: date) -> Iterator[date]:
    days = sorted(task.recurrence_days_of_week)
    if not days:
        return
    interval = task.recurrence_week_interval or DEFAULT_WEEK_INTERVAL
    # Bucket 0 starts on the Sunday at or before the window start
    bucket_start = first - timedelta(days=_weekday_index(first))
    k = 0
    while bucket_start <= last:
        if k % interval == 0:
            for dow in days:
                day = bucket_start + timedelta(days=dow)
                if first <= day <= last:
                    yield day
        k += 1
        bucket_start = bucket_start + timedelta(days=7)


def _monthly(task: Task, first: date, last: date) -> Iterator[date]:
    day_of_month = task.recurrence_day_of_month or DEFAULT_DAY_OF_MONTH
    year, month = first.year, first.month
    while (year, month) <= (last.year, last.month):
        # Months without this day (e.g. the 31st in February) are skipped, not clamped.
        day = _safe_date(year, month, day_of_month)
        if day is not None and first <= day <= last:
            yield day
        month += 1
        if month > 12:
            year, month = year + 1, 1


def _yearly(task: Task, first: date, last: date) -> Iterator[date]:
    month = DEFAULT_MONTH if task.recurrence_month is None else task.recurrence_month
    day_of_month = task.recurrence_day_of_year or DEFAULT_DAY_OF_YEAR
    for year in range(first.year, last.year + 1):
        day = _safe_date(year, month + 1, day_of_month)
        if day is not None and first <= day <= last:
            yield day


def _specific_dates(task: Task, first: date, last: date, context: TimeContext) -> Iterator[date]:
    days = sorted({context.calendar_date(d) for d in task.recurrence_specific_dates})
    for day in days:
        if first <= day <= last:
            yield day


def expand_occurrence_dates(
    task: Task,
    context: TimeContext,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> Iterator[date]:
    """Lazily yield the calendar dates a recurring task occurs on.

    Yields nothing for non-recurring tasks and for rules missing the fields
    their pattern needs. Dates come out in chronological order and depend only
    on the task and the calendar day of `context`.

    Args:
        task: The task to expand
        context: Time anchors; its today_start defines the calendar
        horizon_days: Days after today to expand into
        lookback_days: Days before today to keep (so recent misses show as overdue)

    Returns:
        Iterator of dates inside the expansion window
    """
    if task.task_type != TaskType.RECURRING or not task.recurrence_pattern:
        return iter(())
    window = expansion_window(task, context, horizon_days=horizon_days, lookback_days=lookback_days)
    if window is None:
        return iter(())
    first, last = window

    pattern = task.recurrence_pattern
    if pattern == RecurrencePattern.DAILY:
        return _daily(task, first, last)
    if pattern == RecurrencePattern.WEEKLY:
        return _weekly(task, first, last)
    if pattern == RecurrencePattern.MONTHLY:
        return _monthly(task, first, last)
    if pattern == RecurrencePattern.YEARLY:
        return _yearly(task, first, last)
    if pattern == RecurrencePattern.SPECIFIC_DATES:
        return _specific_dates(task, first, last, context)
    return iter(())


def make_instance(task: Task, day: date, context: TimeContext) -> TaskInstance:
    """Project a recurring task onto `day` as a scheduled_time instance at the start of that day."""
    return TaskInstance(
        **{
            **task.model_dump(),
            "task_type": TaskType.SCHEDULED_TIME,
            "scheduled_at": context.day_start(day),
            "parent_task_id": task.id,
            "instance_date": day,
            "is_recurring_instance": True,
        }
    )


def expand_recurring_task(
    task: Task,
    context: TimeContext,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> List[TaskInstance]:
    """Expand one recurring task into TaskInstance objects (chronological)."""
    instances = [
        make_instance(task, day, context)
        for day in expand_occurrence_dates(
            task, context, horizon_days=horizon_days, lookback_days=lookback_days
        )
    ]
    logger.debug(f"Expanded task {task.id} into {len(instances)} instances")
    return instances
