"""View-state evaluation for taskview.

Computes which views (Today, Tomorrow, This Week, Next Week, Overdue, Someday)
a task belongs to at the instant described by a TimeContext. Days are calendar
days of the context, so whatever midnight convention the caller used to build
it is the one applied to task dates, across DST changes too.

Evaluation is deterministic - same inputs always produce same outputs.
"""

from datetime import datetime
from typing import Optional

from taskview.models.constants import SOMEDAY_TAG
from taskview.models.state import ComputedState, TimeContext
from taskview.models.task import Task, TaskType, assume_utc


def day_offset(instant: datetime, context: TimeContext) -> int:
    """Calendar days from today to the day containing `instant` (today=0)."""
    return (context.calendar_date(instant) - context.today).days


def _week_offsets(context: TimeContext) -> tuple:
    """Day offsets of this week's and next week's first day."""
    return day_offset(context.week_start, context), day_offset(context.next_week_start, context)


def _today_in_own_week(context: TimeContext) -> bool:
    return context.week_start <= context.today_start < context.next_week_start


def evaluate_task_state(task: Task, context: TimeContext) -> ComputedState:
    """Compute view membership for a task.

    Manual pins always apply. Completed tasks keep only their pins; everything
    else is derived from the task's type and temporal fields.

    Args:
        task: Task or TaskInstance to evaluate
        context: Time anchors to evaluate against

    Returns:
        ComputedState with all six flags
    """
    flags = {
        "in_today": bool(task.pinned_today),
        "in_tomorrow": bool(task.pinned_tomorrow),
        "in_this_week": False,
        "in_next_week": False,
        "is_overdue": False,
        "is_someday": SOMEDAY_TAG in task.tag_ids,
    }

    if not task.is_completed:
        if task.task_type == TaskType.DEADLINE:
            _apply_point_in_time(flags, task.deadline_at, context)
        elif task.task_type == TaskType.SCHEDULED_TIME:
            _apply_point_in_time(flags, task.scheduled_at, context)
        elif task.task_type == TaskType.DATE_RANGE:
            _apply_date_range(flags, task.range_start_date, task.range_end_date, context)
        elif task.task_type == TaskType.NONE:
            flags["is_someday"] = True

    # Anything in Today or Tomorrow is also in This Week
    if (flags["in_today"] or flags["in_tomorrow"]) and _today_in_own_week(context):
        flags["in_this_week"] = True

    return ComputedState(**flags)


def _apply_point_in_time(flags: dict, instant: Optional[datetime], context: TimeContext) -> None:
    """Deadline and scheduled-time rules keyed on a single instant."""
    if instant is None:
        return
    due_day = day_offset(instant, context)
    this_week, next_week = _week_offsets(context)

    if context.now > assume_utc(instant):
        flags["is_overdue"] = True
    # Shows in Today from its day onward until completed
    if due_day <= 0:
        flags["in_today"] = True
    if due_day == 1:
        flags["in_tomorrow"] = True
    if this_week <= due_day < this_week + 7:
        flags["in_this_week"] = True
    if next_week <= due_day < next_week + 7:
        flags["in_next_week"] = True


def _apply_date_range(
    flags: dict,
    start: Optional[datetime],
    end: Optional[datetime],
    context: TimeContext,
) -> None:
    """Inclusive calendar range rules."""
    if start is None or end is None:
        return
    first_day = day_offset(start, context)
    last_day = day_offset(end, context)
    this_week, next_week = _week_offsets(context)

    if first_day <= 0 <= last_day:
        flags["in_today"] = True
    if first_day - 1 <= 0 <= last_day - 1:
        flags["in_tomorrow"] = True
    # An overrun range keeps surfacing in Today until resolved
    if 0 > last_day:
        flags["is_overdue"] = True
        flags["in_today"] = True
    if first_day <= this_week + 6 and last_day >= this_week:
        flags["in_this_week"] = True
    if first_day <= next_week + 6 and last_day >= next_week:
        flags["in_next_week"] = True
