"""Temporal view engine for taskview."""

from taskview.engine.time_context import build_time_context, TimeZoneError
from taskview.engine.view_state import evaluate_task_state
from taskview.engine.views import list_tasks, annotate_task, collect_tags
from taskview.engine.overdue_sync import (
    plan_overdue_tag_changes,
    sync_overdue_tags,
    OverdueTagChange,
    TaskStore,
)

__all__ = [
    "build_time_context",
    "TimeZoneError",
    "evaluate_task_state",
    "list_tasks",
    "annotate_task",
    "collect_tags",
    "plan_overdue_tag_changes",
    "sync_overdue_tags",
    "OverdueTagChange",
    "TaskStore",
]
