"""Data models for taskview."""

from taskview.models.task import Task, TaskInstance, InstanceId, TaskType, RecurrencePattern
from taskview.models.state import ComputedState, TimeContext, TaskViewName, ViewItem

__all__ = [
    "Task",
    "TaskInstance",
    "InstanceId",
    "TaskType",
    "RecurrencePattern",
    "ComputedState",
    "TimeContext",
    "TaskViewName",
    "ViewItem",
]
