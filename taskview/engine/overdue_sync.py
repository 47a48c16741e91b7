"""Overdue tag synchronization for taskview.

The "Overdue" tag is derived data: it mirrors ComputedState.is_overdue. Planning
the reconciliation is pure; applying it goes through a TaskStore supplied by
the caller, which owns persistence and raises its own errors (e.g. for an
unknown task id).
"""

import logging
from typing import Iterable, List, Optional, Protocol

from pydantic import BaseModel, Field

from taskview.engine.time_context import build_time_context
from taskview.engine.view_state import evaluate_task_state
from taskview.models.constants import OVERDUE_TAG
from taskview.models.state import TimeContext
from taskview.models.task import Task

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    """The slice of the document store the sync needs."""

    def list_tasks(self) -> List[Task]:
        ...

    def update_tags(self, task_id: str, tag_ids: List[str]) -> None:
        ...


class OverdueTagChange(BaseModel):
    """New tag set for one task whose Overdue tag is out of date."""

    task_id: str = Field(..., description="Task to update")
    tag_ids: List[str] = Field(..., description="Complete tag list after the change")
    added: bool = Field(..., description="True if Overdue was added, False if removed")


def plan_overdue_tag_change(task: Task, context: TimeContext) -> Optional[OverdueTagChange]:
    """The change needed for one task, or None if its tags already agree."""
    is_overdue = evaluate_task_state(task, context).is_overdue
    has_tag = OVERDUE_TAG in task.tag_ids

    if is_overdue and not has_tag:
        return OverdueTagChange(task_id=task.id, tag_ids=[*task.tag_ids, OVERDUE_TAG], added=True)
    if not is_overdue and has_tag:
        return OverdueTagChange(
            task_id=task.id,
            tag_ids=[tag for tag in task.tag_ids if tag != OVERDUE_TAG],
            added=False,
        )
    return None


def plan_overdue_tag_changes(tasks: Iterable[Task], context: TimeContext) -> List[OverdueTagChange]:
    """Changes that bring every task's Overdue tag in line with its state.

    Each task is judged on its own, so the plan does not depend on order, and
    re-planning after applying it yields nothing.
    """
    changes = []
    for task in tasks:
        change = plan_overdue_tag_change(task, context)
        if change is not None:
            changes.append(change)
    return changes


def sync_overdue_tags(store: TaskStore, context: Optional[TimeContext] = None) -> int:
    """Apply the Overdue tag plan to every task in `store`.

    Args:
        store: Document store adapter
        context: Time anchors (defaults to the UTC wall clock)

    Returns:
        Number of tasks updated
    """
    if context is None:
        context = build_time_context()

    changes = plan_overdue_tag_changes(store.list_tasks(), context)
    for change in changes:
        store.update_tags(change.task_id, change.tag_ids)
        logger.debug(
            f"{'Added' if change.added else 'Removed'} {OVERDUE_TAG} tag on task {change.task_id}"
        )
    return len(changes)
