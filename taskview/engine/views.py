"""Task view listing for taskview.

The listing pipeline is a sequence of pure stages, each returning a new list:

    expand -> evaluate -> filter by view -> narrow (folder/tags/search) -> sort

`list_tasks` never mutates the tasks it is given.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from taskview.engine.time_context import build_time_context
from taskview.engine.view_state import evaluate_task_state
from taskview.models.constants import DEFAULT_HORIZON_DAYS, DEFAULT_LOOKBACK_DAYS
from taskview.models.state import TaskViewName, TimeContext, ViewItem
from taskview.models.task import Task, TaskType
from taskview.recurrence.expand import expand_recurring_task

logger = logging.getLogger(__name__)


def partition_recurring(tasks: Iterable[Task]) -> Tuple[List[Task], List[Task]]:
    """Separate tasks into plain tasks and recurring parents.

    Returns:
        Tuple of (plain_tasks, recurring_parents)
    """
    plain = []
    recurring = []

    for task in tasks:
        if task.task_type == TaskType.RECURRING:
            recurring.append(task)
        else:
            plain.append(task)

    return plain, recurring


def shows_recurring_parents(view: Optional[TaskViewName]) -> bool:
    """Only the Bank (or no view at all) lists recurring parents unexpanded."""
    return view is None or view == TaskViewName.BANK


def collect_candidates(
    tasks: Sequence[Task],
    context: TimeContext,
    view: Optional[TaskViewName] = None,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> List[Task]:
    """Plain tasks plus either recurring parents or their expanded instances."""
    plain, recurring = partition_recurring(tasks)
    if shows_recurring_parents(view):
        return plain + recurring

    instances: List[Task] = []
    for parent in recurring:
        instances.extend(
            expand_recurring_task(
                parent,
                context,
                horizon_days=horizon_days,
                lookback_days=lookback_days,
            )
        )
    return plain + instances


def annotate_task(task: Task, context: TimeContext) -> ViewItem:
    """Attach computed state to a single task."""
    return ViewItem(task=task, state=evaluate_task_state(task, context))


def evaluate_all(tasks: Iterable[Task], context: TimeContext) -> List[ViewItem]:
    return [annotate_task(task, context) for task in tasks]


def filter_by_view(items: Iterable[ViewItem], view: Optional[TaskViewName]) -> List[ViewItem]:
    if view is None:
        return list(items)
    return [item for item in items if item.state.in_view(TaskViewName(view))]


def narrow(
    items: Iterable[ViewItem],
    *,
    folder_id: Optional[str] = None,
    tag_ids: Optional[Sequence[str]] = None,
    search: Optional[str] = None,
    filter_not_in_folder: bool = False,
    filter_not_tagged: bool = False,
) -> List[ViewItem]:
    """Apply folder, not-in-folder, tag, not-tagged and search filters in order."""
    result = list(items)

    if folder_id:
        result = [item for item in result if item.task.folder_id == folder_id]

    if filter_not_in_folder:
        result = [item for item in result if not item.task.folder_id]

    if tag_ids:
        wanted = set(tag_ids)
        result = [item for item in result if wanted.intersection(item.task.tag_ids)]

    if filter_not_tagged:
        result = [item for item in result if not item.task.tag_ids]

    if search and search.strip():
        needle = search.lower()
        result = [
            item
            for item in result
            if needle in item.task.title.lower()
            or (item.task.description and needle in item.task.description.lower())
        ]

    return result


def associated_date(task: Task) -> Optional[datetime]:
    """The date a task sorts by in the Bank: deadline, then scheduled time, then range start."""
    if task.deadline_at:
        return task.deadline_at
    if task.scheduled_at:
        return task.scheduled_at
    if task.range_start_date:
        return task.range_start_date
    return None


def _recency_sort_key(task: Task) -> float:
    """Most recently updated first; tasks without updated_at go last."""
    if task.updated_at is None:
        return float("inf")
    return -task.updated_at.timestamp()


def _bank_sort_key(item: ViewItem) -> tuple:
    when = associated_date(item.task)
    if when is not None:
        return (item.task.is_completed, 0, when.timestamp(), _recency_sort_key(item.task))
    return (item.task.is_completed, 1, 0.0, _recency_sort_key(item.task))


def _recency_key(item: ViewItem) -> tuple:
    return (item.task.is_completed, _recency_sort_key(item.task))


def sort_items(items: Iterable[ViewItem], view: Optional[TaskViewName]) -> List[ViewItem]:
    """Incomplete before completed; Bank (or no view) by soonest date, other views by recency.

    The sort is stable, so instances of one parent stay chronological.
    """
    key = _bank_sort_key if shows_recurring_parents(view) else _recency_key
    return sorted(items, key=key)


def list_tasks(
    tasks: Sequence[Task],
    context: Optional[TimeContext] = None,
    view: Optional[TaskViewName] = None,
    folder_id: Optional[str] = None,
    tag_ids: Optional[Sequence[str]] = None,
    search: Optional[str] = None,
    filter_not_in_folder: bool = False,
    filter_not_tagged: bool = False,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> List[ViewItem]:
    """List tasks for a view, annotated with their computed state.

    Args:
        tasks: Candidate task set (never mutated)
        context: Time anchors; built from the UTC wall clock when omitted
        view: View to filter by; None behaves like the Bank
        folder_id: Keep only tasks in this folder
        tag_ids: Keep only tasks sharing at least one of these tags
        search: Case-insensitive substring over title and description
        filter_not_in_folder: Keep only tasks without a folder
        filter_not_tagged: Keep only tasks without tags
        horizon_days: Days ahead to expand recurring tasks
        lookback_days: Days back to expand recurring tasks

    Returns:
        Ordered list of ViewItem
    """
    if context is None:
        context = build_time_context()
    if view is not None:
        view = TaskViewName(view)

    candidates = collect_candidates(
        tasks, context, view, horizon_days=horizon_days, lookback_days=lookback_days
    )
    items = evaluate_all(candidates, context)
    items = filter_by_view(items, view)
    items = narrow(
        items,
        folder_id=folder_id,
        tag_ids=tag_ids,
        search=search,
        filter_not_in_folder=filter_not_in_folder,
        filter_not_tagged=filter_not_tagged,
    )
    items = sort_items(items, view)

    logger.debug(
        f"Listed {len(items)} of {len(candidates)} candidates for view {view.value if view else 'all'}"
    )
    return items


def collect_tags(tasks: Iterable[Task]) -> List[str]:
    """All distinct tags used by `tasks`, sorted."""
    tags = set()
    for task in tasks:
        tags.update(task.tag_ids)
    return sorted(tags)
