"""FastAPI web application for taskview.

Stateless query endpoints over the view engine. Callers post the candidate
task set with each request; nothing is stored between requests.
"""

import logging
import os
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from taskview.engine.overdue_sync import OverdueTagChange, plan_overdue_tag_changes
from taskview.engine.time_context import TimeZoneError, build_time_context
from taskview.engine.view_state import evaluate_task_state
from taskview.engine.views import collect_tags, list_tasks
from taskview.models.constants import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_WEEK_START_DAY,
)
from taskview.models.state import ComputedState, TaskViewName, TimeContext, ViewItem
from taskview.models.task import Task, TaskInstance
from taskview.recurrence.expand import expand_recurring_task

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIME_ZONE = os.getenv("TASKVIEW_TIME_ZONE", "UTC")
WEEK_START_DAY = int(os.getenv("TASKVIEW_WEEK_START_DAY", str(DEFAULT_WEEK_START_DAY)))
HORIZON_DAYS = int(os.getenv("TASKVIEW_HORIZON_DAYS", str(DEFAULT_HORIZON_DAYS)))
LOOKBACK_DAYS = int(os.getenv("TASKVIEW_LOOKBACK_DAYS", str(DEFAULT_LOOKBACK_DAYS)))

# Initialize FastAPI app
app = FastAPI(
    title="taskview API",
    description="Computes Today/Tomorrow/Week/Overdue/Someday views over a task set",
    version="0.1.0",
)


# Request models
class ContextRequest(BaseModel):
    """Time anchors for a request: an explicit context, or an instant to build one from."""
    context: Optional[TimeContext] = Field(None, description="Explicit five-instant context")
    now: Optional[datetime] = Field(None, description="Instant to build a context from (defaults to now)")
    time_zone: Optional[str] = Field(None, description="IANA zone for local midnight (defaults to server config)")


class ListTasksRequest(ContextRequest):
    tasks: List[Task] = Field(default_factory=list)
    view: Optional[TaskViewName] = None
    folder_id: Optional[str] = None
    tag_ids: Optional[List[str]] = None
    search: Optional[str] = None
    filter_not_in_folder: bool = False
    filter_not_tagged: bool = False


class TaskStateRequest(ContextRequest):
    task: Task


class ExpandRequest(ContextRequest):
    task: Task
    horizon_days: Optional[int] = Field(None, ge=0)
    lookback_days: Optional[int] = Field(None, ge=0)


class TasksRequest(ContextRequest):
    tasks: List[Task] = Field(default_factory=list)


# Response models
class ListTasksResponse(BaseModel):
    """Response for a task listing."""
    context: TimeContext
    items: List[ViewItem]


class ExpandResponse(BaseModel):
    """Response for recurring task expansion."""
    instances: List[TaskInstance]


class TagsResponse(BaseModel):
    tags: List[str]


class OverdueSyncResponse(BaseModel):
    """Overdue tag changes the caller should write back to its store."""
    updated: int
    changes: List[OverdueTagChange]


def resolve_context(request: ContextRequest) -> TimeContext:
    """Use the request's explicit context, or build one from its instant and zone."""
    if request.context is not None:
        return request.context
    try:
        return build_time_context(
            request.now,
            time_zone=request.time_zone or DEFAULT_TIME_ZONE,
            week_start_day=WEEK_START_DAY,
        )
    except TimeZoneError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/tasks/list", response_model=ListTasksResponse)
async def list_tasks_endpoint(request: ListTasksRequest):
    """List tasks for a view with their computed state."""
    context = resolve_context(request)
    try:
        items = list_tasks(
            request.tasks,
            context,
            view=request.view,
            folder_id=request.folder_id,
            tag_ids=request.tag_ids,
            search=request.search,
            filter_not_in_folder=request.filter_not_in_folder,
            filter_not_tagged=request.filter_not_tagged,
            horizon_days=HORIZON_DAYS,
            lookback_days=LOOKBACK_DAYS,
        )
    except Exception as e:
        logger.error(f"Failed to list tasks: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to list tasks: {str(e)}")
    return ListTasksResponse(context=context, items=items)


@app.post("/tasks/state", response_model=ComputedState)
async def task_state(request: TaskStateRequest):
    """Computed view membership for one task."""
    return evaluate_task_state(request.task, resolve_context(request))


@app.post("/tasks/expand", response_model=ExpandResponse)
async def expand_task(request: ExpandRequest):
    """Expand one recurring task into its instances (none for other task types)."""
    context = resolve_context(request)
    instances = expand_recurring_task(
        request.task,
        context,
        horizon_days=HORIZON_DAYS if request.horizon_days is None else request.horizon_days,
        lookback_days=LOOKBACK_DAYS if request.lookback_days is None else request.lookback_days,
    )
    return ExpandResponse(instances=instances)


@app.post("/tasks/tags", response_model=TagsResponse)
async def all_tags(request: TasksRequest):
    """All distinct tags used by the posted tasks."""
    return TagsResponse(tags=collect_tags(request.tasks))


@app.post("/tasks/overdue-sync", response_model=OverdueSyncResponse)
async def overdue_sync(request: TasksRequest):
    """Plan Overdue tag changes; the caller applies them to its store."""
    changes = plan_overdue_tag_changes(request.tasks, resolve_context(request))
    logger.debug(f"Planned {len(changes)} overdue tag changes")
    return OverdueSyncResponse(updated=len(changes), changes=changes)
