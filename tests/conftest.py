"""Pytest fixtures and configuration for taskview tests."""

import pytest
import uuid
from datetime import datetime, timezone
from fastapi.testclient import TestClient

from taskview.engine.time_context import build_time_context
from taskview.models.task import Task, TaskType


# Monday, 9am UTC. The surrounding week runs Sunday 2024-01-14 .. Saturday 2024-01-20.
MONDAY_9AM = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


def utc(year, month, day, hour=0, minute=0):
    """Shorthand for an aware UTC datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return MONDAY_9AM


@pytest.fixture
def context(now):
    """TimeContext for Monday 2024-01-15 09:00 UTC (Sunday-start weeks)."""
    return build_time_context(now)


@pytest.fixture
def sample_task_base():
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "title": "Test Task",
        "description": "Test description",
        "task_type": TaskType.NONE,
        "is_completed": False,
        "pinned_today": False,
        "pinned_tomorrow": False,
        "tag_ids": [],
        "folder_id": None,
        "created_at": utc(2024, 1, 1),
        "updated_at": utc(2024, 1, 1),
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def deadline_task(sample_task_base):
    """Task due tomorrow at noon."""
    return Task(**{**sample_task_base, "task_type": TaskType.DEADLINE, "deadline_at": utc(2024, 1, 16, 12)})


@pytest.fixture
def daily_task(sample_task_base):
    """Recurring task on every day of the week, started long ago."""
    return Task(
        **{
            **sample_task_base,
            "title": "Daily standup",
            "task_type": TaskType.RECURRING,
            "recurrence_pattern": "daily",
            "recurrence_days_of_week": [0, 1, 2, 3, 4, 5, 6],
            "recurrence_start_date": utc(2023, 6, 1),
        }
    )


@pytest.fixture
def test_client():
    """Create a FastAPI test client."""
    from taskview.api.app import app

    with TestClient(app) as client:
        yield client
