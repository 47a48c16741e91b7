"""Task data model for taskview."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class TaskType(str, Enum):
    """Which temporal fields of a task are meaningful."""
    NONE = "none"
    DEADLINE = "deadline"
    DATE_RANGE = "date_range"
    SCHEDULED_TIME = "scheduled_time"
    RECURRING = "recurring"


class RecurrencePattern(str, Enum):
    """Recurrence pattern enumeration."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    SPECIFIC_DATES = "specific_dates"


def assume_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes; aware values pass through unchanged."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Task(BaseModel):
    """Canonical Task model (read-only input to the engine)."""

    id: str = Field(..., description="Opaque task identifier assigned by the document store")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    task_type: TaskType = Field(TaskType.NONE, description="Determines which temporal fields are used")

    deadline_at: Optional[datetime] = Field(None, description="Deadline instant (deadline tasks)")
    range_start_date: Optional[datetime] = Field(None, description="First day of an inclusive date range")
    range_end_date: Optional[datetime] = Field(None, description="Last day of an inclusive date range")
    scheduled_at: Optional[datetime] = Field(None, description="Scheduled instant (scheduled_time tasks)")

    # Recurrence (only meaningful when task_type is recurring)
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_days_of_week: List[int] = Field(
        default_factory=list, description="Weekdays 0-6, Sunday=0 (daily/weekly)"
    )
    recurrence_week_interval: Optional[int] = Field(None, description="Every N weeks (weekly)")
    recurrence_specific_dates: List[datetime] = Field(default_factory=list)
    recurrence_start_date: Optional[datetime] = None
    recurrence_end_date: Optional[datetime] = Field(None, description="Inclusive end bound")
    recurrence_day_of_month: Optional[int] = Field(None, description="Day 1-31 (monthly)")
    recurrence_month: Optional[int] = Field(None, description="Month 0-11 (yearly)")
    recurrence_day_of_year: Optional[int] = Field(
        None, description="Day of month within recurrence_month (yearly)"
    )

    is_completed: bool = Field(False, description="Whether the task is done")
    pinned_today: bool = Field(False, description="Manual override into Today")
    pinned_tomorrow: bool = Field(False, description="Manual override into Tomorrow")
    tag_ids: List[str] = Field(default_factory=list, description="Tag names")
    folder_id: Optional[str] = Field(None, description="Optional grouping key")

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator(
        "deadline_at",
        "range_start_date",
        "range_end_date",
        "scheduled_at",
        "recurrence_start_date",
        "recurrence_end_date",
        "created_at",
        "updated_at",
    )
    @classmethod
    def _validate_instant(cls, v):
        return assume_utc(v)

    @field_validator("recurrence_specific_dates")
    @classmethod
    def _validate_specific_dates(cls, v):
        return [assume_utc(d) for d in v]

    @field_validator("recurrence_days_of_week")
    @classmethod
    def _validate_days_of_week(cls, v):
        # Deduplicate but preserve order; out-of-range weekdays never match
        seen = set()
        out: List[int] = []
        for day in v:
            if not 0 <= day <= 6:
                continue
            if day not in seen:
                seen.add(day)
                out.append(day)
        return out

    @property
    def is_recurring_parent(self) -> bool:
        return self.task_type == TaskType.RECURRING

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class InstanceId(BaseModel):
    """Identity of a recurring task projected onto one date."""

    parent_id: str
    instance_date: date

    class Config:
        frozen = True


class TaskInstance(Task):
    """A recurring Task projected onto one concrete calendar date.

    Instances are virtual: rebuilt on every evaluation and never persisted.
    `id` stays the parent's id; `instance_id` is what tells instances apart.
    """

    parent_task_id: str = Field(..., description="Id of the recurring task this came from")
    instance_date: date = Field(..., description="Calendar date of this occurrence")
    is_recurring_instance: bool = True

    @property
    def instance_id(self) -> InstanceId:
        return InstanceId(parent_id=self.parent_task_id, instance_date=self.instance_date)
