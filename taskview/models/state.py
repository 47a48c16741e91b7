"""Computed view-membership state and view names."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field, field_validator, model_validator

from taskview.models.task import InstanceId, Task, TaskInstance, assume_utc


class TaskViewName(str, Enum):
    """Named views over ComputedState."""
    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    BANK = "bank"
    SOMEDAY = "someday"
    OVERDUE = "overdue"


class TimeContext(BaseModel):
    """Five-instant snapshot that all temporal evaluation is relative to.

    Invariants are checked once here, at construction; the evaluator trusts
    them afterwards.
    """

    now: datetime
    today_start: datetime
    tomorrow_start: datetime
    week_start: datetime
    next_week_start: datetime

    @field_validator("now", "today_start", "tomorrow_start", "week_start", "next_week_start")
    @classmethod
    def _validate_instant(cls, v):
        return assume_utc(v)

    @model_validator(mode="after")
    def _check_anchors(self):
        one_day = timedelta(days=1)
        one_week = timedelta(days=7)
        if not (self.today_start <= self.now < self.today_start + one_day):
            raise ValueError("now must fall within [today_start, today_start + 1 day)")
        if self.tomorrow_start - self.today_start != one_day:
            raise ValueError("tomorrow_start must be exactly one day after today_start")
        if not (self.week_start <= self.today_start < self.week_start + one_week):
            raise ValueError("today_start must fall within [week_start, week_start + 7 days)")
        if self.next_week_start - self.week_start != one_week:
            raise ValueError("next_week_start must be exactly seven days after week_start")
        return self

    @property
    def today(self) -> date:
        """Calendar date of today_start."""
        return self.today_start.date()

    def calendar_date(self, instant: datetime) -> date:
        """The caller's calendar date of `instant`.

        Days roll over at the wall-clock time of `today_start` in its own zone.
        A context built on local midnight in a named zone therefore counts local
        calendar days, 23 and 25 hour DST days included, while one sent as
        05:00Z counts days that start at 05:00 UTC.
        """
        start = self.today_start
        rollover = start - start.replace(hour=0, minute=0, second=0, microsecond=0)
        return (assume_utc(instant).astimezone(start.tzinfo) - rollover).date()

    def day_start(self, day: date) -> datetime:
        """Instant at which calendar `day` begins."""
        return self.today_start + timedelta(days=(day - self.today).days)

    class Config:
        frozen = True


class ComputedState(BaseModel):
    """Independent view-membership flags for one task."""

    in_today: bool = False
    in_tomorrow: bool = False
    in_this_week: bool = False
    in_next_week: bool = False
    is_overdue: bool = False
    is_someday: bool = False

    def in_view(self, view: TaskViewName) -> bool:
        """Whether this state belongs to `view`. Bank holds everything."""
        if view == TaskViewName.TODAY:
            return self.in_today
        if view == TaskViewName.TOMORROW:
            return self.in_tomorrow
        if view == TaskViewName.THIS_WEEK:
            return self.in_this_week
        if view == TaskViewName.NEXT_WEEK:
            return self.in_next_week
        if view == TaskViewName.SOMEDAY:
            return self.is_someday
        if view == TaskViewName.OVERDUE:
            return self.is_overdue
        return True


class ViewItem(BaseModel):
    """A task or instance annotated with its computed state."""

    task: Union[TaskInstance, Task]
    state: ComputedState = Field(default_factory=ComputedState)

    @property
    def identity(self) -> Union[str, InstanceId]:
        if isinstance(self.task, TaskInstance):
            return self.task.instance_id
        return self.task.id
