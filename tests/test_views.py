"""Tests for task view listing (expand, evaluate, filter, sort)."""

import pytest
from datetime import date

from conftest import utc
from taskview.engine.views import (
    annotate_task,
    associated_date,
    collect_tags,
    list_tasks,
    narrow,
    partition_recurring,
)
from taskview.models.state import TaskViewName, TimeContext
from taskview.models.task import InstanceId, Task, TaskInstance, TaskType


@pytest.fixture
def make(sample_task_base):
    """Factory for tasks with unique ids."""
    counter = {"n": 0}

    def _make(**fields):
        counter["n"] += 1
        return Task(**{**sample_task_base, "id": f"task-{counter['n']}", **fields})
    return _make


class TestRecurringHandling:
    """Bank keeps recurring parents; other views use their instances."""

    def test_partition(self, sample_task, daily_task):
        plain, recurring = partition_recurring([sample_task, daily_task])

        assert plain == [sample_task]
        assert recurring == [daily_task]

    def test_bank_keeps_parent_unexpanded(self, sample_task, daily_task, context):
        items = list_tasks([sample_task, daily_task], context, view=TaskViewName.BANK)

        assert len(items) == 2
        assert {item.identity for item in items} == {sample_task.id, daily_task.id}
        assert not any(isinstance(item.task, TaskInstance) for item in items)

    def test_no_view_behaves_like_bank(self, sample_task, daily_task, context):
        items = list_tasks([sample_task, daily_task], context)

        assert len(items) == 2
        assert not any(isinstance(item.task, TaskInstance) for item in items)

    def test_today_view_uses_instances(self, daily_task, context):
        items = list_tasks([daily_task], context, view=TaskViewName.TODAY)

        assert items
        assert all(isinstance(item.task, TaskInstance) for item in items)
        assert InstanceId(parent_id=daily_task.id, instance_date=date(2024, 1, 15)) in {
            item.identity for item in items
        }
        assert all(item.task.instance_date <= date(2024, 1, 15) for item in items)

    def test_tomorrow_view_has_only_tomorrows_instance(self, daily_task, context):
        items = list_tasks([daily_task], context, view="tomorrow")

        assert [item.identity for item in items] == [
            InstanceId(parent_id=daily_task.id, instance_date=date(2024, 1, 16))
        ]
        assert items[0].state.in_tomorrow is True

    def test_next_week_view_respects_horizon(self, daily_task, context):
        full = list_tasks([daily_task], context, view=TaskViewName.NEXT_WEEK)
        short = list_tasks([daily_task], context, view=TaskViewName.NEXT_WEEK, horizon_days=3)

        assert len(full) == 7
        assert short == []

    def test_overdue_view_includes_recent_misses(self, daily_task, context):
        items = list_tasks([daily_task], context, view=TaskViewName.OVERDUE)
        dates = {item.task.instance_date for item in items}

        assert date(2024, 1, 14) in dates
        assert date(2024, 1, 1) in dates
        assert date(2023, 12, 31) not in dates

    def test_explicit_offset_context_keeps_instances_on_their_day(self, make):
        """Days that start at 05:00Z: Tuesday's instance is Tomorrow on Monday, not Today."""
        context = TimeContext(
            now=utc(2024, 1, 15, 14),
            today_start=utc(2024, 1, 15, 5),
            tomorrow_start=utc(2024, 1, 16, 5),
            week_start=utc(2024, 1, 14, 5),
            next_week_start=utc(2024, 1, 21, 5),
        )
        tuesdays = make(
            task_type=TaskType.RECURRING,
            recurrence_pattern="daily",
            recurrence_days_of_week=[2],
            recurrence_start_date=utc(2024, 1, 1, 5),
        )

        today = list_tasks([tuesdays], context, view=TaskViewName.TODAY)
        tomorrow = list_tasks([tuesdays], context, view=TaskViewName.TOMORROW)

        assert sorted(item.task.instance_date for item in today) == [date(2024, 1, 2), date(2024, 1, 9)]
        assert [item.task.instance_date for item in tomorrow] == [date(2024, 1, 16)]

    def test_oversized_recurrence_field_lists_nothing(self, make, context):
        task = make(
            task_type=TaskType.RECURRING,
            recurrence_pattern="monthly",
            recurrence_day_of_month=10**20,
            recurrence_start_date=utc(2023, 1, 1),
        )
        assert list_tasks([task], context, view=TaskViewName.TODAY) == []

    def test_input_is_not_mutated(self, sample_task, daily_task, context):
        before = [t.model_dump() for t in (sample_task, daily_task)]
        list_tasks([sample_task, daily_task], context, view=TaskViewName.THIS_WEEK)

        assert [t.model_dump() for t in (sample_task, daily_task)] == before


class TestViewFilter:
    """Views select by the matching ComputedState flag."""

    def test_someday_view(self, make, context):
        untimed = make(title="Untimed")
        tagged = make(title="Tagged", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 3, 1), tag_ids=["Someday"])
        dated = make(title="Dated", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 3, 1))

        items = list_tasks([untimed, tagged, dated], context, view=TaskViewName.SOMEDAY)

        assert {item.task.title for item in items} == {"Untimed", "Tagged"}

    def test_overdue_view(self, make, context):
        late = make(title="Late", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 1, 14))
        soon = make(title="Soon", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 1, 16))

        items = list_tasks([late, soon], context, view=TaskViewName.OVERDUE)

        assert [item.task.title for item in items] == ["Late"]

    def test_bank_includes_everything(self, make, context):
        tasks = [
            make(title="Untimed"),
            make(title="Done", is_completed=True),
            make(title="Far", task_type=TaskType.DEADLINE, deadline_at=utc(2025, 1, 1)),
        ]
        assert len(list_tasks(tasks, context, view=TaskViewName.BANK)) == 3


class TestNarrowing:
    """Folder, tag and search filters."""

    @pytest.fixture
    def tasks(self, make):
        return [
            make(title="Write report", folder_id="work", tag_ids=["urgent"]),
            make(title="Buy milk", description="From the corner SHOP", folder_id="home"),
            make(title="Call mom", tag_ids=["family", "phone"]),
            make(title="Read book"),
        ]

    def _titles(self, items):
        return sorted(item.task.title for item in items)

    def test_folder(self, tasks, context):
        items = list_tasks(tasks, context, folder_id="work")
        assert self._titles(items) == ["Write report"]

    def test_not_in_folder(self, tasks, context):
        items = list_tasks(tasks, context, filter_not_in_folder=True)
        assert self._titles(items) == ["Call mom", "Read book"]

    def test_tags_match_any(self, tasks, context):
        items = list_tasks(tasks, context, tag_ids=["phone", "urgent"])
        assert self._titles(items) == ["Call mom", "Write report"]

    def test_not_tagged(self, tasks, context):
        items = list_tasks(tasks, context, filter_not_tagged=True)
        assert self._titles(items) == ["Buy milk", "Read book"]

    def test_search_title_case_insensitive(self, tasks, context):
        items = list_tasks(tasks, context, search="REPORT")
        assert self._titles(items) == ["Write report"]

    def test_search_description(self, tasks, context):
        items = list_tasks(tasks, context, search="shop")
        assert self._titles(items) == ["Buy milk"]

    def test_blank_search_is_ignored(self, tasks, context):
        assert len(list_tasks(tasks, context, search="   ")) == 4

    def test_filters_compose(self, tasks, context):
        items = list_tasks(tasks, context, filter_not_in_folder=True, filter_not_tagged=True)
        assert self._titles(items) == ["Read book"]

    def test_narrow_returns_new_list(self, tasks, context):
        items = [annotate_task(t, context) for t in tasks]
        narrowed = narrow(items)

        assert narrowed == items
        assert narrowed is not items


class TestSorting:
    """Incomplete first; Bank by date, other views by recency."""

    def test_incomplete_before_completed(self, make, context):
        done = make(title="Done", is_completed=True, updated_at=utc(2024, 1, 14))
        open_ = make(title="Open", updated_at=utc(2024, 1, 1))

        items = list_tasks([done, open_], context, view=TaskViewName.BANK)

        assert [item.task.title for item in items] == ["Open", "Done"]

    def test_bank_sorts_by_soonest_date(self, make, context):
        undated_old = make(title="Undated old", updated_at=utc(2024, 1, 1))
        undated_new = make(title="Undated new", updated_at=utc(2024, 1, 10))
        later = make(title="Later", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 2, 1))
        sooner = make(title="Sooner", task_type=TaskType.SCHEDULED_TIME, scheduled_at=utc(2024, 1, 20))
        ranged = make(
            title="Ranged",
            task_type=TaskType.DATE_RANGE,
            range_start_date=utc(2024, 1, 25),
            range_end_date=utc(2024, 1, 27),
        )

        items = list_tasks([undated_old, later, undated_new, ranged, sooner], context, view=TaskViewName.BANK)

        assert [item.task.title for item in items] == [
            "Sooner",
            "Ranged",
            "Later",
            "Undated new",
            "Undated old",
        ]

    def test_bank_date_ties_by_recency(self, make, context):
        old = make(title="Old", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 2, 1), updated_at=utc(2024, 1, 1))
        new = make(title="New", task_type=TaskType.DEADLINE, deadline_at=utc(2024, 2, 1), updated_at=utc(2024, 1, 9))

        items = list_tasks([old, new], context, view=TaskViewName.BANK)

        assert [item.task.title for item in items] == ["New", "Old"]

    def test_other_views_sort_by_recency(self, make, context):
        base = {"task_type": TaskType.DEADLINE, "deadline_at": utc(2024, 1, 17)}
        a = make(title="A", updated_at=utc(2024, 1, 2), **base)
        b = make(title="B", updated_at=utc(2024, 1, 12), **base)
        c = make(title="C", updated_at=None, **base)
        d = make(title="D", updated_at=utc(2024, 1, 14), is_completed=True, pinned_today=True, **base)

        items = list_tasks([a, c, d, b], context, view=TaskViewName.THIS_WEEK)

        assert [item.task.title for item in items] == ["B", "A", "C", "D"]

    def test_associated_date_precedence(self, make):
        task = make(
            deadline_at=utc(2024, 3, 1),
            scheduled_at=utc(2024, 2, 1),
            range_start_date=utc(2024, 1, 1),
        )
        assert associated_date(task) == utc(2024, 3, 1)
        assert associated_date(make()) is None


class TestHelpers:
    def test_annotate_task(self, deadline_task, context):
        item = annotate_task(deadline_task, context)

        assert item.task == deadline_task
        assert item.identity == deadline_task.id
        assert item.state.in_tomorrow is True

    def test_collect_tags(self, make):
        tasks = [make(tag_ids=["b", "a"]), make(tag_ids=["a", "Overdue"]), make()]
        assert collect_tags(tasks) == ["Overdue", "a", "b"]

    def test_default_context_uses_wall_clock(self, make):
        task = make(task_type=TaskType.DEADLINE, deadline_at=utc(2000, 1, 1))
        items = list_tasks([task], view=TaskViewName.OVERDUE)

        assert [item.task.id for item in items] == [task.id]
