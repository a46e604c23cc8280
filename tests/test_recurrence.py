"""
Unit Tests for Recurrence
"""

from datetime import date

import pytest

from gtd_engine.recurrence import (
    next_instance_fields,
    next_occurrence_date,
    should_recurrence_end,
)
from gtd_engine.task_model import Task, TaskStatus

from tests.conftest import NOW, TODAY, make_task


# TODAY is Friday 2025-01-10
class TestNextOccurrence:

    @pytest.mark.parametrize("recurrence,due,expected", [
        ("daily", "2025-01-10", date(2025, 1, 11)),
        ("weekly", "2025-01-10", date(2025, 1, 17)),
        ("biweekly", "2025-01-10", date(2025, 1, 24)),
        ("monthly", "2025-01-31", date(2025, 2, 28)),
        ("monthly", "2024-03-15", date(2024, 4, 15)),
        ("yearly", "2024-02-29", date(2025, 2, 28)),
        ("monthly", "2024-12-05", date(2025, 1, 5)),
    ])
    def test_simple_patterns(self, recurrence, due, expected):
        task = make_task("t", recurrence=recurrence, due_date=due)

        assert next_occurrence_date(task, TODAY) == expected

    def test_weekly_on_specific_days(self):
        task = make_task("t", recurrence={"type": "weekly", "days_of_week": [1, 3]}, due_date=TODAY)

        # Friday -> next Monday
        assert next_occurrence_date(task, TODAY) == date(2025, 1, 13)

    def test_monthly_day_of_month(self):
        task = make_task("t", recurrence={"type": "monthly", "day_of_month": 15}, due_date=TODAY)

        assert next_occurrence_date(task, TODAY) == date(2025, 2, 15)

    def test_monthly_day_of_month_clamps(self):
        task = make_task("t", recurrence={"type": "monthly", "day_of_month": 31}, due_date=TODAY)

        assert next_occurrence_date(task, TODAY) == date(2025, 2, 28)

    def test_monthly_nth_weekday(self):
        # Third Thursday of February 2025
        task = make_task(
            "t",
            recurrence={"type": "monthly", "nth_weekday": [3, 4]},
            due_date=TODAY,
        )

        assert next_occurrence_date(task, TODAY) == date(2025, 2, 20)

    def test_yearly_month_day(self):
        task = make_task("t", recurrence={"type": "yearly", "month_day": "03-15"}, due_date=TODAY)

        assert next_occurrence_date(task, TODAY) == date(2026, 3, 15)

    def test_counts_from_today_without_due_date(self):
        task = make_task("t", recurrence="daily")

        assert next_occurrence_date(task, TODAY) == date(2025, 1, 11)

    def test_non_recurring(self):
        assert next_occurrence_date(make_task("t"), TODAY) is None


class TestRecurrenceEnd:

    def test_end_date_in_past(self):
        task = make_task("t", recurrence="daily", recurrence_end_date="2025-01-09")

        assert should_recurrence_end(task, TODAY)

    def test_end_date_today_still_recurs(self):
        task = make_task("t", recurrence="daily", recurrence_end_date=TODAY)

        assert not should_recurrence_end(task, TODAY)

    def test_no_end_date(self):
        assert not should_recurrence_end(make_task("t", recurrence="daily"), TODAY)


class TestNextInstanceFields:

    def test_completed_instance_spawns_inbox_task(self):
        task = make_task(
            "t",
            TaskStatus.NEXT,
            title="Water plants",
            recurrence="weekly",
            due_date=TODAY,
            contexts=["@home"],
            energy="low",
            time=10,
        )
        task.mark_complete(NOW)

        fields = next_instance_fields(task, TODAY)

        assert fields["status"] == "inbox"
        assert fields["due_date"] == "2025-01-17"
        assert fields["recurrence_parent_id"] == "t"
        assert fields["contexts"] == ["@home"]

        follow_up = Task.from_dict(fields)
        assert follow_up.id != "t"
        assert follow_up.title == "Water plants"
        assert follow_up.recurrence.type.value == "weekly"
        assert not follow_up.is_done

    def test_keeps_original_parent(self):
        task = make_task("t2", recurrence="daily", recurrence_parent_id="t1")

        assert next_instance_fields(task, TODAY)["recurrence_parent_id"] == "t1"

    def test_open_instance_keeps_status(self):
        task = make_task("t", TaskStatus.NEXT, recurrence="daily")

        assert next_instance_fields(task, TODAY)["status"] == "next"

    def test_ended_recurrence(self):
        task = make_task("t", recurrence="daily", recurrence_end_date="2025-01-01")

        assert next_instance_fields(task, TODAY) is None

    def test_non_recurring(self):
        assert next_instance_fields(make_task("t"), TODAY) is None
