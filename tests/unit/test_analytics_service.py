"""Unit tests for analytics_service module."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from tasklist.domain.task import TaskPriority, TaskStatus, TaskType
from tasklist.services.analytics_service import aggregate_statistics, start_of_day
from tests.unit.mocks import make_context, make_task


NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)
EST = timezone(timedelta(hours=-5))


@pytest.mark.unit
class TestStartOfDay:
    """Tests for start_of_day."""

    def test_in_own_zone(self):
        """Midnight of the same day when no zone is given."""
        assert start_of_day(NOW) == datetime(2026, 3, 15, tzinfo=UTC)

    def test_in_other_zone(self):
        """The local day can start on the previous UTC day."""
        early = datetime(2026, 3, 15, 2, 0, tzinfo=UTC)

        start = start_of_day(early, EST)

        assert start == datetime(2026, 3, 14, tzinfo=EST)
        assert start == datetime(2026, 3, 14, 5, 0, tzinfo=UTC)


@pytest.mark.unit
class TestAggregateStatistics:
    """Tests for aggregate_statistics."""

    def test_empty_has_every_bucket(self):
        """All enum members appear with zero counts."""
        stats = aggregate_statistics([], make_context(), now=NOW)

        assert stats.total_tasks == 0
        assert stats.by_status == dict.fromkeys(TaskStatus, 0)
        assert stats.by_type == dict.fromkeys(TaskType, 0)
        assert stats.by_priority == dict.fromkeys(TaskPriority, 0)
        assert stats.overdue_tasks == 0
        assert stats.completed_today == 0
        assert stats.assigned_to_me == 0

    def test_bucket_counts(self):
        """Each task lands in one bucket per dimension."""
        tasks = [
            make_task(type=TaskType.SHOPPING, priority=TaskPriority.HIGH),
            make_task(type=TaskType.SHOPPING, status=TaskStatus.IN_PROGRESS),
            make_task(type=TaskType.NOTE, status=TaskStatus.DONE, priority=TaskPriority.URGENT),
        ]

        stats = aggregate_statistics(tasks, make_context(), now=NOW)

        assert stats.total_tasks == 3
        assert stats.by_type[TaskType.SHOPPING] == 2
        assert stats.by_type[TaskType.NOTE] == 1
        assert stats.by_type[TaskType.TODO] == 0
        assert stats.by_status[TaskStatus.OPEN] == 1
        assert stats.by_status[TaskStatus.IN_PROGRESS] == 1
        assert stats.by_status[TaskStatus.DONE] == 1
        assert stats.by_priority[TaskPriority.MEDIUM] == 1
        assert stats.by_priority[TaskPriority.HIGH] == 1
        assert stats.by_priority[TaskPriority.URGENT] == 1

    def test_overdue(self):
        """Past due and not DONE counts; archived tasks still count."""
        past = NOW - timedelta(days=1)
        tasks = [
            make_task(due_date=past),
            make_task(due_date=past, status=TaskStatus.IN_PROGRESS),
            make_task(due_date=past, status=TaskStatus.ARCHIVED),
            make_task(due_date=past, status=TaskStatus.DONE),
            make_task(due_date=NOW + timedelta(hours=1)),
            make_task(due_date=NOW),
            make_task(),
        ]

        stats = aggregate_statistics(tasks, make_context(), now=NOW)

        assert stats.overdue_tasks == 3

    def test_completed_today_uses_zone(self):
        """Day boundary follows the requested time zone."""
        now = datetime(2026, 3, 15, 2, 0, tzinfo=UTC)
        tasks = [
            make_task(status=TaskStatus.DONE, completed_at=datetime(2026, 3, 14, 10, 0, tzinfo=UTC)),
            make_task(status=TaskStatus.DONE, completed_at=datetime(2026, 3, 15, 0, 0, tzinfo=UTC)),
            make_task(status=TaskStatus.DONE, completed_at=datetime(2026, 3, 14, 4, 0, tzinfo=UTC)),
        ]

        utc_stats = aggregate_statistics(tasks, make_context(), now=now)
        est_stats = aggregate_statistics(tasks, make_context(), now=now, tz=EST)

        assert utc_stats.completed_today == 1
        assert est_stats.completed_today == 2

    def test_completed_today_counts_reopened(self):
        """Reopened tasks keep completed_at and still count."""
        task = make_task(status=TaskStatus.OPEN, completed_at=NOW - timedelta(hours=1), completed_by="bob")

        stats = aggregate_statistics([task], make_context(), now=NOW)

        assert stats.completed_today == 1

    def test_assigned_to_me(self):
        """Counts tasks listing the requester as an assignee."""
        tasks = [
            make_task(assignee_ids=["bob"]),
            make_task(assignee_ids=["alice", "bob"]),
            make_task(assignee_ids=[]),
        ]

        assert aggregate_statistics(tasks, make_context("bob"), now=NOW).assigned_to_me == 2
        assert aggregate_statistics(tasks, make_context("alice"), now=NOW).assigned_to_me == 1

    def test_accepts_generator(self):
        """Single pass over any iterable."""
        stats = aggregate_statistics((make_task() for _ in range(4)), make_context(), now=NOW)

        assert stats.total_tasks == 4
