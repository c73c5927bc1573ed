"""Statistics over the tasks visible to a requester.

Key Concepts:
- Overdue: a task whose due date has passed and that is not DONE.
- Completed today: ``completed_at`` at or after the start of the current day in
  the requested time zone.
- Assigned to me: the requester is among the task's assignees.
"""

from collections.abc import Iterable
from datetime import datetime, tzinfo

from tasklist.domain.task import Task, TaskPermissionContext, TaskPriority, TaskStatus, TaskType
from tasklist.models.service_models import TaskStatistics


def start_of_day(now: datetime, tz: tzinfo | None = None) -> datetime:
    """Midnight of ``now``'s day, in ``tz`` when given, else in ``now``'s own zone."""
    local_now = now.astimezone(tz) if tz is not None else now
    return local_now.replace(hour=0, minute=0, second=0, microsecond=0)


def aggregate_statistics(
    tasks: Iterable[Task],
    context: TaskPermissionContext,
    *,
    now: datetime,
    tz: tzinfo | None = None,
) -> TaskStatistics:
    """Count tasks per status, type and priority in a single pass.

    Args:
        tasks: Tasks already filtered for visibility
        context: Requester, used for ``assigned_to_me``
        now: Current time
        tz: Time zone defining "today"; defaults to ``now``'s zone

    Returns:
        TaskStatistics with one bucket for every enum member
    """
    by_status = dict.fromkeys(TaskStatus, 0)
    by_type = dict.fromkeys(TaskType, 0)
    by_priority = dict.fromkeys(TaskPriority, 0)
    today_start = start_of_day(now, tz)

    total = overdue = completed_today = assigned_to_me = 0
    for task in tasks:
        total += 1
        by_status[task.status] += 1
        by_type[task.type] += 1
        by_priority[task.priority] += 1

        if task.due_date is not None and task.status != TaskStatus.DONE and task.due_date < now:
            overdue += 1

        if task.completed_at is not None and task.completed_at >= today_start:
            completed_today += 1

        if context.user_id in task.assignee_ids:
            assigned_to_me += 1

    return TaskStatistics(
        total_tasks=total,
        by_status=by_status,
        by_type=by_type,
        by_priority=by_priority,
        overdue_tasks=overdue,
        completed_today=completed_today,
        assigned_to_me=assigned_to_me,
    )
