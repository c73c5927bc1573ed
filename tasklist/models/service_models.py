"""Pydantic models for service layer return types.

These models provide type safety at service boundaries.
"""

from pydantic import BaseModel, Field

from tasklist.domain.task import Task, TaskPriority, TaskStatus, TaskType


class DuplicateCheckResult(BaseModel):
    """Outcome of comparing a proposed title with open tasks."""

    is_duplicate: bool
    similar_tasks: list[Task] = Field(default_factory=list)
    message: str | None = None


class TaskListResult(BaseModel):
    """One page of a filtered task listing."""

    tasks: list[Task]
    total: int
    page: int
    page_size: int
    has_more: bool


class TaskStatistics(BaseModel):
    """Counts over the tasks visible to a requester."""

    total_tasks: int
    by_status: dict[TaskStatus, int]
    by_type: dict[TaskType, int]
    by_priority: dict[TaskPriority, int]
    overdue_tasks: int
    completed_today: int
    assigned_to_me: int
