"""Domain models and DTOs."""

from tasklist.domain.create_models import TaskCreate
from tasklist.domain.query_models import TaskFilter
from tasklist.domain.task import (
    HistoryAction,
    Task,
    TaskHistoryEntry,
    TaskPermissionContext,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from tasklist.domain.update_models import TaskAssignment, TaskStatusChange, TaskUnassignment, TaskUpdate


__all__ = [
    "HistoryAction",
    "Task",
    "TaskAssignment",
    "TaskCreate",
    "TaskFilter",
    "TaskHistoryEntry",
    "TaskPermissionContext",
    "TaskPriority",
    "TaskStatus",
    "TaskStatusChange",
    "TaskType",
    "TaskUnassignment",
    "TaskUpdate",
]
