"""Storage interface the task engine depends on.

The engine never owns its storage: callers inject any object satisfying
``TaskStore``. Implementations return copies, so mutating a returned task never
changes stored state without an explicit ``update_task``.
"""

from collections.abc import Collection
from typing import Protocol

from tasklist.domain.task import Task, TaskHistoryEntry, TaskStatus, TaskType


class TaskStore(Protocol):
    """Task persistence capability: CRUD plus append-only history."""

    async def create_task(self, task: Task) -> Task:
        """Persist a new task and return the stored copy."""
        ...

    async def get_task(self, task_id: str) -> Task | None:
        """Return the task with this id, or None when it does not exist."""
        ...

    async def list_tasks(
        self,
        *,
        tenant_id: str,
        location_id: str | None = None,
        task_type: TaskType | None = None,
        statuses: Collection[TaskStatus] | None = None,
    ) -> list[Task]:
        """Return a snapshot of tasks in a tenant, in insertion order.

        Args:
            tenant_id: Tenant to read from (required)
            location_id: Restrict to one location when given
            task_type: Restrict to one task type when given
            statuses: Restrict to these statuses when given
        """
        ...

    async def update_task(self, task: Task) -> Task:
        """Overwrite a stored task. Raises RecordNotFoundError if it does not exist."""
        ...

    async def append_history(self, entry: TaskHistoryEntry) -> TaskHistoryEntry:
        """Append an immutable history entry."""
        ...

    async def list_history(self, task_id: str) -> list[TaskHistoryEntry]:
        """Return a task's history entries in insertion order."""
        ...
