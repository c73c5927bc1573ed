"""SQLite-backed implementation of the task store."""

import json
import logging
from collections.abc import Collection
from typing import Any

from tasklist.core import db_client
from tasklist.core.errors import RecordNotFoundError
from tasklist.core.logging import span
from tasklist.core.schema import init_db
from tasklist.domain.task import Task, TaskHistoryEntry, TaskStatus, TaskType


logger = logging.getLogger(__name__)

_TASKS = "tasks"
_HISTORY = "task_history"


def _task_to_row(task: Task) -> dict[str, Any]:
    """Flatten a task into column values."""
    return task.model_dump()


def _row_to_task(row: dict[str, Any]) -> Task:
    """Rebuild a task from a stored row."""
    data = dict(row)
    data["assignee_ids"] = json.loads(data["assignee_ids"] or "[]")
    data["is_personal"] = bool(data["is_personal"])
    return Task.model_validate(data)


class SqliteTaskStore:
    """Task store persisting to a SQLite file through ``db_client``.

    Usage:
        store = SqliteTaskStore(db_path="data/tasks.db")
        await store.initialize()
        engine = TaskEngine(store)
    """

    def __init__(self, *, db_path: str | None = None) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        """Create the schema if needed."""
        await init_db(db_path=self._db_path)

    async def close(self) -> None:
        """Close the cached connection for this store's database."""
        await db_client.close_connection(db_path=self._db_path)

    async def create_task(self, task: Task) -> Task:
        with span("sqlite_store.create_task"):
            await db_client.create_record(table=_TASKS, data=_task_to_row(task), db_path=self._db_path)
            return task.model_copy(deep=True)

    async def get_task(self, task_id: str) -> Task | None:
        try:
            row = await db_client.get_record(table=_TASKS, record_id=task_id, db_path=self._db_path)
        except RecordNotFoundError:
            return None
        return _row_to_task(row)

    async def list_tasks(
        self,
        *,
        tenant_id: str,
        location_id: str | None = None,
        task_type: TaskType | None = None,
        statuses: Collection[TaskStatus] | None = None,
    ) -> list[Task]:
        with span("sqlite_store.list_tasks"):
            where: dict[str, Any] = {"tenant_id": tenant_id}
            if location_id is not None:
                where["location_id"] = location_id
            if task_type is not None:
                where["type"] = task_type
            if statuses is not None:
                where["status"] = list(statuses)

            rows = await db_client.list_records(table=_TASKS, where=where, db_path=self._db_path)
            return [_row_to_task(row) for row in rows]

    async def update_task(self, task: Task) -> Task:
        with span("sqlite_store.update_task"):
            data = _task_to_row(task)
            data.pop("id")
            await db_client.update_record(table=_TASKS, record_id=task.id, data=data, db_path=self._db_path)
            return task.model_copy(deep=True)

    async def append_history(self, entry: TaskHistoryEntry) -> TaskHistoryEntry:
        await db_client.create_record(table=_HISTORY, data=entry.model_dump(), db_path=self._db_path)
        return entry

    async def list_history(self, task_id: str) -> list[TaskHistoryEntry]:
        rows = await db_client.list_records(table=_HISTORY, where={"task_id": task_id}, db_path=self._db_path)
        return [TaskHistoryEntry.model_validate(row) for row in rows]
