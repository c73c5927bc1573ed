"""SQLite schema for the task store (code-first approach)."""

import logging

from tasklist.core.db_client import get_connection


logger = logging.getLogger(__name__)


TABLE_SCHEMAS: dict[str, str] = {
    "tasks": """CREATE TABLE IF NOT EXISTS tasks (
        id TEXT PRIMARY KEY,
        tenant_id TEXT NOT NULL,
        location_id TEXT NOT NULL,
        type TEXT NOT NULL CHECK (type IN ('SHOPPING', 'TODO', 'NOTE')),
        status TEXT NOT NULL DEFAULT 'OPEN'
            CHECK (status IN ('OPEN', 'IN_PROGRESS', 'DONE', 'ARCHIVED')),
        title TEXT NOT NULL,
        description TEXT,
        priority TEXT NOT NULL DEFAULT 'MEDIUM'
            CHECK (priority IN ('LOW', 'MEDIUM', 'HIGH', 'URGENT')),
        quantity INTEGER CHECK (quantity IS NULL OR quantity > 0),
        target_location TEXT,
        created_by TEXT NOT NULL,
        assignee_ids TEXT NOT NULL DEFAULT '[]',
        is_personal INTEGER NOT NULL DEFAULT 0,
        due_date TEXT,
        completed_at TEXT,
        completed_by TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )""",
    "task_history": """CREATE TABLE IF NOT EXISTS task_history (
        id TEXT PRIMARY KEY,
        task_id TEXT NOT NULL REFERENCES tasks(id),
        action TEXT NOT NULL CHECK (
            action IN ('CREATED', 'UPDATED', 'STATUS_CHANGED', 'ASSIGNED', 'COMPLETED', 'ARCHIVED')
        ),
        previous_value TEXT,
        new_value TEXT,
        performed_by TEXT NOT NULL,
        performed_at TEXT NOT NULL
    )""",
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_scope ON tasks (tenant_id, location_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_type_status ON tasks (type, status)",
    "CREATE INDEX IF NOT EXISTS idx_task_history_task_id ON task_history (task_id)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create tables and indexes if they do not exist yet."""
    conn = await get_connection(db_path=db_path)
    for table, ddl in TABLE_SCHEMAS.items():
        await conn.execute(ddl)
        logger.debug("Ensured table %s", table)
    for index in INDEXES:
        await conn.execute(index)
    await conn.commit()
    logger.info("Task store schema initialized", extra={"tables": list(TABLE_SCHEMAS)})
