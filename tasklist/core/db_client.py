"""SQLite database client wrapper with CRUD operations."""

import asyncio
import json
import logging
import re
import threading
from collections.abc import Collection, Mapping
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from tasklist.core.config import settings
from tasklist.core.errors import DatabaseError, RecordNotFoundError


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def _validate_identifier(name: str) -> None:
    """Validate that a table or column name contains only alphanumeric characters and underscores."""
    if not _IDENTIFIER.match(name):
        msg = f"Invalid identifier: {name}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _to_sql_value(value: Any) -> Any:
    """Convert a Python value to something sqlite3 can bind."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict | list):
        return json.dumps(value)
    if isinstance(value, bool):
        return int(value)
    return value


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _build_where(where: Mapping[str, Any] | None) -> tuple[str, list[Any]]:
    """Build a WHERE clause from equality and membership conditions.

    A collection value becomes ``IN (...)``; anything else is compared with ``=``.
    """
    if not where:
        return "", []

    conditions = []
    params: list[Any] = []
    for column, value in where.items():
        _validate_identifier(column)
        if isinstance(value, Collection) and not isinstance(value, str):
            values = list(value)
            if not values:
                conditions.append("0")
                continue
            placeholders = ", ".join("?" for _ in values)
            conditions.append(f"{column} IN ({placeholders})")
            params.extend(_to_sql_value(v) for v in values)
        else:
            conditions.append(f"{column} = ?")
            params.append(_to_sql_value(value))

    return "WHERE " + " AND ".join(conditions), params


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_locks: dict[int, asyncio.Lock] = {}


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    lock = _db_locks.setdefault(loop_id, asyncio.Lock())
    async with lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    conn = _db_connections.pop(cache_key, None)
    if not any(key[1] == loop_id for key in _db_connections):
        _db_locks.pop(loop_id, None)
    if conn is None:
        return

    await conn.close()
    logger.info(
        "Closed SQLite connection",
        extra={"thread_id": thread_id, "loop_id": loop_id, "db_path": str(path)},
    )


async def create_record(*, table: str, data: Mapping[str, Any], db_path: str | None = None) -> None:
    """Insert a new row."""
    _validate_identifier(table)
    for column in data:
        _validate_identifier(column)

    columns_str = ", ".join(data)
    placeholders_str = ", ".join("?" for _ in data)
    values = [_to_sql_value(v) for v in data.values()]

    try:
        conn = await get_connection(db_path=db_path)
        query = f"INSERT INTO {table} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - identifiers are validated
        await conn.execute(query, values)
        await conn.commit()
    except aiosqlite.Error as e:
        logger.error("create_record_failed", extra={"table": table, "error": str(e)})
        msg = f"Failed to create record in {table}: {e}"
        raise DatabaseError(msg) from e

    logger.debug("Created record", extra={"table": table, "record_id": data.get("id")})


async def get_record(*, table: str, record_id: str, db_path: str | None = None) -> dict[str, Any]:
    """Fetch a single row by ID, raising RecordNotFoundError if not found."""
    _validate_identifier(table)

    try:
        conn = await get_connection(db_path=db_path)
        query = f"SELECT * FROM {table} WHERE id = ?"  # noqa: S608 - table is validated
        cursor = await conn.execute(query, (record_id,))
        row = await cursor.fetchone()
    except aiosqlite.Error as e:
        logger.error("get_record_failed", extra={"table": table, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {table}: {e}"
        raise DatabaseError(msg) from e

    if row is None:
        msg = f"Record not found in {table}: {record_id}"
        raise RecordNotFoundError(msg)

    return dict(row)


async def update_record(
    *, table: str, record_id: str, data: Mapping[str, Any], db_path: str | None = None
) -> None:
    """Update a row by ID, raising RecordNotFoundError if not found."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    _validate_identifier(table)
    for column in data:
        _validate_identifier(column)

    set_clause = ", ".join(f"{column} = ?" for column in data)
    values = [_to_sql_value(v) for v in data.values()]
    values.append(record_id)

    try:
        conn = await get_connection(db_path=db_path)
        query = f"UPDATE {table} SET {set_clause} WHERE id = ?"  # noqa: S608 - identifiers are validated
        cursor = await conn.execute(query, values)
        await conn.commit()
    except aiosqlite.Error as e:
        logger.error("update_record_failed", extra={"table": table, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {table}: {e}"
        raise DatabaseError(msg) from e

    if cursor.rowcount == 0:
        msg = f"Record not found in {table}: {record_id}"
        raise RecordNotFoundError(msg)

    logger.debug("Updated record", extra={"table": table, "record_id": record_id})


async def list_records(
    *,
    table: str,
    where: Mapping[str, Any] | None = None,
    db_path: str | None = None,
) -> list[dict[str, Any]]:
    """List rows matching all conditions, in insertion order."""
    _validate_identifier(table)
    where_clause, params = _build_where(where)

    try:
        conn = await get_connection(db_path=db_path)
        query = f"SELECT * FROM {table} {where_clause} ORDER BY rowid ASC"  # noqa: S608 - identifiers are validated
        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
    except aiosqlite.Error as e:
        logger.error("list_records_failed", extra={"table": table, "error": str(e)})
        msg = f"Failed to list records from {table}: {e}"
        raise DatabaseError(msg) from e

    logger.debug("Listed records", extra={"table": table, "count": len(rows)})
    return [dict(row) for row in rows]
