"""Pure state transition functions for task lifecycle management."""

import logging
from datetime import datetime
from typing import assert_never

from tasklist.core.errors import InvalidTransitionError
from tasklist.domain.task import Task, TaskStatus


logger = logging.getLogger(__name__)


def allowed_transitions(status: TaskStatus) -> frozenset[TaskStatus]:
    """Statuses reachable from ``status`` in one step. ARCHIVED is terminal."""
    match status:
        case TaskStatus.OPEN:
            return frozenset({TaskStatus.IN_PROGRESS, TaskStatus.DONE, TaskStatus.ARCHIVED})
        case TaskStatus.IN_PROGRESS:
            return frozenset({TaskStatus.OPEN, TaskStatus.DONE, TaskStatus.ARCHIVED})
        case TaskStatus.DONE:
            return frozenset({TaskStatus.OPEN, TaskStatus.ARCHIVED})
        case TaskStatus.ARCHIVED:
            return frozenset()
        case _:
            assert_never(status)


# Allowed transitions by current status
TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {status: allowed_transitions(status) for status in TaskStatus}


def can_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """Return True if ``to_status`` is reachable from ``from_status``."""
    return to_status in allowed_transitions(from_status)


def validate_transition(from_status: TaskStatus, to_status: TaskStatus) -> None:
    """Raise InvalidTransitionError (a ConflictError) unless the transition is in the table."""
    if not can_transition(from_status, to_status):
        msg = f"Invalid status transition: {from_status} -> {to_status}"
        raise InvalidTransitionError(msg)


def apply_transition(task: Task, to_status: TaskStatus, *, user_id: str, now: datetime) -> Task:
    """Return a copy of ``task`` moved to ``to_status``.

    Entering DONE stamps ``completed_at``/``completed_by``. Leaving DONE keeps them.

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    validate_transition(task.status, to_status)

    changes: dict[str, object] = {"status": to_status, "updated_at": now}
    if to_status == TaskStatus.DONE:
        changes["completed_at"] = now
        changes["completed_by"] = user_id

    logger.debug("Transitioning task %s: %s -> %s", task.id, task.status, to_status)
    return task.model_copy(update=changes)
