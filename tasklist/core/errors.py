"""Error taxonomy for task-list operations.

Every engine failure is raised as a subclass of ``TaskError``. The kinds are
kept distinct so a presentation layer can translate them into transport
responses without inspecting message text:

- ``ValidationError``: structurally invalid input
- ``ConflictError``: duplicate titles (``DuplicateTaskError``), illegal
  transitions (``InvalidTransitionError``), bad date ranges, assignees on
  personal tasks
- ``NotFoundError``: missing task, or a task outside the caller's tenant/location
- ``ForbiddenError``: task in scope but denied by a specific rule

Storage adapters raise ``DatabaseError`` / ``RecordNotFoundError``.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel


if TYPE_CHECKING:
    from tasklist.domain.task import Task


class ErrorCode:
    """Error codes for specific error conditions."""

    # Input errors
    ERR_VALIDATION = "ERR_VALIDATION"

    # Task errors
    ERR_DUPLICATE_TASK = "ERR_DUPLICATE_TASK"
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_CONFLICT = "ERR_CONFLICT"
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"

    # Permission errors
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"

    # Storage errors
    ERR_DATABASE = "ERR_DATABASE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskError(Exception):
    """Base class for all task-list engine errors."""

    code: str = ErrorCode.ERR_UNKNOWN

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(TaskError):
    """Input failed structural validation."""

    code = ErrorCode.ERR_VALIDATION

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ConflictError(TaskError):
    """Operation conflicts with the current state of the task collection."""

    code = ErrorCode.ERR_CONFLICT


class DuplicateTaskError(ConflictError):
    """A similar open task already exists; matches are attached for disambiguation."""

    code = ErrorCode.ERR_DUPLICATE_TASK

    def __init__(self, message: str, *, similar_tasks: "list[Task]") -> None:
        super().__init__(message)
        self.similar_tasks = similar_tasks


class InvalidTransitionError(ConflictError):
    """Requested status is not reachable from the current one."""

    code = ErrorCode.ERR_INVALID_STATE_TRANSITION


class NotFoundError(TaskError):
    """Task does not exist or is outside the caller's scope."""

    code = ErrorCode.ERR_TASK_NOT_FOUND


class ForbiddenError(TaskError):
    """Task is in scope but a permission rule denies the operation."""

    code = ErrorCode.ERR_PERMISSION_DENIED


class DatabaseError(Exception):
    """Storage backend failure."""


class RecordNotFoundError(DatabaseError):
    """Storage backend has no record with the requested id."""


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    status_code: int


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised by an engine operation

    Returns:
        ErrorResponse with code, message, suggestion, severity and a transport status hint
    """
    if isinstance(exception, ValidationError):
        return ErrorResponse(
            code=exception.code,
            message=exception.message,
            suggestion="Check the submitted fields and try again.",
            severity=ErrorSeverity.LOW,
            status_code=400,
        )

    if isinstance(exception, DuplicateTaskError):
        return ErrorResponse(
            code=exception.code,
            message=exception.message,
            suggestion="Update the existing task instead of adding a new one.",
            severity=ErrorSeverity.LOW,
            status_code=409,
        )

    if isinstance(exception, ConflictError):
        return ErrorResponse(
            code=exception.code,
            message=exception.message,
            suggestion="Refresh the task and check its current status.",
            severity=ErrorSeverity.LOW,
            status_code=409,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=exception.code,
            message="I couldn't find that task.",
            suggestion="List your tasks to see what is available.",
            severity=ErrorSeverity.LOW,
            status_code=404,
        )

    if isinstance(exception, ForbiddenError):
        return ErrorResponse(
            code=exception.code,
            message=exception.message,
            suggestion="Ask the task creator or a manager if you think this is an error.",
            severity=ErrorSeverity.MEDIUM,
            status_code=403,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_DATABASE,
            message="The task store is unavailable.",
            suggestion="Please try again later.",
            severity=ErrorSeverity.HIGH,
            status_code=500,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
        status_code=500,
    )
