"""Task domain models and enums."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes so all stored timestamps compare safely."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class TaskType(StrEnum):
    """Kind of work item. Fixed at creation."""

    SHOPPING = "SHOPPING"
    TODO = "TODO"
    NOTE = "NOTE"


class TaskStatus(StrEnum):
    """Task lifecycle state."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    ARCHIVED = "ARCHIVED"


class TaskPriority(StrEnum):
    """Task urgency."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class HistoryAction(StrEnum):
    """Kinds of audit entries appended on mutation."""

    CREATED = "CREATED"
    UPDATED = "UPDATED"
    STATUS_CHANGED = "STATUS_CHANGED"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Opaque unique task ID")
    tenant_id: str = Field(..., description="Owning tenant")
    location_id: str = Field(..., description="Location within the tenant")
    type: TaskType = Field(..., description="Shopping item, to-do or note")
    status: TaskStatus = Field(default=TaskStatus.OPEN, description="Current lifecycle state")
    title: str = Field(..., description="Task title")
    description: str | None = Field(default=None, description="Detailed task description")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task urgency")
    quantity: int | None = Field(default=None, description="Quantity to buy (shopping only)")
    target_location: str | None = Field(default=None, description="Where to buy or deliver (shopping only)")
    created_by: str = Field(..., description="Creator user ID")
    assignee_ids: list[str] = Field(default_factory=list, description="Assigned user IDs")
    is_personal: bool = Field(default=False, description="Visible to the creator only")
    due_date: datetime | None = Field(default=None, description="Optional due date")
    completed_at: datetime | None = Field(default=None, description="When the task first entered DONE")
    completed_by: str | None = Field(default=None, description="Who moved the task into DONE")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("due_date", "completed_at", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime | None) -> datetime | None:
        """Store every timestamp timezone-aware."""
        return as_utc(v)


class TaskHistoryEntry(BaseModel):
    """Append-only audit record for a task."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque unique entry ID")
    task_id: str = Field(..., description="Task this entry belongs to")
    action: HistoryAction = Field(..., description="What happened")
    previous_value: str | None = Field(default=None, description="Value or JSON snapshot before the change")
    new_value: str | None = Field(default=None, description="Value or JSON snapshot after the change")
    performed_by: str = Field(..., description="Acting user ID")
    performed_at: datetime = Field(..., description="When the change was made")


class TaskPermissionContext(BaseModel):
    """Requester identity and role flags, built by the caller for each request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    tenant_id: str
    location_id: str
    is_manager: bool = False
    can_view_all: bool = False
    can_manage_all: bool = False
