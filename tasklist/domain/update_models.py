"""Update models for task mutations.

``TaskUpdate`` is a patch: only fields the caller actually supplied are applied.
pydantic records supplied fields in ``model_fields_set``, which keeps "absent"
apart from "explicitly set to None".
"""

from datetime import datetime

from pydantic import BaseModel, Field, PositiveInt, field_validator

from tasklist.core.config import Constants
from tasklist.domain.task import TaskPriority, TaskStatus, as_utc


class TaskUpdate(BaseModel):
    """Partial update payload for a task."""

    title: str | None = Field(default=None, min_length=1, max_length=Constants.TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=Constants.DESCRIPTION_MAX_LENGTH)
    priority: TaskPriority | None = None
    quantity: PositiveInt | None = None
    target_location: str | None = Field(default=None, max_length=Constants.TARGET_LOCATION_MAX_LENGTH)
    assignee_ids: list[str] | None = None
    due_date: datetime | None = None

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str | None) -> str | None:
        """Reject titles made only of whitespace."""
        if v is not None and not v.strip():
            msg = "Title must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("assignee_ids")
    @classmethod
    def dedupe_assignees(cls, v: list[str] | None) -> list[str] | None:
        """Drop repeated assignee IDs, keeping first occurrence order."""
        return None if v is None else list(dict.fromkeys(v))

    @field_validator("due_date", mode="before")
    @classmethod
    def empty_due_date_clears(cls, v: object) -> object:
        """An empty string clears the due date."""
        return None if v == "" else v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        """Read naive due dates as UTC."""
        return as_utc(v)

    def changes(self) -> dict[str, object]:
        """Fields the caller supplied, including explicit clears."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class TaskStatusChange(BaseModel):
    """DTO for moving a task to another status."""

    task_id: str = Field(..., min_length=1)
    new_status: TaskStatus


class TaskAssignment(BaseModel):
    """DTO for replacing a task's assignees."""

    task_id: str = Field(..., min_length=1)
    assignee_ids: list[str] = Field(default_factory=list)
    notify_assignees: bool = Field(default=False, description="Caller should notify the new assignees")

    @field_validator("assignee_ids")
    @classmethod
    def dedupe_assignees(cls, v: list[str]) -> list[str]:
        """Drop repeated assignee IDs, keeping first occurrence order."""
        return list(dict.fromkeys(v))


class TaskUnassignment(BaseModel):
    """DTO for removing some users from a task's assignees."""

    task_id: str = Field(..., min_length=1)
    assignee_ids: list[str] = Field(..., min_length=1, description="User IDs to remove")
