"""Query models for listing tasks."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from tasklist.domain.task import TaskPriority, TaskStatus, TaskType, as_utc


class TaskFilter(BaseModel):
    """Optional filters and pagination for task listings.

    ``page_size`` is left unset by default; the engine fills in and caps it from
    its own settings.
    """

    type: TaskType | None = None
    status: TaskStatus | None = None
    assignee_id: str | None = None
    created_by: str | None = None
    priority: TaskPriority | None = None
    due_date_from: datetime | None = Field(default=None, description="Inclusive lower bound on due date")
    due_date_to: datetime | None = Field(default=None, description="Inclusive upper bound on due date")
    search: str | None = Field(default=None, max_length=200, description="Substring of title or description")
    include_personal: bool = Field(default=False, description="Include the requester's own personal tasks")
    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int | None = Field(default=None, ge=1, description="Tasks per page (engine default when unset)")

    @field_validator("due_date_from", "due_date_to")
    @classmethod
    def normalize_due_dates(cls, v: datetime | None) -> datetime | None:
        """Read naive bounds as UTC."""
        return as_utc(v)

    @field_validator("search")
    @classmethod
    def normalize_search(cls, v: str | None) -> str | None:
        """Treat a blank search string as no search."""
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None
