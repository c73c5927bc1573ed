"""Pydantic models for creating task records."""

from datetime import datetime

from pydantic import BaseModel, Field, PositiveInt, field_validator, model_validator

from tasklist.core.config import Constants
from tasklist.domain.task import TaskPriority, TaskType, as_utc


class TaskCreate(BaseModel):
    """Pydantic model for creating a task."""

    type: TaskType = Field(..., description="Shopping item, to-do or note")
    title: str = Field(..., min_length=1, max_length=Constants.TITLE_MAX_LENGTH, description="Task title")
    description: str | None = Field(
        default=None, max_length=Constants.DESCRIPTION_MAX_LENGTH, description="Detailed task description"
    )
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task urgency")
    quantity: PositiveInt | None = Field(default=None, description="Quantity to buy (shopping only)")
    target_location: str | None = Field(
        default=None, max_length=Constants.TARGET_LOCATION_MAX_LENGTH, description="Shop or destination"
    )
    assignee_ids: list[str] = Field(default_factory=list, description="User IDs to assign")
    is_personal: bool = Field(default=False, description="Visible to the creator only")
    due_date: datetime | None = Field(default=None, description="Optional due date")

    @field_validator("title")
    @classmethod
    def validate_title_not_blank(cls, v: str) -> str:
        """Reject titles made only of whitespace."""
        if not v.strip():
            msg = "Title must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        """Read naive due dates as UTC."""
        return as_utc(v)

    @field_validator("assignee_ids")
    @classmethod
    def dedupe_assignees(cls, v: list[str]) -> list[str]:
        """Drop repeated assignee IDs, keeping first occurrence order."""
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_shopping_fields(self) -> "TaskCreate":
        """Quantity and target location only apply to shopping items."""
        if self.type != TaskType.SHOPPING and (self.quantity is not None or self.target_location is not None):
            msg = "quantity and target_location are only allowed for SHOPPING tasks"
            raise ValueError(msg)
        return self
