"""Task schemas."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from taskmanager.models.enums import TaskPriority, TaskStatus

TITLE_MAX_LENGTH = 200

# May be omitted on update but never explicitly nulled
NON_NULLABLE_FIELDS = ("title", "description", "status", "priority")
DEFAULTED_FIELDS = ("description", "status", "priority")


def _check_title(value: str) -> str:
    if not value.strip():
        raise ValueError("Title must be a non-empty string")
    return value


class TaskCreate(BaseModel):
    """Create a new task."""

    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_null_defaults(cls, data: Any) -> Any:
        """A null description, status or priority means "use the default"."""
        if isinstance(data, dict):
            return {
                k: v for k, v in data.items() if not (k in DEFAULTED_FIELDS and v is None)
            }
        return data

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        return _check_title(value)


class TaskUpdate(BaseModel):
    """Partial update of a task; only supplied fields change."""

    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _check_title(value)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "TaskUpdate":
        for name in NON_NULLABLE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TaskResponse(BaseModel):
    """Task response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None
    created_at: datetime
    updated_at: datetime


class TaskEnvelope(BaseModel):
    """Single task response."""

    success: bool = True
    data: TaskResponse


class TaskListResponse(BaseModel):
    """Task list response."""

    success: bool = True
    count: int
    data: list[TaskResponse]
