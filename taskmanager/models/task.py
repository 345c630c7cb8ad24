"""Task record model."""

from datetime import date

from pydantic import AwareDatetime, BaseModel, ConfigDict

from taskmanager.models.enums import TaskPriority, TaskStatus


class Task(BaseModel):
    """A task as persisted in its owner's document."""

    model_config = ConfigDict(extra="ignore")

    id: str
    owner_id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date | None = None
    created_at: AwareDatetime
    updated_at: AwareDatetime
