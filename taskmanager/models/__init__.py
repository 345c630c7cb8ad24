"""Domain record models."""

from taskmanager.models.enums import TaskPriority, TaskStatus
from taskmanager.models.task import Task
from taskmanager.models.user import User, UserRecord

__all__ = [
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
    "UserRecord",
]
