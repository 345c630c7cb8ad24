"""Task API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from taskmanager.api.dependencies import get_current_user, get_task_store
from taskmanager.errors import NotFoundError, ValidationError
from taskmanager.models.enums import TaskPriority, TaskStatus
from taskmanager.models.user import User
from taskmanager.schemas.common import MessageResponse
from taskmanager.schemas.task import (
    TaskCreate,
    TaskEnvelope,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from taskmanager.services.tasks import TaskFilter, TaskStore

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _choices(enum_cls) -> str:
    return ", ".join(member.value for member in enum_cls)


def get_task_filter(
    status: str | None = Query(default=None, description="Only tasks with this status"),
    priority: str | None = Query(default=None, description="Only tasks with this priority"),
) -> TaskFilter:
    """Build a filter from query parameters; empty values are ignored."""
    try:
        task_status = TaskStatus(status) if status else None
    except ValueError:
        raise ValidationError(f"Status must be one of: {_choices(TaskStatus)}") from None
    try:
        task_priority = TaskPriority(priority) if priority else None
    except ValueError:
        raise ValidationError(f"Priority must be one of: {_choices(TaskPriority)}") from None
    return TaskFilter(status=task_status, priority=task_priority)


def task_not_found(task_id: str) -> NotFoundError:
    return NotFoundError(f"Task with ID {task_id} not found")


@router.get("", response_model=TaskListResponse)
def list_tasks(
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[TaskStore, Depends(get_task_store)],
    task_filter: Annotated[TaskFilter, Depends(get_task_filter)],
):
    """Get the current user's tasks, newest first."""
    tasks = store.list(current_user.id, task_filter)
    return TaskListResponse(
        count=len(tasks),
        data=[TaskResponse.model_validate(t) for t in tasks],
    )


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[TaskStore, Depends(get_task_store)],
):
    """Get a single task."""
    task = store.get(current_user.id, task_id)
    if not task:
        raise task_not_found(task_id)
    return TaskEnvelope(data=TaskResponse.model_validate(task))


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[TaskStore, Depends(get_task_store)],
):
    """Create a new task."""
    task = store.create(current_user.id, task_data)
    return TaskEnvelope(data=TaskResponse.model_validate(task))


@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: str,
    task_data: TaskUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[TaskStore, Depends(get_task_store)],
):
    """Update a task; only supplied fields change."""
    task = store.update(current_user.id, task_id, task_data)
    if not task:
        raise task_not_found(task_id)
    return TaskEnvelope(data=TaskResponse.model_validate(task))


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    current_user: Annotated[User, Depends(get_current_user)],
    store: Annotated[TaskStore, Depends(get_task_store)],
):
    """Delete a task."""
    if not store.delete(current_user.id, task_id):
        raise task_not_found(task_id)
    return MessageResponse(message="Task deleted successfully")
