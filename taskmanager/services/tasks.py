"""Task store: one document of tasks per owner."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from taskmanager.errors import CorruptionError
from taskmanager.models.enums import TaskPriority, TaskStatus
from taskmanager.models.task import Task
from taskmanager.schemas.task import TaskCreate, TaskUpdate
from taskmanager.storage import DocumentStore, KeyedLocks

logger = logging.getLogger(__name__)


def tasks_key(owner_id: str) -> str:
    return f"tasks_{owner_id}"


def _owned(task: Task, owner_id: str, task_id: str) -> bool:
    return task.id == task_id and task.owner_id == owner_id


@dataclass(frozen=True)
class TaskFilter:
    """Equality filters applied when listing tasks."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    def matches(self, task: Task) -> bool:
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        return True


def apply_patch(task: Task, patch: TaskUpdate, now: datetime) -> Task:
    """Return a copy of ``task`` with the supplied patch fields applied.

    A field absent from the patch keeps its existing value. ``due_date`` may
    be supplied as None to clear it. ``id``, ``owner_id`` and ``created_at``
    are never taken from the patch, and ``updated_at`` never moves backwards.
    """
    supplied = patch.model_fields_set
    updated = task.model_copy()

    if "title" in supplied:
        updated.title = patch.title
    if "description" in supplied:
        updated.description = patch.description
    if "status" in supplied:
        updated.status = patch.status
    if "priority" in supplied:
        updated.priority = patch.priority
    if "due_date" in supplied:
        updated.due_date = patch.due_date

    updated.updated_at = max(now, task.updated_at)
    return updated


class TaskStore:
    """Owner-scoped task persistence.

    Every mutation is a read-modify-persist cycle over the owner's whole
    document, serialized per owner. Reads take no lock: documents are
    replaced atomically, so a reader sees either the old or the new one.
    """

    def __init__(
        self,
        documents: DocumentStore,
        locks: KeyedLocks | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.documents = documents
        self.locks = locks or KeyedLocks()
        self.clock = clock or (lambda: datetime.now(UTC))

    def _load(self, owner_id: str) -> list[Task]:
        key = tasks_key(owner_id)
        records = self.documents.read(key)
        try:
            tasks = [Task.model_validate(r) for r in records]
        except PydanticValidationError as e:
            logger.error(f"Invalid task record in {key}: {e}")
            raise CorruptionError(f"Task document for owner {owner_id} is corrupt") from e
        return tasks

    def _save(self, owner_id: str, tasks: list[Task]) -> None:
        self.documents.write(tasks_key(owner_id), [t.model_dump(mode="json") for t in tasks])

    def list(self, owner_id: str, task_filter: TaskFilter | None = None) -> list[Task]:
        """Get the owner's tasks, newest first."""
        task_filter = task_filter or TaskFilter()
        tasks = [
            t for t in self._load(owner_id) if t.owner_id == owner_id and task_filter.matches(t)
        ]
        # Ties keep the later-appended task first
        return sorted(reversed(tasks), key=lambda t: t.created_at, reverse=True)

    def get(self, owner_id: str, task_id: str) -> Task | None:
        """Get a single task, or None if the owner has no task with that id."""
        return next((t for t in self._load(owner_id) if _owned(t, owner_id, task_id)), None)

    def create(self, owner_id: str, fields: TaskCreate) -> Task:
        """Create a task with a fresh id and persist it."""
        with self.locks.hold(owner_id):
            tasks = self._load(owner_id)
            existing_ids = {t.id for t in tasks}
            task_id = str(uuid.uuid4())
            while task_id in existing_ids:
                task_id = str(uuid.uuid4())

            now = self.clock()
            task = Task(
                id=task_id,
                owner_id=owner_id,
                title=fields.title,
                description=fields.description,
                status=fields.status,
                priority=fields.priority,
                due_date=fields.due_date,
                created_at=now,
                updated_at=now,
            )
            tasks.append(task)
            self._save(owner_id, tasks)

        logger.info(f"Created task {task.id} for owner {owner_id}")
        return task

    def update(self, owner_id: str, task_id: str, patch: TaskUpdate) -> Task | None:
        """Merge ``patch`` into a task; None if the owner has no such task."""
        with self.locks.hold(owner_id):
            tasks = self._load(owner_id)
            index = next((i for i, t in enumerate(tasks) if _owned(t, owner_id, task_id)), None)
            if index is None:
                return None

            tasks[index] = apply_patch(tasks[index], patch, self.clock())
            self._save(owner_id, tasks)
            updated = tasks[index]

        logger.info(f"Updated task {task_id} for owner {owner_id}")
        return updated

    def delete(self, owner_id: str, task_id: str) -> bool:
        """Remove a task; False if the owner has no such task."""
        with self.locks.hold(owner_id):
            tasks = self._load(owner_id)
            remaining = [t for t in tasks if not _owned(t, owner_id, task_id)]
            if len(remaining) == len(tasks):
                return False
            self._save(owner_id, remaining)

        logger.info(f"Deleted task {task_id} for owner {owner_id}")
        return True
