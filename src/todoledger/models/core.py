"""Task data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    TODO = "ToDo"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TaskPriority(str, Enum):
    """Task priority. ``NONE`` means no priority was set."""

    NONE = "None"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class OperationKind(str, Enum):
    """Kind of mutation tracked by the mirror."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Outcome(str, Enum):
    """Resolution of a completed operation."""

    SUCCESS = "success"
    FAILURE = "failure"


def _clean_description(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("description must not be empty")
    return value


class TaskRecord(BaseModel):
    """A task as held in the local mirror.

    Attributes:
        id: Identifier assigned by the remote authority, None until the
            create call is confirmed
        temp_id: Local token standing in for ``id`` while a create is pending
        description: Task text, never empty
        status: Lifecycle status
        priority: Priority level
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    temp_id: str | None = None
    description: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.NONE

    @property
    def key(self) -> str:
        """Key of the record in the mirror: the real id, else the temporary token."""
        return self.id or self.temp_id or ""

    @property
    def is_committed(self) -> bool:
        return self.id is not None


class TaskCreate(BaseModel):
    """Model for creating a new task.

    Attributes:
        description: Task text (required, trimmed)
        priority: Priority level
    """

    description: str
    priority: TaskPriority = TaskPriority.NONE

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return _clean_description(v)


class TaskUpdate(BaseModel):
    """Model for a partial update of an existing task.

    All fields are optional - only provided fields will be updated.

    Attributes:
        description: Task text (trimmed, never empty when given)
        status: Lifecycle status
        priority: Priority level
    """

    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _clean_description(v)

    def changes(self) -> dict[str, Any]:
        """Return only the fields that were provided."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.changes()

    def merged(self, later: TaskUpdate) -> TaskUpdate:
        """Combine with a later update; the later values win."""
        return TaskUpdate(**{**self.changes(), **later.changes()})


@dataclass
class PendingOperation:
    """An in-flight mutation and the state needed to undo it."""

    target_id: str
    kind: OperationKind
    snapshot_before: TaskRecord | None = None
    epoch: int = 0


class SyncEvent(BaseModel):
    """Notification emitted for every completed operation.

    Attributes:
        kind: Operation kind
        target_id: Id (or temporary token) the operation targeted
        outcome: success or failure
        error_kind: Error class name on failure
        message: Human-readable detail on failure
        record: Final record on success (None after a delete)
    """

    kind: OperationKind
    target_id: str
    outcome: Outcome
    error_kind: str | None = None
    message: str | None = None
    record: TaskRecord | None = None
    retryable: bool = Field(default=False)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS
