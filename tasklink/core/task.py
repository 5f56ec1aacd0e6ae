"""
Task Snapshot Models
====================

This module provides the read-only models for tasks and projects as they are
returned by the remote task-tracking service.

Classes:
    TaskStatus: Lifecycle states of a task
    TaskPriority: Priority levels of a task
    Task: A single task snapshot
    Project: A project that owns tasks
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    """
    Task status values.

    The remote service only knows these three states; the values double as
    the wire representation.
    """
    TODO = "todo"                # Task is acknowledged but not started
    IN_PROGRESS = "in_progress"  # Task is actively being worked on
    DONE = "done"                # Task has been finished


class TaskPriority(str, Enum):
    """Task priority values, lowest first."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


class Assignee(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class ProjectRef(BaseModel):
    id: str
    name: str

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return str(value)


class Task(BaseModel):
    """
    Snapshot of a task owned by the remote service.

    Only ``title``, ``description`` and ``tags`` take part in matching; the
    remaining fields are carried for display.

    Attributes:
        id (int): Unique identifier for the task
        title (str): Short title of the task
        description (Optional[str]): Longer description, may be missing
        status (TaskStatus): Current status
        priority (TaskPriority): Current priority
        tags (list[str]): Curated tags
    """
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: list[str] = Field(default_factory=list)
    due_date: Optional[str] = None
    assignee: Optional[Assignee] = None
    project: Optional[ProjectRef] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, value):
        return [] if value is None else value

    @property
    def searchable_text(self) -> str:
        """Title, description and tags joined by spaces."""
        return f"{self.title} {self.description or ''} {' '.join(self.tags)}"

    def label(self) -> str:
        return f"{self.title} (ID: {self.id}) - {self.status.value}"


class Project(BaseModel):
    """A project as known by the remote service."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: Optional[str] = None
    owner_id: Optional[int] = None
    is_favorite: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return str(value)
