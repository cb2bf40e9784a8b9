"""Domain models for the task manager client.

Two families of models live here:

- Plain dataclasses and enums for client-side state (``Session``,
  ``UserProfile``, ``TaskStatus``, ``StatusFilter``).
- Pydantic models for the JSON exchanged with the backend (``Task``,
  ``TaskInput``, credentials and ``AuthResponse``).

The backend serializes task timestamps as ``createdAt`` / ``updatedAt``; the
``Task`` model accepts those names and exposes snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    """Task lifecycle statuses as sent by the backend."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def label(self) -> str:
        """Human readable label, e.g. ``In Progress``."""
        return _STATUS_LABELS[self]

    @property
    def css_class(self) -> str:
        """Visual class used to tell statuses apart when scanning a list."""
        return _STATUS_CLASSES[self]


_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.COMPLETED: "Completed",
}

_STATUS_CLASSES: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "status-pending",
    TaskStatus.IN_PROGRESS: "status-in-progress",
    TaskStatus.COMPLETED: "status-completed",
}


class StatusFilter(str, Enum):
    """Client-side filter over the fetched task collection."""

    ALL = "ALL"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    def matches(self, status: TaskStatus) -> bool:
        """Return True if a task with ``status`` passes this filter."""
        if self is StatusFilter.ALL:
            return True
        return status.value == self.value


@dataclass(frozen=True)
class UserProfile:
    """Minimal profile fields kept next to the session token."""

    name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class Session:
    """Current authentication state.

    A session without a non-empty token is unauthenticated; the profile
    fields are only meaningful while a token is present.

    Attributes:
        token: Opaque bearer token, or None when unauthenticated.
        display_name: Name shown in the UI.
        email: Email of the authenticated user.
    """

    token: str | None = None
    display_name: str | None = None
    email: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def profile(self) -> UserProfile:
        return UserProfile(name=self.display_name, email=self.email)


# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class LoginCredentials(BaseModel):
    """Request body for ``POST /auth/login``."""

    model_config = {"extra": "forbid"}

    email: str
    password: str


class RegisterCredentials(BaseModel):
    """Request body for ``POST /auth/register``."""

    model_config = {"extra": "forbid"}

    name: str
    email: str
    password: str


class AuthResponse(BaseModel):
    """Successful login/register payload."""

    token: str
    name: str | None = None
    email: str | None = None


class Task(BaseModel):
    """A task as owned by the server.

    Instances are immutable; the client never patches a task locally and
    instead re-fetches the whole collection after a mutation.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: int | str
    title: str
    description: str | None = None
    status: TaskStatus
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class TaskInput(BaseModel):
    """Editable task fields sent on create and update."""

    model_config = {"extra": "forbid"}

    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not empty or whitespace."""
        if not v or not v.strip():
            raise ValueError("title must not be empty or whitespace")
        return v

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the backend; ``description`` is omitted when absent."""
        return self.model_dump(mode="json", exclude_none=True)


def filter_tasks(tasks: list[Task], status_filter: StatusFilter) -> list[Task]:
    """Return the tasks passing ``status_filter``, preserving server order."""
    if status_filter is StatusFilter.ALL:
        return list(tasks)
    return [task for task in tasks if status_filter.matches(task.status)]
