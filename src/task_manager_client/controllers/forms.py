"""Form state, independent of how the form is rendered.

Each form holds its field values, a validation/error message and a
submitting flag. Editing a field clears the current message.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar

from ..models import LoginCredentials, RegisterCredentials, Task, TaskInput, TaskStatus


@dataclass
class _Form:
    required: ClassVar[tuple[str, ...]] = ()
    labels: ClassVar[dict[str, str]] = {}

    error: str | None = None
    submitting: bool = False

    def update(self, field: str, value: Any) -> None:
        """Set a field value and clear the current message."""
        if field in ("error", "submitting") or field not in {f.name for f in fields(self)}:
            msg = f"Unknown form field: {field}"
            raise ValueError(msg)
        setattr(self, field, value)
        self.error = None

    def missing_fields(self) -> list[str]:
        """Required fields that are empty or whitespace."""
        return [name for name in self.required if not str(getattr(self, name) or "").strip()]

    def validate(self) -> bool:
        """Set the message for the first missing field; True when complete."""
        missing = self.missing_fields()
        if missing:
            label = self.labels.get(missing[0], missing[0].capitalize())
            self.error = f"{label} is required"
            return False
        return True

    def reset(self) -> None:
        """Restore every field to its default."""
        for f in fields(self):
            setattr(self, f.name, f.default)


@dataclass
class LoginForm(_Form):
    required: ClassVar[tuple[str, ...]] = ("email", "password")

    email: str = ""
    password: str = ""

    def to_credentials(self) -> LoginCredentials:
        return LoginCredentials(email=self.email.strip(), password=self.password)


@dataclass
class RegisterForm(_Form):
    required: ClassVar[tuple[str, ...]] = ("name", "email", "password")

    name: str = ""
    email: str = ""
    password: str = ""

    def to_credentials(self) -> RegisterCredentials:
        return RegisterCredentials(
            name=self.name.strip(), email=self.email.strip(), password=self.password
        )


@dataclass
class TaskForm(_Form):
    required: ClassVar[tuple[str, ...]] = ("title",)

    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING

    def load(self, task: Task) -> None:
        """Copy the editable fields of ``task`` into the form."""
        self.title = task.title
        self.description = task.description or ""
        self.status = task.status
        self.error = None

    def to_input(self) -> TaskInput:
        return TaskInput(
            title=self.title.strip(),
            description=self.description.strip() or None,
            status=self.status,
        )
