"""Task CRUD over the API Gateway.

Each operation is one HTTP call; nothing is cached and nothing is retried.
Gateway errors propagate unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from ..models import Task, TaskInput

if TYPE_CHECKING:
    from ..client.gateway import ApiGateway

TaskId = int | str

_TASK_LIST = TypeAdapter(list[Task])


class TaskService:
    """Task operations for the authenticated user."""

    def __init__(self, gateway: ApiGateway) -> None:
        self._gateway = gateway

    async def list(self) -> list[Task]:
        """Fetch the full task collection in server order."""
        data = await self._gateway.request("GET", "/tasks")
        return _TASK_LIST.validate_python(data or [])

    async def get(self, task_id: TaskId) -> Task:
        """Fetch a single task.

        Raises:
            NotFoundError: If the task does not exist.
        """
        data = await self._gateway.request("GET", f"/tasks/{task_id}")
        return Task.model_validate(data)

    async def create(self, task: TaskInput) -> Task:
        """Create a task and return it with its server-assigned fields."""
        data = await self._gateway.request("POST", "/tasks", json=task.to_payload())
        return Task.model_validate(data)

    async def update(self, task_id: TaskId, task: TaskInput) -> Task:
        """Replace the editable fields of a task.

        Raises:
            NotFoundError: If the task does not exist.
        """
        data = await self._gateway.request(
            "PUT", f"/tasks/{task_id}", json=task.to_payload()
        )
        return Task.model_validate(data)

    async def delete(self, task_id: TaskId) -> None:
        """Delete a task.

        Raises:
            NotFoundError: If the task does not exist.
        """
        await self._gateway.request("DELETE", f"/tasks/{task_id}")
