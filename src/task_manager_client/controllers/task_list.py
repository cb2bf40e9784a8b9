"""Task list workflow: fetch, create/update, confirmed delete, filtering.

The controller never patches its collection locally. Every successful
mutation is followed by a full re-fetch so the list shown always reflects a
complete server round-trip.

Overlapping mutations are rejected: while a submit or delete (including its
follow-up re-fetch) is in flight, further ``submit()`` and ``delete()`` calls
return False without contacting the server. For fetches, the most recently
issued one wins; responses of superseded fetches, or fetches that complete
after ``deactivate()``, are discarded.

Leaving the view drops everything the controller holds (collection, filter,
form, edit target, message), so nothing carries over into the next session.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ..client.errors import ClientError
from ..models import StatusFilter, Task, filter_tasks
from ..services.tasks import TaskId
from .forms import TaskForm

if TYPE_CHECKING:
    from ..services.tasks import TaskService

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load tasks. Please try again."
SAVE_FAILED_MESSAGE = "Failed to save task."
DELETE_FAILED_MESSAGE = "Failed to delete task."

ConfirmCallback = Callable[[TaskId], bool | Awaitable[bool]]


class ListPhase(Enum):
    """Loading state of the task collection."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class TaskListController:
    """Holds the transient state behind the task list view.

    Attributes:
        tasks: Last successfully fetched collection, in server order.
        status_filter: Active client-side filter.
        editing: Task being edited, or None when the form creates a new task.
        form: Input fields for create/update.
        phase: Loading state of ``tasks``.
        error: Message to display, or None.
        submitting: True while a mutation and its re-fetch are in flight.
        active: True between ``activate()`` and ``deactivate()``.
    """

    def __init__(self, service: TaskService) -> None:
        self._service = service
        self.tasks: list[Task] = []
        self.status_filter = StatusFilter.ALL
        self.editing: Task | None = None
        self.form = TaskForm()
        self.phase = ListPhase.IDLE
        self.error: str | None = None
        self.submitting = False
        self.active = False
        self._fetch_generation = 0
        self._view_generation = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def activate(self) -> bool:
        """Enter the view and fetch the collection."""
        self.active = True
        return await self.refresh()

    def deactivate(self) -> None:
        """Leave the view: drop its state and discard any pending fetch.

        A mutation still in flight completes on the server, but its outcome
        is not applied to the controller.
        """
        self.active = False
        self._fetch_generation += 1
        self._view_generation += 1
        self.tasks = []
        self.status_filter = StatusFilter.ALL
        self._reset_form()
        self.phase = ListPhase.IDLE
        self.error = None

    async def refresh(self) -> bool:
        """Fetch the full collection. Returns True when it was applied."""
        self._fetch_generation += 1
        generation = self._fetch_generation
        self.phase = ListPhase.LOADING

        try:
            tasks = await self._service.list()
        except (ClientError, ValidationError) as e:
            if generation != self._fetch_generation:
                logger.debug("Discarding failed stale fetch: %s", e)
                return False
            logger.warning("Error fetching tasks: %s", e)
            self.tasks = []
            self.error = LOAD_FAILED_MESSAGE
            self.phase = ListPhase.ERROR
            return False

        if generation != self._fetch_generation:
            logger.debug("Discarding stale fetch of %d tasks", len(tasks))
            return False

        self.tasks = tasks
        self.error = None
        self.phase = ListPhase.READY
        return True

    # ------------------------------------------------------------------
    # Form workflow
    # ------------------------------------------------------------------

    def start_edit(self, task: Task) -> None:
        """Load ``task`` into the form and make it the edit target."""
        self.editing = task
        self.form.load(task)

    def cancel_edit(self) -> None:
        """Drop the edit target and reset the form."""
        self._reset_form()

    async def submit(self) -> bool:
        """Create or update from the form, then re-fetch.

        Returns:
            True if the mutation succeeded. On failure the form and the edit
            target are kept and no re-fetch happens.
        """
        if self.submitting:
            logger.info("Submission ignored: another change is still in flight")
            return False
        if not self.form.validate():
            self.error = self.form.error
            return False

        self.submitting = True
        self.error = None
        view = self._view_generation
        editing = self.editing
        try:
            payload = self.form.to_input()
            try:
                if editing is None:
                    created = await self._service.create(payload)
                    logger.info("Created task %s", created.id)
                else:
                    await self._service.update(editing.id, payload)
                    logger.info("Updated task %s", editing.id)
            except ClientError as e:
                logger.warning("Submit error: %s", e)
                if view != self._view_generation:
                    return False
                self.error = e.server_message or SAVE_FAILED_MESSAGE
                self.form.error = self.error
                return False

            if view != self._view_generation:
                return True
            self._reset_form()
            await self.refresh()
            return True
        finally:
            self.submitting = False

    async def delete(self, task_id: TaskId, confirm: ConfirmCallback) -> bool:
        """Delete a task after explicit confirmation, then re-fetch.

        Args:
            task_id: Task to delete.
            confirm: Asked with ``task_id``; the delete is only issued when it
                returns True.

        Returns:
            True if the task was deleted.
        """
        if self.submitting:
            logger.info("Delete ignored: another change is still in flight")
            return False

        confirmed = confirm(task_id)
        if inspect.isawaitable(confirmed):
            confirmed = await confirmed
        if not confirmed:
            logger.debug("Delete of task %s not confirmed", task_id)
            return False

        self.submitting = True
        self.error = None
        view = self._view_generation
        try:
            try:
                await self._service.delete(task_id)
            except ClientError as e:
                logger.warning("Delete error: %s", e)
                if view != self._view_generation:
                    return False
                self.error = e.server_message or DELETE_FAILED_MESSAGE
                return False

            logger.info("Deleted task %s", task_id)
            if view != self._view_generation:
                return True
            if self.editing is not None and self.editing.id == task_id:
                self._reset_form()
            await self.refresh()
            return True
        finally:
            self.submitting = False

    def _reset_form(self) -> None:
        self.form.reset()
        self.editing = None

    # ------------------------------------------------------------------
    # Filtering and display
    # ------------------------------------------------------------------

    def set_filter(self, status_filter: StatusFilter | str) -> None:
        """Change the filter; never re-fetches."""
        self.status_filter = StatusFilter(status_filter)

    @property
    def visible_tasks(self) -> list[Task]:
        return filter_tasks(self.tasks, self.status_filter)

    def summary(self) -> str:
        return f"Showing {len(self.visible_tasks)} of {len(self.tasks)} tasks"

    def empty_message(self) -> str:
        if self.status_filter is StatusFilter.ALL:
            return "Create your first task to get started!"
        return f'No tasks with status "{self.status_filter.value}"'


def format_timestamp(value: datetime | None) -> str:
    """Date and hour:minute, or an empty string for a missing value."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M")


def timestamps_line(task: Task) -> str:
    """Created time, plus the updated time when it differs."""
    line = f"Created: {format_timestamp(task.created_at)}"
    if task.updated_at != task.created_at:
        line += f" | Updated: {format_timestamp(task.updated_at)}"
    return line
