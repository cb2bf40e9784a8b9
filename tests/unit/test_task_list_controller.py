"""Tests for the task list workflow."""

from __future__ import annotations

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from task_manager_client.client.errors import ClientError, NotFoundError, ServerError
from task_manager_client.controllers.task_list import (
    DELETE_FAILED_MESSAGE,
    LOAD_FAILED_MESSAGE,
    SAVE_FAILED_MESSAGE,
    ListPhase,
    TaskListController,
    format_timestamp,
    timestamps_line,
)
from task_manager_client.models import StatusFilter, Task, TaskInput, TaskStatus
from task_manager_client.services.tasks import TaskService


def _task(
    task_id: int,
    title: str = "Task",
    status: TaskStatus = TaskStatus.PENDING,
    updated: datetime | None = None,
) -> Task:
    created = datetime(2024, 1, 1, 9, 0)
    return Task(
        id=task_id,
        title=title,
        status=status,
        created_at=created,
        updated_at=updated or created,
    )


@pytest.fixture
def service() -> MagicMock:
    svc = MagicMock(spec=TaskService)
    svc.list = AsyncMock(return_value=[])
    svc.create = AsyncMock(side_effect=lambda task_input: _task(99, task_input.title))
    svc.update = AsyncMock(
        side_effect=lambda task_id, task_input: _task(task_id, task_input.title)
    )
    svc.delete = AsyncMock(return_value=None)
    return svc


@pytest.fixture
def controller(service: MagicMock) -> TaskListController:
    return TaskListController(service)


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


class TestFetch:
    """activate(), refresh() and deactivate()."""

    async def test_activate_fetches_collection(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        tasks = [_task(2), _task(1)]
        service.list.return_value = tasks

        assert controller.phase is ListPhase.IDLE
        assert await controller.activate() is True

        assert controller.active
        assert controller.phase is ListPhase.READY
        assert controller.tasks == tasks
        assert controller.error is None

    async def test_fetch_failure_shows_error_and_empty_list(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        service.list.return_value = [_task(1)]
        await controller.activate()
        service.list.side_effect = ServerError(500)

        assert await controller.refresh() is False

        assert controller.phase is ListPhase.ERROR
        assert controller.error == LOAD_FAILED_MESSAGE
        assert controller.tasks == []

    async def test_successful_refresh_clears_previous_error(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        service.list.side_effect = ServerError(503)
        await controller.activate()
        service.list.side_effect = None
        service.list.return_value = [_task(1)]

        assert await controller.refresh() is True
        assert controller.error is None
        assert controller.phase is ListPhase.READY

    async def test_fetch_completing_after_deactivate_is_discarded(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_list() -> list[Task]:
            await release.wait()
            return [_task(1)]

        service.list.side_effect = slow_list
        pending = asyncio.create_task(controller.activate())
        await asyncio.sleep(0)

        controller.deactivate()
        release.set()

        assert await pending is False
        assert controller.tasks == []
        assert not controller.active

    async def test_latest_fetch_wins(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release_first = asyncio.Event()
        responses = iter([("first", release_first), ("second", None)])

        async def list_tasks() -> list[Task]:
            title, gate = next(responses)
            if gate is not None:
                await gate.wait()
            return [_task(1, title)]

        service.list.side_effect = list_tasks
        first = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)

        assert await controller.refresh() is True
        release_first.set()
        assert await first is False

        assert [task.title for task in controller.tasks] == ["second"]

    async def test_stale_failure_does_not_overwrite(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release_first = asyncio.Event()
        calls = 0

        async def list_tasks() -> list[Task]:
            nonlocal calls
            calls += 1
            if calls == 1:
                await release_first.wait()
                raise ServerError(500)
            return [_task(1)]

        service.list.side_effect = list_tasks
        first = asyncio.create_task(controller.refresh())
        await asyncio.sleep(0)
        await controller.refresh()
        release_first.set()
        await first

        assert controller.phase is ListPhase.READY
        assert controller.error is None
        assert len(controller.tasks) == 1

    async def test_malformed_payload_shows_load_error(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        async def bad_list() -> list[Task]:
            return [Task.model_validate({"id": 1, "title": "T", "status": "DONE"})]

        service.list.side_effect = bad_list

        assert await controller.activate() is False

        assert controller.phase is ListPhase.ERROR
        assert controller.error == LOAD_FAILED_MESSAGE
        assert controller.tasks == []


# ---------------------------------------------------------------------------
# Leaving the view
# ---------------------------------------------------------------------------


class TestDeactivate:
    """deactivate() drops everything the view held."""

    async def test_state_returns_to_defaults(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        task = _task(1, "Secret", TaskStatus.COMPLETED)
        service.list.return_value = [task]
        await controller.activate()
        controller.set_filter(StatusFilter.COMPLETED)
        controller.start_edit(task)
        controller.error = "stale message"

        controller.deactivate()

        assert controller.tasks == []
        assert controller.status_filter is StatusFilter.ALL
        assert controller.editing is None
        assert controller.form.title == ""
        assert controller.form.status is TaskStatus.PENDING
        assert controller.error is None
        assert controller.phase is ListPhase.IDLE
        assert not controller.active

    async def test_failed_update_after_leaving_is_not_applied(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_update(task_id: int, task_input: TaskInput) -> Task:
            await release.wait()
            raise NotFoundError()

        service.update.side_effect = slow_update
        controller.start_edit(_task(3, "Draft"))
        pending = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)

        controller.deactivate()
        release.set()

        assert await pending is False
        assert controller.error is None
        assert controller.editing is None
        assert controller.form.error is None
        assert controller.submitting is False

    async def test_successful_create_after_leaving_skips_refetch(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_create(task_input: TaskInput) -> Task:
            await release.wait()
            return _task(1, task_input.title)

        service.create.side_effect = slow_create
        controller.form.update("title", "Late")
        pending = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)

        controller.deactivate()
        release.set()

        assert await pending is True
        service.list.assert_not_awaited()
        assert controller.tasks == []

    async def test_failed_delete_after_leaving_is_not_applied(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_delete(task_id: int) -> None:
            await release.wait()
            raise ServerError(500)

        service.delete.side_effect = slow_delete
        pending = asyncio.create_task(controller.delete(5, lambda _: True))
        await asyncio.sleep(0)

        controller.deactivate()
        release.set()

        assert await pending is False
        assert controller.error is None


# ---------------------------------------------------------------------------
# Create and update
# ---------------------------------------------------------------------------


class TestSubmit:
    """submit() for create and update."""

    async def test_create_then_refetch(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        await controller.activate()
        service.list.return_value = [_task(99, "Buy milk")]
        controller.form.update("title", "Buy milk")

        assert await controller.submit() is True

        service.create.assert_awaited_once_with(TaskInput(title="Buy milk"))
        assert service.list.await_count == 2
        assert [task.title for task in controller.tasks] == ["Buy milk"]
        assert controller.form.title == ""
        assert controller.editing is None
        assert controller.submitting is False

    async def test_update_edit_target_then_refetch(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        original = _task(3, "Draft", TaskStatus.PENDING)
        service.list.return_value = [original]
        await controller.activate()

        controller.start_edit(original)
        assert controller.form.title == "Draft"
        controller.form.update("title", "Final")
        controller.form.update("status", TaskStatus.COMPLETED)

        assert await controller.submit() is True

        service.update.assert_awaited_once_with(
            3, TaskInput(title="Final", status=TaskStatus.COMPLETED)
        )
        service.create.assert_not_awaited()
        assert service.list.await_count == 2
        assert controller.editing is None

    async def test_update_of_deleted_task_keeps_form(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        original = _task(3, "Draft")
        service.list.return_value = [original]
        await controller.activate()
        service.update.side_effect = NotFoundError()
        controller.start_edit(original)
        controller.form.update("title", "Changed")

        assert await controller.submit() is False

        assert controller.error == SAVE_FAILED_MESSAGE
        assert controller.form.error == SAVE_FAILED_MESSAGE
        assert controller.editing is original
        assert controller.form.title == "Changed"
        assert service.list.await_count == 1

    async def test_server_validation_message_shown_verbatim(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        service.create.side_effect = ClientError(400, "Title is too long")
        controller.form.update("title", "x" * 500)

        assert await controller.submit() is False
        assert controller.error == "Title is too long"

    async def test_blank_title_never_reaches_server(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        controller.form.update("title", "   ")

        assert await controller.submit() is False

        assert controller.error == "Title is required"
        service.create.assert_not_awaited()

    async def test_submit_rejected_while_another_change_in_flight(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        release = asyncio.Event()

        async def slow_create(task_input: TaskInput) -> Task:
            await release.wait()
            return _task(1, task_input.title)

        service.create.side_effect = slow_create
        controller.form.update("title", "First")
        first = asyncio.create_task(controller.submit())
        await asyncio.sleep(0)
        assert controller.submitting

        assert await controller.submit() is False
        assert await controller.delete(1, lambda _: True) is False

        release.set()
        assert await first is True
        assert service.create.await_count == 1
        service.delete.assert_not_awaited()

    async def test_cancel_edit_resets(self, controller: TaskListController) -> None:
        controller.start_edit(_task(1, "Draft"))
        controller.cancel_edit()
        assert controller.editing is None
        assert controller.form.title == ""


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


class TestDelete:
    """delete() with confirmation."""

    async def test_declined_confirmation_issues_no_request(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        asked: list[object] = []

        def confirm(task_id: object) -> bool:
            asked.append(task_id)
            return False

        assert await controller.delete(5, confirm) is False

        assert asked == [5]
        service.delete.assert_not_awaited()
        service.list.assert_not_awaited()

    async def test_confirmed_delete_then_refetch(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        service.list.return_value = [_task(5), _task(4)]
        await controller.activate()
        service.list.return_value = [_task(4)]

        assert await controller.delete(5, lambda _: True) is True

        service.delete.assert_awaited_once_with(5)
        assert [task.id for task in controller.tasks] == [4]
        assert service.list.await_count == 2

    async def test_async_confirmation(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        async def confirm(task_id: object) -> bool:
            return True

        assert await controller.delete(5, confirm) is True
        service.delete.assert_awaited_once_with(5)

    async def test_deleting_edit_target_resets_form(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        target = _task(5, "Old")
        controller.start_edit(target)

        await controller.delete(5, lambda _: True)

        assert controller.editing is None
        assert controller.form.title == ""

    async def test_failed_delete_shows_error_without_refetch(
        self, controller: TaskListController, service: MagicMock
    ) -> None:
        service.delete.side_effect = ServerError(500)

        assert await controller.delete(5, lambda _: True) is False

        assert controller.error == DELETE_FAILED_MESSAGE
        service.list.assert_not_awaited()
        assert controller.submitting is False


# ---------------------------------------------------------------------------
# Filtering and display
# ---------------------------------------------------------------------------


class TestFiltering:
    """Client-side filter and list text."""

    @pytest.fixture
    async def loaded(
        self, controller: TaskListController, service: MagicMock
    ) -> TaskListController:
        service.list.return_value = [
            _task(3, "c", TaskStatus.COMPLETED),
            _task(2, "b", TaskStatus.IN_PROGRESS),
            _task(1, "a", TaskStatus.PENDING),
        ]
        await controller.activate()
        return controller

    async def test_filter_does_not_refetch(
        self, loaded: TaskListController, service: MagicMock
    ) -> None:
        loaded.set_filter(StatusFilter.COMPLETED)

        assert [task.title for task in loaded.visible_tasks] == ["c"]
        assert service.list.await_count == 1

    async def test_filter_accepts_string(self, loaded: TaskListController) -> None:
        loaded.set_filter("IN_PROGRESS")
        assert loaded.status_filter is StatusFilter.IN_PROGRESS
        assert [task.title for task in loaded.visible_tasks] == ["b"]

    async def test_summary(self, loaded: TaskListController) -> None:
        assert loaded.summary() == "Showing 3 of 3 tasks"
        loaded.set_filter(StatusFilter.PENDING)
        assert loaded.summary() == "Showing 1 of 3 tasks"

    def test_empty_messages(self, controller: TaskListController) -> None:
        assert controller.empty_message() == "Create your first task to get started!"
        controller.set_filter(StatusFilter.COMPLETED)
        assert controller.empty_message() == 'No tasks with status "COMPLETED"'


class TestTimestamps:
    """Timestamp display helpers."""

    def test_format_timestamp(self) -> None:
        assert format_timestamp(datetime(2024, 3, 5, 14, 7, 59)) == "2024-03-05 14:07"
        assert format_timestamp(None) == ""

    def test_updated_shown_only_when_different(self) -> None:
        assert timestamps_line(_task(1)) == "Created: 2024-01-01 09:00"
        edited = _task(1, updated=datetime(2024, 1, 2, 8, 30))
        assert timestamps_line(edited) == "Created: 2024-01-01 09:00 | Updated: 2024-01-02 08:30"
