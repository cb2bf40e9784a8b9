"""Command-line front end for the task manager client.

Each command builds a ``TaskManagerApp``, navigates to the view it needs
through the Session Gate, and prints the resulting controller state.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from .app import TaskManagerApp
from .config import ClientConfig, create_default_config, resolve_config_for_cli
from .client.errors import ClientError
from .controllers.task_list import ListPhase, timestamps_line
from .models import Session, StatusFilter, Task, TaskStatus
from .session.gate import View

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

_STATUS_CHOICES = [s.value for s in TaskStatus]
_FILTER_CHOICES = [f.value for f in StatusFilter]


@dataclass
class CliOptions:
    """Global options shared by every command."""

    config_path: str | None = None
    base_url: str | None = None

    def resolve(self) -> tuple[ClientConfig, Path]:
        try:
            return resolve_config_for_cli(self.config_path, self.base_url)
        except (FileNotFoundError, ValueError) as exc:
            click.echo(f"Error: {exc}", err=True)
            sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--config", "config_path", type=click.Path(), help="Path to config.toml")
@click.option("--base-url", envvar="TASKMAN_BASE_URL", help="Backend API base URL")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: str | None, base_url: str | None) -> None:
    """Task Manager - manage your tasks from the terminal."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.obj = CliOptions(config_path=config_path, base_url=base_url)


@cli.command(name="init")
@click.option("--base-url", default=None, help="Backend API base URL")
@click.option("--force", is_flag=True, help="Overwrite an existing config")
def init_command(base_url: str | None, force: bool) -> None:
    """Write .taskman/config.toml in the current directory."""
    try:
        config = create_default_config(
            Path.cwd(), base_url=base_url or ClientConfig().base_url, force=force
        )
    except (FileExistsError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Configured client for {config.base_url}")


# ---------------------------------------------------------------------------
# Session commands
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--email", prompt=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_obj
def login(opts: CliOptions, email: str, password: str) -> None:
    """Log in and remember the session."""
    config, session_db = opts.resolve()
    if not asyncio.run(_login_async(config, session_db, email, password)):
        sys.exit(1)


async def _login_async(
    config: ClientConfig, session_db: Path, email: str, password: str
) -> bool:
    async with TaskManagerApp.from_config(config, session_db) as app:
        decision = await app.navigate(View.LOGIN.value)
        if decision.view is not View.LOGIN:
            click.echo(
                f"Already logged in as {app.greeting}. Run 'taskman logout' first.", err=True
            )
            return False

        form = app.auth.login_form
        form.update("email", email)
        form.update("password", password)
        if not await app.auth.submit_login():
            click.echo(f"Error: {form.error}", err=True)
            return False

        click.echo(f"Welcome, {app.greeting}")
        return True


@cli.command()
@click.option("--name", prompt=True, help="Display name")
@click.option("--email", prompt=True, help="Account email")
@click.option(
    "--password", prompt=True, hide_input=True, confirmation_prompt=True, help="Password"
)
@click.pass_obj
def register(opts: CliOptions, name: str, email: str, password: str) -> None:
    """Create an account and log in."""
    config, session_db = opts.resolve()
    if not asyncio.run(_register_async(config, session_db, name, email, password)):
        sys.exit(1)


async def _register_async(
    config: ClientConfig, session_db: Path, name: str, email: str, password: str
) -> bool:
    async with TaskManagerApp.from_config(config, session_db) as app:
        decision = await app.navigate(View.REGISTER.value)
        if decision.view is not View.REGISTER:
            click.echo(
                f"Already logged in as {app.greeting}. Run 'taskman logout' first.", err=True
            )
            return False

        form = app.auth.register_form
        form.update("name", name)
        form.update("email", email)
        form.update("password", password)
        if not await app.auth.submit_register():
            click.echo(f"Error: {form.error}", err=True)
            return False

        click.echo(f"Welcome, {app.greeting}")
        return True


@cli.command()
@click.pass_obj
def logout(opts: CliOptions) -> None:
    """Forget the stored session."""
    config, session_db = opts.resolve()
    asyncio.run(_logout_async(config, session_db))
    click.echo("Logged out.")


async def _logout_async(config: ClientConfig, session_db: Path) -> None:
    async with TaskManagerApp.from_config(config, session_db) as app:
        await app.logout()


@cli.command()
@click.pass_obj
def whoami(opts: CliOptions) -> None:
    """Show the logged-in user."""
    config, session_db = opts.resolve()
    session = asyncio.run(_load_session(config, session_db))
    if not session.is_authenticated:
        click.echo("Not logged in.", err=True)
        sys.exit(1)
    click.echo(f"{session.display_name or 'User'} <{session.email or '-'}> @ {config.base_url}")


async def _load_session(config: ClientConfig, session_db: Path) -> Session:
    async with TaskManagerApp.from_config(config, session_db) as app:
        return await app.store.load()


# ---------------------------------------------------------------------------
# Task commands
# ---------------------------------------------------------------------------


@cli.group()
def tasks() -> None:
    """Manage your tasks."""
    pass


async def _open_task_list(app: TaskManagerApp) -> bool:
    """Navigate to the task list; report why when that is not possible."""
    decision = await app.navigate(View.TASKS.value)
    if decision.view is not View.TASKS:
        click.echo("Not logged in. Run 'taskman login' first.", err=True)
        return False
    if app.current_view is not View.TASKS:
        click.echo("Session expired. Please log in again.", err=True)
        return False
    if app.task_list.phase is ListPhase.ERROR:
        click.echo(f"Error: {app.task_list.error}", err=True)
        return False
    return True


def _find_task(app: TaskManagerApp, task_id: str) -> Task | None:
    for task in app.task_list.tasks:
        if str(task.id) == task_id:
            return task
    return None


def _print_task(task: Task, *, verbose: bool = False) -> None:
    click.echo(f"{task.id:>5}  [{task.status.label}]  {task.title}")
    if task.description:
        click.echo(f"       {task.description}")
    if verbose:
        click.echo(f"       {timestamps_line(task)}")


@tasks.command(name="list")
@click.option(
    "--status",
    "status_filter",
    type=click.Choice(_FILTER_CHOICES, case_sensitive=False),
    default=StatusFilter.ALL.value,
    help="Show only tasks with this status",
)
@click.pass_obj
def list_tasks(opts: CliOptions, status_filter: str) -> None:
    """List tasks, optionally filtered by status."""
    config, session_db = opts.resolve()
    if not asyncio.run(_list_async(config, session_db, status_filter.upper())):
        sys.exit(1)


async def _list_async(config: ClientConfig, session_db: Path, status_filter: str) -> bool:
    async with TaskManagerApp.from_config(config, session_db) as app:
        if not await _open_task_list(app):
            return False
        controller = app.task_list
        controller.set_filter(status_filter)

        click.echo(f"My Tasks - {app.greeting}")
        visible = controller.visible_tasks
        if not visible:
            click.echo(controller.empty_message())
        for task in visible:
            _print_task(task, verbose=True)
        click.echo(controller.summary())
        return True


@tasks.command(name="show")
@click.argument("task_id")
@click.pass_obj
def show_task(opts: CliOptions, task_id: str) -> None:
    """Show a single task."""
    config, session_db = opts.resolve()
    if not asyncio.run(_show_async(config, session_db, task_id)):
        sys.exit(1)


async def _show_async(config: ClientConfig, session_db: Path, task_id: str) -> bool:
    async with TaskManagerApp.from_config(config, session_db) as app:
        decision = await app.navigate(View.TASKS.value)
        if decision.view is not View.TASKS or app.current_view is not View.TASKS:
            click.echo("Not logged in. Run 'taskman login' first.", err=True)
            return False
        try:
            task = await app.task_service.get(task_id)
        except ClientError as exc:
            click.echo(f"Error: {exc.message}", err=True)
            return False
        _print_task(task, verbose=True)
        return True


@tasks.command(name="add")
@click.option("--title", prompt=True, help="Task title")
@click.option("--description", default="", help="Optional description")
@click.option(
    "--status",
    type=click.Choice(_STATUS_CHOICES, case_sensitive=False),
    default=TaskStatus.PENDING.value,
    help="Initial status",
)
@click.pass_obj
def add_task(opts: CliOptions, title: str, description: str, status: str) -> None:
    """Create a task."""
    config, session_db = opts.resolve()
    if not asyncio.run(
        _save_async(config, session_db, None, title, description, status.upper())
    ):
        sys.exit(1)


@tasks.command(name="edit")
@click.argument("task_id")
@click.option("--title", default=None, help="New title")
@click.option("--description", default=None, help="New description")
@click.option(
    "--status",
    type=click.Choice(_STATUS_CHOICES, case_sensitive=False),
    default=None,
    help="New status",
)
@click.pass_obj
def edit_task(
    opts: CliOptions,
    task_id: str,
    title: str | None,
    description: str | None,
    status: str | None,
) -> None:
    """Update a task's title, description or status."""
    config, session_db = opts.resolve()
    if not asyncio.run(
        _save_async(
            config, session_db, task_id, title, description, status.upper() if status else None
        )
    ):
        sys.exit(1)


async def _save_async(
    config: ClientConfig,
    session_db: Path,
    task_id: str | None,
    title: str | None,
    description: str | None,
    status: str | None,
) -> bool:
    async with TaskManagerApp.from_config(config, session_db) as app:
        if not await _open_task_list(app):
            return False
        controller = app.task_list

        if task_id is not None:
            task = _find_task(app, task_id)
            if task is None:
                click.echo(f"Error: task {task_id} not found", err=True)
                return False
            controller.start_edit(task)

        form = controller.form
        if title is not None:
            form.update("title", title)
        if description is not None:
            form.update("description", description)
        if status is not None:
            form.update("status", TaskStatus(status))

        editing = controller.editing
        if not await controller.submit():
            click.echo(f"Error: {controller.error}", err=True)
            return False

        if editing is None:
            click.echo("Task created.")
        else:
            click.echo(f"Task {editing.id} updated.")
        click.echo(controller.summary())
        return True


@tasks.command(name="delete")
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete_task(opts: CliOptions, task_id: str, yes: bool) -> None:
    """Delete a task (asks for confirmation)."""
    config, session_db = opts.resolve()
    if not asyncio.run(_delete_async(config, session_db, task_id, yes)):
        sys.exit(1)


async def _delete_async(config: ClientConfig, session_db: Path, task_id: str, yes: bool) -> bool:
    async with TaskManagerApp.from_config(config, session_db) as app:
        if not await _open_task_list(app):
            return False
        controller = app.task_list

        task = _find_task(app, task_id)
        if task is None:
            click.echo(f"Error: task {task_id} not found", err=True)
            return False

        def confirm(_: object) -> bool:
            if yes:
                return True
            return click.confirm(f"Are you sure you want to delete '{task.title}'?")

        if await controller.delete(task.id, confirm):
            click.echo(f"Task {task.id} deleted.")
            click.echo(controller.summary())
            return True
        if controller.error:
            click.echo(f"Error: {controller.error}", err=True)
            return False
        click.echo("Aborted.")
        return True


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
