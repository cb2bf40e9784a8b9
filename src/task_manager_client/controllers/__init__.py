"""View state and workflows, independent of the rendering surface."""

from .auth import AuthController
from .forms import LoginForm, RegisterForm, TaskForm
from .task_list import ListPhase, TaskListController, format_timestamp, timestamps_line

__all__ = [
    "AuthController",
    "ListPhase",
    "LoginForm",
    "RegisterForm",
    "TaskForm",
    "TaskListController",
    "format_timestamp",
    "timestamps_line",
]
