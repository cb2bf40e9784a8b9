"""Task Manager client.

Client-side session and data-synchronization layer for a personal task list
served by a remote HTTP API: durable session storage, an API gateway that
attaches the bearer token and reacts to 401, auth and task services, a
routing guard and the task list workflow.
"""

from __future__ import annotations

from .app import TaskManagerApp
from .client import (
    ApiGateway,
    AuthenticationError,
    ClientError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from .config import ClientConfig, load_client_config
from .controllers import AuthController, ListPhase, TaskListController
from .models import (
    AuthResponse,
    LoginCredentials,
    RegisterCredentials,
    Session,
    StatusFilter,
    Task,
    TaskInput,
    TaskStatus,
    UserProfile,
    filter_tasks,
)
from .services import AuthService, TaskService
from .session import GateDecision, GateState, SessionGate, SessionStore, View, resolve

__all__ = [
    # App
    "TaskManagerApp",
    # Config
    "ClientConfig",
    "load_client_config",
    # Gateway and errors
    "ApiGateway",
    "AuthenticationError",
    "ClientError",
    "NotFoundError",
    "ServerError",
    "TransportError",
    "UnauthorizedError",
    # Session
    "GateDecision",
    "GateState",
    "SessionGate",
    "SessionStore",
    "View",
    "resolve",
    # Services
    "AuthService",
    "TaskService",
    # Controllers
    "AuthController",
    "ListPhase",
    "TaskListController",
    # Models
    "AuthResponse",
    "LoginCredentials",
    "RegisterCredentials",
    "Session",
    "StatusFilter",
    "Task",
    "TaskInput",
    "TaskStatus",
    "UserProfile",
    "filter_tasks",
]
