"""Backend operations built on the API Gateway."""

from .auth import AuthService
from .tasks import TaskService

__all__ = ["AuthService", "TaskService"]
