"""Application shell wiring the session layer to the views.

``TaskManagerApp`` owns the current view. Every navigation goes through the
Session Gate; entering the task list activates its controller and leaving it
deactivates it. A 401 seen by the API Gateway, or an explicit logout, drops
the profile display fields and navigates to the login view.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from .client.gateway import DEFAULT_BASE_URL, ApiGateway
from .config import ClientConfig
from .controllers.auth import AuthController
from .controllers.task_list import TaskListController
from .services.auth import AuthService
from .services.tasks import TaskService
from .session.gate import GateDecision, SessionGate, View
from .session.store import SessionStore, origin_of

logger = logging.getLogger(__name__)


class TaskManagerApp:
    """Composition root for the client.

    Usage::

        async with TaskManagerApp.from_config(config, session_db) as app:
            await app.start()
            if app.current_view is View.TASKS:
                print(app.task_list.summary())

    Args:
        store: Session Store shared by every component.
        base_url: Base URL of the backend API.
        timeout: Request timeout in seconds; None keeps the httpx default.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.store = store
        self.gateway = ApiGateway(
            store,
            base_url=base_url,
            timeout=timeout,
            on_unauthorized=self.handle_unauthorized,
            transport=transport,
        )
        self.auth_service = AuthService(self.gateway)
        self.task_service = TaskService(self.gateway)
        self.gate = SessionGate(store)
        self.auth = AuthController(
            self.auth_service, store, on_authenticated=self._after_authenticated
        )
        self.task_list = TaskListController(self.task_service)

        self.current_view: View | None = None
        self.display_name: str | None = None
        self.email: str | None = None
        self.history: list[GateDecision] = []

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        session_db: str | Path,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> TaskManagerApp:
        """Build an app whose session is scoped to the configured origin."""
        store = SessionStore(session_db, origin_of(config.base_url))
        return cls(
            store,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> TaskManagerApp:
        await self.store.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        self.task_list.deactivate()
        await self.gateway.close()
        await self.store.close()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def start(self) -> GateDecision:
        """Initial load: resolve the entry view."""
        return await self.navigate(View.ENTRY.value)

    async def navigate(self, path: str) -> GateDecision:
        """Resolve ``path`` through the Session Gate and switch views."""
        decision = await self.gate.evaluate(path)
        previous = self.current_view
        self.current_view = decision.view
        self.history.append(decision)
        await self._sync_profile()
        logger.debug("Navigated %s -> %s", path, decision.view.value)

        if previous is View.TASKS and decision.view is not View.TASKS:
            self.task_list.deactivate()
        if decision.view is View.TASKS and previous is not View.TASKS:
            await self.task_list.activate()
        return decision

    async def logout(self) -> None:
        """Explicit logout: forget the session and show the login view."""
        await self.store.clear()
        self._clear_profile()
        logger.info("Logged out")
        await self.navigate(View.LOGIN.value)

    async def handle_unauthorized(self) -> None:
        """Forced logout after the API Gateway saw a 401."""
        self._clear_profile()
        await self.navigate(View.LOGIN.value)

    async def _after_authenticated(self) -> None:
        await self.navigate(View.TASKS.value)

    # ------------------------------------------------------------------
    # Profile display
    # ------------------------------------------------------------------

    @property
    def greeting(self) -> str:
        return self.display_name or self.email or "User"

    async def _sync_profile(self) -> None:
        session = await self.store.load()
        if session.is_authenticated:
            self.display_name = session.display_name
            self.email = session.email
        else:
            self._clear_profile()

    def _clear_profile(self) -> None:
        self.display_name = None
        self.email = None
