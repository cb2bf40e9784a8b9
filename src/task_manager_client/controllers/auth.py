"""Login and registration form workflow."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from ..client.errors import ClientError
from ..models import AuthResponse, UserProfile
from .forms import LoginForm, RegisterForm

if TYPE_CHECKING:
    from ..services.auth import AuthService
    from ..session.store import SessionStore

logger = logging.getLogger(__name__)


class AuthController:
    """Drives the login and register forms.

    On success the issued token and profile are written to the Session Store
    and ``on_authenticated`` is invoked so the shell can navigate on. On
    failure the server's message is shown on the form and the entered values
    are kept.

    Args:
        auth: Auth service used for the credential exchange.
        store: Session Store populated on success.
        on_authenticated: Callback run after the session is saved.
    """

    def __init__(
        self,
        auth: AuthService,
        store: SessionStore,
        on_authenticated: Callable[[], Awaitable[None] | None] | None = None,
    ) -> None:
        self._auth = auth
        self._store = store
        self._on_authenticated = on_authenticated
        self.login_form = LoginForm()
        self.register_form = RegisterForm()

    async def submit_login(self) -> bool:
        """Submit the login form. Returns True when a session was created."""
        form = self.login_form
        if form.submitting or not form.validate():
            return False

        form.submitting = True
        form.error = None
        try:
            response = await self._auth.login(form.to_credentials())
        except ClientError as e:
            form.error = e.message
            return False
        finally:
            form.submitting = False

        await self._establish(response)
        form.reset()
        await self._notify()
        return True

    async def submit_register(self) -> bool:
        """Submit the register form. Returns True when a session was created."""
        form = self.register_form
        if form.submitting or not form.validate():
            return False

        form.submitting = True
        form.error = None
        try:
            response = await self._auth.register(form.to_credentials())
        except ClientError as e:
            form.error = e.message
            return False
        finally:
            form.submitting = False

        await self._establish(response)
        form.reset()
        await self._notify()
        return True

    async def _establish(self, response: AuthResponse) -> None:
        await self._store.save(
            response.token, UserProfile(name=response.name, email=response.email)
        )
        logger.info("Signed in as %s", response.email)

    async def _notify(self) -> None:
        if self._on_authenticated is None:
            return
        result = self._on_authenticated()
        if inspect.isawaitable(result):
            await result
