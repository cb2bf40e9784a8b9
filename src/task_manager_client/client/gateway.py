"""Single HTTP entry point to the task manager backend.

Every call to the backend goes through ``ApiGateway.request`` so that bearer
token attachment and 401 handling are applied uniformly:

- ``SessionAuth`` reads the Session Store before each request and adds
  ``Authorization: Bearer <token>`` when a token is present.
- On a 401 response the same auth flow clears the Session Store and invokes
  the ``on_unauthorized`` callback (navigation to the login view) before the
  error is raised to the caller.

No status other than 401 has side effects, and nothing is retried.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from typing import TYPE_CHECKING, Any

import httpx

from .errors import (
    ClientError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
)

if TYPE_CHECKING:
    from ..session.store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api"

UnauthorizedCallback = Callable[[], Awaitable[None] | None]


class SessionAuth(httpx.Auth):
    """httpx auth flow backed by the Session Store.

    Args:
        store: Session Store to read the token from and clear on 401.
        on_unauthorized: Called after the store is cleared on a 401 response.
    """

    def __init__(
        self,
        store: SessionStore,
        on_unauthorized: UnauthorizedCallback | None = None,
    ) -> None:
        self._store = store
        self.on_unauthorized = on_unauthorized

    def sync_auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        msg = "SessionAuth reads an async Session Store; use httpx.AsyncClient"
        raise RuntimeError(msg)
        yield request  # pragma: no cover

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        session = await self._store.load()
        if session.is_authenticated:
            request.headers["Authorization"] = f"Bearer {session.token}"

        response = yield request

        if response.status_code == 401:
            await self._invalidate_session(request)

    async def _invalidate_session(self, request: httpx.Request) -> None:
        logger.warning(
            "401 from %s %s, clearing session", request.method, request.url.path
        )
        await self._store.clear()
        if self.on_unauthorized is not None:
            result = self.on_unauthorized()
            if inspect.isawaitable(result):
                await result


class ApiGateway:
    """Async gateway wrapping the task manager REST API.

    Usage::

        async with ApiGateway(store, base_url="http://localhost:8080/api") as api:
            tasks = await api.request("GET", "/tasks")

    Args:
        store: Session Store supplying the bearer token.
        base_url: Base URL of the backend API.
        timeout: Request timeout in seconds; None keeps the httpx default.
        on_unauthorized: Callback run after a 401 cleared the session.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = None,
        on_unauthorized: UnauthorizedCallback | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._auth = SessionAuth(store, on_unauthorized)
        client_kwargs: dict[str, Any] = {
            "base_url": base_url,
            "headers": {
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            "auth": self._auth,
            "event_hooks": {"response": [self._log_response]},
        }
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def on_unauthorized(self) -> UnauthorizedCallback | None:
        return self._auth.on_unauthorized

    @on_unauthorized.setter
    def on_unauthorized(self, callback: UnauthorizedCallback | None) -> None:
        self._auth.on_unauthorized = callback

    async def __aenter__(self) -> ApiGateway:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def _log_response(response: httpx.Response) -> None:
        request = response.request
        logger.debug("%s %s -> %s", request.method, request.url.path, response.status_code)

    @staticmethod
    def _extract_message(response: httpx.Response) -> str | None:
        """Extract the server's error message from a response.

        The backend sends ``{"message": ..., "error": ...}``; ``detail`` is
        accepted as well.

        Args:
            response: The HTTP response to extract the message from.

        Returns:
            The message string, or None when the body carries none.
        """
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            for key in ("message", "detail"):
                value = body.get(key)
                if value:
                    return str(value)
        return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
    ) -> Any:
        """Send a request and return the parsed JSON response.

        Args:
            method: HTTP method (GET, POST, etc.).
            path: URL path relative to ``base_url``.
            json: Optional JSON body.

        Returns:
            Parsed JSON, or None for an empty body (e.g. 204).

        Raises:
            UnauthorizedError: On 401, after the session has been cleared.
            NotFoundError: If the server responds with 404.
            ServerError: If the server responds with a 5xx status code.
            ClientError: For any other non-2xx status code.
            TransportError: On network failure or timeout.
        """
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TransportError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise TransportError(str(e) or type(e).__name__) from e

        if response.status_code == 401:
            raise UnauthorizedError(self._extract_message(response))

        if response.status_code == 404:
            raise NotFoundError(self._extract_message(response))

        if response.status_code >= 500:
            raise ServerError(
                status_code=response.status_code,
                message=self._extract_message(response),
            )

        if response.status_code >= 400:
            raise ClientError(
                status_code=response.status_code,
                message=self._extract_message(response),
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()
