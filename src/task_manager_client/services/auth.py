"""Credential exchange with the backend.

Both operations return the issued token and profile; persisting them into the
Session Store is left to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..client.errors import AuthenticationError, ClientError, TransportError
from ..models import AuthResponse, LoginCredentials, RegisterCredentials

if TYPE_CHECKING:
    from ..client.gateway import ApiGateway

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid email or password"
REGISTER_FAILED_MESSAGE = "Registration failed"


class AuthService:
    """Register and log in through the API Gateway."""

    def __init__(self, gateway: ApiGateway) -> None:
        self._gateway = gateway

    async def register(self, credentials: RegisterCredentials) -> AuthResponse:
        """Create an account and return its session token.

        Raises:
            AuthenticationError: With the server's message verbatim (e.g.
                duplicate email, validation failure).
            TransportError: If the server could not be reached.
        """
        try:
            data = await self._gateway.request(
                "POST", "/auth/register", json=credentials.model_dump()
            )
        except TransportError:
            raise
        except ClientError as e:
            logger.info("Registration rejected (HTTP %s)", e.status_code)
            raise AuthenticationError(
                status_code=e.status_code,
                message=e.server_message or REGISTER_FAILED_MESSAGE,
            ) from e
        return AuthResponse.model_validate(data)

    async def login(self, credentials: LoginCredentials) -> AuthResponse:
        """Exchange email and password for a session token.

        Raises:
            AuthenticationError: With the server's message, or a generic
                "Invalid email or password" when the server gives none.
            TransportError: If the server could not be reached.
        """
        try:
            data = await self._gateway.request(
                "POST", "/auth/login", json=credentials.model_dump()
            )
        except TransportError:
            raise
        except ClientError as e:
            logger.info("Login rejected (HTTP %s)", e.status_code)
            raise AuthenticationError(
                status_code=e.status_code,
                message=e.server_message or LOGIN_FAILED_MESSAGE,
            ) from e
        return AuthResponse.model_validate(data)
