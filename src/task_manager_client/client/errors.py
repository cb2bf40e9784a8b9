"""Custom exceptions for the task manager API client."""

from __future__ import annotations


class ClientError(Exception):
    """Base error for failed API calls.

    Attributes:
        status_code: The HTTP status code returned by the server, or None when
            no response was received.
        server_message: The message supplied by the server, if any.
        message: A human-readable error description (server message, or a
            default for the error class).
    """

    default_message = "Request failed"

    def __init__(self, status_code: int | None, message: str | None = None) -> None:
        self.status_code = status_code
        self.server_message = message
        self.message = message or self.default_message
        if status_code is None:
            super().__init__(self.message)
        else:
            super().__init__(f"HTTP {status_code}: {self.message}")


class UnauthorizedError(ClientError):
    """Raised when the server returns 401; the session has been cleared."""

    default_message = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(status_code=401, message=message)


class NotFoundError(ClientError):
    """Raised when the server returns a 404 Not Found response."""

    default_message = "Not found"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(status_code=404, message=message)


class ServerError(ClientError):
    """Raised when the server returns a 5xx response."""

    default_message = "Server error"

    def __init__(self, status_code: int = 500, message: str | None = None) -> None:
        super().__init__(status_code=status_code, message=message)


class TransportError(ClientError):
    """Raised on network failure or timeout; no response was received."""

    default_message = "Could not reach the server"

    def __init__(self, detail: str | None = None) -> None:
        # Transport detail is not a server message; server_message stays None.
        self.detail = detail
        super().__init__(status_code=None, message=None)


class AuthenticationError(ClientError):
    """Raised when login or registration is rejected by the server."""
