"""Async HTTP gateway for the task manager REST API."""

from .errors import (
    AuthenticationError,
    ClientError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
)
from .gateway import DEFAULT_BASE_URL, ApiGateway, SessionAuth

__all__ = [
    "DEFAULT_BASE_URL",
    "ApiGateway",
    "AuthenticationError",
    "ClientError",
    "NotFoundError",
    "ServerError",
    "SessionAuth",
    "TransportError",
    "UnauthorizedError",
]
