"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    AuthenticationError,
    BackendRequestError,
    BackendUnavailableError,
    InfrastructureError,
    NotFoundError,
    PermissionDeniedError,
)

__all__ = [
    "AuthenticationError",
    "BackendRequestError",
    "BackendUnavailableError",
    "InfrastructureError",
    "NotFoundError",
    "PermissionDeniedError",
]
