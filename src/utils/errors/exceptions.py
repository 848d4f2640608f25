"""Exceções de infraestrutura para chamadas ao backend gerenciado."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class BackendUnavailableError(InfrastructureError):
    """Timeout, falha de conexão ou erro 5xx do backend."""


class BackendRequestError(InfrastructureError):
    """Requisição recusada pelo backend (4xx) ou resposta malformada.

    Attributes:
        status_code: Status HTTP (0 quando não houve resposta HTTP)
        code: Código de erro do backend (ex: PGRST116, 42501)
    """

    def __init__(self, message: str, *, status_code: int = 0, code: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class PermissionDeniedError(BackendRequestError):
    """Acesso negado (401/403 ou RLS 42501)."""


class NotFoundError(BackendRequestError):
    """Registro não encontrado (404 ou PGRST116)."""


class AuthenticationError(Exception):
    """Falha reportada pelo provedor de autenticação (credenciais, OAuth cancelado)."""

    def __init__(self, message: str, *, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider
