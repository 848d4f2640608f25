"""Capacidade de autenticação consumida pelo passo de login.

O motor não implementa autenticação; apenas orquestra estas chamadas.
Falhas sobem como AuthenticationError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.session import AuthUser


class AuthProviderProtocol(ABC):
    """Contrato {sign_in, sign_up, sign_in_with_oauth}."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthUser: ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthUser: ...

    @abstractmethod
    async def sign_in_with_oauth(self, provider: str) -> AuthUser: ...
