"""Fake in-memory do provedor de autenticação para testes deterministas."""

from __future__ import annotations

from app.domain.session import AuthUser
from app.protocols.auth_provider import AuthProviderProtocol
from utils.errors import AuthenticationError


class FakeAuthProvider(AuthProviderProtocol):
    """Implementa o protocolo sem IO.

    Contas cadastradas ficam num dicionário; provedores OAuth podem ser
    marcados como falhos para exercitar o caminho de erro.
    """

    def __init__(self) -> None:
        self.accounts: dict[str, str] = {}
        self.failing_oauth: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    async def sign_in(self, email: str, password: str) -> AuthUser:
        self.calls.append(("sign_in", email))
        if self.accounts.get(email) != password:
            raise AuthenticationError("Invalid login credentials", provider="email")
        return AuthUser(id=f"user-{email}", email=email, provider="email")

    async def sign_up(self, email: str, password: str) -> AuthUser:
        self.calls.append(("sign_up", email))
        if email in self.accounts:
            raise AuthenticationError("User already registered", provider="email")
        self.accounts[email] = password
        return AuthUser(id=f"user-{email}", email=email, provider="email")

    async def sign_in_with_oauth(self, provider: str) -> AuthUser:
        self.calls.append(("oauth", provider))
        if provider in self.failing_oauth:
            raise AuthenticationError(self.failing_oauth[provider], provider=provider)
        return AuthUser(id=f"user-{provider}", provider=provider)
