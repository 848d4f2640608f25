"""LoginStepHandler — sub-componente de autenticação do passo `login_step`.

Não implementa autenticação: delega ao AuthProviderProtocol e repassa o
resultado pelos hooks `on_auth_success`/`on_auth_error`/`on_track_event`,
de modo que o controller observe o login sem que o renderer conheça auth.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from utils.errors import AuthenticationError

if TYPE_CHECKING:
    from app.domain.session import AuthProviderName, AuthUser
    from app.protocols.auth_provider import AuthProviderProtocol

logger = logging.getLogger(__name__)

MaybeAwaitable = Awaitable[Any] | Any


@dataclass(frozen=True, slots=True)
class AuthSuccess:
    """Payload entregue a `on_auth_success`."""

    user: AuthUser
    provider: AuthProviderName
    marketing_opt_in: bool


AuthSuccessHook = Callable[[AuthSuccess], MaybeAwaitable]
AuthErrorHook = Callable[[Exception], MaybeAwaitable]
TrackEventHook = Callable[[str, dict[str, Any]], MaybeAwaitable]


async def _call_hook(hook: Callable[..., MaybeAwaitable] | None, *args: Any) -> None:
    if hook is None:
        return
    result = hook(*args)
    if inspect.isawaitable(result):
        await result


class LoginStepHandler:
    """Estado e ações do formulário de login (OAuth + email/senha).

    Attributes:
        loading: Provedor com chamada em andamento (None = ocioso)
        error: Última mensagem de erro exibível
        marketing_opt_in: Consentimento de compartilhar dados com a marca
        is_sign_up: Alterna entre "Sign In" e "Create Account"
    """

    def __init__(
        self,
        auth_provider: AuthProviderProtocol | None,
        *,
        on_auth_success: AuthSuccessHook | None = None,
        on_auth_error: AuthErrorHook | None = None,
        on_track_event: TrackEventHook | None = None,
    ) -> None:
        self._auth = auth_provider
        self._on_auth_success = on_auth_success
        self._on_auth_error = on_auth_error
        self._on_track_event = on_track_event

        self.loading: AuthProviderName | None = None
        self.error: str | None = None
        self.marketing_opt_in = False
        self.is_sign_up = False
        self.email = ""
        self.password = ""
        self.confirm_password = ""
        self._viewed = False

    @property
    def is_busy(self) -> bool:
        return self.loading is not None

    async def mark_viewed(self) -> None:
        """Emite `auth_viewed` uma única vez por instância."""
        if self._viewed:
            return
        self._viewed = True
        await self._track("auth_viewed", {})

    def set_marketing_opt_in(self, value: bool) -> None:
        self.marketing_opt_in = bool(value)

    def toggle_mode(self) -> None:
        self.is_sign_up = not self.is_sign_up
        self.error = None

    def set_credentials(self, email: str, password: str, confirm_password: str = "") -> None:
        self.email = email.strip()
        self.password = password
        self.confirm_password = confirm_password

    async def continue_with_google(self) -> bool:
        return await self._oauth("google")

    async def continue_with_apple(self) -> bool:
        return await self._oauth("apple")

    async def submit_email(self) -> bool:
        """Login ou cadastro por email, conforme `is_sign_up`."""
        if not self.email or not self.password:
            self.error = "Please fill in all fields"
            return False
        if self.is_sign_up and self.password != self.confirm_password:
            self.error = "Passwords do not match"
            return False

        if self._auth is None:
            return await self._fail("email", AuthenticationError("Authentication unavailable", provider="email"))

        self.loading = "email"
        self.error = None
        try:
            if self.is_sign_up:
                user = await self._auth.sign_up(self.email, self.password)
            else:
                user = await self._auth.sign_in(self.email, self.password)
        except AuthenticationError as exc:
            return await self._fail("email", exc)
        finally:
            self.loading = None

        return await self._succeed(user, "email")

    async def _oauth(self, provider: AuthProviderName) -> bool:
        if self._auth is None:
            return await self._fail(provider, AuthenticationError("Authentication unavailable", provider=provider))

        self.loading = provider
        self.error = None
        try:
            user = await self._auth.sign_in_with_oauth(provider)
        except AuthenticationError as exc:
            self.loading = None
            return await self._fail(provider, exc)

        self.loading = None
        return await self._succeed(user, provider)

    async def _succeed(self, user: AuthUser, provider: AuthProviderName) -> bool:
        logger.info("auth_step_succeeded", extra={"provider": provider})
        await self._track(
            "auth_success",
            {"provider": provider, "marketing_opt_in": self.marketing_opt_in},
        )
        await _call_hook(
            self._on_auth_success,
            AuthSuccess(user=user, provider=provider, marketing_opt_in=self.marketing_opt_in),
        )
        return True

    async def _fail(self, provider: AuthProviderName, exc: AuthenticationError) -> bool:
        message = str(exc) or f"{provider.capitalize()} sign-in failed"
        self.error = message
        logger.warning("auth_step_failed", extra={"provider": provider})
        await _call_hook(self._on_auth_error, exc)
        await self._track("auth_error", {"provider": provider, "error": message})
        return False

    async def _track(self, event_name: str, metadata: dict[str, Any]) -> None:
        try:
            await _call_hook(self._on_track_event, event_name, metadata)
        except Exception:
            logger.warning("auth_step_track_failed", extra={"event": event_name}, exc_info=True)
