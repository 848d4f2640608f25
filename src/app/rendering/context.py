"""Contexto de renderização: modo, dados da marca e bindings de runtime."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from app.auth.login import LoginStepHandler
from config.settings.flow import FALLBACK_STORE_OPTIONS

if TYPE_CHECKING:
    from app.auth.login import AuthErrorHook, AuthSuccessHook, TrackEventHook
    from app.domain.style_tokens import StyleTokens
    from app.protocols.auth_provider import AuthProviderProtocol

PurchaseChannel = Literal["in-store", "online", ""]


@dataclass(slots=True)
class StoreSelectionState:
    """Estado local do seletor de loja (modo não controlado)."""

    purchase_channel: PurchaseChannel = ""
    selected_store: str = ""


@dataclass(slots=True)
class RenderContext:
    """Tudo que o renderer precisa além da seção.

    O seletor de loja opera em modo controlado quando `purchase_channel`
    e `on_purchase_channel_change` são fornecidos juntos; caso contrário
    usa `store_states`, indexado pelo id da seção.
    """

    tokens: StyleTokens
    is_preview: bool = False
    is_runtime_mode: bool = False

    store_options: list[str] = field(default_factory=list)
    fallback_store_options: tuple[str, ...] = FALLBACK_STORE_OPTIONS
    brand_colors: dict[str, str] | None = None
    brand_logo_url: str | None = None

    # Seletor de loja controlado
    purchase_channel: PurchaseChannel | None = None
    selected_store: str | None = None
    on_purchase_channel_change: Callable[[PurchaseChannel], Any] | None = None
    on_selected_store_change: Callable[[str], Any] | None = None

    # Login
    auth_provider: AuthProviderProtocol | None = None
    on_auth_success: AuthSuccessHook | None = None
    on_auth_error: AuthErrorHook | None = None
    on_track_event: TrackEventHook | None = None

    # Navegação
    on_navigate_to_page: Callable[[str], Any] | None = None
    on_next: Callable[[], Any] | None = None
    on_prev: Callable[[], Any] | None = None

    # Etapas fixas (verificação e página final)
    on_run_verification: Callable[[], Any] | None = None
    on_open_document: Callable[[str], Any] | None = None
    on_upsell_click: Callable[[str], Any] | None = None

    # Formulários
    form_values: dict[str, str] = field(default_factory=dict)
    on_form_change: Callable[[str, str], Any] | None = None

    store_states: dict[str, StoreSelectionState] = field(default_factory=dict)
    login_handlers: dict[str, LoginStepHandler] = field(default_factory=dict)

    @property
    def is_store_controlled(self) -> bool:
        return self.purchase_channel is not None and self.on_purchase_channel_change is not None

    def store_state(self, section_id: str) -> StoreSelectionState:
        return self.store_states.setdefault(section_id, StoreSelectionState())

    def login_handler(self, section_id: str) -> LoginStepHandler:
        """Handler de login da seção, criado uma vez e reutilizado entre renders."""
        handler = self.login_handlers.get(section_id)
        if handler is None:
            handler = LoginStepHandler(
                self.auth_provider,
                on_auth_success=self.on_auth_success,
                on_auth_error=self.on_auth_error,
                on_track_event=self.on_track_event,
            )
            self.login_handlers[section_id] = handler
        return handler

    def accent_color(self) -> str | None:
        return (self.brand_colors or {}).get("primary") or None
