"""Settings do motor de fluxo de certificação."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from config.settings.base.core import _parse_bool, get_base_settings

FALLBACK_STORE_OPTIONS: tuple[str, ...] = (
    "Downtown Location",
    "Mall Branch",
    "Airport Store",
)


@dataclass(frozen=True)
class FlowSettings:
    """Configurações do fluxo.

    Attributes:
        default_template_id: Família de design aplicada quando a campanha não define uma
        allow_draft_preview: Permite carregar rascunho (modo debug de editores)
        single_flight_verification: Compartilha uma única verificação em voo por controller
        fallback_store_options: Lojas usadas quando nem o runtime nem a seção fornecem lista
    """

    default_template_id: str = ""
    allow_draft_preview: bool = True
    single_flight_verification: bool = False
    fallback_store_options: tuple[str, ...] = field(default=FALLBACK_STORE_OPTIONS)

    def validate(self) -> list[str]:
        errors: list[str] = []
        if not self.fallback_store_options:
            errors.append("fallback_store_options não pode ser vazio")
        return errors


def _load_flow_from_env() -> FlowSettings:
    """Carrega FlowSettings de variáveis de ambiente."""
    base = get_base_settings()
    draft_default = "true" if base.is_development else "false"
    return FlowSettings(
        default_template_id=os.getenv("FLOW_DEFAULT_TEMPLATE", ""),
        allow_draft_preview=_parse_bool(os.getenv("FLOW_ALLOW_DRAFT_PREVIEW", draft_default)),
        single_flight_verification=_parse_bool(
            os.getenv("FLOW_SINGLE_FLIGHT_VERIFICATION", "false")
        ),
    )


@lru_cache(maxsize=1)
def get_flow_settings() -> FlowSettings:
    """Retorna instância cacheada de FlowSettings."""
    return _load_flow_from_env()
