"""Settings do backend gerenciado (RPC + tabelas REST).

O motor nunca assume um banco específico: `memory` serve dev/testes e
`supabase` fala PostgREST via HTTP.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

BackendKind = Literal["memory", "supabase"]


@dataclass(frozen=True)
class BackendSettings:
    """Configurações de acesso ao backend.

    Attributes:
        backend: Implementação (memory|supabase)
        url: URL base do projeto (ex: https://xyz.supabase.co)
        api_key: Chave pública (anon) enviada em `apikey`
        timeout_seconds: Timeout por requisição
    """

    backend: BackendKind = "memory"
    url: str = ""
    api_key: str = ""
    timeout_seconds: float = 10.0

    @property
    def rest_url(self) -> str:
        """URL da API REST (PostgREST)."""
        return f"{self.url.rstrip('/')}/rest/v1"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações do backend."""
        errors: list[str] = []

        if self.backend not in ("memory", "supabase"):
            errors.append(f"FLOW_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append("FLOW_BACKEND=memory proibido em staging/production")

        if self.backend == "supabase":
            if not self.url:
                errors.append("FLOW_BACKEND=supabase requer SUPABASE_URL")
            if not self.api_key:
                errors.append("FLOW_BACKEND=supabase requer SUPABASE_ANON_KEY")

        if self.timeout_seconds <= 0:
            errors.append("BACKEND_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_backend_from_env() -> BackendSettings:
    """Carrega BackendSettings de variáveis de ambiente."""
    backend_str = os.getenv("FLOW_BACKEND", "memory").lower()
    backend: BackendKind = backend_str if backend_str in ("memory", "supabase") else "memory"
    return BackendSettings(
        backend=backend,
        url=os.getenv("SUPABASE_URL", ""),
        api_key=os.getenv("SUPABASE_ANON_KEY", ""),
        timeout_seconds=float(os.getenv("BACKEND_TIMEOUT_SECONDS", "10")),
    )


@lru_cache(maxsize=1)
def get_backend_settings() -> BackendSettings:
    """Retorna instância cacheada de BackendSettings."""
    return _load_backend_from_env()
