"""Factories de colaboradores — criação de implementações concretas.

Este módulo centraliza a escolha entre backend em memória e Supabase
(PostgREST via httpx) com base nas settings, e monta os serviços do
motor sobre os protocolos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

import httpx

from app.flow import CertificationFlowController
from app.infra.backend import (
    MemoryContentStore,
    MemoryDatabase,
    MemoryFlowBackend,
    MemoryFlowRepository,
    MemoryTelemetrySink,
    MemoryTemplateRepository,
    SupabaseContentStore,
    SupabaseFlowBackend,
    SupabaseFlowRepository,
    SupabaseRestClient,
    SupabaseTelemetrySink,
    SupabaseTemplateRepository,
)
from app.rendering import SectionRenderer
from app.services import FlowContentLoader, FlowManager, StyleTokenResolver, TemplateManager
from config.settings import (
    BackendSettings,
    BaseSettings,
    FlowSettings,
    get_backend_settings,
    get_base_settings,
    get_flow_settings,
)

if TYPE_CHECKING:
    from app.protocols.content_store import ContentStoreProtocol
    from app.protocols.flow_backend import FlowBackendProtocol
    from app.protocols.flow_repository import FlowRepositoryProtocol
    from app.protocols.telemetry import TelemetrySinkProtocol
    from app.protocols.template_repository import TemplateRepositoryProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BackendBundle:
    """Implementações de todos os protocolos de backend de um mesmo provedor."""

    kind: str
    flow_backend: FlowBackendProtocol
    content_store: ContentStoreProtocol
    telemetry: TelemetrySinkProtocol
    flow_repository: FlowRepositoryProtocol
    template_repository: TemplateRepositoryProtocol
    http_client: httpx.AsyncClient | None = None

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


# ──────────────────────────────────────────────────────────────────────────────
# Validação
# ──────────────────────────────────────────────────────────────────────────────


def validate_settings(
    base: BaseSettings,
    backend: BackendSettings,
    flow: FlowSettings,
) -> None:
    """Valida todas as settings antes de montar colaboradores.

    Raises:
        ValueError: Com todos os erros encontrados
    """
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"backend: {error}" for error in backend.validate(base))
    errors.extend(f"flow: {error}" for error in flow.validate())
    if errors:
        logger.error(
            "settings_validation_failed",
            extra={"component": "bootstrap", "error_count": len(errors), "errors": errors},
        )
        raise ValueError("Configuração inválida:\n" + "\n".join(f"- {error}" for error in errors))


# ──────────────────────────────────────────────────────────────────────────────
# Backend
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_memory_database() -> MemoryDatabase:
    """Banco em memória compartilhado pelo processo (dev only)."""
    return MemoryDatabase()


def create_http_client(settings: BackendSettings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.timeout_seconds))


def create_backend(
    settings: BackendSettings | None = None,
    *,
    access_token: str | None = None,
    memory_db: MemoryDatabase | None = None,
) -> BackendBundle:
    """Cria o conjunto de implementações de backend.

    Args:
        settings: BackendSettings (default: env)
        access_token: JWT do usuário para chamadas autenticadas (Supabase)
        memory_db: Banco em memória explícito (testes)

    Returns:
        BackendBundle com todos os protocolos do mesmo provedor
    """
    settings = settings or get_backend_settings()

    if settings.backend == "supabase":
        http_client = create_http_client(settings)
        rest = SupabaseRestClient(http_client, settings.rest_url, settings.api_key, access_token)
        logger.info("backend_created", extra={"backend": "supabase"})
        return BackendBundle(
            kind="supabase",
            flow_backend=SupabaseFlowBackend(rest),
            content_store=SupabaseContentStore(rest),
            telemetry=SupabaseTelemetrySink(rest),
            flow_repository=SupabaseFlowRepository(rest),
            template_repository=SupabaseTemplateRepository(rest),
            http_client=http_client,
        )

    if settings.backend == "memory":
        db = memory_db if memory_db is not None else get_memory_database()
        logger.info("backend_created", extra={"backend": "memory"})
        return BackendBundle(
            kind="memory",
            flow_backend=MemoryFlowBackend(db),
            content_store=MemoryContentStore(db),
            telemetry=MemoryTelemetrySink(db),
            flow_repository=MemoryFlowRepository(db),
            template_repository=MemoryTemplateRepository(db),
        )

    msg = f"FLOW_BACKEND inválido: {settings.backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Serviços do motor
# ──────────────────────────────────────────────────────────────────────────────


def create_flow_controller(
    backend: BackendBundle,
    flow_settings: FlowSettings | None = None,
) -> CertificationFlowController:
    """Um controller por travessia (não compartilhar entre clientes)."""
    flow_settings = flow_settings or get_flow_settings()
    return CertificationFlowController(
        backend.flow_backend,
        backend.telemetry,
        single_flight_verification=flow_settings.single_flight_verification,
    )


def create_content_loader(
    backend: BackendBundle,
    flow_settings: FlowSettings | None = None,
) -> FlowContentLoader:
    flow_settings = flow_settings or get_flow_settings()
    return FlowContentLoader(backend.content_store, allow_draft_preview=flow_settings.allow_draft_preview)


def create_style_resolver(flow_settings: FlowSettings | None = None) -> StyleTokenResolver:
    flow_settings = flow_settings or get_flow_settings()
    return StyleTokenResolver(default_template_id=flow_settings.default_template_id)


def create_section_renderer() -> SectionRenderer:
    return SectionRenderer()


def create_flow_manager(backend: BackendBundle) -> FlowManager:
    return FlowManager(backend.flow_repository)


def create_template_manager(backend: BackendBundle, user_id: str | None = None) -> TemplateManager:
    return TemplateManager(backend.template_repository, backend.flow_repository, user_id=user_id)


def validate_env_settings() -> None:
    """Valida as settings carregadas do ambiente."""
    validate_settings(get_base_settings(), get_backend_settings(), get_flow_settings())
