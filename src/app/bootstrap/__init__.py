"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, get_backend, create_flow_controller

    # Na inicialização do processo
    initialize_app()

    # Uma travessia de cliente
    controller = create_flow_controller(get_backend())
"""

from __future__ import annotations

import logging
from functools import lru_cache

from app.bootstrap.dependencies import (
    BackendBundle,
    create_backend,
    create_content_loader,
    create_flow_controller,
    create_flow_manager,
    create_section_renderer,
    create_style_resolver,
    create_template_manager,
    validate_env_settings,
    validate_settings,
)
from app.observability import get_correlation_id, get_flow_session_id
from config.logging import configure_logging
from config.settings import get_base_settings

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do processo.

    Raises:
        ValueError: Se alguma settings for inválida
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
        session_id_getter=get_flow_session_id,
    )
    validate_env_settings()
    logger.info(
        "app_initialized",
        extra={"component": "bootstrap", "environment": base.environment},
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging DEBUG, sem validação)."""
    configure_logging(
        level="DEBUG",
        service_name=f"{get_base_settings().service_name}_test",
        correlation_id_getter=get_correlation_id,
        session_id_getter=get_flow_session_id,
    )


@lru_cache(maxsize=1)
def get_backend() -> BackendBundle:
    """Obtém o conjunto de backend do processo (singleton)."""
    validate_env_settings()
    return create_backend()


__all__ = [
    "BackendBundle",
    "create_backend",
    "create_content_loader",
    "create_flow_controller",
    "create_flow_manager",
    "create_section_renderer",
    "create_style_resolver",
    "create_template_manager",
    "get_backend",
    "initialize_app",
    "initialize_test_app",
    "validate_settings",
]
