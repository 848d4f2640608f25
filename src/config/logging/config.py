"""Configuração centralizada de logging.

Uso:
    from config.logging import configure_logging

    # Uma vez, na montagem das dependências (app/bootstrap/)
    configure_logging(level="INFO", service_name="certiflow")

    # Em qualquer módulo
    logger = logging.getLogger(__name__)
    logger.info("flow_started", extra={"campaign_id": "cmp-1"})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import FlowContextFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "certiflow"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    session_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Retorna o correlation_id do contexto atual.
        session_id_getter: Retorna o id da sessão de fluxo do contexto atual.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(
        FlowContextFilter(service_name, correlation_id_getter, session_id_getter)
    )

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    **fields: object,
) -> None:
    """Registra que um fallback determinístico foi aplicado.

    Args:
        logger: Logger do módulo chamador.
        component: Componente que degradou (ex: "section_renderer").
        reason: Motivo curto, sem PII (ex: "unknown_section_type").
        **fields: Campos extras de contexto (ids, tipos).
    """
    extra: dict[str, object] = {"fallback_used": True, "component": component}
    if reason:
        extra["reason"] = reason
    extra.update(fields)
    logger.info("fallback_applied", extra=extra)
