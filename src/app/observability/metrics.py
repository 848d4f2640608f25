"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente (BigQuery, CloudWatch Insights, etc.).

Métricas suportadas:
- Latência: tempo de ida e volta de cada chamada ao backend
- Verificação: contador de resultados pass/warn/fail
- Carga de conteúdo: modo (published/draft/legacy) ou motivo de falha

Uso:
    start = time.perf_counter()
    # ... chamada ao backend ...
    record_latency("flow_controller", "run_verification", (time.perf_counter() - start) * 1000)
"""

from __future__ import annotations

import logging

from app.observability.correlation import get_correlation_id

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "flow_controller", "content_loader")
        operation: Nome da operação (ex: "start_flow_session")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação (default: do contexto)
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )


def record_verification_outcome(
    result: str,
    reasons_count: int,
    correlation_id: str | None = None,
) -> None:
    """Registra resultado de verificação (pass|warn|fail).

    Os motivos em si não entram na métrica; apenas a contagem.
    """
    logger.info(
        "metric_verification_outcome",
        extra={
            "metric_type": "verification_outcome",
            "component": "flow_controller",
            "result": result,
            "reasons_count": reasons_count,
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )


def record_content_load(
    source_mode: str,
    success: bool,
    error: str | None = None,
    correlation_id: str | None = None,
) -> None:
    """Registra resultado de carga de conteúdo de campanha."""
    logger.info(
        "metric_content_load",
        extra={
            "metric_type": "content_load",
            "component": "content_loader",
            "source_mode": source_mode,
            "success": success,
            "error": error,
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )
