"""Formatters de logging estruturado.

Todo log sai em JSON com os campos obrigatórios abaixo, mais qualquer
campo passado via `extra`.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Ordem estável para facilitar leitura em terminal
REQUIRED_LOG_FIELDS: tuple[str, ...] = (
    "asctime",
    "levelname",
    "name",
    "message",
    "service",
    "correlation_id",
    "flow_session_id",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-10-19 10:30:00,123",
            "level": "INFO",
            "logger": "app.flow.controller",
            "message": "flow_started",
            "service": "certiflow",
            "correlation_id": "4f0c...",
            "flow_session_id": "sess-123",
            "campaign_id": "cmp-1"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)
    return JsonFormatter(format_string, rename_fields=FIELD_RENAME_MAP)
