"""Configuração de logging estruturado (JSON).

Campos presentes em todo log: asctime, level, logger, message,
service, correlation_id, flow_session_id.
"""

from config.logging.config import configure_logging, log_fallback
from config.logging.filters import FlowContextFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "FlowContextFilter",
    "configure_logging",
    "create_json_formatter",
    "log_fallback",
]
