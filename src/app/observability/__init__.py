"""Observabilidade — correlation/flow session ids e métricas.

Uso:
    from app.observability import get_correlation_id, set_flow_session_id
    from app.observability import record_latency, record_verification_outcome
"""

from app.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    get_flow_session_id,
    reset_correlation_id,
    reset_flow_session_id,
    set_correlation_id,
    set_flow_session_id,
)
from app.observability.metrics import (
    record_content_load,
    record_latency,
    record_verification_outcome,
)

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "get_flow_session_id",
    "record_content_load",
    "record_latency",
    "record_verification_outcome",
    "reset_correlation_id",
    "reset_flow_session_id",
    "set_correlation_id",
    "set_flow_session_id",
]
