"""Gerenciamento de correlation_id e flow_session_id para rastreamento.

Ambos são injetados em logs pelo FlowContextFilter.
Usa ContextVar para ser async-safe (cada task herda o contexto de quem a criou).

Uso:
    from app.observability import get_correlation_id, set_correlation_id

    token = set_correlation_id(request_id)
    try:
        await controller.start_flow(qr_id=qr_id)
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_flow_session_id: ContextVar[str] = ContextVar("flow_session_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual.

    Returns:
        correlation_id ou string vazia se não definido.
    """
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


def get_flow_session_id() -> str:
    """Retorna o id da sessão de fluxo ativa no contexto (ou vazio)."""
    return _flow_session_id.get()


def set_flow_session_id(session_id: str) -> Token[str]:
    """Associa o contexto atual a uma sessão de fluxo."""
    return _flow_session_id.set(session_id)


def reset_flow_session_id(token: Token[str]) -> None:
    _flow_session_id.reset(token)
