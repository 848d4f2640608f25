"""Contratos de dados trocados com o backend gerenciado."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StartFlowSessionResult(BaseModel):
    """Resposta de `start_flow_session(qr_id)`.

    Em falha de negócio (QR inválido/expirado), `success=False` e `message`
    traz o motivo legível.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    success: bool
    session_id: str | None = None
    campaign_id: str | None = None
    campaign_name: str | None = None
    brand_id: str | None = None
    brand_name: str | None = None
    message: str | None = None


class CreatedFlow(BaseModel):
    """Resposta de `create_flow_with_campaign`."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    flow_id: str
    campaign_id: str | None = None


class AuditEvent(BaseModel):
    """Evento append-only do log de auditoria (`audit_log`).

    Eventos do motor usam `action = "flow_<evento>"` e `object_type = "flow_session"`.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    actor: str | None = None
    action: str = Field(..., min_length=1)
    object_type: str = "flow_session"
    object_id: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=_utcnow)

    def to_row(self) -> dict[str, Any]:
        """Linha pronta para insert (timestamp ISO-8601)."""
        return {
            "actor": self.actor,
            "action": self.action,
            "object_type": self.object_type,
            "object_id": self.object_id,
            "meta": self.meta,
            "created_at": self.created_at.isoformat(),
        }
