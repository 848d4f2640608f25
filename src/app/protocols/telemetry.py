"""Protocolo do sink de telemetria (log de auditoria append-only)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.protocols.models import AuditEvent


class TelemetrySinkProtocol(ABC):
    """Contrato mínimo: anexar um evento. Nunca lê nem altera eventos."""

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> None: ...
