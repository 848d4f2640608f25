"""Protocolo de leitura de conteúdo de fluxo por campanha."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.snapshot import FlowRecord, LegacyContentRow


class ContentStoreProtocol(ABC):
    """Contrato de leitura usado pelo FlowContentLoader."""

    @abstractmethod
    async def get_flow_for_campaign(self, campaign_id: str) -> FlowRecord | None:
        """Retorna o registro de fluxo da campanha (ou None)."""

    @abstractmethod
    async def list_flow_content(self, flow_id: str) -> list[LegacyContentRow]:
        """Linhas legadas de `flow_content`, ordenadas por `order_index`."""
