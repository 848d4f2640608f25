"""Protocolo de CRUD de fluxos usado pelo FlowManager."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.snapshot import FlowRecord, LegacyContentRow
    from app.protocols.models import CreatedFlow


class FlowRepositoryProtocol(ABC):
    """Contrato assíncrono para a tabela `flows` e RPCs associadas."""

    @abstractmethod
    async def list_user_flows(self) -> list[FlowRecord]:
        """RPC `get_user_flows`."""

    @abstractmethod
    async def create_flow_with_campaign(
        self,
        flow_name: str,
        brand_id: str,
        flow_config: dict[str, Any],
        campaign_name: str | None,
    ) -> CreatedFlow:
        """RPC atômica `create_flow_with_campaign`."""

    @abstractmethod
    async def get_flow(self, flow_id: str) -> FlowRecord | None: ...

    @abstractmethod
    async def update_flow(self, flow_id: str, fields: dict[str, Any]) -> None: ...

    @abstractmethod
    async def publish_flow(
        self,
        flow_id: str,
        snapshot: dict[str, Any],
        expected_version: int,
    ) -> bool:
        """Grava snapshot e versão `expected_version + 1`.

        Returns:
            False se a versão atual divergir de `expected_version`.
        """

    @abstractmethod
    async def delete_flow(self, flow_id: str) -> None: ...

    @abstractmethod
    async def list_flow_content_recent(self, flow_id: str) -> list[LegacyContentRow]:
        """Linhas legadas de `flow_content`, mais recentes primeiro."""
