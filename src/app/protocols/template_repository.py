"""Protocolo de CRUD de templates usado pelo TemplateManager."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from app.domain.snapshot import TemplateRecord


class TemplateRepositoryProtocol(ABC):
    """Contrato assíncrono para a tabela `templates` e RPCs administrativas."""

    @abstractmethod
    async def list_templates(self, kind: Literal["system", "brand"]) -> list[TemplateRecord]:
        """Templates do tipo informado, mais recentes primeiro."""

    @abstractmethod
    async def insert_template(self, fields: dict[str, Any]) -> TemplateRecord: ...

    @abstractmethod
    async def update_template(self, template_id: str, fields: dict[str, Any]) -> TemplateRecord: ...

    @abstractmethod
    async def delete_template(self, template_id: str) -> None: ...

    @abstractmethod
    async def publish_system_template(self, template_id: str) -> Any:
        """RPC `admin_publish_system_template`."""

    @abstractmethod
    async def fork_system_template(self, system_template_id: str, brand_id: str) -> Any:
        """RPC `brand_fork_system_template`."""

    @abstractmethod
    async def create_campaign_from_template(
        self,
        brand_id: str,
        template_id: str,
        campaign_name: str,
        template_version: int | None,
    ) -> dict[str, Any]:
        """RPC `create_campaign_from_template`; retorna ao menos `flow_id`."""
