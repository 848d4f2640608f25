"""Implementações Supabase dos repositórios de fluxos e templates (editores)."""

from __future__ import annotations

from typing import Any, Literal

from app.domain.snapshot import FlowRecord, LegacyContentRow, TemplateRecord
from app.infra.backend.http_client import SupabaseRestClient
from app.infra.backend.rows import parse_row
from app.protocols.flow_repository import FlowRepositoryProtocol
from app.protocols.models import CreatedFlow
from app.protocols.template_repository import TemplateRepositoryProtocol
from utils.errors import BackendRequestError


class SupabaseFlowRepository(FlowRepositoryProtocol):
    """Tabela `flows` + RPCs `get_user_flows` e `create_flow_with_campaign`."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    async def list_user_flows(self) -> list[FlowRecord]:
        data = await self._client.rpc("get_user_flows")
        return [parse_row(FlowRecord, row, "get_user_flows") for row in data or []]

    async def create_flow_with_campaign(
        self,
        flow_name: str,
        brand_id: str,
        flow_config: dict[str, Any],
        campaign_name: str | None,
    ) -> CreatedFlow:
        data = await self._client.rpc(
            "create_flow_with_campaign",
            {
                "p_flow_name": flow_name,
                "p_brand_id": brand_id,
                "p_flow_config": flow_config,
                "p_campaign_name": campaign_name,
            },
        )
        rows = data if isinstance(data, list) else [data] if data else []
        if not rows or not isinstance(rows[0], dict):
            raise BackendRequestError("create_flow_with_campaign: nenhum fluxo retornado")
        return parse_row(CreatedFlow, rows[0], "create_flow_with_campaign")

    async def get_flow(self, flow_id: str) -> FlowRecord | None:
        row = await self._client.select_one("flows", filters={"id": flow_id})
        return parse_row(FlowRecord, row, "select:flows") if row is not None else None

    async def update_flow(self, flow_id: str, fields: dict[str, Any]) -> None:
        await self._client.update("flows", fields, {"id": flow_id})

    async def publish_flow(
        self,
        flow_id: str,
        snapshot: dict[str, Any],
        expected_version: int,
    ) -> bool:
        # versão nula no banco equivale a 0
        version_filter = (
            {"or": "(latest_published_version.is.null,latest_published_version.eq.0)"}
            if expected_version == 0
            else {"latest_published_version": f"eq.{expected_version}"}
        )
        rows = await self._client.update(
            "flows",
            {
                "published_snapshot": snapshot,
                "latest_published_version": expected_version + 1,
            },
            {"id": flow_id},
            raw_filters=version_filter,
        )
        return len(rows) > 0

    async def delete_flow(self, flow_id: str) -> None:
        await self._client.delete("flows", {"id": flow_id})

    async def list_flow_content_recent(self, flow_id: str) -> list[LegacyContentRow]:
        rows = await self._client.select(
            "flow_content",
            columns="content,updated_at",
            filters={"flow_id": flow_id},
            order="updated_at.desc",
        )
        return [parse_row(LegacyContentRow, row, "select:flow_content") for row in rows]


class SupabaseTemplateRepository(TemplateRepositoryProtocol):
    """Tabela `templates` + RPCs administrativas de publicação e fork."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    async def list_templates(self, kind: Literal["system", "brand"]) -> list[TemplateRecord]:
        rows = await self._client.select(
            "templates",
            filters={"kind": kind},
            order="created_at.desc",
        )
        return [parse_row(TemplateRecord, row, "select:templates") for row in rows]

    async def insert_template(self, fields: dict[str, Any]) -> TemplateRecord:
        row = await self._client.insert("templates", fields)
        return parse_row(TemplateRecord, row, "insert:templates")

    async def update_template(self, template_id: str, fields: dict[str, Any]) -> TemplateRecord:
        rows = await self._client.update("templates", fields, {"id": template_id})
        if not rows:
            raise BackendRequestError(f"update:templates: template {template_id} não atualizado")
        return parse_row(TemplateRecord, rows[0], "update:templates")

    async def delete_template(self, template_id: str) -> None:
        await self._client.delete("templates", {"id": template_id})

    async def publish_system_template(self, template_id: str) -> Any:
        return await self._client.rpc("admin_publish_system_template", {"tpl_id": template_id})

    async def fork_system_template(self, system_template_id: str, brand_id: str) -> Any:
        return await self._client.rpc(
            "brand_fork_system_template",
            {"system_tpl_id": system_template_id, "target_brand_id": brand_id},
        )

    async def create_campaign_from_template(
        self,
        brand_id: str,
        template_id: str,
        campaign_name: str,
        template_version: int | None,
    ) -> dict[str, Any]:
        data = await self._client.rpc(
            "create_campaign_from_template",
            {
                "p_brand_id": brand_id,
                "p_template_id": template_id,
                "p_campaign_name": campaign_name,
                "p_template_version": template_version,
            },
        )
        if isinstance(data, list):
            data = data[0] if data else {}
        return data if isinstance(data, dict) else {}
