"""TemplateManager — templates de sistema, forks de marca e campanhas.

Criar campanha a partir de template também garante que o fluxo novo já
sirva conteúdo: se o snapshot publicado vier sem páginas, ele é
auto-publicado a partir do conteúdo legado (ou do rascunho). Falhas
nessa etapa são apenas registradas; a campanha continua criada.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.services.operation_result import OperationResult
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from app.domain.snapshot import FlowRecord, LegacyContentRow, TemplateRecord
    from app.protocols.flow_repository import FlowRepositoryProtocol
    from app.protocols.template_repository import TemplateRepositoryProtocol

logger = logging.getLogger(__name__)


def _pages_from_content_rows(rows: list[LegacyContentRow]) -> list[dict[str, Any]]:
    return [
        {**(row.content if isinstance(row.content, dict) else {}), "order": index}
        for index, row in enumerate(rows)
    ]


class TemplateManager:
    """Orquestra templates (admin + marca) sobre os repositórios."""

    def __init__(
        self,
        templates: TemplateRepositoryProtocol,
        flows: FlowRepositoryProtocol,
        *,
        user_id: str | None = None,
    ) -> None:
        self._templates = templates
        self._flows = flows
        self._user_id = user_id
        self.system_templates: list[TemplateRecord] = []
        self.brand_templates: list[TemplateRecord] = []

    # ──────────────────────────────────────────────────────────────
    # Listagem
    # ──────────────────────────────────────────────────────────────

    async def load_system_templates(self) -> OperationResult[list[TemplateRecord]]:
        try:
            self.system_templates = await self._templates.list_templates("system")
        except InfrastructureError as exc:
            logger.error("system_templates_load_failed", extra={"error_type": type(exc).__name__})
            return OperationResult.fail("Failed to load system templates")
        return OperationResult.ok(self.system_templates)

    async def load_brand_templates(self) -> OperationResult[list[TemplateRecord]]:
        try:
            self.brand_templates = await self._templates.list_templates("brand")
        except InfrastructureError as exc:
            logger.error("brand_templates_load_failed", extra={"error_type": type(exc).__name__})
            return OperationResult.fail("Failed to load brand templates")
        return OperationResult.ok(self.brand_templates)

    # ──────────────────────────────────────────────────────────────
    # Templates de sistema (admin)
    # ──────────────────────────────────────────────────────────────

    async def create_system_template(
        self,
        name: str,
        description: str = "",
        schema: dict[str, Any] | None = None,
        content: dict[str, Any] | None = None,
    ) -> OperationResult[TemplateRecord]:
        """Insere template de sistema em `draft`."""
        fields = {
            "kind": "system",
            "status": "draft",
            "name": name,
            "description": description,
            "created_by": self._user_id,
            "schema": schema,
            "content": content,
        }
        try:
            template = await self._templates.insert_template(fields)
        except InfrastructureError as exc:
            logger.error("system_template_create_failed", extra={"error_type": type(exc).__name__})
            return OperationResult.fail("Failed to create system template")

        self.system_templates = [template, *self.system_templates]
        logger.info("system_template_created", extra={"template_id": template.id})
        return OperationResult.ok(template, message="System template created successfully")

    async def update_template(self, template_id: str, updates: dict[str, Any]) -> OperationResult[TemplateRecord]:
        try:
            template = await self._templates.update_template(template_id, updates)
        except InfrastructureError as exc:
            logger.error(
                "template_update_failed",
                extra={"template_id": template_id, "error_type": type(exc).__name__},
            )
            return OperationResult.fail("Failed to update system template")

        self.system_templates = [template if t.id == template_id else t for t in self.system_templates]
        logger.info("template_updated", extra={"template_id": template_id, "fields": sorted(updates)})
        return OperationResult.ok(template, message="System template updated successfully")

    async def publish_system_template(self, template_id: str) -> OperationResult[Any]:
        """RPC `admin_publish_system_template` seguida de recarga da lista."""
        try:
            data = await self._templates.publish_system_template(template_id)
        except InfrastructureError as exc:
            logger.error(
                "system_template_publish_failed",
                extra={"template_id": template_id, "error_type": type(exc).__name__},
            )
            return OperationResult.fail("Failed to publish system template")

        await self.load_system_templates()
        logger.info("system_template_published", extra={"template_id": template_id})
        return OperationResult.ok(data, message="System template published successfully")

    # ──────────────────────────────────────────────────────────────
    # Marca
    # ──────────────────────────────────────────────────────────────

    async def fork_system_template(self, system_template_id: str, brand_id: str) -> OperationResult[Any]:
        """RPC `brand_fork_system_template` seguida de recarga dos forks."""
        try:
            data = await self._templates.fork_system_template(system_template_id, brand_id)
        except InfrastructureError as exc:
            logger.error(
                "template_fork_failed",
                extra={
                    "template_id": system_template_id,
                    "brand_id": brand_id,
                    "error_type": type(exc).__name__,
                },
            )
            return OperationResult.fail("Failed to fork template")

        await self.load_brand_templates()
        logger.info("template_forked", extra={"template_id": system_template_id, "brand_id": brand_id})
        return OperationResult.ok(data, message="Template forked successfully")

    async def create_campaign_from_template(
        self,
        brand_id: str,
        template_id: str,
        campaign_name: str,
        template_version: int | None = None,
    ) -> OperationResult[dict[str, Any]]:
        """Cria campanha + fluxo a partir de um template e auto-publica se preciso."""
        try:
            data = await self._templates.create_campaign_from_template(
                brand_id,
                template_id,
                campaign_name,
                template_version,
            )
        except InfrastructureError as exc:
            logger.error(
                "campaign_create_failed",
                extra={"template_id": template_id, "brand_id": brand_id, "error_type": type(exc).__name__},
            )
            return OperationResult.fail("Failed to create campaign")

        flow_id = data.get("flow_id") if isinstance(data, dict) else None
        if flow_id:
            await self._auto_publish(str(flow_id))

        logger.info(
            "campaign_created",
            extra={"template_id": template_id, "brand_id": brand_id, "flow_id": flow_id},
        )
        return OperationResult.ok(data, message="Campaign created successfully")

    async def _auto_publish(self, flow_id: str) -> bool:
        """Publica a versão 1 quando o snapshot recém-criado não tem páginas.

        Returns:
            True se um snapshot foi gravado.
        """
        try:
            flow = await self._flows.get_flow(flow_id)
        except InfrastructureError as exc:
            logger.warning(
                "auto_publish_flow_fetch_failed",
                extra={"flow_id": flow_id, "error_type": type(exc).__name__},
            )
            return False

        if flow is None or flow.has_published_pages:
            return False

        pages = await self._auto_publish_pages(flow)
        if not pages:
            return False

        snapshot = {
            "pages": pages,
            "publishedAt": datetime.now(UTC).isoformat(),
            "autoPublished": True,
        }
        try:
            await self._flows.update_flow(flow_id, {"published_snapshot": snapshot, "latest_published_version": 1})
        except InfrastructureError as exc:
            logger.warning("auto_publish_failed", extra={"flow_id": flow_id, "error_type": type(exc).__name__})
            return False

        logger.info("flow_auto_published", extra={"flow_id": flow_id, "pages_count": len(pages)})
        return True

    async def _auto_publish_pages(self, flow: FlowRecord) -> list[dict[str, Any]]:
        """Páginas do conteúdo legado (mais recente primeiro) ou do rascunho."""
        try:
            rows = await self._flows.list_flow_content_recent(flow.id)
        except InfrastructureError as exc:
            logger.warning(
                "auto_publish_content_fetch_failed",
                extra={"flow_id": flow.id, "error_type": type(exc).__name__},
            )
            return []

        if rows:
            return _pages_from_content_rows(rows)

        draft_pages = (flow.flow_config or {}).get("pages")
        if isinstance(draft_pages, list) and draft_pages:
            return list(draft_pages)
        return []

    async def delete_template(self, template_id: str) -> OperationResult[None]:
        try:
            await self._templates.delete_template(template_id)
        except InfrastructureError as exc:
            logger.error(
                "template_delete_failed",
                extra={"template_id": template_id, "error_type": type(exc).__name__},
            )
            return OperationResult.fail("Failed to delete template")

        self.system_templates = [t for t in self.system_templates if t.id != template_id]
        self.brand_templates = [t for t in self.brand_templates if t.id != template_id]
        logger.info("template_deleted", extra={"template_id": template_id})
        return OperationResult.ok(message="Template deleted successfully")
