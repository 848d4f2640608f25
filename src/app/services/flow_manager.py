"""FlowManager — CRUD de fluxos do editor (rascunho + publicação).

Operações devolvem `OperationResult`; falhas de infraestrutura viram
mensagens legíveis e nunca escapam como exceção. Mantém um cache local
(`flows`) coerente com as operações bem-sucedidas.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from app.observability import record_latency
from app.services.operation_result import OperationResult
from app.services.starter_templates import default_flow_config
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from app.domain.snapshot import FlowRecord
    from app.protocols.flow_repository import FlowRepositoryProtocol

logger = logging.getLogger(__name__)

PreviewMode = Literal["editor", "customer"]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def build_published_snapshot(name: str, flow_config: dict[str, Any] | None) -> dict[str, Any]:
    """Snapshot publicado = rascunho + `name` + `publishedAt`."""
    return {**(flow_config or {}), "name": name, "publishedAt": _now_iso()}


class FlowManager:
    """Orquestra o repositório de fluxos para o editor."""

    def __init__(self, repository: FlowRepositoryProtocol) -> None:
        self._repo = repository
        self.flows: list[FlowRecord] = []
        self.is_loading = False
        self.error: str | None = None
        self.selected_flow: FlowRecord | None = None
        self.preview_mode: PreviewMode | None = None

    # ──────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────

    async def fetch_flows(self) -> OperationResult[list[FlowRecord]]:
        """Lista os fluxos visíveis ao usuário (RPC `get_user_flows`)."""
        self.is_loading = True
        self.error = None
        start = time.perf_counter()
        try:
            flows = await self._repo.list_user_flows()
        except InfrastructureError as exc:
            self.error = f"Failed to fetch flows: {exc}"
            logger.error("flows_fetch_failed", extra={"error_type": type(exc).__name__})
            return OperationResult.fail(self.error)
        finally:
            self.is_loading = False
            record_latency("flow_manager", "fetch_flows", (time.perf_counter() - start) * 1000)

        self.flows = list(flows)
        logger.info("flows_fetched", extra={"flows_count": len(self.flows)})
        return OperationResult.ok(self.flows)

    # ──────────────────────────────────────────────────────────────
    # Escrita
    # ──────────────────────────────────────────────────────────────

    async def create_flow(
        self,
        flow_name: str,
        brand_id: str,
        flow_config: dict[str, Any] | None = None,
        campaign_name: str | None = None,
    ) -> OperationResult[FlowRecord]:
        """Cria fluxo + campanha atomicamente.

        Args:
            flow_name: Nome obrigatório (espaços nas pontas são removidos)
            brand_id: Marca dona do fluxo
            flow_config: Rascunho inicial; None usa o template inicial padrão
            campaign_name: Nome da campanha criada junto

        Returns:
            OperationResult com o registro completo do fluxo criado.
        """
        name = (flow_name or "").strip()
        if not name:
            return OperationResult.fail("Flow name is required")

        config = flow_config if flow_config is not None else default_flow_config()
        try:
            created = await self._repo.create_flow_with_campaign(name, brand_id, config, campaign_name)
            flow = await self._repo.get_flow(created.flow_id)
        except InfrastructureError as exc:
            logger.error(
                "flow_create_failed",
                extra={"brand_id": brand_id, "error_type": type(exc).__name__},
            )
            return OperationResult.fail(f"Failed to create flow: {exc}")

        if flow is None:
            logger.error("flow_create_missing", extra={"flow_id": created.flow_id})
            return OperationResult.fail("Failed to fetch created flow")

        self.flows = [flow, *self.flows]
        self.selected_flow = flow
        self.preview_mode = "editor"
        logger.info(
            "flow_created",
            extra={"flow_id": created.flow_id, "campaign_id": created.campaign_id, "brand_id": brand_id},
        )
        return OperationResult.ok(flow, message=f'"{name}" is ready for editing')

    async def duplicate_flow(self, flow: FlowRecord) -> OperationResult[FlowRecord]:
        """Copia rascunho e nome para um novo fluxo com campanha própria."""
        if not flow.brand_id:
            logger.warning("flow_duplicate_without_brand", extra={"flow_id": flow.id})
            return OperationResult.fail("Flow must have a brand ID to duplicate")

        result = await self.create_flow(
            f"{flow.name} (Copy)",
            flow.brand_id,
            flow.flow_config or {},
            f"{flow.name} Copy Campaign",
        )
        if result.success and result.data is not None:
            logger.info(
                "flow_duplicated",
                extra={"original_flow_id": flow.id, "new_flow_id": result.data.id},
            )
        return result

    async def delete_flow(self, flow_id: str) -> OperationResult[None]:
        try:
            await self._repo.delete_flow(flow_id)
        except InfrastructureError as exc:
            logger.error("flow_delete_failed", extra={"flow_id": flow_id, "error_type": type(exc).__name__})
            return OperationResult.fail(f"Failed to delete flow: {exc}")

        self.flows = [flow for flow in self.flows if flow.id != flow_id]
        if self.selected_flow is not None and self.selected_flow.id == flow_id:
            self.selected_flow = None
            self.preview_mode = None
        logger.info("flow_deleted", extra={"flow_id": flow_id})
        return OperationResult.ok(message="Flow deleted successfully")

    async def save_flow(self, flow_id: str, name: str, flow_config: dict[str, Any]) -> OperationResult[None]:
        """Salva nome + rascunho.

        Fluxos ligados a uma campanha são auto-publicados: o snapshot vira
        o rascunho salvo e a versão publicada avança em 1.
        """
        try:
            current = await self._repo.get_flow(flow_id)
            if current is None:
                return OperationResult.fail("Failed to save flow: flow not found")

            fields: dict[str, Any] = {"name": name, "flow_config": flow_config}
            if current.campaign_id:
                fields["published_snapshot"] = build_published_snapshot(name, flow_config)
                fields["latest_published_version"] = current.latest_published_version + 1
            await self._repo.update_flow(flow_id, fields)
        except InfrastructureError as exc:
            logger.error("flow_save_failed", extra={"flow_id": flow_id, "error_type": type(exc).__name__})
            return OperationResult.fail(f"Failed to save flow: {exc}")

        self._patch_local(flow_id, fields)
        logger.info(
            "flow_saved",
            extra={"flow_id": flow_id, "auto_published": "published_snapshot" in fields},
        )
        return OperationResult.ok(message="Flow saved successfully")

    async def publish_flow(self, flow_id: str) -> OperationResult[int]:
        """Publica o rascunho atual com checagem otimista de versão.

        Returns:
            OperationResult com a nova versão publicada; falha se outro
            editor publicou no intervalo.
        """
        try:
            current = await self._repo.get_flow(flow_id)
            if current is None:
                return OperationResult.fail("Failed to publish flow: flow not found")
            snapshot = build_published_snapshot(current.name, current.flow_config)
            expected = current.latest_published_version
            published = await self._repo.publish_flow(flow_id, snapshot, expected)
        except InfrastructureError as exc:
            logger.error("flow_publish_failed", extra={"flow_id": flow_id, "error_type": type(exc).__name__})
            return OperationResult.fail(f"Failed to publish flow: {exc}")

        if not published:
            logger.warning("flow_publish_conflict", extra={"flow_id": flow_id, "expected_version": expected})
            return OperationResult.fail("Flow was published by someone else. Reload and try again.")

        new_version = expected + 1
        self._patch_local(flow_id, {"published_snapshot": snapshot, "latest_published_version": new_version})
        logger.info("flow_published", extra={"flow_id": flow_id, "version": new_version})
        return OperationResult.ok(new_version, message="Flow published successfully")

    # ──────────────────────────────────────────────────────────────
    # Estado de UI
    # ──────────────────────────────────────────────────────────────

    def open_flow_editor(self, flow: FlowRecord) -> None:
        self.selected_flow = flow
        self.preview_mode = "editor"

    def open_customer_preview(self, flow: FlowRecord) -> None:
        self.selected_flow = flow
        self.preview_mode = "customer"

    def close(self) -> None:
        self.selected_flow = None
        self.preview_mode = None

    def _patch_local(self, flow_id: str, fields: dict[str, Any]) -> None:
        updated: list[FlowRecord] = []
        for flow in self.flows:
            updated.append(flow.model_copy(update=fields) if flow.id == flow_id else flow)
        self.flows = updated
        if self.selected_flow is not None and self.selected_flow.id == flow_id:
            self.selected_flow = self.selected_flow.model_copy(update=fields)
