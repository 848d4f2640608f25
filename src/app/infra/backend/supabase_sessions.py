"""Implementações Supabase das RPCs de sessão, conteúdo e telemetria."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from app.domain.session import FlowSession, StoreMetadata, VerificationResult
from app.domain.snapshot import FlowRecord, LegacyContentRow
from app.infra.backend.http_client import SupabaseRestClient
from app.infra.backend.rows import parse_row
from app.protocols.content_store import ContentStoreProtocol
from app.protocols.flow_backend import FlowBackendProtocol
from app.protocols.models import AuditEvent, StartFlowSessionResult
from app.protocols.telemetry import TelemetrySinkProtocol
from utils.errors import BackendRequestError


def _as_object(data: Any, operation: str) -> dict[str, Any]:
    """RPCs podem devolver objeto ou array de uma linha; normaliza para objeto."""
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        raise BackendRequestError(f"{operation}: resposta inesperada")
    return data


class SupabaseFlowBackend(FlowBackendProtocol):
    """RPCs `start_flow_session`, `get_flow_session`, `update_flow_store`,
    `link_user_to_flow` e `run_verification`."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    async def start_flow_session(self, qr_id: str) -> StartFlowSessionResult:
        data = await self._client.rpc("start_flow_session", {"p_qr_id": qr_id})
        try:
            return StartFlowSessionResult.model_validate(_as_object(data, "start_flow_session"))
        except ValidationError as exc:
            raise BackendRequestError("start_flow_session: payload inválido") from exc

    async def get_flow_session(self, session_id: str) -> FlowSession | None:
        data = _as_object(
            await self._client.rpc("get_flow_session", {"p_session_id": session_id}),
            "get_flow_session",
        )
        if not data.get("success"):
            return None
        payload = dict(data.get("data") or {})
        payload.setdefault("id", session_id)
        try:
            return FlowSession.model_validate(payload)
        except ValidationError as exc:
            raise BackendRequestError("get_flow_session: payload inválido") from exc

    async def update_flow_store(self, session_id: str, store_meta: StoreMetadata) -> bool:
        data = await self._client.rpc(
            "update_flow_store",
            {
                "p_session_id": session_id,
                "p_store_meta": store_meta.model_dump(mode="json", exclude_none=True),
            },
        )
        return bool(_as_object(data, "update_flow_store").get("success"))

    async def link_user_to_flow(
        self,
        session_id: str,
        user_id: str,
        marketing_opt_in: bool,
        created_via: str,
    ) -> bool:
        data = await self._client.rpc(
            "link_user_to_flow",
            {
                "p_session_id": session_id,
                "p_user_id": user_id,
                "p_marketing_opt_in": marketing_opt_in,
                "p_created_via": created_via,
            },
        )
        return bool(_as_object(data, "link_user_to_flow").get("success"))

    async def run_verification(self, session_id: str) -> VerificationResult | None:
        data = _as_object(
            await self._client.rpc("run_verification", {"p_session_id": session_id}),
            "run_verification",
        )
        if not data.get("success"):
            return None
        try:
            return VerificationResult.model_validate(data)
        except ValidationError as exc:
            raise BackendRequestError("run_verification: payload inválido") from exc


class SupabaseContentStore(ContentStoreProtocol):
    """Leitura das tabelas `flows` e `flow_content`."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    async def get_flow_for_campaign(self, campaign_id: str) -> FlowRecord | None:
        row = await self._client.select_one(
            "flows",
            columns="id,name,campaign_id,brand_id,flow_config,published_snapshot,latest_published_version",
            filters={"campaign_id": campaign_id},
        )
        return parse_row(FlowRecord, row, "select:flows") if row is not None else None

    async def list_flow_content(self, flow_id: str) -> list[LegacyContentRow]:
        rows = await self._client.select(
            "flow_content",
            filters={"flow_id": flow_id},
            order="order_index.asc",
        )
        return [parse_row(LegacyContentRow, row, "select:flow_content") for row in rows]


class SupabaseTelemetrySink(TelemetrySinkProtocol):
    """Insere eventos em `audit_log`."""

    def __init__(self, client: SupabaseRestClient) -> None:
        self._client = client

    async def append_event(self, event: AuditEvent) -> None:
        await self._client.insert("audit_log", event.to_row())
