"""Backend em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.

Reproduz os contratos das RPCs e tabelas (sessões, fluxos, conteúdo legado,
templates e audit_log) sobre dicionários, devolvendo cópias como faria o
servidor. Falhas podem ser injetadas por operação para exercitar os
caminhos de erro do controller.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from app.domain.session import FlowSession, StoreMetadata, VerificationResult
from app.domain.snapshot import FlowRecord, LegacyContentRow, TemplateRecord
from app.infra.backend.rows import parse_row
from app.protocols.content_store import ContentStoreProtocol
from app.protocols.flow_backend import FlowBackendProtocol
from app.protocols.flow_repository import FlowRepositoryProtocol
from app.protocols.models import AuditEvent, CreatedFlow, StartFlowSessionResult
from app.protocols.telemetry import TelemetrySinkProtocol
from app.protocols.template_repository import TemplateRepositoryProtocol
from utils.errors import NotFoundError


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class MemoryDatabase:
    """Estado compartilhado pelas implementações em memória."""

    qr_codes: dict[str, dict[str, Any]] = field(default_factory=dict)
    sessions: dict[str, dict[str, Any]] = field(default_factory=dict)
    flows: dict[str, dict[str, Any]] = field(default_factory=dict)
    flow_content: list[dict[str, Any]] = field(default_factory=list)
    templates: dict[str, dict[str, Any]] = field(default_factory=dict)
    audit_log: list[dict[str, Any]] = field(default_factory=list)
    verification_outcomes: dict[str, dict[str, Any]] = field(default_factory=dict)
    _failures: dict[str, Exception] = field(default_factory=dict)

    # ──────────────────────────────────────────────────────────────
    # Seed helpers (testes/dev)
    # ──────────────────────────────────────────────────────────────

    def add_qr_code(
        self,
        qr_id: str,
        *,
        campaign_id: str,
        campaign_name: str = "",
        brand_id: str,
        brand_name: str = "",
        active: bool = True,
    ) -> None:
        self.qr_codes[qr_id] = {
            "campaign_id": campaign_id,
            "campaign_name": campaign_name,
            "brand_id": brand_id,
            "brand_name": brand_name,
            "active": active,
        }

    def add_flow(
        self,
        *,
        campaign_id: str | None,
        flow_config: dict[str, Any] | None = None,
        published_snapshot: dict[str, Any] | None = None,
        latest_published_version: int = 0,
        name: str = "Flow",
        brand_id: str | None = None,
        flow_id: str | None = None,
    ) -> str:
        flow_id = flow_id or _new_id()
        self.flows[flow_id] = {
            "id": flow_id,
            "name": name,
            "campaign_id": campaign_id,
            "brand_id": brand_id,
            "flow_config": copy.deepcopy(flow_config),
            "published_snapshot": copy.deepcopy(published_snapshot),
            "latest_published_version": latest_published_version,
            "created_at": _now_iso(),
            "updated_at": _now_iso(),
        }
        return flow_id

    def add_flow_content(
        self,
        flow_id: str,
        *,
        title: str = "",
        content: Any = None,
        order_index: int | None = 0,
    ) -> None:
        self.flow_content.append(
            {
                "id": _new_id(),
                "flow_id": flow_id,
                "title": title,
                "content": copy.deepcopy(content),
                "order_index": order_index,
                "updated_at": _now_iso(),
            }
        )

    def set_verification_outcome(
        self,
        session_id: str,
        result: Literal["pass", "warn", "fail"],
        reasons: list[str] | None = None,
        *,
        store_ok: bool = True,
        expiry_ok: bool = True,
    ) -> None:
        self.verification_outcomes[session_id] = {
            "result": result,
            "reasons": list(reasons or []),
            "store_ok": store_ok,
            "expiry_ok": expiry_ok,
        }

    def inject_failure(self, operation: str, error: Exception) -> None:
        """Faz a próxima chamada de `operation` levantar `error` (uma vez)."""
        self._failures[operation] = error

    def check_failure(self, operation: str) -> None:
        error = self._failures.pop(operation, None)
        if error is not None:
            raise error


class MemoryFlowBackend(FlowBackendProtocol):
    """RPCs de sessão sobre MemoryDatabase."""

    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    async def start_flow_session(self, qr_id: str) -> StartFlowSessionResult:
        self._db.check_failure("start_flow_session")
        qr = self._db.qr_codes.get(qr_id)
        if qr is None:
            return StartFlowSessionResult(success=False, message="Invalid QR code")
        if not qr["active"]:
            return StartFlowSessionResult(success=False, message="QR code is no longer active")

        session_id = _new_id()
        self._db.sessions[session_id] = {
            "id": session_id,
            "status": "active",
            "step": "welcome",
            "store_meta": {},
            "user_id": None,
            "marketing_opt_in": False,
            "campaign": {"id": qr["campaign_id"], "name": qr["campaign_name"]},
            "brand": {"id": qr["brand_id"], "name": qr["brand_name"]},
            "verification": None,
            "created_at": _now_iso(),
        }
        return StartFlowSessionResult(
            success=True,
            session_id=session_id,
            campaign_id=qr["campaign_id"],
            campaign_name=qr["campaign_name"],
            brand_id=qr["brand_id"],
            brand_name=qr["brand_name"],
        )

    async def get_flow_session(self, session_id: str) -> FlowSession | None:
        self._db.check_failure("get_flow_session")
        row = self._db.sessions.get(session_id)
        if row is None:
            return None
        return FlowSession.model_validate(copy.deepcopy(row))

    async def update_flow_store(self, session_id: str, store_meta: StoreMetadata) -> bool:
        self._db.check_failure("update_flow_store")
        row = self._db.sessions.get(session_id)
        if row is None or row["status"] != "active":
            return False
        row["store_meta"] = store_meta.model_dump(mode="json", exclude_none=True)
        row["step"] = "store_selector"
        return True

    async def link_user_to_flow(
        self,
        session_id: str,
        user_id: str,
        marketing_opt_in: bool,
        created_via: str,
    ) -> bool:
        self._db.check_failure("link_user_to_flow")
        row = self._db.sessions.get(session_id)
        if row is None or row["status"] != "active":
            return False
        row["user_id"] = user_id
        row["marketing_opt_in"] = marketing_opt_in
        row["created_via"] = created_via
        row["step"] = "user_login"
        return True

    async def run_verification(self, session_id: str) -> VerificationResult | None:
        self._db.check_failure("run_verification")
        row = self._db.sessions.get(session_id)
        if row is None:
            return None

        outcome = self._db.verification_outcomes.get(session_id)
        if outcome is None:
            has_store = bool(row.get("store_meta"))
            outcome = {
                "result": "pass" if has_store else "warn",
                "reasons": [] if has_store else ["store_not_provided"],
                "store_ok": has_store,
                "expiry_ok": True,
            }

        verification = {"id": _new_id(), "created_at": _now_iso(), **copy.deepcopy(outcome)}
        row["verification"] = verification
        row["step"] = "authentication"
        row["status"] = "failed" if outcome["result"] == "fail" else "completed"
        return VerificationResult.model_validate(copy.deepcopy(verification))


class MemoryContentStore(ContentStoreProtocol):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    async def get_flow_for_campaign(self, campaign_id: str) -> FlowRecord | None:
        self._db.check_failure("get_flow_for_campaign")
        for row in self._db.flows.values():
            if row.get("campaign_id") == campaign_id:
                return parse_row(FlowRecord, copy.deepcopy(row), "select:flows")
        return None

    async def list_flow_content(self, flow_id: str) -> list[LegacyContentRow]:
        self._db.check_failure("list_flow_content")
        rows = [row for row in self._db.flow_content if row["flow_id"] == flow_id]
        rows.sort(key=lambda row: row["order_index"] or 0)
        return [parse_row(LegacyContentRow, copy.deepcopy(row), "select:flow_content") for row in rows]


class MemoryTelemetrySink(TelemetrySinkProtocol):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    async def append_event(self, event: AuditEvent) -> None:
        self._db.check_failure("append_event")
        self._db.audit_log.append(event.to_row())


class MemoryFlowRepository(FlowRepositoryProtocol):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    async def list_user_flows(self) -> list[FlowRecord]:
        self._db.check_failure("get_user_flows")
        rows = sorted(self._db.flows.values(), key=lambda row: row["created_at"], reverse=True)
        return [FlowRecord.model_validate(copy.deepcopy(row)) for row in rows]

    async def create_flow_with_campaign(
        self,
        flow_name: str,
        brand_id: str,
        flow_config: dict[str, Any],
        campaign_name: str | None,
    ) -> CreatedFlow:
        self._db.check_failure("create_flow_with_campaign")
        campaign_id = _new_id()
        flow_id = self._db.add_flow(
            campaign_id=campaign_id,
            flow_config=flow_config,
            name=flow_name,
            brand_id=brand_id,
        )
        self._db.flows[flow_id]["campaign_name"] = campaign_name or f"{flow_name} Campaign"
        return CreatedFlow(flow_id=flow_id, campaign_id=campaign_id)

    async def get_flow(self, flow_id: str) -> FlowRecord | None:
        self._db.check_failure("get_flow")
        row = self._db.flows.get(flow_id)
        return FlowRecord.model_validate(copy.deepcopy(row)) if row is not None else None

    async def update_flow(self, flow_id: str, fields: dict[str, Any]) -> None:
        self._db.check_failure("update_flow")
        row = self._db.flows.get(flow_id)
        if row is None:
            raise NotFoundError(f"update:flows: fluxo {flow_id} não encontrado", status_code=404)
        row.update(copy.deepcopy(fields))
        row["updated_at"] = _now_iso()

    async def publish_flow(
        self,
        flow_id: str,
        snapshot: dict[str, Any],
        expected_version: int,
    ) -> bool:
        self._db.check_failure("publish_flow")
        row = self._db.flows.get(flow_id)
        if row is None or (row.get("latest_published_version") or 0) != expected_version:
            return False
        row["published_snapshot"] = copy.deepcopy(snapshot)
        row["latest_published_version"] = expected_version + 1
        row["updated_at"] = _now_iso()
        return True

    async def delete_flow(self, flow_id: str) -> None:
        self._db.check_failure("delete_flow")
        self._db.flows.pop(flow_id, None)
        self._db.flow_content = [row for row in self._db.flow_content if row["flow_id"] != flow_id]

    async def list_flow_content_recent(self, flow_id: str) -> list[LegacyContentRow]:
        rows = [row for row in self._db.flow_content if row["flow_id"] == flow_id]
        rows.sort(key=lambda row: row["updated_at"], reverse=True)
        return [parse_row(LegacyContentRow, copy.deepcopy(row), "select:flow_content") for row in rows]


class MemoryTemplateRepository(TemplateRepositoryProtocol):
    def __init__(self, db: MemoryDatabase) -> None:
        self._db = db

    async def list_templates(self, kind: Literal["system", "brand"]) -> list[TemplateRecord]:
        self._db.check_failure("list_templates")
        rows = [row for row in self._db.templates.values() if row["kind"] == kind]
        rows.sort(key=lambda row: row["created_at"], reverse=True)
        return [TemplateRecord.model_validate(copy.deepcopy(row)) for row in rows]

    async def insert_template(self, fields: dict[str, Any]) -> TemplateRecord:
        self._db.check_failure("insert_template")
        template_id = _new_id()
        row = {
            "version": 1,
            **copy.deepcopy(fields),
            "id": template_id,
            "created_at": _now_iso(),
            "updated_at": _now_iso(),
        }
        self._db.templates[template_id] = row
        return TemplateRecord.model_validate(copy.deepcopy(row))

    async def update_template(self, template_id: str, fields: dict[str, Any]) -> TemplateRecord:
        self._db.check_failure("update_template")
        row = self._db.templates.get(template_id)
        if row is None:
            raise NotFoundError(f"update:templates: template {template_id} não encontrado", status_code=404)
        row.update(copy.deepcopy(fields))
        row["updated_at"] = _now_iso()
        return TemplateRecord.model_validate(copy.deepcopy(row))

    async def delete_template(self, template_id: str) -> None:
        self._db.check_failure("delete_template")
        self._db.templates.pop(template_id, None)

    async def publish_system_template(self, template_id: str) -> Any:
        self._db.check_failure("admin_publish_system_template")
        row = self._db.templates.get(template_id)
        if row is None or row["kind"] != "system":
            raise NotFoundError(f"template de sistema {template_id} não encontrado", status_code=404)
        row["status"] = "published"
        row["version"] = int(row.get("version") or 0) + 1
        return {"id": template_id, "version": row["version"]}

    async def fork_system_template(self, system_template_id: str, brand_id: str) -> Any:
        self._db.check_failure("brand_fork_system_template")
        source = self._db.templates.get(system_template_id)
        if source is None or source["kind"] != "system":
            raise NotFoundError(f"template de sistema {system_template_id} não encontrado", status_code=404)
        fork = await self.insert_template(
            {
                "kind": "brand",
                "status": "draft",
                "name": source["name"],
                "description": source.get("description", ""),
                "brand_id": brand_id,
                "base_template_id": system_template_id,
                "schema": source.get("schema"),
                "content": source.get("content"),
            }
        )
        return fork.id

    async def create_campaign_from_template(
        self,
        brand_id: str,
        template_id: str,
        campaign_name: str,
        template_version: int | None,
    ) -> dict[str, Any]:
        self._db.check_failure("create_campaign_from_template")
        template = self._db.templates.get(template_id)
        if template is None:
            raise NotFoundError(f"template {template_id} não encontrado", status_code=404)
        campaign_id = _new_id()
        flow_id = self._db.add_flow(
            campaign_id=campaign_id,
            flow_config=template.get("content") or {},
            name=campaign_name,
            brand_id=brand_id,
        )
        return {"campaign_id": campaign_id, "flow_id": flow_id}
