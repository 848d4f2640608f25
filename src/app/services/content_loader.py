"""FlowContentLoader — decide qual snapshot uma campanha serve.

Política:
- Caminho do cliente (force_draft=False): apenas `published_snapshot`.
  Sem snapshot publicado → falha `unpublished`; nunca cai para rascunho.
- Caminho de depuração (force_draft=True, apenas editores): rascunho →
  publicado → reconstrução a partir de `flow_content` legado.
- `pages` sempre existe no conteúdo devolvido; ausência vira `[]` e é
  reportada em `metadata.pages_normalized`.
- `campaign_id` divergente entre pedido e registro/conteúdo falha a carga.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

from pydantic import ValidationError

from app.domain.snapshot import FlowTemplateSnapshot
from app.observability import record_content_load, record_latency
from config.logging import log_fallback
from utils.errors import InfrastructureError, NotFoundError, PermissionDeniedError

if TYPE_CHECKING:
    from app.domain.snapshot import FlowRecord, LegacyContentRow
    from app.protocols.content_store import ContentStoreProtocol

logger = logging.getLogger(__name__)

ContentSourceMode = Literal["published", "draft", "legacy", "none"]


class ContentLoadError(StrEnum):
    """Motivos de falha de carga, reportados separadamente."""

    NOT_FOUND = "not_found"
    UNPUBLISHED = "unpublished"
    PERMISSION_DENIED = "permission_denied"
    CAMPAIGN_MISMATCH = "campaign_mismatch"
    BACKEND_ERROR = "backend_error"
    EMPTY_CAMPAIGN_ID = "empty_campaign_id"


_MESSAGES: dict[ContentLoadError, str] = {
    ContentLoadError.NOT_FOUND: "Flow not found for this campaign",
    ContentLoadError.UNPUBLISHED: "This flow has not been published yet",
    ContentLoadError.PERMISSION_DENIED: "You do not have access to this flow",
    ContentLoadError.CAMPAIGN_MISMATCH: "Flow content does not belong to this campaign",
    ContentLoadError.BACKEND_ERROR: "Failed to load flow",
    ContentLoadError.EMPTY_CAMPAIGN_ID: "Missing campaign ID",
}


@dataclass(frozen=True, slots=True)
class FlowLoadResult:
    """Resultado discriminado de `FlowContentLoader.load`.

    Attributes:
        success: True se há conteúdo para servir
        content: Snapshot tipado (None em falha)
        source_mode: published|draft|legacy (none em falha)
        metadata: flow_id, version, pages_count, pages_normalized...
        error: Motivo da falha (None em sucesso)
        message: Texto legível para a tela de erro
    """

    success: bool
    content: FlowTemplateSnapshot | None = None
    source_mode: ContentSourceMode = "none"
    metadata: dict[str, Any] = field(default_factory=dict)
    error: ContentLoadError | None = None
    message: str = ""

    @classmethod
    def failure(
        cls,
        error: ContentLoadError,
        metadata: dict[str, Any] | None = None,
    ) -> FlowLoadResult:
        return cls(
            success=False,
            error=error,
            message=_MESSAGES[error],
            metadata=metadata or {},
        )


def _has_pages(payload: Any) -> bool:
    return isinstance(payload, dict) and isinstance(payload.get("pages"), list) and bool(payload["pages"])


def _is_empty(payload: Any) -> bool:
    """Rascunho/snapshot vazio: ausente, não-objeto ou sem páginas."""
    return not _has_pages(payload)


def reconstruct_from_legacy(rows: list[LegacyContentRow]) -> dict[str, Any]:
    """Monta uma lista de páginas a partir de linhas ordenadas de `flow_content`.

    Linhas com `content` objeto viram a própria página (com `order = índice`);
    as demais viram páginas vazias nomeadas pelo título da linha.
    """
    pages: list[dict[str, Any]] = []
    for index, row in enumerate(rows):
        if isinstance(row.content, dict):
            page = {**row.content, "order": index}
            page.setdefault("id", row.id)
        else:
            page = {"id": row.id, "name": row.title, "sections": [], "order": index}
        pages.append(page)
    return {"pages": pages}


class FlowContentLoader:
    """Resolve o conteúdo (publicado ou rascunho) de uma campanha."""

    def __init__(self, store: ContentStoreProtocol, *, allow_draft_preview: bool = True) -> None:
        self._store = store
        self._allow_draft_preview = allow_draft_preview

    async def load(self, campaign_id: str, *, force_draft: bool = False) -> FlowLoadResult:
        """Carrega o conteúdo de `campaign_id`.

        Args:
            campaign_id: Campanha solicitada
            force_draft: Modo depuração de editores (prefere rascunho)

        Returns:
            FlowLoadResult; nunca levanta exceção.
        """
        start = time.perf_counter()
        result = await self._load(campaign_id.strip() if campaign_id else "", force_draft)
        record_latency("content_loader", "load", (time.perf_counter() - start) * 1000)
        record_content_load(
            result.source_mode,
            result.success,
            result.error.value if result.error else None,
        )
        return result

    async def _load(self, campaign_id: str, force_draft: bool) -> FlowLoadResult:
        if not campaign_id:
            return FlowLoadResult.failure(ContentLoadError.EMPTY_CAMPAIGN_ID)

        if force_draft and not self._allow_draft_preview:
            logger.warning("content_draft_preview_refused", extra={"campaign_id": campaign_id})
            return FlowLoadResult.failure(ContentLoadError.PERMISSION_DENIED)

        try:
            record = await self._store.get_flow_for_campaign(campaign_id)
        except PermissionDeniedError:
            logger.warning("content_load_denied", extra={"campaign_id": campaign_id})
            return FlowLoadResult.failure(ContentLoadError.PERMISSION_DENIED)
        except NotFoundError:
            record = None
        except InfrastructureError as exc:
            logger.warning(
                "content_load_backend_error",
                extra={"campaign_id": campaign_id, "error_type": type(exc).__name__},
            )
            return FlowLoadResult.failure(ContentLoadError.BACKEND_ERROR)

        if record is None:
            logger.info("content_flow_not_found", extra={"campaign_id": campaign_id})
            return FlowLoadResult.failure(ContentLoadError.NOT_FOUND)

        base_metadata = {
            "flow_id": record.id,
            "flow_name": record.name,
            "campaign_id": campaign_id,
            "version": record.latest_published_version,
        }

        if record.campaign_id != campaign_id:
            return self._mismatch(campaign_id, record.campaign_id, base_metadata)

        if force_draft:
            return await self._load_draft(record, base_metadata)
        return self._load_published(record, base_metadata)

    def _load_published(self, record: FlowRecord, metadata: dict[str, Any]) -> FlowLoadResult:
        if not record.published_snapshot:
            logger.info(
                "content_unpublished",
                extra={"campaign_id": metadata["campaign_id"], "flow_id": record.id},
            )
            return FlowLoadResult.failure(ContentLoadError.UNPUBLISHED, metadata)
        return self._build(record.published_snapshot, "published", metadata)

    async def _load_draft(self, record: FlowRecord, metadata: dict[str, Any]) -> FlowLoadResult:
        if not _is_empty(record.flow_config):
            return self._build(record.flow_config, "draft", metadata)

        if not _is_empty(record.published_snapshot):
            log_fallback(logger, "content_loader", reason="draft_empty_using_published", flow_id=record.id)
            return self._build(record.published_snapshot, "published", metadata)

        try:
            rows = await self._store.list_flow_content(record.id)
        except InfrastructureError as exc:
            logger.warning(
                "content_legacy_load_failed",
                extra={"flow_id": record.id, "error_type": type(exc).__name__},
            )
            rows = []

        if rows:
            log_fallback(logger, "content_loader", reason="legacy_reconstruction", flow_id=record.id)
            return self._build(reconstruct_from_legacy(rows), "legacy", metadata)

        # Nada utilizável: serve o rascunho (ou vazio) normalizado
        return self._build(record.flow_config or {}, "draft", metadata)

    def _build(
        self,
        payload: dict[str, Any],
        mode: ContentSourceMode,
        metadata: dict[str, Any],
    ) -> FlowLoadResult:
        campaign_id = metadata["campaign_id"]
        content_campaign = payload.get("campaign_id")
        if content_campaign is not None and str(content_campaign) != campaign_id:
            return self._mismatch(campaign_id, str(content_campaign), metadata)

        normalized = dict(payload)
        pages_normalized = not isinstance(normalized.get("pages"), list)
        if pages_normalized:
            log_fallback(logger, "content_loader", reason="pages_missing", flow_id=metadata["flow_id"])
            normalized["pages"] = []

        try:
            content = FlowTemplateSnapshot.model_validate(normalized)
        except ValidationError:
            log_fallback(logger, "content_loader", reason="snapshot_invalid", flow_id=metadata["flow_id"])
            content = FlowTemplateSnapshot(pages=[])
            pages_normalized = True

        logger.info(
            "content_loaded",
            extra={
                "campaign_id": campaign_id,
                "flow_id": metadata["flow_id"],
                "source_mode": mode,
                "pages_count": len(content.pages),
            },
        )
        return FlowLoadResult(
            success=True,
            content=content,
            source_mode=mode,
            metadata={
                **metadata,
                "source_mode": mode,
                "pages_count": len(content.pages),
                "pages_normalized": pages_normalized,
            },
        )

    @staticmethod
    def _mismatch(
        requested: str,
        recorded: str | None,
        metadata: dict[str, Any],
    ) -> FlowLoadResult:
        logger.error(
            "content_campaign_mismatch",
            extra={"requested_campaign_id": requested, "recorded_campaign_id": recorded},
        )
        return FlowLoadResult.failure(ContentLoadError.CAMPAIGN_MISMATCH, metadata)
