"""Testes do FlowContentLoader (publicado, rascunho, legado e falhas)."""

from __future__ import annotations

import pytest

from app.domain.snapshot import LegacyContentRow
from app.infra.backend import MemoryContentStore, MemoryDatabase
from app.services.content_loader import ContentLoadError, FlowContentLoader, reconstruct_from_legacy
from utils.errors import BackendUnavailableError, NotFoundError, PermissionDeniedError

PUBLISHED = {
    "name": "Spring",
    "publishedAt": "2026-03-01T00:00:00Z",
    "pages": [{"id": "p1", "type": "welcome", "sections": [{"id": "s1", "type": "hero"}]}],
}
DRAFT = {"pages": [{"id": "d1", "type": "welcome"}, {"id": "d2", "type": "thank_you"}]}


@pytest.fixture
def db() -> MemoryDatabase:
    return MemoryDatabase()


@pytest.fixture
def loader(db: MemoryDatabase) -> FlowContentLoader:
    return FlowContentLoader(MemoryContentStore(db))


class TestPublishedPath:
    @pytest.mark.asyncio
    async def test_serves_published_snapshot(self, db, loader) -> None:
        flow_id = db.add_flow(
            campaign_id="camp-1", flow_config=DRAFT, published_snapshot=PUBLISHED, latest_published_version=3
        )
        result = await loader.load("camp-1")

        assert result.success is True
        assert result.source_mode == "published"
        assert [page.id for page in result.content.pages] == ["p1"]
        assert result.content.published_at == "2026-03-01T00:00:00Z"
        assert result.metadata["flow_id"] == flow_id
        assert result.metadata["version"] == 3
        assert result.metadata["pages_count"] == 1
        assert result.metadata["pages_normalized"] is False

    @pytest.mark.asyncio
    async def test_draft_only_flow_is_unpublished(self, db, loader) -> None:
        db.add_flow(campaign_id="camp-1", flow_config=DRAFT)
        result = await loader.load("camp-1")
        assert result.success is False
        assert result.error == ContentLoadError.UNPUBLISHED
        assert result.message == "This flow has not been published yet"
        assert result.content is None

    @pytest.mark.asyncio
    async def test_missing_pages_normalized(self, db, loader) -> None:
        db.add_flow(campaign_id="camp-1", published_snapshot={"name": "Broken"})
        result = await loader.load("camp-1")
        assert result.success is True
        assert result.content.pages == []
        assert result.metadata["pages_normalized"] is True

    @pytest.mark.asyncio
    async def test_campaign_mismatch_in_content(self, db, loader) -> None:
        db.add_flow(campaign_id="camp-1", published_snapshot={**PUBLISHED, "campaign_id": "camp-9"})
        result = await loader.load("camp-1")
        assert result.error == ContentLoadError.CAMPAIGN_MISMATCH


class TestFailures:
    @pytest.mark.asyncio
    async def test_empty_campaign_id(self, loader) -> None:
        result = await loader.load("  ")
        assert result.error == ContentLoadError.EMPTY_CAMPAIGN_ID

    @pytest.mark.asyncio
    async def test_unknown_campaign(self, loader) -> None:
        result = await loader.load("camp-x")
        assert result.error == ContentLoadError.NOT_FOUND
        assert result.source_mode == "none"

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (PermissionDeniedError("rls", status_code=403), ContentLoadError.PERMISSION_DENIED),
            (NotFoundError("missing", status_code=404), ContentLoadError.NOT_FOUND),
            (BackendUnavailableError("timeout"), ContentLoadError.BACKEND_ERROR),
        ],
    )
    @pytest.mark.asyncio
    async def test_backend_errors_are_reported_separately(self, db, loader, error, expected) -> None:
        db.inject_failure("get_flow_for_campaign", error)
        result = await loader.load("camp-1")
        assert result.success is False
        assert result.error == expected

    @pytest.mark.asyncio
    async def test_malformed_flow_row_is_backend_error(self, db, loader) -> None:
        """flow_config fora do schema vira backend_error, sem exceção."""
        flow_id = db.add_flow(campaign_id="camp-1")
        db.flows[flow_id]["flow_config"] = []
        result = await loader.load("camp-1", force_draft=True)
        assert result.success is False
        assert result.error == ContentLoadError.BACKEND_ERROR


class TestDraftPreview:
    @pytest.mark.asyncio
    async def test_force_draft_prefers_draft(self, db, loader) -> None:
        db.add_flow(campaign_id="camp-1", flow_config=DRAFT, published_snapshot=PUBLISHED)
        result = await loader.load("camp-1", force_draft=True)
        assert result.source_mode == "draft"
        assert [page.id for page in result.content.pages] == ["d1", "d2"]

    @pytest.mark.asyncio
    async def test_empty_draft_falls_back_to_published(self, db, loader) -> None:
        db.add_flow(campaign_id="camp-1", flow_config={"pages": []}, published_snapshot=PUBLISHED)
        result = await loader.load("camp-1", force_draft=True)
        assert result.source_mode == "published"

    @pytest.mark.asyncio
    async def test_legacy_reconstruction(self, db, loader) -> None:
        flow_id = db.add_flow(campaign_id="camp-1")
        db.add_flow_content(flow_id, title="Second", content=None, order_index=2)
        db.add_flow_content(flow_id, title="First", content={"id": "w", "type": "welcome"}, order_index=1)

        result = await loader.load("camp-1", force_draft=True)
        assert result.source_mode == "legacy"
        pages = result.content.pages
        assert [page.type for page in pages] == ["welcome", ""]
        assert pages[1].name == "Second"

    @pytest.mark.asyncio
    async def test_legacy_row_without_order_index(self, db, loader) -> None:
        flow_id = db.add_flow(campaign_id="camp-1")
        db.add_flow_content(flow_id, title="Only", content={"id": "w", "type": "welcome"}, order_index=None)

        result = await loader.load("camp-1", force_draft=True)
        assert result.success is True
        assert result.source_mode == "legacy"
        assert [page.id for page in result.content.pages] == ["w"]

    @pytest.mark.asyncio
    async def test_malformed_legacy_rows_fall_back_to_draft(self, db, loader) -> None:
        flow_id = db.add_flow(campaign_id="camp-1")
        db.add_flow_content(flow_id, title="Broken", content={"id": "w"})
        db.flow_content[-1]["updated_at"] = "not-a-date"

        result = await loader.load("camp-1", force_draft=True)
        assert result.success is True
        assert result.source_mode == "draft"
        assert result.content.pages == []

    @pytest.mark.asyncio
    async def test_nothing_usable_serves_empty_draft(self, db, loader) -> None:
        db.add_flow(campaign_id="camp-1")
        result = await loader.load("camp-1", force_draft=True)
        assert result.success is True
        assert result.source_mode == "draft"
        assert result.metadata["pages_normalized"] is True

    @pytest.mark.asyncio
    async def test_draft_refused_when_preview_disabled(self, db) -> None:
        db.add_flow(campaign_id="camp-1", flow_config=DRAFT)
        loader = FlowContentLoader(MemoryContentStore(db), allow_draft_preview=False)
        result = await loader.load("camp-1", force_draft=True)
        assert result.error == ContentLoadError.PERMISSION_DENIED


def test_reconstruct_from_legacy_orders_by_index() -> None:
    rows = [
        LegacyContentRow(id="a", flow_id="f", title="A", content={"type": "welcome", "order": 7}),
        LegacyContentRow(id="b", flow_id="f", title="B", content="not-an-object"),
    ]
    pages = reconstruct_from_legacy(rows)["pages"]
    assert pages[0] == {"type": "welcome", "order": 0, "id": "a"}
    assert pages[1] == {"id": "b", "name": "B", "sections": [], "order": 1}
