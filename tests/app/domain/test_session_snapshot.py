"""Testes dos modelos de sessão e snapshot."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.domain.session import FlowSession, StoreMetadata, VerificationResult
from app.domain.snapshot import FlowRecord, FlowTemplateSnapshot, TemplateRecord
from fsm.states import FlowStep


def _session_payload(**overrides):
    payload = {
        "id": "sess-1",
        "status": "active",
        "step": "welcome",
        "campaign": {"id": "cmp-1", "name": "Spring"},
        "brand": {"id": "brand-1", "name": "Acme"},
    }
    payload.update(overrides)
    return payload


class TestFlowSession:
    def test_parses_backend_payload(self) -> None:
        session = FlowSession.model_validate(_session_payload(store_meta={}))
        assert session.step is FlowStep.WELCOME
        assert session.store_meta is None
        assert session.is_active

    def test_unknown_step_becomes_scan(self) -> None:
        session = FlowSession.model_validate(_session_payload(step="checkout"))
        assert session.step is FlowStep.SCAN

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FlowSession.model_validate(_session_payload(id=""))

    def test_log_dict_has_no_user_identity(self) -> None:
        session = FlowSession.model_validate(_session_payload(user_id="user-secret"))
        data = session.to_log_dict()
        assert data["has_user"] is True
        assert "user-secret" not in data.values()

    def test_is_immutable(self) -> None:
        session = FlowSession.model_validate(_session_payload())
        with pytest.raises(ValidationError):
            session.user_id = "u"  # type: ignore[misc]


class TestVerificationResult:
    def test_reasons_keep_order_and_duplicates(self) -> None:
        result = VerificationResult(result="warn", reasons=["b", "a", "b"])
        assert result.reasons == ("b", "a", "b")

    def test_outcome_is_closed(self) -> None:
        with pytest.raises(ValidationError):
            VerificationResult(result="maybe")


class TestStoreMetadata:
    def test_defaults(self) -> None:
        meta = StoreMetadata()
        assert meta.location_type == "other"
        assert meta.store_name == ""


class TestFlowTemplateSnapshot:
    def test_pages_sections_are_typed_and_sorted(self) -> None:
        snapshot = FlowTemplateSnapshot.model_validate(
            {
                "name": "Flow",
                "designConfig": {"cardStyle": "flat"},
                "pages": [
                    {
                        "id": "p1",
                        "type": "welcome",
                        "sections": [{"id": "b", "type": "text", "order": 2}, {"id": "a", "type": "hero", "order": 1}],
                    },
                    "not-a-page",
                ],
            }
        )
        assert len(snapshot.pages) == 1
        assert [s.id for s in snapshot.pages[0].sections] == ["a", "b"]
        assert snapshot.design_config == {"cardStyle": "flat"}

    def test_extra_fields_are_kept(self) -> None:
        snapshot = FlowTemplateSnapshot.model_validate({"pages": [], "autoPublished": True})
        assert snapshot.model_extra == {"autoPublished": True}


class TestRecords:
    def test_flow_record_null_version(self) -> None:
        record = FlowRecord.model_validate({"id": "f1", "latest_published_version": None})
        assert record.latest_published_version == 0
        assert record.has_published_pages is False

    def test_flow_record_has_published_pages(self) -> None:
        record = FlowRecord(id="f1", published_snapshot={"pages": [{"id": "p"}]})
        assert record.has_published_pages is True

    def test_template_record_schema_alias(self) -> None:
        template = TemplateRecord.model_validate({"id": "t1", "schema": {"a": 1}, "kind": "brand"})
        assert template.schema_ == {"a": 1}
        assert template.kind == "brand"
        assert template.status == "draft"
