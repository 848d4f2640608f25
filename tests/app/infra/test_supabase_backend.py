"""Testes do cliente PostgREST e dos adapters Supabase (httpx.MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest

from app.domain.session import StoreMetadata
from app.infra.backend import (
    SupabaseContentStore,
    SupabaseFlowBackend,
    SupabaseFlowRepository,
    SupabaseRestClient,
    SupabaseTelemetrySink,
)
from app.protocols.models import AuditEvent
from utils.errors import (
    BackendRequestError,
    BackendUnavailableError,
    NotFoundError,
    PermissionDeniedError,
)

REST_URL = "https://demo.supabase.co/rest/v1/"


class Recorder:
    """Handler do MockTransport que guarda as requisições recebidas."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)


def _client(handler, access_token: str | None = None) -> SupabaseRestClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseRestClient(http, REST_URL, "anon-key", access_token)


class TestRestClient:
    @pytest.mark.asyncio
    async def test_rpc_posts_params_with_auth_headers(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"ok": True}))
        client = _client(recorder, access_token="user-jwt")

        assert await client.rpc("ping", {"a": 1}) == {"ok": True}

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://demo.supabase.co/rest/v1/rpc/ping"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer user-jwt"
        assert recorder.last_json == {"a": 1}

    @pytest.mark.asyncio
    async def test_anon_key_used_without_token(self) -> None:
        recorder = Recorder(httpx.Response(204))
        client = _client(recorder)
        assert await client.rpc("noop") is None
        assert recorder.requests[0].headers["Authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_select_builds_postgrest_filters(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[{"id": "1"}]))
        client = _client(recorder)

        rows = await client.select("flows", filters={"campaign_id": "c1"}, order="created_at.desc", limit=5)

        assert rows == [{"id": "1"}]
        params = recorder.requests[0].url.params
        assert params["campaign_id"] == "eq.c1"
        assert params["order"] == "created_at.desc"
        assert params["limit"] == "5"
        assert params["select"] == "*"

    @pytest.mark.asyncio
    async def test_select_one_rejects_multiple_rows(self) -> None:
        client = _client(Recorder(httpx.Response(200, json=[{"id": "1"}, {"id": "2"}])))
        with pytest.raises(BackendRequestError):
            await client.select_one("flows", filters={"id": "1"})

    @pytest.mark.parametrize(
        ("status", "body", "expected"),
        [
            (500, {"message": "boom"}, BackendUnavailableError),
            (401, {"message": "jwt expired"}, PermissionDeniedError),
            (400, {"code": "42501", "message": "rls"}, PermissionDeniedError),
            (406, {"code": "PGRST116", "message": "no rows"}, NotFoundError),
            (404, {}, NotFoundError),
            (400, {"code": "22P02", "message": "bad uuid"}, BackendRequestError),
        ],
    )
    @pytest.mark.asyncio
    async def test_error_status_mapping(self, status, body, expected) -> None:
        client = _client(Recorder(httpx.Response(status, json=body)))
        with pytest.raises(expected):
            await client.rpc("fn")

    @pytest.mark.asyncio
    async def test_transport_errors_become_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(BackendUnavailableError):
            await _client(handler).rpc("fn")

    @pytest.mark.asyncio
    async def test_timeout_becomes_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(BackendUnavailableError, match="timeout"):
            await _client(handler).rpc("fn")

    @pytest.mark.asyncio
    async def test_non_json_body_rejected(self) -> None:
        client = _client(Recorder(httpx.Response(200, text="<html>")))
        with pytest.raises(BackendRequestError):
            await client.rpc("fn")


class TestFlowBackend:
    @pytest.mark.asyncio
    async def test_start_flow_session_accepts_array_payload(self) -> None:
        recorder = Recorder(
            httpx.Response(200, json=[{"success": True, "session_id": "s1", "campaign_id": "c1", "brand_id": "b1"}])
        )
        backend = SupabaseFlowBackend(_client(recorder))

        result = await backend.start_flow_session("qr-1")

        assert result.success is True
        assert result.session_id == "s1"
        assert recorder.last_json == {"p_qr_id": "qr-1"}

    @pytest.mark.asyncio
    async def test_get_flow_session_unwraps_data(self) -> None:
        payload = {
            "success": True,
            "data": {
                "status": "active",
                "step": "unknown_step",
                "store_meta": {},
                "campaign": {"id": "c1", "name": "Spring"},
                "brand": {"id": "b1"},
            },
        }
        backend = SupabaseFlowBackend(_client(Recorder(httpx.Response(200, json=payload))))

        session = await backend.get_flow_session("s1")

        assert session.id == "s1"
        assert session.step == "scan"
        assert session.store_meta is None

    @pytest.mark.asyncio
    async def test_get_flow_session_missing(self) -> None:
        backend = SupabaseFlowBackend(_client(Recorder(httpx.Response(200, json={"success": False}))))
        assert await backend.get_flow_session("s1") is None

    @pytest.mark.asyncio
    async def test_update_store_sends_metadata(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"success": True}))
        backend = SupabaseFlowBackend(_client(recorder))

        ok = await backend.update_flow_store("s1", StoreMetadata(location_type="retailer", store_name="Target"))

        assert ok is True
        assert recorder.last_json == {
            "p_session_id": "s1",
            "p_store_meta": {"location_type": "retailer", "store_name": "Target"},
        }

    @pytest.mark.asyncio
    async def test_run_verification_keeps_reasons(self) -> None:
        payload = {"success": True, "result": "warn", "reasons": ["b", "a", "b"], "store_ok": True}
        backend = SupabaseFlowBackend(_client(Recorder(httpx.Response(200, json=payload))))
        result = await backend.run_verification("s1")
        assert result.reasons == ("b", "a", "b")

    @pytest.mark.asyncio
    async def test_malformed_verification_payload(self) -> None:
        payload = {"success": True, "result": "maybe"}
        backend = SupabaseFlowBackend(_client(Recorder(httpx.Response(200, json=payload))))
        with pytest.raises(BackendRequestError):
            await backend.run_verification("s1")


class TestTablesAdapters:
    @pytest.mark.asyncio
    async def test_content_store_reads_flow_by_campaign(self) -> None:
        row = {"id": "f1", "campaign_id": "c1", "latest_published_version": None}
        recorder = Recorder(httpx.Response(200, json=[row]))
        store = SupabaseContentStore(_client(recorder))

        record = await store.get_flow_for_campaign("c1")

        assert record.id == "f1"
        assert record.latest_published_version == 0
        assert recorder.requests[0].url.params["campaign_id"] == "eq.c1"

    @pytest.mark.asyncio
    async def test_malformed_flow_row_raises_request_error(self) -> None:
        row = {"id": "f1", "campaign_id": "c1", "flow_config": []}
        store = SupabaseContentStore(_client(Recorder(httpx.Response(200, json=[row]))))
        with pytest.raises(BackendRequestError, match="select:flows"):
            await store.get_flow_for_campaign("c1")

    @pytest.mark.asyncio
    async def test_legacy_rows_tolerate_null_order(self) -> None:
        rows = [{"id": "r1", "title": None, "content": {"id": "w"}, "order_index": None}]
        store = SupabaseContentStore(_client(Recorder(httpx.Response(200, json=rows))))

        result = await store.list_flow_content("f1")

        assert result[0].order_index == 0
        assert result[0].title == ""

    @pytest.mark.asyncio
    async def test_malformed_legacy_row_raises_request_error(self) -> None:
        rows = [{"id": "r1", "updated_at": "not-a-date"}]
        store = SupabaseContentStore(_client(Recorder(httpx.Response(200, json=rows))))
        with pytest.raises(BackendRequestError, match="select:flow_content"):
            await store.list_flow_content("f1")

    @pytest.mark.asyncio
    async def test_telemetry_inserts_audit_row(self) -> None:
        recorder = Recorder(httpx.Response(201, json=[{"id": 1}]))
        sink = SupabaseTelemetrySink(_client(recorder))

        await sink.append_event(AuditEvent(action="flow_welcome_viewed", object_id="s1", meta={"x": 1}))

        request = recorder.requests[0]
        assert request.url.path.endswith("/audit_log")
        assert request.headers["Prefer"] == "return=representation"
        assert recorder.last_json["action"] == "flow_welcome_viewed"
        assert recorder.last_json["object_type"] == "flow_session"

    @pytest.mark.asyncio
    async def test_publish_flow_first_version_matches_null(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[{"id": "f1"}]))
        repo = SupabaseFlowRepository(_client(recorder))

        assert await repo.publish_flow("f1", {"pages": []}, 0) is True

        params = recorder.requests[0].url.params
        assert params["id"] == "eq.f1"
        assert params["or"] == "(latest_published_version.is.null,latest_published_version.eq.0)"
        assert recorder.last_json["latest_published_version"] == 1

    @pytest.mark.asyncio
    async def test_publish_flow_conflict_returns_false(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[]))
        repo = SupabaseFlowRepository(_client(recorder))

        assert await repo.publish_flow("f1", {"pages": []}, 3) is False
        assert recorder.requests[0].url.params["latest_published_version"] == "eq.3"
