"""Testes para config.logging.

Cobre: configure_logging, log_fallback, FlowContextFilter,
create_json_formatter.
"""

from __future__ import annotations

import json
import logging

import pytest

from app.observability import reset_flow_session_id, set_flow_session_id
from app.observability.correlation import get_flow_session_id
from config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    FlowContextFilter,
    configure_logging,
    create_json_formatter,
    log_fallback,
)
from config.logging.config import DEFAULT_SERVICE_NAME


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _make_record(msg: str = "flow_started", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("app.flow", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_default_level_and_single_handler(self) -> None:
        """Nível padrão INFO e handlers existentes substituídos."""
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_level_is_case_insensitive(self) -> None:
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_invalid_level_raises(self) -> None:
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="VERBOSE")

    def test_handler_has_context_filter(self) -> None:
        configure_logging(correlation_id_getter=lambda: "corr-1")
        handler = logging.getLogger().handlers[0]
        assert any(isinstance(f, FlowContextFilter) for f in handler.filters)

    def test_default_service_name(self) -> None:
        assert DEFAULT_SERVICE_NAME == "certiflow"


class TestFlowContextFilter:
    def test_injects_service_and_ids(self) -> None:
        flt = FlowContextFilter("certiflow", lambda: "corr-1", lambda: "sess-1")
        record = _make_record()
        assert flt.filter(record) is True
        assert record.service == "certiflow"
        assert record.correlation_id == "corr-1"
        assert record.flow_session_id == "sess-1"

    def test_explicit_extra_wins(self) -> None:
        flt = FlowContextFilter("certiflow", lambda: "corr-ctx", lambda: "sess-ctx")
        record = _make_record(correlation_id="corr-explicit", flow_session_id="sess-explicit")
        flt.filter(record)
        assert record.correlation_id == "corr-explicit"
        assert record.flow_session_id == "sess-explicit"

    def test_without_getters_uses_empty_strings(self) -> None:
        flt = FlowContextFilter("svc")
        record = _make_record()
        flt.filter(record)
        assert record.correlation_id == ""
        assert record.flow_session_id == ""

    def test_reads_flow_session_context_var(self) -> None:
        token = set_flow_session_id("sess-ctx-var")
        try:
            flt = FlowContextFilter("svc", session_id_getter=get_flow_session_id)
            record = _make_record()
            flt.filter(record)
            assert record.flow_session_id == "sess-ctx-var"
        finally:
            reset_flow_session_id(token)


class TestJsonFormatter:
    def test_output_is_json_with_renamed_fields(self) -> None:
        formatter = create_json_formatter()
        record = _make_record(service="certiflow", correlation_id="c", flow_session_id="s", campaign_id="cmp-1")
        payload = json.loads(formatter.format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "app.flow"
        assert payload["message"] == "flow_started"
        assert payload["campaign_id"] == "cmp-1"
        assert "levelname" not in payload

    def test_required_fields_and_rename_map(self) -> None:
        assert "flow_session_id" in REQUIRED_LOG_FIELDS
        assert FIELD_RENAME_MAP == {"levelname": "level", "name": "logger"}


class TestLogFallback:
    def test_records_component_reason_and_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)
        logger = logging.getLogger("tests.fallback")
        log_fallback(logger, "section_renderer", reason="unknown_section_type", section_id="s1")

        record = next(r for r in caplog.records if r.getMessage() == "fallback_applied")
        assert record.fallback_used is True
        assert record.component == "section_renderer"
        assert record.reason == "unknown_section_type"
        assert record.section_id == "s1"

    def test_reason_is_optional(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)
        log_fallback(logging.getLogger("tests.fallback"), "content_loader")
        record = next(r for r in caplog.records if r.getMessage() == "fallback_applied")
        assert not hasattr(record, "reason")
