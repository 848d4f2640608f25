"""Protocolos e contratos do core da aplicação."""

from .auth_provider import AuthProviderProtocol
from .content_store import ContentStoreProtocol
from .flow_backend import FlowBackendProtocol
from .flow_repository import FlowRepositoryProtocol
from .models import AuditEvent, CreatedFlow, StartFlowSessionResult
from .telemetry import TelemetrySinkProtocol
from .template_repository import TemplateRepositoryProtocol

__all__ = [
    "AuditEvent",
    "AuthProviderProtocol",
    "ContentStoreProtocol",
    "CreatedFlow",
    "FlowBackendProtocol",
    "FlowRepositoryProtocol",
    "StartFlowSessionResult",
    "TelemetrySinkProtocol",
    "TemplateRepositoryProtocol",
]
