"""Implementações do backend gerenciado (Supabase via httpx e memória)."""

from app.infra.backend.http_client import SupabaseRestClient
from app.infra.backend.memory_backend import (
    MemoryContentStore,
    MemoryDatabase,
    MemoryFlowBackend,
    MemoryFlowRepository,
    MemoryTelemetrySink,
    MemoryTemplateRepository,
)
from app.infra.backend.supabase_admin import SupabaseFlowRepository, SupabaseTemplateRepository
from app.infra.backend.supabase_sessions import (
    SupabaseContentStore,
    SupabaseFlowBackend,
    SupabaseTelemetrySink,
)

__all__ = [
    "MemoryContentStore",
    "MemoryDatabase",
    "MemoryFlowBackend",
    "MemoryFlowRepository",
    "MemoryTelemetrySink",
    "MemoryTemplateRepository",
    "SupabaseContentStore",
    "SupabaseFlowBackend",
    "SupabaseFlowRepository",
    "SupabaseRestClient",
    "SupabaseTelemetrySink",
    "SupabaseTemplateRepository",
]
