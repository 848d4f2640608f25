"""Protocolo das RPCs de sessão de fluxo (criação, leitura e mutações).

Falhas de transporte sobem como InfrastructureError (utils.errors); falhas
de negócio voltam como `success=False`/None.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.session import FlowSession, StoreMetadata, VerificationResult
    from app.protocols.models import StartFlowSessionResult


class FlowBackendProtocol(ABC):
    """Contrato assíncrono das chamadas que mutam a sessão no backend."""

    @abstractmethod
    async def start_flow_session(self, qr_id: str) -> StartFlowSessionResult: ...

    @abstractmethod
    async def get_flow_session(self, session_id: str) -> FlowSession | None: ...

    @abstractmethod
    async def update_flow_store(self, session_id: str, store_meta: StoreMetadata) -> bool: ...

    @abstractmethod
    async def link_user_to_flow(
        self,
        session_id: str,
        user_id: str,
        marketing_opt_in: bool,
        created_via: str,
    ) -> bool: ...

    @abstractmethod
    async def run_verification(self, session_id: str) -> VerificationResult | None: ...
