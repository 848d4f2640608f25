"""CertificationFlowController — máquina de estados da sessão do cliente.

Dono exclusivo da etapa atual, da identidade da sessão e das entradas do
usuário. Toda mutação de sessão passa pelo FlowBackendProtocol; erros do
backend são convertidos em False/None + log e nunca sobem para a UI.

Concorrência: execução cooperativa em um único event loop. Cada chamada
de rede incrementa um contador em voo; `is_loading` é verdadeiro enquanto
houver chamada pendente e o contador é sempre decrementado em `finally`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.domain.session import BrandRef, CampaignRef, FlowSession, FlowSessionStatus, StoreMetadata
from app.flow.results import StartFlowResult
from app.observability import record_latency, record_verification_outcome, set_flow_session_id
from app.protocols.models import AuditEvent
from app.rendering.context import RenderContext
from fsm.manager import FlowStepMachine, create_step_machine
from fsm.states import FlowStep

if TYPE_CHECKING:
    from app.auth.login import AuthSuccess
    from app.domain.session import AuthProviderName, AuthUser, VerificationResult
    from app.domain.style_tokens import StyleTokens
    from app.protocols.auth_provider import AuthProviderProtocol
    from app.protocols.flow_backend import FlowBackendProtocol
    from app.protocols.telemetry import TelemetrySinkProtocol
    from app.rendering.context import PurchaseChannel

logger = logging.getLogger(__name__)

MISSING_IDENTIFIER_MESSAGE = "Either QR ID or test session ID is required"
TEST_SESSION_NOT_FOUND_MESSAGE = "Test session not found"
INVALID_QR_MESSAGE = "Invalid QR code"
START_FAILED_MESSAGE = "Failed to start verification flow"


class CertificationFlowController:
    """Orquestra uma travessia de fluxo de certificação.

    Attributes:
        session: Cópia local da sessão (substituída após chamadas bem-sucedidas)
        session_id: Identificador da sessão ativa
        store_metadata: Último local de compra persistido com sucesso
        marketing_opt_in: Consentimento enviado em `link_user`
        user: Identidade resolvida externamente (provedor de auth)
        error: Motivo legível da etapa `invalid`
    """

    def __init__(
        self,
        backend: FlowBackendProtocol,
        telemetry: TelemetrySinkProtocol | None = None,
        *,
        single_flight_verification: bool = False,
        machine: FlowStepMachine | None = None,
    ) -> None:
        self._backend = backend
        self._telemetry = telemetry
        self._single_flight = single_flight_verification
        self._machine = machine or create_step_machine()

        self.session: FlowSession | None = None
        self.session_id: str | None = None
        self.store_metadata: StoreMetadata | None = None
        self.marketing_opt_in = False
        self.user: AuthUser | None = None
        self.error: str | None = None

        # Estado controlado do seletor de loja
        self.purchase_channel: PurchaseChannel = ""
        self.selected_store = ""

        self._in_flight = 0
        self._pending_events: set[asyncio.Task[None]] = set()
        self._verification_task: asyncio.Task[VerificationResult | None] | None = None
        self._viewed_steps: set[FlowStep] = set()

    # ──────────────────────────────────────────────────────────
    # Estado
    # ──────────────────────────────────────────────────────────

    @property
    def current_step(self) -> FlowStep:
        return self._machine.current_step

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def machine(self) -> FlowStepMachine:
        return self._machine

    @contextmanager
    def _loading(self, operation: str) -> Iterator[None]:
        self._in_flight += 1
        start = time.perf_counter()
        try:
            yield
        finally:
            self._in_flight -= 1
            record_latency("flow_controller", operation, (time.perf_counter() - start) * 1000)

    def set_marketing_opt_in(self, value: bool) -> None:
        self.marketing_opt_in = bool(value)

    def set_user(self, user: AuthUser | None) -> None:
        self.user = user

    # ──────────────────────────────────────────────────────────
    # Navegação
    # ──────────────────────────────────────────────────────────

    def go_to_next_step(self) -> FlowStep:
        """Avança uma etapa; nunca passa de `final_page` nem sai de `invalid`."""
        self._machine.advance()
        return self.current_step

    def go_to_prev_step(self) -> FlowStep:
        """Recua uma etapa; nunca antes de `scan` nem sai de `invalid`."""
        self._machine.retreat()
        return self.current_step

    def go_to_step(self, step: FlowStep) -> FlowStep:
        """Salto direto (recuperação, deep-link, ferramentas de operador)."""
        self._machine.jump(step)
        return self.current_step

    def _fail_resolution(self, reason: str, trigger: str) -> StartFlowResult:
        self.error = reason
        self._machine.jump(FlowStep.INVALID, trigger=trigger)
        logger.warning("flow_resolution_failed", extra={"reason": reason, "trigger": trigger})
        return StartFlowResult(success=False, step=self.current_step, error=reason)

    # ──────────────────────────────────────────────────────────
    # Operações
    # ──────────────────────────────────────────────────────────

    async def start_flow(
        self,
        qr_id: str | None = None,
        test_session_id: str | None = None,
    ) -> StartFlowResult:
        """Resolve um QR (nova sessão) ou reidrata uma sessão de teste.

        Exatamente um identificador deve ser informado. Falhas de resolução
        levam à etapa `invalid` com motivo retido; nunca levanta exceção.
        """
        self.error = None
        if bool(qr_id) == bool(test_session_id):
            return self._fail_resolution(MISSING_IDENTIFIER_MESSAGE, "missing_identifier")

        with self._loading("start_flow"):
            try:
                if test_session_id:
                    return await self._resume_test_session(test_session_id)
                return await self._start_from_qr(qr_id or "")
            except Exception as exc:
                logger.error(
                    "flow_start_failed",
                    extra={"error_type": type(exc).__name__, "error": str(exc)},
                )
                return self._fail_resolution(START_FAILED_MESSAGE, "start_failed")

    async def _resume_test_session(self, test_session_id: str) -> StartFlowResult:
        session = await self._backend.get_flow_session(test_session_id)
        if session is None:
            return self._fail_resolution(TEST_SESSION_NOT_FOUND_MESSAGE, "test_session_not_found")

        self._adopt_session(session)
        self._machine.jump(FlowStep.WELCOME, trigger="test_session_resumed")
        logger.info("flow_test_session_resumed", extra=session.to_log_dict())
        return StartFlowResult(success=True, step=self.current_step, session_id=session.id)

    async def _start_from_qr(self, qr_id: str) -> StartFlowResult:
        result = await self._backend.start_flow_session(qr_id)
        if not result.success or not result.session_id:
            return self._fail_resolution(result.message or INVALID_QR_MESSAGE, "qr_invalid")

        session = FlowSession(
            id=result.session_id,
            status=FlowSessionStatus.ACTIVE,
            campaign=CampaignRef(id=result.campaign_id or "", name=result.campaign_name or ""),
            brand=BrandRef(id=result.brand_id or "", name=result.brand_name or ""),
        )
        self._adopt_session(session)
        self._machine.jump(FlowStep.WELCOME, trigger="qr_resolved")
        logger.info("flow_started", extra=session.to_log_dict())

        self.track_event(
            "welcome_viewed",
            {
                "session_id": result.session_id,
                "campaign_id": result.campaign_id,
                "brand_id": result.brand_id,
            },
        )
        return StartFlowResult(success=True, step=self.current_step, session_id=session.id)

    def _adopt_session(self, session: FlowSession) -> None:
        self.session = session
        self.session_id = session.id
        self._machine.session_id = session.id
        self._viewed_steps.clear()
        set_flow_session_id(session.id)

    async def update_store(self, metadata: StoreMetadata | dict[str, Any]) -> bool:
        """Persiste o local de compra; emite `store_selected` em sucesso."""
        if not self.session_id:
            logger.info("store_update_skipped", extra={"reason": "no_session"})
            return False

        session_id = self.session_id
        try:
            store_meta = metadata if isinstance(metadata, StoreMetadata) else StoreMetadata.model_validate(metadata)
        except ValidationError as exc:
            logger.warning(
                "store_update_invalid",
                extra={"session_id": session_id, "error_count": exc.error_count()},
            )
            return False

        with self._loading("update_flow_store"):
            try:
                success = await self._backend.update_flow_store(session_id, store_meta)
            except Exception as exc:
                logger.error(
                    "store_update_failed",
                    extra={"session_id": session_id, "error_type": type(exc).__name__},
                )
                return False

        if not success:
            logger.info("store_update_rejected", extra={"session_id": session_id})
            return False

        self.store_metadata = store_meta
        self.track_event(
            "store_selected",
            {
                "session_id": session_id,
                "location_type": store_meta.location_type,
                "store_name": store_meta.store_name,
            },
        )
        return True

    def set_purchase_channel(self, channel: PurchaseChannel) -> None:
        """Troca de canal sempre limpa a loja escolhida."""
        self.purchase_channel = channel
        self.selected_store = ""

    def set_selected_store(self, store: str) -> None:
        self.selected_store = store

    async def submit_store_selection(self) -> bool:
        """Converte o estado do seletor de loja em StoreMetadata e persiste."""
        if not self.purchase_channel or not self.selected_store:
            return False
        if self.selected_store == "other":
            location_type = "other"
            store_name = "Other Store"
        else:
            location_type = "retailer" if self.purchase_channel == "in-store" else "direct"
            store_name = self.selected_store.strip()
        return await self.update_store(
            StoreMetadata(
                location_type=location_type,
                store_name=store_name,
                purchase_channel=self.purchase_channel,
            )
        )

    async def link_user(self, provider: AuthProviderName = "email") -> bool:
        """Associa o usuário autenticado à sessão (registra opt-in e provedor)."""
        if not self.session_id or self.user is None:
            logger.info(
                "link_user_skipped",
                extra={"has_session": bool(self.session_id), "has_user": self.user is not None},
            )
            return False

        session_id = self.session_id
        with self._loading("link_user_to_flow"):
            try:
                success = await self._backend.link_user_to_flow(
                    session_id,
                    self.user.id,
                    self.marketing_opt_in,
                    provider,
                )
            except Exception as exc:
                logger.error(
                    "link_user_failed",
                    extra={"session_id": session_id, "provider": provider, "error_type": type(exc).__name__},
                )
                return False

        if not success:
            logger.info("link_user_rejected", extra={"session_id": session_id, "provider": provider})
            return False

        self.track_event(
            "auth_success",
            {"session_id": session_id, "provider": provider, "opt_in": self.marketing_opt_in},
        )
        return True

    async def handle_auth_success(
        self,
        user: AuthUser,
        provider: AuthProviderName,
        marketing_opt_in: bool,
    ) -> bool:
        """Guarda a identidade resolvida pelo provedor e vincula à sessão."""
        self.user = user
        self.marketing_opt_in = marketing_opt_in
        return await self.link_user(provider)

    async def on_auth_success(self, success: AuthSuccess) -> bool:
        """Hook do passo de login (`on_auth_success`)."""
        return await self.handle_auth_success(success.user, success.provider, success.marketing_opt_in)

    def handle_auth_error(self, error: Exception) -> None:
        """Hook `on_auth_error`: apenas registra; o evento `auth_error` vem do passo de login."""
        logger.warning(
            "auth_failed",
            extra={"session_id": self.session_id, "provider": getattr(error, "provider", None)},
        )

    async def run_verification(self) -> VerificationResult | None:
        """Dispara a verificação server-side; emite `verify_<result>`.

        Com `single_flight_verification`, chamadas concorrentes compartilham
        a mesma requisição em voo.
        """
        if not self.session_id:
            logger.info("verification_skipped", extra={"reason": "no_session"})
            return None

        if not self._single_flight:
            return await self._run_verification(self.session_id)

        if self._verification_task is None or self._verification_task.done():
            self._verification_task = asyncio.create_task(self._run_verification(self.session_id))
        return await self._verification_task

    async def _run_verification(self, session_id: str) -> VerificationResult | None:
        with self._loading("run_verification"):
            try:
                result = await self._backend.run_verification(session_id)
            except Exception as exc:
                logger.error(
                    "verification_failed",
                    extra={"session_id": session_id, "error_type": type(exc).__name__},
                )
                return None

        if result is None:
            logger.info("verification_rejected", extra={"session_id": session_id})
            return None

        record_verification_outcome(result.result, len(result.reasons))
        if self.session is not None and self.session.id == session_id:
            self.session = self.session.model_copy(update={"verification": result})
        self.track_event(
            f"verify_{result.result}",
            {
                "session_id": session_id,
                "reasons": list(result.reasons),
                "store_ok": result.store_ok,
                "expiry_ok": result.expiry_ok,
            },
        )
        return result

    async def refresh_session(self) -> FlowSession | None:
        """Relê a sessão do backend; erros são apenas registrados."""
        if not self.session_id:
            return None
        try:
            session = await self._backend.get_flow_session(self.session_id)
        except Exception as exc:
            logger.warning(
                "session_refresh_failed",
                extra={"session_id": self.session_id, "error_type": type(exc).__name__},
            )
            return self.session
        if session is not None:
            self.session = session
        return self.session

    # ──────────────────────────────────────────────────────────
    # Telemetria (fire-and-forget)
    # ──────────────────────────────────────────────────────────

    def track_event(self, event_name: str, metadata: dict[str, Any] | None = None) -> None:
        """Agenda o envio do evento sem bloquear a operação chamadora."""
        event = AuditEvent(
            actor=self.user.id if self.user else None,
            action=f"flow_{event_name}",
            object_type="flow_session",
            object_id=self.session_id,
            meta=dict(metadata or {}),
        )
        logger.info("flow_event", extra={"event": event_name, "session_id": self.session_id})
        if self._telemetry is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("telemetry_dropped", extra={"action": event.action, "reason": "no_event_loop"})
            return

        task = loop.create_task(self._deliver(self._telemetry, event))
        self._pending_events.add(task)
        task.add_done_callback(self._pending_events.discard)

    def track_step_viewed(self) -> bool:
        """Evento de exibição da etapa atual, uma vez por etapa.

        store_selector → `store_selector_viewed`, authentication →
        `verify_started`, final_page → `final_viewed`. Demais etapas não
        emitem nada aqui (`welcome_viewed` sai de start_flow).
        """
        step = self.current_step
        if step in self._viewed_steps:
            return False

        metadata: dict[str, Any] = {"session_id": self.session_id}
        if step == FlowStep.STORE_SELECTOR:
            event_name = "store_selector_viewed"
        elif step == FlowStep.AUTHENTICATION:
            event_name = "verify_started"
        elif step == FlowStep.FINAL_PAGE:
            event_name = "final_viewed"
            verification = self.session.verification if self.session else None
            metadata["verification_result"] = verification.result if verification else None
        else:
            return False

        self._viewed_steps.add(step)
        self.track_event(event_name, metadata)
        return True

    def open_document(self, doc_type: str) -> None:
        self.track_event("doc_opened", {"session_id": self.session_id, "doc_type": doc_type})

    def click_upsell(self, sku: str) -> None:
        self.track_event("upsell_clicked", {"session_id": self.session_id, "sku": sku})

    @staticmethod
    async def _deliver(sink: TelemetrySinkProtocol, event: AuditEvent) -> None:
        try:
            await sink.append_event(event)
        except Exception as exc:
            logger.warning(
                "telemetry_delivery_failed",
                extra={"action": event.action, "error_type": type(exc).__name__},
            )

    async def flush_events(self) -> None:
        """Aguarda entregas pendentes (shutdown e testes)."""
        if self._pending_events:
            await asyncio.gather(*list(self._pending_events))

    # ──────────────────────────────────────────────────────────
    # Bindings para o renderer
    # ──────────────────────────────────────────────────────────

    def render_context(
        self,
        tokens: StyleTokens,
        *,
        auth_provider: AuthProviderProtocol | None = None,
        store_options: list[str] | None = None,
        **overrides: Any,
    ) -> RenderContext:
        """RenderContext com o seletor de loja controlado e hooks de auth ligados."""
        brand = self.session.brand if self.session else None
        context = RenderContext(
            tokens=tokens,
            is_runtime_mode=True,
            store_options=list(store_options or []),
            brand_colors=tokens.brand_colors(),
            brand_logo_url=brand.logo_url if brand else None,
            purchase_channel=self.purchase_channel,
            selected_store=self.selected_store,
            on_purchase_channel_change=self.set_purchase_channel,
            on_selected_store_change=self.set_selected_store,
            auth_provider=auth_provider,
            on_auth_success=self.on_auth_success,
            on_auth_error=self.handle_auth_error,
            on_track_event=self.track_event,
            on_next=self.go_to_next_step,
            on_prev=self.go_to_prev_step,
            on_run_verification=self.run_verification,
            on_open_document=self.open_document,
            on_upsell_click=self.click_upsell,
        )
        for name, value in overrides.items():
            setattr(context, name, value)
        return context
