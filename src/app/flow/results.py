"""Resultados discriminados das operações do controller."""

from __future__ import annotations

from dataclasses import dataclass

from fsm.states import FlowStep


@dataclass(frozen=True, slots=True)
class StartFlowResult:
    """Resultado de `start_flow`.

    Attributes:
        success: True se a sessão foi resolvida (etapa `welcome`)
        step: Etapa após a operação (`welcome` ou `invalid`)
        session_id: Sessão criada/reidratada
        error: Motivo legível retido para a tela `invalid`
    """

    success: bool
    step: FlowStep
    session_id: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if not self.success and not self.error:
            raise ValueError("StartFlowResult com falha deve incluir error")
