"""
Tipos e estruturas de dados para transições de etapa.

Registros imutáveis usados pela máquina de etapas para manter
histórico rastreável da jornada do cliente.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.step import FlowStep


@dataclass(frozen=True, slots=True)
class StepTransition:
    """
    Representa uma mudança de etapa no fluxo.

    Attributes:
        from_step: Etapa de origem
        to_step: Etapa de destino
        trigger: Gatilho da transição (ex: 'next', 'prev', 'jump', 'resolution_failed')
        metadata: Dados adicionais para auditoria (nunca conter PII)
        timestamp: Momento da transição (UTC)
    """

    from_step: FlowStep
    to_step: FlowStep
    trigger: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )

    def __post_init__(self) -> None:
        """Valida invariantes do objeto após inicialização."""
        if not self.trigger or not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")

    def to_log_dict(self) -> dict[str, Any]:
        """Retorna representação segura para logs (sem PII)."""
        return {
            "from_step": self.from_step.value,
            "to_step": self.to_step.value,
            "trigger": self.trigger,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Resultado de uma tentativa de transição.

    Attributes:
        success: Se a etapa mudou
        transition: Dados da transição (se success=True)
        error_reason: Motivo da recusa (se success=False)
    """

    success: bool
    transition: StepTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        """Valida consistência do resultado."""
        if self.success and self.transition is None:
            raise ValueError("Transição bem-sucedida deve incluir transition")
        if not self.success and self.error_reason is None:
            raise ValueError("Transição falha deve incluir error_reason")
