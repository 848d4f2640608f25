"""
Máquina de etapas (FlowStepMachine) da jornada de certificação.

Mantém a etapa atual e o histórico de transições. Navegação linear
(next/prev) é limitada pelas extremidades da ordem; saltos diretos
aceitam qualquer etapa.
"""

from typing import Any

from fsm.rules.guards import evaluate_guards
from fsm.states.step import DEFAULT_INITIAL_STEP, FlowStep, is_terminal
from fsm.transitions.rules import next_step, prev_step
from fsm.types.transition import StepTransition, TransitionResult


class FlowStepMachine:
    """
    Máquina de etapas de uma sessão de certificação.

    Attributes:
        current_step: Etapa atual
        history: Histórico de transições realizadas
    """

    __slots__ = ("_current_step", "_history", "_session_id")

    def __init__(
        self,
        initial_step: FlowStep | None = None,
        session_id: str = "",
    ) -> None:
        self._current_step = initial_step or DEFAULT_INITIAL_STEP
        self._history: list[StepTransition] = []
        self._session_id = session_id

    @property
    def current_step(self) -> FlowStep:
        """Etapa atual."""
        return self._current_step

    @property
    def history(self) -> list[StepTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def session_id(self) -> str:
        return self._session_id

    @session_id.setter
    def session_id(self, value: str) -> None:
        self._session_id = value

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._current_step)

    def advance(self, metadata: dict[str, Any] | None = None) -> TransitionResult:
        """Avança uma etapa (no-op na última etapa)."""
        return self.transition(next_step(self._current_step), "next", metadata)

    def retreat(self, metadata: dict[str, Any] | None = None) -> TransitionResult:
        """Recua uma etapa (no-op na primeira etapa)."""
        return self.transition(prev_step(self._current_step), "prev", metadata)

    def jump(
        self,
        target: FlowStep,
        trigger: str = "jump",
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Salta diretamente para qualquer etapa (recuperação/deep-link)."""
        return self.transition(target, trigger, metadata)

    def transition(
        self,
        target: FlowStep,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de etapa.

        Args:
            target: Etapa de destino
            trigger: Identificador do gatilho
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        guard_result = evaluate_guards(self._current_step, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        transition = StepTransition(
            from_step=self._current_step,
            to_step=target,
            trigger=trigger,
            metadata=metadata or {},
        )

        self._current_step = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observabilidade (seguro para logs)."""
        return {
            "session_id": self._session_id,
            "current_step": self._current_step.value,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]

    def reset(self, new_initial_step: FlowStep | None = None) -> None:
        """
        Reseta a máquina para a etapa inicial.

        ATENÇÃO: Limpa todo o histórico.
        """
        self._current_step = new_initial_step or DEFAULT_INITIAL_STEP
        self._history = []


def create_step_machine(
    session_id: str = "",
    initial_step: FlowStep | None = None,
) -> FlowStepMachine:
    """Factory function para criar uma máquina de etapas."""
    return FlowStepMachine(initial_step=initial_step, session_id=session_id)
