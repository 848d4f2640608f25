"""
Guards para transições entre etapas.

Não há validação de grafo: qualquer etapa é alcançável por salto direto
(ferramentas de operador/teste). Os guards apenas rejeitam valores que
não são etapas e transições reflexivas sem efeito.
"""

from collections.abc import Callable

from fsm.states.step import FlowStep


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[FlowStep, FlowStep], GuardResult]


def guard_valid_step(from_step: FlowStep, to_step: FlowStep) -> GuardResult:
    """Guard: origem e destino precisam ser membros de FlowStep."""
    if not isinstance(from_step, FlowStep):
        return GuardResult.deny(f"Etapa de origem inválida: {from_step}")

    if not isinstance(to_step, FlowStep):
        return GuardResult.deny(f"Etapa de destino inválida: {to_step}")

    return GuardResult.allow()


def guard_not_same_step(from_step: FlowStep, to_step: FlowStep) -> GuardResult:
    """Guard: transição para a mesma etapa não gera registro (no-op)."""
    if from_step == to_step:
        return GuardResult.deny(f"Já está na etapa {to_step.name}")
    return GuardResult.allow()


# Aplicados em ordem; o primeiro deny interrompe
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_step,
    guard_not_same_step,
]


def evaluate_guards(
    from_step: FlowStep,
    to_step: FlowStep,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_step: Etapa de origem
        to_step: Etapa de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_step, to_step)
        if not result.allowed:
            return result

    return GuardResult.allow()
