"""
Módulo FSM — Máquina de etapas da jornada de certificação.

Estrutura:
    - states/: Etapas (FlowStep enum, STEP_ORDER)
    - transitions/: Navegação linear (next/prev)
    - rules/: Guards de transição
    - manager/: Máquina de etapas (FlowStepMachine)
    - types/: Tipos de dados (StepTransition, TransitionResult)
"""

from fsm.manager import FlowStepMachine, create_step_machine
from fsm.rules import GuardResult, evaluate_guards
from fsm.states import (
    DEFAULT_INITIAL_STEP,
    STEP_ORDER,
    TERMINAL_STEPS,
    FlowStep,
    is_terminal,
    step_index,
)
from fsm.transitions import next_step, prev_step, validate_step_order
from fsm.types import StepTransition, TransitionResult

__all__ = [
    "DEFAULT_INITIAL_STEP",
    "STEP_ORDER",
    "TERMINAL_STEPS",
    "FlowStep",
    "FlowStepMachine",
    "GuardResult",
    "StepTransition",
    "TransitionResult",
    "create_step_machine",
    "evaluate_guards",
    "is_terminal",
    "next_step",
    "prev_step",
    "step_index",
    "validate_step_order",
]
