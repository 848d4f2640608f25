"""
Exports públicos do módulo fsm/states.

Etapas canônicas da jornada de certificação.
"""

from fsm.states.step import (
    DEFAULT_INITIAL_STEP,
    STEP_ORDER,
    TERMINAL_STEPS,
    FlowStep,
    is_terminal,
    step_index,
)

__all__ = [
    "DEFAULT_INITIAL_STEP",
    "STEP_ORDER",
    "TERMINAL_STEPS",
    "FlowStep",
    "is_terminal",
    "step_index",
]
