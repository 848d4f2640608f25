"""
Exports públicos do módulo fsm/transitions.

Regras de navegação linear entre etapas.
"""

from fsm.transitions.rules import (
    next_step,
    prev_step,
    validate_step_order,
)

__all__ = [
    "next_step",
    "prev_step",
    "validate_step_order",
]
