"""
Exports públicos do módulo fsm/rules.

Guards para transições entre etapas.
"""

from fsm.rules.guards import (
    DEFAULT_GUARDS,
    Guard,
    GuardResult,
    evaluate_guards,
    guard_not_same_step,
    guard_valid_step,
)

__all__ = [
    "DEFAULT_GUARDS",
    "Guard",
    "GuardResult",
    "evaluate_guards",
    "guard_not_same_step",
    "guard_valid_step",
]
