"""
Exports públicos do módulo fsm/manager.

Máquina de etapas (FlowStepMachine) da jornada de certificação.
"""

from fsm.manager.machine import FlowStepMachine, create_step_machine

__all__ = [
    "FlowStepMachine",
    "create_step_machine",
]
