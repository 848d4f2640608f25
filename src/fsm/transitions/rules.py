"""
Regras de navegação entre etapas do fluxo.

A navegação do cliente é linear e por índice: avança ou recua uma etapa
por vez, limitada pelas extremidades de STEP_ORDER. Saltos diretos
(recuperação, deep-link de sessões de teste) não passam por estas regras.
"""

from fsm.states.step import STEP_ORDER, FlowStep, is_terminal, step_index


def next_step(step: FlowStep) -> FlowStep:
    """
    Retorna a etapa seguinte na ordem linear.

    Args:
        step: Etapa atual

    Returns:
        Próxima etapa; a própria etapa se já for a última ou se estiver
        fora da ordem (INVALID é pegajosa para navegação linear)
    """
    index = step_index(step)
    if index < 0 or index >= len(STEP_ORDER) - 1:
        return step
    return STEP_ORDER[index + 1]


def prev_step(step: FlowStep) -> FlowStep:
    """
    Retorna a etapa anterior na ordem linear.

    Args:
        step: Etapa atual

    Returns:
        Etapa anterior; a própria etapa se já for a primeira ou estiver fora da ordem
    """
    index = step_index(step)
    if index <= 0:
        return step
    return STEP_ORDER[index - 1]


def validate_step_order() -> list[str]:
    """
    Valida a integridade da ordem linear.

    Verifica:
    - Todas as etapas não terminais aparecem exatamente uma vez
    - Nenhuma etapa terminal aparece na ordem

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for step in FlowStep:
        count = STEP_ORDER.count(step)
        if is_terminal(step) and count:
            errors.append(f"Etapa terminal {step.name} não deveria estar em STEP_ORDER")
        if not is_terminal(step) and count != 1:
            errors.append(f"Etapa {step.name} aparece {count} vezes em STEP_ORDER")

    return errors
