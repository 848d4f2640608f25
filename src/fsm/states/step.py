"""
Etapas canônicas da jornada de certificação.

Este módulo define as etapas que uma sessão de fluxo percorre, da leitura
do QR até a página final. A ordem é linear e explícita; a etapa INVALID
fica fora da ordem e pode ser alcançada de qualquer ponto.
"""

from enum import StrEnum


class FlowStep(StrEnum):
    """
    Etapas de uma sessão de certificação.

    Etapas ordenadas (navegação linear):
        - SCAN: QR lido, sessão ainda não resolvida
        - WELCOME: boas-vindas com dados da marca/campanha
        - STORE_SELECTOR: escolha do canal e da loja de compra
        - USER_LOGIN: autenticação do cliente final
        - AUTHENTICATION: verificação de autenticidade do produto
        - FINAL_PAGE: resultado final

    Etapa terminal fora da ordem:
        - INVALID: falha de resolução (QR inválido, campanha desconhecida)
    """

    SCAN = "scan"
    WELCOME = "welcome"
    STORE_SELECTOR = "store_selector"
    USER_LOGIN = "user_login"
    AUTHENTICATION = "authentication"
    FINAL_PAGE = "final_page"

    INVALID = "invalid"

    def __str__(self) -> str:
        return self.value


# Ordem linear usada por next/prev (INVALID não participa)
STEP_ORDER: tuple[FlowStep, ...] = (
    FlowStep.SCAN,
    FlowStep.WELCOME,
    FlowStep.STORE_SELECTOR,
    FlowStep.USER_LOGIN,
    FlowStep.AUTHENTICATION,
    FlowStep.FINAL_PAGE,
)

TERMINAL_STEPS: frozenset[FlowStep] = frozenset({FlowStep.INVALID})

DEFAULT_INITIAL_STEP: FlowStep = FlowStep.SCAN


def is_terminal(step: FlowStep) -> bool:
    """Verifica se a etapa é terminal (fluxo interrompido)."""
    return step in TERMINAL_STEPS


def step_index(step: FlowStep) -> int:
    """
    Retorna a posição da etapa na ordem linear.

    Returns:
        Índice em STEP_ORDER, ou -1 para etapas fora da ordem (INVALID)
    """
    try:
        return STEP_ORDER.index(step)
    except ValueError:
        return -1
