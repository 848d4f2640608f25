"""Controller da jornada de certificação (sessão + etapas)."""

from app.flow.controller import CertificationFlowController
from app.flow.results import StartFlowResult

__all__ = ["CertificationFlowController", "StartFlowResult"]
