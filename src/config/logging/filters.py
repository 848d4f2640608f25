"""Filter de logging que injeta contexto do fluxo em cada record."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class FlowContextFilter(logging.Filter):
    """Injeta service, correlation_id e flow_session_id em cada record.

    Valores passados explicitamente via `extra` são preservados.
    Nunca adicionar e-mails, senhas ou tokens aos logs.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        session_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_session_id = session_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca descarta."""
        if not getattr(record, "correlation_id", None):
            record.correlation_id = self._get_correlation_id()
        if not getattr(record, "flow_session_id", None):
            record.flow_session_id = self._get_session_id()
        record.service = self._service_name
        return True
