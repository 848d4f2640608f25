"""Resultado discriminado das operações dos managers (fluxos/templates)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class OperationResult(Generic[T]):
    """Sucesso com `data` opcional ou falha com `error` legível.

    `message` carrega o texto de sucesso exibido ao editor (toast).
    """

    success: bool
    data: T | None = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: T | None = None, message: str | None = None) -> OperationResult[T]:
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> OperationResult[T]:
        return cls(success=False, error=error)
