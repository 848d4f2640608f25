"""Validação de linhas vindas do backend (Supabase ou memória)."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from utils.errors import BackendRequestError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_row(model: type[ModelT], row: Any, operation: str) -> ModelT:
    """Valida uma linha; schema inválido vira BackendRequestError."""
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise BackendRequestError(f"{operation}: linha inválida") from exc
