"""Cliente HTTP para o backend gerenciado (PostgREST + RPC).

Implementação concreta de IO. Traduz respostas HTTP para a hierarquia
de utils.errors; nunca retorna payload de erro como se fosse sucesso.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from app.observability import record_latency
from utils.errors import (
    BackendRequestError,
    BackendUnavailableError,
    NotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

# Códigos PostgREST/Postgres com significado próprio
_CODE_NO_ROWS = "PGRST116"
_CODE_RLS_DENIED = "42501"


def _error_details(response: httpx.Response) -> tuple[str, str]:
    """Extrai (code, message) do corpo de erro PostgREST, se houver."""
    try:
        body = response.json()
    except ValueError:
        return "", response.text[:200]
    if not isinstance(body, dict):
        return "", str(body)[:200]
    return str(body.get("code") or ""), str(body.get("message") or "")


def _raise_for_response(response: httpx.Response, operation: str) -> None:
    """Converte status de erro em exceção tipada."""
    if response.is_success:
        return

    status = response.status_code
    code, message = _error_details(response)
    detail = message or f"HTTP {status}"
    log_extra = {"operation": operation, "status_code": status, "code": code}

    if status >= 500:
        logger.warning("backend_server_error", extra=log_extra)
        raise BackendUnavailableError(f"{operation}: {detail}")

    if status in (401, 403) or code == _CODE_RLS_DENIED:
        logger.warning("backend_permission_denied", extra=log_extra)
        raise PermissionDeniedError(f"{operation}: {detail}", status_code=status, code=code)

    if status == 404 or code == _CODE_NO_ROWS:
        raise NotFoundError(f"{operation}: {detail}", status_code=status, code=code)

    logger.warning("backend_request_rejected", extra=log_extra)
    raise BackendRequestError(f"{operation}: {detail}", status_code=status, code=code)


class SupabaseRestClient:
    """Acesso assíncrono a tabelas e funções RPC via PostgREST.

    Attributes:
        rest_url: URL base da API REST (ex: https://xyz.supabase.co/rest/v1)
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        rest_url: str,
        api_key: str,
        access_token: str | None = None,
    ) -> None:
        self._http = http_client
        self.rest_url = rest_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token

    def set_access_token(self, access_token: str | None) -> None:
        """Troca o JWT do usuário (após login) usado nas próximas chamadas."""
        self._access_token = access_token

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = self._headers(prefer)

        start = time.perf_counter()
        try:
            response = await self._http.request(
                method,
                f"{self.rest_url}/{path}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            logger.warning("backend_timeout", extra={"operation": operation})
            raise BackendUnavailableError(f"{operation}: timeout") from exc
        except httpx.TransportError as exc:
            logger.warning(
                "backend_transport_error",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise BackendUnavailableError(f"{operation}: {type(exc).__name__}") from exc
        finally:
            record_latency("backend", operation, (time.perf_counter() - start) * 1000)

        _raise_for_response(response, operation)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendRequestError(
                f"{operation}: resposta não-JSON",
                status_code=response.status_code,
            ) from exc

    # ──────────────────────────────────────────────────────────────
    # RPC
    # ──────────────────────────────────────────────────────────────

    async def rpc(self, function: str, params: dict[str, Any] | None = None) -> Any:
        """Chama `POST /rpc/<function>` e retorna o JSON da resposta."""
        return await self._request(
            "POST",
            f"rpc/{function}",
            f"rpc:{function}",
            json=params or {},
        )

    # ──────────────────────────────────────────────────────────────
    # Tabelas
    # ──────────────────────────────────────────────────────────────

    @staticmethod
    def _filters(filters: dict[str, Any] | None) -> dict[str, str]:
        """Filtros de igualdade no formato PostgREST (`col=eq.valor`)."""
        return {column: f"eq.{value}" for column, value in (filters or {}).items()}

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Seleciona linhas. `order` no formato PostgREST (ex: `created_at.desc`)."""
        params = {"select": columns, **self._filters(filters)}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        data = await self._request("GET", table, f"select:{table}", params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise BackendRequestError(f"select:{table}: esperado array JSON")
        return data

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Seleciona no máximo uma linha (equivalente a `maybeSingle`)."""
        rows = await self.select(table, columns=columns, filters=filters, limit=2)
        if not rows:
            return None
        if len(rows) > 1:
            raise BackendRequestError(
                f"select:{table}: múltiplas linhas para filtro único",
                code="PGRST116",
            )
        return rows[0]

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insere uma linha e retorna a representação gravada."""
        data = await self._request(
            "POST",
            table,
            f"insert:{table}",
            json=row,
            prefer="return=representation",
        )
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        raise BackendRequestError(f"insert:{table}: resposta vazia")

    async def update(
        self,
        table: str,
        fields: dict[str, Any],
        filters: dict[str, Any],
        raw_filters: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Atualiza linhas que casam com `filters`; retorna as linhas alteradas.

        `raw_filters` aceita expressões PostgREST prontas (ex: `or=(...)`).
        """
        data = await self._request(
            "PATCH",
            table,
            f"update:{table}",
            params={**self._filters(filters), **(raw_filters or {})},
            json=fields,
            prefer="return=representation",
        )
        return data if isinstance(data, list) else []

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        await self._request(
            "DELETE",
            table,
            f"delete:{table}",
            params=self._filters(filters),
        )
