"""Modelos de domínio da sessão de certificação.

A sessão é criada e mutada exclusivamente pelo backend; o cliente mantém
apenas uma cópia imutável que é substituída após cada chamada bem-sucedida.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fsm.states import FlowStep

VerificationOutcome = Literal["pass", "warn", "fail"]
AuthProviderName = Literal["google", "apple", "email"]
LocationType = Literal["retailer", "pharmacy", "direct", "other"]


class FlowSessionStatus(StrEnum):
    """Status de uma sessão no backend."""

    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class GeoLocation(BaseModel):
    """Coordenadas opcionais informadas na seleção de loja."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    latitude: float
    longitude: float


class StoreMetadata(BaseModel):
    """Local de compra informado pelo cliente."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    location_type: LocationType = "other"
    store_name: str = ""
    purchase_channel: Literal["in-store", "online"] | None = None
    geo_location: GeoLocation | None = None


class CampaignRef(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    final_redirect_url: str | None = None


class BrandRef(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    logo_url: str | None = None
    brand_colors: dict[str, Any] | None = None


class VerificationResult(BaseModel):
    """Resultado terminal da verificação server-side.

    `reasons` preserva ordem e duplicatas exatamente como recebidos.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    result: VerificationOutcome
    reasons: tuple[str, ...] = ()
    batch_info: dict[str, Any] | None = None
    store_ok: bool = False
    expiry_ok: bool = False
    created_at: datetime | None = None


class FlowSession(BaseModel):
    """Cópia local de uma travessia de fluxo.

    Attributes:
        id: Identificador opaco emitido pelo backend
        status: active|completed|failed
        step: Etapa registrada no backend (a etapa exibida vive no controller)
        store_meta: Local de compra, quando informado
        user_id: Definido apenas após link_user bem-sucedido
        verification: Definido apenas após run_verification bem-sucedido
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    status: FlowSessionStatus = FlowSessionStatus.ACTIVE
    step: FlowStep = FlowStep.SCAN
    store_meta: StoreMetadata | None = None
    user_id: str | None = None
    marketing_opt_in: bool = False
    campaign: CampaignRef
    brand: BrandRef
    verification: VerificationResult | None = None
    created_at: datetime | None = None

    @field_validator("store_meta", mode="before")
    @classmethod
    def _empty_store_meta(cls, value: Any) -> Any:
        """`{}` no backend significa loja ainda não informada."""
        if isinstance(value, dict) and not value:
            return None
        return value

    @field_validator("step", mode="before")
    @classmethod
    def _coerce_step(cls, value: Any) -> Any:
        """Etapas desconhecidas vindas do backend viram `scan`."""
        if isinstance(value, str) and value not in FlowStep._value2member_map_:
            return FlowStep.SCAN
        return value

    @property
    def is_active(self) -> bool:
        return self.status == FlowSessionStatus.ACTIVE

    def to_log_dict(self) -> dict[str, Any]:
        """Resumo sem PII para logs."""
        return {
            "session_id": self.id,
            "status": self.status.value,
            "step": self.step.value,
            "campaign_id": self.campaign.id,
            "brand_id": self.brand.id,
            "has_user": self.user_id is not None,
            "has_store": self.store_meta is not None,
            "verification": self.verification.result if self.verification else None,
        }


class AuthUser(BaseModel):
    """Identidade resolvida pelo provedor de autenticação."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    email: str | None = None
    provider: AuthProviderName | None = None
