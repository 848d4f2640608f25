"""Documento versionado de páginas/seções e o registro de fluxo que o contém."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.sections import BaseSection, parse_sections


class FlowPage(BaseModel):
    """Página do fluxo com seções já tipadas e ordenadas."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    name: str = ""
    type: str = ""
    sections: list[BaseSection] = Field(default_factory=list)

    @field_validator("id", "name", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("sections", mode="before")
    @classmethod
    def _parse_sections(cls, value: Any) -> list[BaseSection]:
        return parse_sections(value)


class FlowTemplateSnapshot(BaseModel):
    """Snapshot (publicado ou rascunho) servido ao renderer.

    `pages` sempre existe; payloads sem lista em `pages` são normalizados
    pelo loader antes de chegar aqui.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    name: str = ""
    pages: list[FlowPage] = Field(default_factory=list)
    design_config: dict[str, Any] | None = Field(default=None, alias="designConfig")
    published_at: str | None = Field(default=None, alias="publishedAt")
    campaign_id: str | None = None

    @field_validator("pages", mode="before")
    @classmethod
    def _only_page_objects(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [page for page in value if isinstance(page, dict | FlowPage)]
        return value


class FlowRecord(BaseModel):
    """Linha da tabela `flows` (rascunho + snapshot publicado por campanha)."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    name: str = ""
    campaign_id: str | None = None
    brand_id: str | None = None
    campaign_name: str | None = None
    brand_name: str | None = None
    flow_config: dict[str, Any] | None = None
    published_snapshot: dict[str, Any] | None = None
    latest_published_version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("latest_published_version", mode="before")
    @classmethod
    def _null_version(cls, value: Any) -> Any:
        return 0 if value is None else value

    @property
    def has_published_pages(self) -> bool:
        pages = (self.published_snapshot or {}).get("pages")
        return isinstance(pages, list) and len(pages) > 0


class LegacyContentRow(BaseModel):
    """Linha da tabela legada `flow_content` (uma página por linha)."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    title: str = ""
    content: Any = None
    order_index: int = 0
    updated_at: datetime | None = None

    @field_validator("order_index", mode="before")
    @classmethod
    def _null_order(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("id", "title", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value


class TemplateRecord(BaseModel):
    """Linha da tabela `templates` (sistema ou fork de marca)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = ""
    kind: Literal["system", "brand"] = "system"
    status: Literal["draft", "published", "deprecated"] = "draft"
    name: str = ""
    description: str = ""
    created_by: str | None = None
    brand_id: str | None = None
    base_template_id: str | None = None
    version: int = 1
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    content: dict[str, Any] | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
