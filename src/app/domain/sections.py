"""Seções de página como união discriminada pelo campo `type`.

Cada tipo tem um payload de configuração próprio. Campos ausentes ou
malformados nunca geram erro: caem para o default documentado do campo
(e o fallback é registrado em log), garantindo que um erro de autoria
de conteúdo nunca bloqueie o fluxo do cliente.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel

from config.logging import log_fallback

logger = logging.getLogger(__name__)

SectionType = Literal[
    "header",
    "hero",
    "features",
    "cta",
    "product_showcase",
    "text",
    "image",
    "store_selector",
    "divider",
    "login_step",
    "footer",
    "form",
    "card",
    "button",
]


class _LenientModel(BaseModel):
    """Base que troca valores inválidos pelo default do campo."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field_name = info.field_name or ""
            field = cls.model_fields[field_name]
            log_fallback(
                logger,
                "section_config",
                reason="invalid_field",
                model=cls.__name__,
                field=field_name,
            )
            return field.get_default(call_default_factory=True)


# ──────────────────────────────────────────────────────────────
# Configurações por tipo
# ──────────────────────────────────────────────────────────────


class SectionConfig(_LenientModel):
    """Campos de estilo comuns a todas as seções (wrapper externo/interno)."""

    background_color: str | None = None
    text_color: str | None = None
    padding: float | None = None
    padding_top: float | None = None
    padding_right: float | None = None
    padding_bottom: float | None = None
    padding_left: float | None = None
    drop_shadow: bool = False
    shadow_offset_x: float = 0
    shadow_offset_y: float = 4
    shadow_blur: float = 10
    shadow_spread: float = 0
    shadow_color: str = "rgba(0,0,0,0.1)"


class HeaderConfig(SectionConfig):
    logo: bool = False


class HeroConfig(SectionConfig):
    title: str = ""
    subtitle: str = ""
    description: str = ""
    align: Literal["left", "center", "right"] = "left"


class FeaturesConfig(SectionConfig):
    items: list[str] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _drop_empty_items(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(item) for item in value if item is not None and str(item).strip()]
        return value


class CtaConfig(SectionConfig):
    text: str = "Click here"
    size: Literal["sm", "md", "lg"] = "md"
    color: Literal["primary", "secondary", "accent"] = "primary"
    button_color: str | None = None
    page_id: str | None = None
    url: str | None = None


class ProductShowcaseConfig(SectionConfig):
    caption: str = ""
    image_url: str | None = None


class TextConfig(SectionConfig):
    content: str = ""
    font_size: float = 16
    font_weight: str = "normal"
    align: Literal["left", "center", "right", "justify"] = "left"


class ImageConfig(SectionConfig):
    image_url: str | None = None
    alt: str = "Section image"
    caption: str = ""
    width: float | None = None
    height: float | None = None


class StoreSelectorConfig(SectionConfig):
    store_options: str | list[str] | None = None
    label: str = "Select Store"
    placeholder: str = "Choose your store"
    border_color: str | None = None
    focus_border_color: str | None = None

    def store_option_list(self) -> list[str]:
        """Lista de lojas do próprio config (texto com uma loja por linha)."""
        raw = self.store_options
        if raw is None:
            return []
        lines = raw.split("\n") if isinstance(raw, str) else raw
        return [line.strip() for line in lines if isinstance(line, str) and line.strip()]


class DividerConfig(SectionConfig):
    thickness: float = 1
    color: str = "#e5e7eb"
    width: float = 100
    full_width: bool = False


class LoginStepConfig(SectionConfig):
    title: str = ""
    subtitle: str = ""
    show_email: bool = True
    show_apple: bool = True
    show_google: bool = True
    brand_name: str = "this brand"


class FooterConfig(SectionConfig):
    logo_size: float = 120
    text: str = "Powered by Panacea"


class FormField(_LenientModel):
    id: str = ""
    label: str = ""
    type: Literal["text", "email", "tel", "number", "date", "textarea"] = "text"
    placeholder: str = ""
    required: bool = False


class FormConfig(SectionConfig):
    title: str = ""
    fields: list[FormField] = Field(default_factory=list)
    submit_text: str = ""

    @field_validator("fields", mode="before")
    @classmethod
    def _only_mappings(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item for item in value if isinstance(item, dict | FormField)]
        return value


class CardConfig(SectionConfig):
    title: str = ""
    content: str = ""
    image_url: str | None = None


class ButtonConfig(SectionConfig):
    text: str = "Action Button"
    action: Literal["next", "prev", "page", "link"] = "next"
    page_id: str | None = None
    url: str | None = None
    variant: Literal["primary", "outline"] = "primary"


# ──────────────────────────────────────────────────────────────
# Seções
# ──────────────────────────────────────────────────────────────


class BaseSection(BaseModel):
    """Campos comuns: identidade, tipo e ordem de renderização."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    type: str
    order: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return "" if value is None else str(value)

    @field_validator("order", mode="wrap")
    @classmethod
    def _lenient_order(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class HeaderSection(BaseSection):
    type: Literal["header"] = "header"
    config: HeaderConfig = Field(default_factory=HeaderConfig)


class HeroSection(BaseSection):
    type: Literal["hero"] = "hero"
    config: HeroConfig = Field(default_factory=HeroConfig)


class FeaturesSection(BaseSection):
    type: Literal["features"] = "features"
    config: FeaturesConfig = Field(default_factory=FeaturesConfig)


class CtaSection(BaseSection):
    type: Literal["cta"] = "cta"
    config: CtaConfig = Field(default_factory=CtaConfig)


class ProductShowcaseSection(BaseSection):
    type: Literal["product_showcase"] = "product_showcase"
    config: ProductShowcaseConfig = Field(default_factory=ProductShowcaseConfig)


class TextSection(BaseSection):
    type: Literal["text"] = "text"
    config: TextConfig = Field(default_factory=TextConfig)


class ImageSection(BaseSection):
    type: Literal["image"] = "image"
    config: ImageConfig = Field(default_factory=ImageConfig)


class StoreSelectorSection(BaseSection):
    type: Literal["store_selector"] = "store_selector"
    config: StoreSelectorConfig = Field(default_factory=StoreSelectorConfig)


class DividerSection(BaseSection):
    type: Literal["divider"] = "divider"
    config: DividerConfig = Field(default_factory=DividerConfig)


class LoginStepSection(BaseSection):
    type: Literal["login_step"] = "login_step"
    config: LoginStepConfig = Field(default_factory=LoginStepConfig)


class FooterSection(BaseSection):
    type: Literal["footer"] = "footer"
    config: FooterConfig = Field(default_factory=FooterConfig)


class FormSection(BaseSection):
    type: Literal["form"] = "form"
    config: FormConfig = Field(default_factory=FormConfig)


class CardSection(BaseSection):
    type: Literal["card"] = "card"
    config: CardConfig = Field(default_factory=CardConfig)


class ButtonSection(BaseSection):
    type: Literal["button"] = "button"
    config: ButtonConfig = Field(default_factory=ButtonConfig)


class UnknownSection(BaseSection):
    """Tipo fora do conjunto fechado; o renderer exibe um placeholder."""

    config: dict[str, Any] = Field(default_factory=dict)


SECTION_MODELS: dict[str, type[BaseSection]] = {
    "header": HeaderSection,
    "hero": HeroSection,
    "features": FeaturesSection,
    "cta": CtaSection,
    "product_showcase": ProductShowcaseSection,
    "text": TextSection,
    "image": ImageSection,
    "store_selector": StoreSelectorSection,
    "divider": DividerSection,
    "login_step": LoginStepSection,
    "footer": FooterSection,
    "form": FormSection,
    "card": CardSection,
    "button": ButtonSection,
}

SECTION_TYPES: frozenset[str] = frozenset(SECTION_MODELS)


def parse_section(raw: Any) -> BaseSection:
    """Converte um descritor JSON de seção na variante tipada.

    Nunca levanta exceção: config ausente/não-objeto vira `{}` e tipos
    desconhecidos viram UnknownSection.

    Args:
        raw: Descritor {id, type, order, config}

    Returns:
        Seção tipada (ou UnknownSection).
    """
    if isinstance(raw, BaseSection):
        return raw

    if not isinstance(raw, dict):
        log_fallback(logger, "section_parser", reason="section_not_object")
        return UnknownSection(type=type(raw).__name__)

    section_type = raw.get("type")
    section_id = raw.get("id")
    config = raw.get("config")
    if not isinstance(config, dict):
        if config is not None:
            log_fallback(
                logger,
                "section_parser",
                reason="config_not_object",
                section_id=str(section_id or ""),
            )
        config = {}

    payload = {"id": section_id, "order": raw.get("order"), "config": config}

    model_cls = SECTION_MODELS.get(section_type) if isinstance(section_type, str) else None
    if model_cls is None:
        return UnknownSection(type=str(section_type or ""), **payload)

    try:
        return model_cls.model_validate(payload)
    except ValidationError:
        log_fallback(
            logger,
            "section_parser",
            reason="section_invalid",
            section_id=str(section_id or ""),
            section_type=section_type,
        )
        return model_cls(id=str(section_id or ""))


def parse_sections(raw_sections: Any) -> list[BaseSection]:
    """Converte e ordena seções: `order` primeiro, posição no array como desempate."""
    if not isinstance(raw_sections, list):
        return []
    parsed = [parse_section(item) for item in raw_sections]
    indexed = list(enumerate(parsed))
    indexed.sort(key=lambda pair: (pair[1].order if pair[1].order is not None else pair[0], pair[0]))
    return [section for _, section in indexed]
