"""Modelos de domínio do motor de fluxo de certificação."""

from app.domain.sections import (
    SECTION_MODELS,
    SECTION_TYPES,
    BaseSection,
    SectionConfig,
    UnknownSection,
    parse_section,
    parse_sections,
)
from app.domain.session import (
    AuthUser,
    BrandRef,
    CampaignRef,
    FlowSession,
    FlowSessionStatus,
    GeoLocation,
    StoreMetadata,
    VerificationResult,
)
from app.domain.snapshot import (
    FlowPage,
    FlowRecord,
    FlowTemplateSnapshot,
    LegacyContentRow,
    TemplateRecord,
)
from app.domain.style_tokens import StyleTokens

__all__ = [
    "SECTION_MODELS",
    "SECTION_TYPES",
    "AuthUser",
    "BaseSection",
    "BrandRef",
    "CampaignRef",
    "FlowPage",
    "FlowRecord",
    "FlowSession",
    "FlowSessionStatus",
    "FlowTemplateSnapshot",
    "GeoLocation",
    "LegacyContentRow",
    "SectionConfig",
    "StoreMetadata",
    "StyleTokens",
    "TemplateRecord",
    "UnknownSection",
    "VerificationResult",
    "parse_section",
    "parse_sections",
]
