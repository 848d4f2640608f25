"""Renderização de seções de página em árvores de RenderNode."""

from app.rendering.card_styles import (
    border_radius_class,
    card_classes,
    image_drop_shadow_class,
    shadow_class,
    strip_card_framing,
)
from app.rendering.context import RenderContext, StoreSelectionState
from app.rendering.markup import format_text_markup
from app.rendering.nodes import RenderNode
from app.rendering.renderer import SectionRenderer
from app.rendering.sections import SECTION_RENDERERS, store_option_entries, validate_registry

__all__ = [
    "SECTION_RENDERERS",
    "RenderContext",
    "RenderNode",
    "SectionRenderer",
    "StoreSelectionState",
    "border_radius_class",
    "card_classes",
    "format_text_markup",
    "image_drop_shadow_class",
    "shadow_class",
    "store_option_entries",
    "strip_card_framing",
    "validate_registry",
]
