"""SectionRenderer — mapeia seção + tokens + bindings de runtime em UI.

Cada seção é envolvida por dois nós: o externo (largura total) carrega
apenas a cor de fundo; o interno carrega cor de texto, padding, largura
máxima e sombra. Falhas inesperadas de um render viram o placeholder
"Section Error" e a página continua renderizando.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from app.domain.sections import SectionConfig, UnknownSection, parse_section, parse_sections
from app.rendering.nodes import RenderNode, el, text_node
from app.rendering.sections import SECTION_RENDERERS, render_unknown, validate_registry
from app.rendering.steps import render_final_step, render_verification_step
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.domain.sections import BaseSection
    from app.domain.session import FlowSession, VerificationResult
    from app.domain.snapshot import FlowPage
    from app.rendering.context import RenderContext
    from app.rendering.sections import SectionRenderFn

logger = logging.getLogger(__name__)

MAX_CONTENT_WIDTH = "var(--device-width-px, 390px)"
DEFAULT_INVALID_REASON = "This QR code is not valid or has expired. Please check the code and try again."


def _wrapper_config(section: BaseSection) -> SectionConfig:
    config = getattr(section, "config", None)
    if isinstance(config, SectionConfig):
        return config
    try:
        return SectionConfig.model_validate(config if isinstance(config, dict) else {})
    except ValidationError:
        return SectionConfig()


def outer_style(config: SectionConfig) -> dict[str, Any]:
    """Fundo de largura total; sem cor própria a seção herda o fundo da página."""
    return {"backgroundColor": config.background_color or None, "width": "100%"}


def inner_style(section_type: str, config: SectionConfig) -> dict[str, Any]:
    padding = config.padding if config.padding is not None else 4
    if config.drop_shadow and section_type != "image":
        box_shadow = (
            f"{config.shadow_offset_x:g}px {config.shadow_offset_y:g}px "
            f"{config.shadow_blur:g}px {config.shadow_spread:g}px {config.shadow_color}"
        )
    else:
        box_shadow = "none"
    return {
        "color": config.text_color or None,
        "border": "none" if config.background_color else None,
        "padding": f"{padding * 0.25:g}rem",
        "maxWidth": MAX_CONTENT_WIDTH,
        "margin": "0 auto",
        "boxShadow": box_shadow,
    }


def section_error_node(section: BaseSection, message: str) -> RenderNode:
    return el(
        "div",
        el(
            "div",
            RenderNode(tag="span", classes="w-4 h-4", attrs={"data-icon": "alert"}),
            text_node("span", "Section Error", "font-medium text-sm"),
            classes="flex items-center gap-2 text-red-700",
        ),
        el(
            "div",
            text_node("div", f"Type: {section.type}"),
            text_node("div", f"ID: {section.id}"),
            text_node("div", message or "An error occurred while rendering this section", "mt-1 text-red-500"),
            classes="mt-2 text-xs text-red-600",
        ),
        classes="p-4 border border-red-300 bg-red-50/50 rounded",
        attrs={"data-role": "section-error"},
    )


class SectionRenderer:
    """Renderer polimórfico sobre o conjunto fechado de tipos de seção."""

    def __init__(self, renderers: dict[str, SectionRenderFn] | None = None) -> None:
        registry = renderers if renderers is not None else SECTION_RENDERERS
        errors = validate_registry(registry)
        if errors:
            raise ValueError("; ".join(errors))
        self._renderers = registry

    def render(self, section: BaseSection | dict[str, Any], context: RenderContext) -> RenderNode:
        """Renderiza uma seção com o wrapper externo/interno.

        Args:
            section: Seção tipada ou descritor JSON bruto
            context: Tokens, modo e bindings de runtime

        Returns:
            RenderNode; nunca levanta exceção por conteúdo malformado.
        """
        parsed = parse_section(section)
        config = _wrapper_config(parsed)
        inner = el("div", self._render_body(parsed, context), style=inner_style(parsed.type, config))
        return el(
            "div",
            inner,
            style=outer_style(config),
            attrs={"data-section-id": parsed.id, "data-section-type": parsed.type},
        )

    def _render_body(self, section: BaseSection, context: RenderContext) -> RenderNode:
        if isinstance(section, UnknownSection):
            log_fallback(
                logger,
                "section_renderer",
                reason="unknown_section_type",
                section_id=section.id,
                section_type=section.type,
            )
            return render_unknown(section, context)

        render_fn = self._renderers[section.type]
        try:
            return render_fn(section, context)
        except Exception as exc:
            logger.error(
                "section_render_failed",
                extra={
                    "section_id": section.id,
                    "section_type": section.type,
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
            return section_error_node(section, str(exc))

    def render_sections(self, sections: list[Any], context: RenderContext) -> list[RenderNode]:
        """Renderiza em ordem (`order`, depois posição)."""
        return [self.render(section, context) for section in parse_sections(sections)]

    def render_page(self, page: FlowPage, context: RenderContext) -> RenderNode:
        """Página inteira: variáveis CSS dos tokens + seções em ordem."""
        nodes = [self.render(section, context) for section in page.sections]
        style: dict[str, Any] = dict(context.tokens.to_css_variables())
        style["backgroundColor"] = context.tokens.background
        logger.debug(
            "page_rendered",
            extra={"page_id": page.id, "page_type": page.type, "sections_count": len(nodes)},
        )
        return el(
            "div",
            *nodes,
            classes="flow-page min-h-screen",
            style=style,
            attrs={"data-page-id": page.id, "data-page-type": page.type},
        )

    def render_invalid_page(self, reason: str | None = None) -> RenderNode:
        """Tela dedicada da etapa `invalid` (nunca um erro cru)."""
        causes = (
            "The QR code may have expired",
            "The code might be damaged or unreadable",
            "The product may not be from an authorized source",
        )
        return el(
            "div",
            el(
                "div",
                text_node("h1", "Invalid QR Code", "text-2xl font-bold text-red-600"),
                text_node("p", reason or DEFAULT_INVALID_REASON, "text-base mt-2", attrs={"data-role": "invalid-reason"}),
                text_node("h4", "Common causes:", "font-medium"),
                el("ul", *(text_node("li", cause) for cause in causes), classes="space-y-2 text-muted-foreground"),
                classes="w-full max-w-md mx-auto text-center",
            ),
            classes="min-h-screen flex items-center justify-center p-4",
            attrs={"data-role": "invalid-page"},
        )

    def render_verification_result(self, result: VerificationResult | None, context: RenderContext) -> RenderNode:
        """Tela da etapa `authentication` (pendente, pass, warn ou fail)."""
        return render_verification_step(result, context)

    def render_final_page(self, session: FlowSession | None, context: RenderContext) -> RenderNode:
        """Tela da etapa `final_page` com documentos, ofertas e redirect seguro."""
        return render_final_step(session, context)
