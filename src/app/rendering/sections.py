"""Regras de renderização por tipo de seção.

Um render por tipo do conjunto fechado, registrados em
`SECTION_RENDERERS`. Cada função recebe a seção já tipada (config com
defaults aplicados) e o RenderContext, e devolve um RenderNode.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from app.domain.sections import SECTION_TYPES
from app.rendering.card_styles import (
    border_radius_class,
    button_classes,
    card_classes,
    image_drop_shadow_class,
    strip_card_framing,
    text_classes,
    without_shadow,
)
from app.rendering.markup import format_text_markup, is_safe_image_url, is_safe_url
from app.rendering.nodes import RenderNode, el, text_node
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.domain.sections import (
        BaseSection,
        ButtonSection,
        CardSection,
        CtaSection,
        DividerSection,
        FeaturesSection,
        FooterSection,
        FormSection,
        HeaderSection,
        HeroSection,
        ImageSection,
        LoginStepSection,
        ProductShowcaseSection,
        SectionConfig,
        StoreSelectorSection,
        TextSection,
        UnknownSection,
    )
    from app.rendering.context import PurchaseChannel, RenderContext

logger = logging.getLogger(__name__)

SectionRenderFn = Callable[[Any, "RenderContext"], RenderNode]

DEFAULT_ACCENT = "#3b82f6"
OTHER_STORE_VALUE = "other"
OTHER_STORE_LABEL = "Other Store"

LOGIN_DEFAULT_TITLE = "Create your Certified account"
LOGIN_DEFAULT_SUBTITLE = "Access full testing results and member-only offers."


# ──────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────


def _num(value: float) -> str:
    """4.0 → "4"; 2.5 → "2.5"."""
    return f"{value:g}"


def padding_style(config: SectionConfig) -> dict[str, str]:
    """Padding por lado em rem: `paddingTop ?? padding ?? 1`."""
    base = config.padding if config.padding is not None else 1
    sides = {
        "paddingTop": config.padding_top,
        "paddingRight": config.padding_right,
        "paddingBottom": config.padding_bottom,
        "paddingLeft": config.padding_left,
    }
    return {name: f"{_num(value if value is not None else base)}rem" for name, value in sides.items()}


def image_src(url: str | None, section_type: str) -> str | None:
    """URL de imagem utilizável em `src`; esquemas fora da lista viram placeholder."""
    if not url:
        return None
    if not is_safe_image_url(url):
        log_fallback(logger, "section_renderer", reason="unsafe_image_url", section_type=section_type)
        return None
    return url


def padding_class(config: SectionConfig) -> str:
    return f"p-{_num(config.padding if config.padding is not None else 4)}"


def framed_classes(section: BaseSection, ctx: RenderContext) -> str:
    """Folha de card sem enquadramento; imagem nunca mantém `shadow-*`."""
    keep_shadow = bool(getattr(section.config, "drop_shadow", False)) and section.type != "image"
    return strip_card_framing(card_classes(ctx.tokens), keep_shadow=keep_shadow)


def _bind(actions: dict[str, Callable[..., Any]], name: str, handler: Callable[..., Any] | None, *args: Any) -> None:
    if handler is not None:
        actions[name] = lambda *extra: handler(*args, *extra)


def store_option_entries(section: StoreSelectorSection, ctx: RenderContext) -> list[tuple[str, str]]:
    """Opções (valor, rótulo) do seletor de loja.

    Origem: `store_options` do runtime → lista do config → fallback fixo.
    Uma única opção sintética "Other Store" (valor `other`) é sempre anexada;
    entradas fornecidas são mantidas como vieram.
    """
    stores = list(ctx.store_options) or section.config.store_option_list() or list(ctx.fallback_store_options)
    entries = [(store, store) for store in stores]
    entries.append((OTHER_STORE_VALUE, OTHER_STORE_LABEL))
    return entries


# ──────────────────────────────────────────────────────────────
# Renders por tipo
# ──────────────────────────────────────────────────────────────


def render_header(section: HeaderSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    background = "bg-primary" if config.background_color == "primary" else "bg-background"
    node = el("div", classes=f"header-section {padding_class(config)} {background}")
    if config.logo:
        logo_url = image_src(ctx.brand_logo_url, section.type)
        if logo_url:
            logo = RenderNode(tag="img", classes="h-16 object-contain", attrs={"src": logo_url, "alt": "Brand logo"})
        else:
            logo = el(
                "div",
                text_node("span", "LOGO", "text-white font-bold"),
                classes="w-16 h-16 bg-background/20 rounded-lg flex items-center justify-center",
            )
        node.children.append(el("div", logo, classes="flex justify-center", attrs={"data-role": "logo"}))
    return node


def render_hero(section: HeroSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    align = {"center": "text-center", "right": "text-right"}.get(config.align, "")
    node = el("div", classes=f"hero-section {padding_class(config)} {align}")
    if config.title:
        node.children.append(text_node("h1", config.title, "text-2xl font-bold text-foreground mb-2"))
    if config.subtitle:
        node.children.append(text_node("h2", config.subtitle, "text-lg font-medium text-muted-foreground mb-2"))
    if config.description:
        node.children.append(text_node("p", config.description, "text-sm text-muted-foreground"))
    return node


def render_features(section: FeaturesSection, ctx: RenderContext) -> RenderNode:
    items = [
        el(
            "div",
            RenderNode(tag="span", classes="w-5 h-5 text-primary flex-shrink-0", attrs={"data-icon": "check"}),
            text_node("span", item, "text-sm text-foreground"),
            classes="flex items-center gap-3",
            attrs={"data-role": "feature-item"},
        )
        for item in section.config.items
    ]
    return el(
        "div",
        el("div", *items, classes="space-y-3"),
        classes=f"features-section {framed_classes(section, ctx)}",
        style=padding_style(section.config),
    )


def render_cta(section: CtaSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    size = {"lg": "text-lg px-8 py-4", "sm": "text-sm px-4 py-2"}.get(config.size, "")
    background = config.button_color or f"var(--template-{config.color})"

    actions: dict[str, Callable[..., Any]] = {}
    if config.page_id:
        _bind(actions, "click", ctx.on_navigate_to_page, config.page_id)

    button = RenderNode(
        tag="button",
        classes=f"px-6 py-3 rounded-lg font-medium transition-colors {size}",
        style={"backgroundColor": background, "color": config.text_color or "#ffffff"},
        attrs={"data-role": "cta", "data-href": config.url if config.url and is_safe_url(config.url) else None},
        text=config.text or "Click here",
        actions=actions,
    )
    return el("div", button, classes=f"cta-section {framed_classes(section, ctx)} flex justify-center")


def render_product_showcase(section: ProductShowcaseSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    background = "bg-primary/10" if config.background_color == "primary" else "bg-muted"
    src = image_src(config.image_url, section.type)
    if src:
        media = RenderNode(
            tag="img",
            classes="w-32 h-32 object-contain rounded-lg",
            attrs={"src": src, "alt": config.caption or "Product"},
        )
    else:
        media = el(
            "div",
            RenderNode(tag="span", classes="w-12 h-12 text-muted-foreground", attrs={"data-icon": "package"}),
            classes="w-32 h-32 bg-muted border-2 border-dashed border-muted-foreground/30 rounded-lg flex items-center justify-center",
        )
    panel = el("div", el("div", media, classes="flex justify-center"), classes=f"p-6 rounded-lg {background}")
    if config.caption:
        panel.children.append(text_node("p", config.caption, "text-center text-sm text-muted-foreground mt-3"))
    return el(
        "div",
        panel,
        classes=f"product-showcase-section {framed_classes(section, ctx)}",
        style=padding_style(config),
    )


def render_text(section: TextSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    body = RenderNode(
        tag="div",
        classes="prose prose-sm max-w-none",
        style={
            "fontSize": f"{_num(config.font_size)}px",
            "fontWeight": config.font_weight or "normal",
            "textAlign": config.align,
            "color": config.text_color or "inherit",
            "backgroundColor": config.background_color or "transparent",
        },
        attrs={"data-role": "text-body"},
        trusted_html=format_text_markup(config.content),
    )
    return el("div", body, classes=f"text-section {framed_classes(section, ctx)} {padding_class(config)}")


def render_image(section: ImageSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    radius = border_radius_class(ctx.tokens)
    children: list[RenderNode] = []

    src = image_src(config.image_url, section.type)
    if src:
        drop_shadow = image_drop_shadow_class(config.shadow_blur) if config.drop_shadow else ""
        image = RenderNode(
            tag="img",
            classes=f"w-full h-auto {radius} select-none pointer-events-none {drop_shadow}",
            style={
                "maxWidth": f"{_num(config.width)}px" if config.width else "100%",
                "maxHeight": f"{_num(config.height)}px" if config.height else "auto",
            },
            attrs={"src": src, "alt": config.alt or "Section image", "data-role": "image"},
        )
        wrapper_classes = "relative group overflow-visible" if config.drop_shadow else "relative group"
        children.append(el("div", image, classes=wrapper_classes))
    else:
        muted = "" if config.background_color else "bg-muted"
        children.append(
            el(
                "div",
                el(
                    "div",
                    RenderNode(tag="span", classes="h-8 w-8 mx-auto mb-2", attrs={"data-icon": "image"}),
                    text_node("p", "No image selected", "text-sm"),
                    classes="text-center text-muted-foreground",
                ),
                classes=f"w-full h-32 {muted} {radius} flex items-center justify-center",
                attrs={"data-role": "image-placeholder"},
            )
        )

    if config.caption:
        children.append(
            text_node(
                "p",
                config.caption,
                "text-sm text-center",
                style={"color": config.text_color or "#666666"},
            )
        )

    return el(
        "div",
        el("div", *children, classes="space-y-2"),
        classes=f"image-section {framed_classes(section, ctx)}",
        style=padding_style(config),
    )


def render_store_selector(section: StoreSelectorSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    accent = config.border_color or ctx.accent_color() or DEFAULT_ACCENT
    ring = config.focus_border_color or ctx.accent_color() or DEFAULT_ACCENT

    controlled = ctx.is_store_controlled
    local = None if controlled else ctx.store_state(section.id)
    if local is None:
        channel = ctx.purchase_channel or ""
        selected = ctx.selected_store or ""
    else:
        channel = local.purchase_channel
        selected = local.selected_store

    on_channel = ctx.on_purchase_channel_change
    on_store = ctx.on_selected_store_change

    def change_channel(value: PurchaseChannel) -> Any:
        if local is not None:
            local.purchase_channel = value
            local.selected_store = ""
            return None
        return on_channel(value) if on_channel is not None else None

    def change_store(value: str) -> Any:
        if local is not None:
            local.selected_store = value
            return None
        return on_store(value) if on_store is not None else None

    node = el("div", classes="store-selector-section space-y-4", attrs={"data-controlled": controlled})

    if not channel:
        base = "w-full h-10 px-4 py-2 rounded-md text-sm font-medium inline-flex items-center justify-center gap-2"
        in_store = RenderNode(
            tag="button",
            classes=base,
            style={"backgroundColor": accent, "color": "white", "border": f"1px solid {accent}", "--tw-ring-color": ring},
            attrs={"data-role": "channel-option", "data-value": "in-store"},
            text="In-store",
            actions={"click": lambda: change_channel("in-store")},
        )
        online = RenderNode(
            tag="button",
            classes=base,
            style={"backgroundColor": "transparent", "color": accent, "border": f"1px solid {accent}", "--tw-ring-color": ring},
            attrs={"data-role": "channel-option", "data-value": "online"},
            text="Online",
            actions={"click": lambda: change_channel("online")},
        )
        node.children.append(el("div", in_store, online, classes="space-y-3"))
        return node

    options = [
        RenderNode(
            tag="option",
            attrs={"value": value, "selected": value == selected, "data-role": "store-option"},
            text=label,
        )
        for value, label in store_option_entries(section, ctx)
    ]
    select = RenderNode(
        tag="select",
        attrs={"id": f"store-{section.id}", "data-role": "store-select", "data-value": selected},
        children=[RenderNode(tag="option", attrs={"value": "", "disabled": True, "selected": not selected}, text=config.placeholder), *options],
        actions={"change": change_store},
    )
    node.children.append(
        el(
            "div",
            el(
                "div",
                text_node("span", "Purchase channel:"),
                text_node("span", "In-store" if channel == "in-store" else "Online", "font-medium", attrs={"data-role": "channel-label"}),
                RenderNode(
                    tag="button",
                    classes="text-xs underline h-auto p-0",
                    attrs={"data-role": "channel-change"},
                    text="Change",
                    actions={"click": lambda: change_channel("")},
                ),
                classes="flex items-center gap-2 text-sm text-muted-foreground",
            ),
            el("div", text_node("label", config.label, attrs={"for": f"store-{section.id}"}), select),
            classes="space-y-4",
        )
    )
    return node


def render_divider(section: DividerSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    rule = RenderNode(
        tag="hr",
        classes="border-0",
        style={
            "height": f"{_num(config.thickness or 1)}px",
            "backgroundColor": config.color or "#e5e7eb",
            "width": f"{_num(config.width or 100)}%",
            "margin": "0" if config.full_width else "0 auto",
        },
    )
    return el("div", rule, classes=f"divider-section {framed_classes(section, ctx)}", style=padding_style(config))


def render_login_step(section: LoginStepSection, ctx: RenderContext) -> RenderNode:
    """Delega ao LoginStepHandler; o renderer só expõe estado e ações."""
    config = section.config
    handler = ctx.login_handler(section.id)
    show_email = True if ctx.is_preview else config.show_email
    show_apple = True if ctx.is_preview else config.show_apple
    busy = handler.is_busy

    body = el("div", classes="space-y-4")
    body.children.append(text_node("h2", config.title or LOGIN_DEFAULT_TITLE, "text-xl font-bold text-center"))
    body.children.append(text_node("p", config.subtitle or LOGIN_DEFAULT_SUBTITLE, "text-sm text-muted-foreground text-center"))
    if handler.error:
        body.children.append(text_node("div", handler.error, "text-sm text-destructive", attrs={"data-role": "auth-error"}))

    body.children.append(
        RenderNode(
            tag="button",
            classes="w-full",
            attrs={"data-role": "auth-google", "disabled": busy},
            text="Continue with Google",
            actions={"click": handler.continue_with_google},
        )
    )
    if show_apple:
        body.children.append(
            RenderNode(
                tag="button",
                classes="w-full",
                attrs={"data-role": "auth-apple", "disabled": busy},
                text="Continue with Apple",
                actions={"click": handler.continue_with_apple},
            )
        )

    if show_email:
        fields = [
            RenderNode(tag="input", attrs={"type": "email", "name": "email", "placeholder": "Email", "data-role": "auth-email"}),
            RenderNode(tag="input", attrs={"type": "password", "name": "password", "placeholder": "Password", "data-role": "auth-password"}),
        ]
        if handler.is_sign_up:
            fields.append(
                RenderNode(
                    tag="input",
                    attrs={"type": "password", "name": "confirm_password", "placeholder": "Confirm Password", "data-role": "auth-confirm"},
                )
            )
        body.children.append(
            el(
                "div",
                text_node("span", "or", "text-xs text-muted-foreground"),
                *fields,
                RenderNode(
                    tag="button",
                    classes="w-full",
                    attrs={"data-role": "auth-submit", "disabled": busy},
                    text="Create Account" if handler.is_sign_up else "Sign In",
                    actions={"click": handler.submit_email},
                ),
                RenderNode(
                    tag="button",
                    classes="text-sm underline",
                    attrs={"data-role": "auth-toggle"},
                    text="Already have an account? Sign in" if handler.is_sign_up else "Don't have an account? Sign up",
                    actions={"click": handler.toggle_mode},
                ),
                classes="space-y-3",
                attrs={"data-role": "auth-email-form"},
            )
        )

    consent = el(
        "label",
        RenderNode(
            tag="input",
            attrs={"type": "checkbox", "checked": handler.marketing_opt_in, "data-role": "auth-opt-in"},
            actions={"change": handler.set_marketing_opt_in},
        ),
        RenderNode(
            tag="span",
            classes="text-xs text-muted-foreground",
            trusted_html=(
                f"Share my details with <strong>{html.escape(config.brand_name or 'this brand')}</strong>"
                " for updates &amp; offers"
            ),
        ),
        classes="flex items-start gap-2",
    )
    body.children.append(consent)

    return el(
        "div",
        body,
        classes=f"login-step-section {framed_classes(section, ctx)}",
        style=padding_style(config),
        attrs={"data-role": "login-step"},
        actions={"view": handler.mark_viewed},
    )


def render_footer(section: FooterSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    background = None if config.background_color == "transparent" else config.background_color
    footer = el(
        "div",
        text_node(
            "span",
            config.text or "Powered by Panacea",
            "object-contain opacity-80",
            style={"width": f"{_num(config.logo_size or 120)}px"},
            attrs={"data-role": "footer-logo"},
        ),
        classes="mt-8 pt-6 border-t border-border/50 flex justify-center",
        style={"backgroundColor": background},
    )
    return el("div", footer, classes="footer-section", style=padding_style(config))


def render_form(section: FormSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    node = el("form", classes=f"form-section {framed_classes(section, ctx)} space-y-3", style=padding_style(config))
    if config.title:
        node.children.append(text_node("h3", config.title, "text-lg font-semibold"))

    for form_field in config.fields:
        actions: dict[str, Callable[..., Any]] = {}
        _bind(actions, "change", ctx.on_form_change, form_field.id)
        value = ctx.form_values.get(form_field.id, "")
        if form_field.type == "textarea":
            control = RenderNode(
                tag="textarea",
                attrs={"name": form_field.id, "placeholder": form_field.placeholder, "required": form_field.required},
                text=value,
                actions=actions,
            )
        else:
            control = RenderNode(
                tag="input",
                attrs={
                    "type": form_field.type,
                    "name": form_field.id,
                    "placeholder": form_field.placeholder,
                    "value": value,
                    "required": form_field.required,
                },
                actions=actions,
            )
        node.children.append(
            el(
                "div",
                text_node("label", form_field.label, "text-sm font-medium", attrs={"for": form_field.id}),
                control,
                attrs={"data-role": "form-field", "data-field-id": form_field.id},
            )
        )

    submit_actions: dict[str, Callable[..., Any]] = {}
    _bind(submit_actions, "click", ctx.on_next)
    node.children.append(
        RenderNode(
            tag="button",
            classes=f"w-full {button_classes(ctx.tokens)} {border_radius_class(ctx.tokens)}",
            attrs={"type": "submit", "data-role": "form-submit"},
            text=config.submit_text or "Submit",
            actions=submit_actions,
        )
    )
    return node


def render_card(section: CardSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    classes = card_classes(ctx.tokens) if config.drop_shadow else without_shadow(card_classes(ctx.tokens))
    node = el("div", classes=f"card-section {classes} {border_radius_class(ctx.tokens)} {padding_class(config)} space-y-2")
    src = image_src(config.image_url, section.type)
    if src:
        node.children.append(
            RenderNode(tag="img", classes=f"w-full {border_radius_class(ctx.tokens)}", attrs={"src": src, "alt": config.title})
        )
    if config.title:
        node.children.append(text_node("h3", config.title, f"text-lg font-semibold {text_classes(ctx.tokens)}"))
    if config.content:
        node.children.append(text_node("p", config.content, "text-sm text-muted-foreground"))
    return node


def render_button(section: ButtonSection, ctx: RenderContext) -> RenderNode:
    config = section.config
    variant = "border border-primary text-primary" if config.variant == "outline" else button_classes(ctx.tokens)
    classes = f"w-full px-4 py-2 font-medium {variant} {border_radius_class(ctx.tokens)}"

    if config.action == "link":
        href = config.url if config.url and is_safe_url(config.url) else None
        link = RenderNode(tag="a", classes=classes, attrs={"href": href, "data-role": "button"}, text=config.text)
        return el("div", link, classes=f"button-section {padding_class(config)}")

    actions: dict[str, Callable[..., Any]] = {}
    if config.action == "next":
        _bind(actions, "click", ctx.on_next)
    elif config.action == "prev":
        _bind(actions, "click", ctx.on_prev)
    elif config.page_id:
        _bind(actions, "click", ctx.on_navigate_to_page, config.page_id)

    button = RenderNode(tag="button", classes=classes, attrs={"data-role": "button"}, text=config.text, actions=actions)
    return el("div", button, classes=f"button-section {padding_class(config)}")


def render_unknown(section: UnknownSection, ctx: RenderContext) -> RenderNode:
    """Placeholder marcado para tipos fora do conjunto fechado."""
    padding = section.config.get("padding")
    padding_value = padding if isinstance(padding, int | float) and not isinstance(padding, bool) else 4
    node = el(
        "div",
        el(
            "div",
            RenderNode(tag="span", classes="w-4 h-4", attrs={"data-icon": "alert"}),
            text_node("span", "Unknown Section Type", "font-medium text-sm"),
            classes="flex items-center gap-2 text-orange-700",
        ),
        el(
            "div",
            text_node("div", f"Type: {section.type}"),
            text_node("div", f"ID: {section.id}"),
            classes="mt-2 text-xs text-orange-600",
        ),
        classes=f"p-{_num(padding_value)} {card_classes(ctx.tokens)} border border-dashed border-orange-300 bg-orange-50/50",
        attrs={"data-role": "unknown-section"},
    )
    if not ctx.is_preview:
        node.children[1].children.append(
            text_node(
                "div",
                "This section type is not recognized. Please check the section configuration.",
                "mt-1 text-orange-500",
            )
        )
    return node


SECTION_RENDERERS: dict[str, SectionRenderFn] = {
    "header": render_header,
    "hero": render_hero,
    "features": render_features,
    "cta": render_cta,
    "product_showcase": render_product_showcase,
    "text": render_text,
    "image": render_image,
    "store_selector": render_store_selector,
    "divider": render_divider,
    "login_step": render_login_step,
    "footer": render_footer,
    "form": render_form,
    "card": render_card,
    "button": render_button,
}


def validate_registry(renderers: dict[str, SectionRenderFn] | None = None) -> list[str]:
    """Confere que o registro cobre exatamente o conjunto fechado de tipos.

    Returns:
        Lista de erros (vazia se o registro é exaustivo)
    """
    registered = set(renderers if renderers is not None else SECTION_RENDERERS)
    errors = [f"Tipo sem renderer: {name}" for name in sorted(SECTION_TYPES - registered)]
    errors.extend(f"Renderer para tipo desconhecido: {name}" for name in sorted(registered - SECTION_TYPES))
    return errors
