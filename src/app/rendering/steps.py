"""Telas fixas das etapas `authentication` e `final_page`.

Diferente das páginas montadas no editor, estas telas têm texto fixo e
dependem apenas do resultado da verificação e da sessão. As ações dos
botões chamam os hooks do RenderContext; sem hook, o botão fica inerte.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from app.rendering.markup import is_safe_url
from app.rendering.nodes import RenderNode, el, text_node
from config.logging import log_fallback

if TYPE_CHECKING:
    from app.domain.session import FlowSession, VerificationResult
    from app.rendering.context import RenderContext

logger = logging.getLogger(__name__)

VERIFICATION_CHECKS = (
    "QR code authenticity check",
    "Batch validation",
    "Store location verification",
    "Expiration date validation",
)

FAIL_GUIDANCE = (
    "This product may not be authentic",
    "Contact the brand directly for assistance",
    "Keep your receipt for reference",
)

# (doc_type, título, descrição)
DOCUMENTS = (
    ("coa", "Certificate of Analysis (COA)", "Official lab analysis and potency results"),
    ("test_results", "Third-Party Test Results", "Independent lab verification reports"),
    ("authenticity_cert", "Authenticity Certificate", "Official verification document"),
)

# (sku, nome, detalhe, preço, selo)
UPSELL_PRODUCTS = (
    ("premium-gummies", "Premium Gummies", "25mg THC • 30 count", "$45.99", "New"),
    ("tincture-oil", "Full Spectrum Tincture", "1000mg CBD • 30ml", "$89.99", "Bestseller"),
)

_RESULT_COPY = {
    "pass": ("Product Verified Successfully", "text-green-600"),
    "warn": ("Product Verified with Warnings", "text-yellow-600"),
}


def _on_click(handler: Callable[..., Any] | None, *args: Any) -> dict[str, Callable[..., Any]]:
    if handler is None:
        return {}
    return {"click": lambda: handler(*args)}


def _button(label: str, role: str, handler: Callable[..., Any] | None, *args: Any, classes: str = "") -> RenderNode:
    return RenderNode(
        tag="button",
        classes=f"w-full {classes}".strip(),
        attrs={"type": "button", "data-role": role},
        text=label,
        actions=_on_click(handler, *args),
    )


def _batch_details(batch_info: dict[str, Any]) -> RenderNode:
    rows = [
        el(
            "div",
            text_node("span", f"{label}:", "text-muted-foreground"),
            text_node("span", str(batch_info.get(key) or ""), "font-mono" if key == "batch_id" else ""),
            classes="flex justify-between text-sm",
        )
        for key, label in (("batch_id", "Batch ID"), ("name", "Name"), ("status", "Status"))
    ]
    return el(
        "div",
        text_node("h4", "Batch Information", "font-medium"),
        el("div", *rows, classes="bg-muted/50 p-3 rounded-lg space-y-2"),
        classes="space-y-3",
        attrs={"data-role": "batch-info"},
    )


def _screen(*children: RenderNode, role: str) -> RenderNode:
    return el(
        "div",
        el("div", *children, classes="w-full max-w-md mx-auto space-y-6"),
        classes="min-h-screen flex items-center justify-center p-4",
        attrs={"data-role": role},
    )


def render_verification_step(result: VerificationResult | None, ctx: RenderContext) -> RenderNode:
    """Tela da etapa `authentication` antes e depois da verificação.

    Sem resultado: lista de checagens e botão "Start Verification".
    `pass`/`warn`: título, motivos e botões Back/Continue.
    `fail`: tela de produto não verificado com orientação e "Go Back".
    """
    if result is None:
        return _screen(
            text_node("h1", "Product Authentication", "text-2xl font-bold text-center"),
            text_node(
                "p",
                "We'll now verify your product's authenticity using advanced security checks.",
                "text-base text-center",
            ),
            text_node("h4", "Verification includes:", "font-medium"),
            el("ul", *(text_node("li", check) for check in VERIFICATION_CHECKS), classes="space-y-1 text-sm"),
            _button("Start Verification", "start-verification", ctx.on_run_verification),
            role="verification-pending",
        )

    reasons = ", ".join(result.reasons)
    if result.result == "fail":
        children = [
            text_node("h1", "Product Not Verified", "text-2xl font-bold text-red-600 text-center"),
            text_node("p", "We were unable to verify the authenticity of this product.", "text-base text-center"),
        ]
        if reasons:
            children.append(
                text_node(
                    "div", f"Issues found: {reasons}", "text-red-800", attrs={"data-role": "verification-reasons"}
                )
            )
        children.extend(
            [
                text_node("h4", "What this means:", "font-medium"),
                el("ul", *(text_node("li", item) for item in FAIL_GUIDANCE), classes="space-y-1 text-sm"),
                text_node("p", "Contact brand support for assistance with this product verification.", "text-sm"),
                _button("Contact Support", "contact-support", None, classes="border"),
                _button("Go Back", "step-prev", ctx.on_prev, classes="border"),
            ]
        )
        return _screen(*children, role="verification-fail")

    title, color = _RESULT_COPY[result.result]
    if result.result == "pass":
        description = "Your product has been successfully authenticated. All checks passed."
    else:
        description = f"Your product is authentic but has some warnings: {reasons}"
    children = [
        text_node("h1", title, f"text-2xl font-bold text-center {color}"),
        text_node("p", description, "text-base text-center"),
    ]
    if result.batch_info:
        children.append(_batch_details(result.batch_info))
    if result.result == "warn" and reasons:
        children.append(
            text_node("div", f"Warnings: {reasons}", "text-yellow-800", attrs={"data-role": "verification-reasons"})
        )
    children.append(
        el(
            "div",
            _button("Back", "step-prev", ctx.on_prev, classes="border"),
            _button("Continue", "step-next", ctx.on_next),
            classes="flex gap-3",
        )
    )
    return _screen(*children, role=f"verification-{result.result}")


def render_final_step(session: FlowSession | None, ctx: RenderContext) -> RenderNode:
    """Tela final: selo de autenticidade, documentos, ofertas e redirect da campanha."""
    brand_name = session.brand.name if session else ""
    verification = session.verification if session else None

    header = el(
        "div",
        text_node("h1", "Verified Authentic", "text-3xl font-bold text-green-600"),
        text_node("p", f"This product has been successfully verified as authentic from {brand_name}", "text-lg mt-2"),
        classes="text-center",
    )
    if verification is not None:
        header.children.append(
            text_node(
                "span",
                f"Verification: {verification.result.upper()}",
                "text-sm px-4 py-1 rounded-full",
                attrs={"data-role": "verification-badge"},
            )
        )
    children = [header]
    if verification is not None and verification.batch_info:
        children.append(_batch_details(verification.batch_info))

    documents = [
        RenderNode(
            tag="button",
            classes="justify-between h-auto p-4 border",
            attrs={"type": "button", "data-role": "document", "data-doc-type": doc_type},
            children=[
                text_node("div", title, "font-medium"),
                text_node("div", detail, "text-sm text-muted-foreground"),
            ],
            actions=_on_click(ctx.on_open_document, doc_type),
        )
        for doc_type, title, detail in DOCUMENTS
    ]
    children.append(
        el("div", text_node("h2", "Certificates & Test Results", "text-xl"), *documents, classes="grid gap-3")
    )

    products = [
        RenderNode(
            tag="div",
            classes="border rounded-lg p-4 cursor-pointer",
            attrs={"data-role": "upsell", "data-sku": sku},
            children=[
                text_node("h4", name, "font-medium"),
                text_node("p", detail, "text-sm text-muted-foreground"),
                text_node("span", price, "font-semibold"),
                text_node("span", badge, "text-xs"),
            ],
            actions=_on_click(ctx.on_upsell_click, sku),
        )
        for sku, name, detail, price, badge in UPSELL_PRODUCTS
    ]
    children.append(
        el(
            "div",
            text_node("h2", f"Exclusive Products from {brand_name}", "text-xl"),
            el("div", *products, classes="grid gap-4 md:grid-cols-2"),
            _button(f"Shop All {brand_name} Products", "upsell", ctx.on_upsell_click, "brand-store"),
            _button(
                "Get Exclusive Offers & Updates", "upsell", ctx.on_upsell_click, "newsletter-signup", classes="border"
            ),
            classes="space-y-4",
        )
    )

    redirect_url = session.campaign.final_redirect_url if session else None
    if redirect_url:
        if is_safe_url(redirect_url):
            children.append(
                RenderNode(
                    tag="a",
                    attrs={
                        "href": redirect_url,
                        "target": "_blank",
                        "rel": "noopener noreferrer",
                        "data-role": "final-redirect",
                    },
                    text=f"Visit {brand_name}",
                )
            )
        else:
            log_fallback(logger, "final_page", reason="unsafe_redirect_url")

    return el(
        "div",
        el("div", *children, classes="max-w-2xl mx-auto space-y-6"),
        classes="min-h-screen p-4",
        attrs={"data-role": "final-page"},
    )
