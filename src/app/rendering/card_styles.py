"""Tabelas de classes utilitárias derivadas dos tokens de estilo.

O "card" é a folha de estilo reutilizável aplicada às seções. Seções que
desenham o próprio enquadramento (texto, imagem) removem dela fundo,
borda e desfoque via `strip_card_framing`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.style_tokens import StyleTokens

CARD_CLASSES: dict[str, str] = {
    "glass": "bg-white/10 backdrop-blur-sm border border-white/20 shadow-lg",
    "bordered": "bg-card border border-primary/20 shadow-sm",
    "flat": "bg-background border-l-4 border-l-primary",
    "elevated": "bg-card border border-border shadow-sm",
}

BORDER_RADIUS_CLASSES: dict[str, str] = {
    "rounded": "rounded-lg",
    "sharp": "rounded-none",
    "soft": "rounded-md",
}

SHADOW_CLASSES: dict[str, str] = {
    "elevated": "shadow-lg",
    "subtle": "shadow-sm",
    "strong": "shadow-xl",
    "none": "",
}

BUTTON_CLASSES: dict[str, str] = {
    "vibrant": "bg-gradient-to-r from-primary to-accent hover:from-primary/90 hover:to-accent/90",
    "monochrome": "border border-primary text-primary hover:bg-primary hover:text-primary-foreground",
}
DEFAULT_BUTTON_CLASSES = "bg-primary hover:bg-primary/90 text-primary-foreground"

_SHADOW = re.compile(r"shadow-\w+")
_BACKGROUND = re.compile(r"\bbg-\S+")
_BORDER = re.compile(r"\bborder\S*")
_BACKDROP = re.compile(r"\bbackdrop-blur\S*")
_GRADIENT_STOPS = re.compile(r"\bfrom-\S+\b|\bto-\S+\b|\bvia-\S+\b")


def card_classes(tokens: StyleTokens) -> str:
    return CARD_CLASSES.get(tokens.card_style, CARD_CLASSES["elevated"])


def border_radius_class(tokens: StyleTokens) -> str:
    return BORDER_RADIUS_CLASSES.get(tokens.border_style, "rounded-md")


def shadow_class(tokens: StyleTokens) -> str:
    return SHADOW_CLASSES.get(tokens.shadow_level, "shadow-sm")


def button_classes(tokens: StyleTokens) -> str:
    return BUTTON_CLASSES.get(tokens.color_scheme, DEFAULT_BUTTON_CLASSES)


def text_classes(tokens: StyleTokens) -> str:
    if tokens.color_scheme == "monochrome":
        return "text-foreground font-medium"
    return "text-foreground"


def without_shadow(classes: str) -> str:
    return " ".join(_SHADOW.sub("", classes).split())


def strip_card_framing(classes: str, *, keep_shadow: bool) -> str:
    """Remove fundo, borda, desfoque e gradiente da folha de card.

    Args:
        classes: Classes do card resolvidas pelos tokens
        keep_shadow: False remove também as classes `shadow-*`

    Returns:
        Classes restantes (ex: arredondamento), normalizadas.
    """
    if not keep_shadow:
        classes = _SHADOW.sub("", classes)
    for pattern in (_BACKGROUND, _BORDER, _BACKDROP, _GRADIENT_STOPS):
        classes = pattern.sub("", classes)
    return " ".join(classes.split())


def image_drop_shadow_class(blur: float) -> str:
    """Classe de drop-shadow da imagem, escolhida pelo desfoque configurado."""
    if blur <= 4:
        return "drop-shadow-sm"
    if blur <= 8:
        return "drop-shadow"
    if blur <= 16:
        return "drop-shadow-lg"
    return "drop-shadow-xl"
