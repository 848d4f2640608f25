"""Tokens de estilo totalmente resolvidos usados pelo renderer.

Todos os campos são obrigatórios: a resolução garante um valor base para
cada chave, então nenhum consumidor precisa de fallback próprio.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Literal

BackgroundStyle = Literal["solid", "gradient", "pattern"]
ColorScheme = Literal["primary", "secondary", "monochrome", "vibrant"]
BorderStyle = Literal["rounded", "sharp", "soft"]
DividerStyle = Literal["line", "gradient", "decorative", "none"]
CardStyle = Literal["elevated", "flat", "bordered", "glass"]
Spacing = Literal["compact", "comfortable", "spacious"]
LogoSize = Literal["small", "medium", "large", "60"]
ShadowLevel = Literal["none", "subtle", "elevated", "strong"]

# Chave snake_case -> chave camelCase usada nos documentos JSON de design
TOKEN_KEYS: dict[str, str] = {
    "primary": "primary",
    "secondary": "secondary",
    "accent": "accent",
    "background": "background",
    "foreground": "foreground",
    "text_primary": "textPrimary",
    "text_secondary": "textSecondary",
    "text_muted": "textMuted",
    "background_style": "backgroundStyle",
    "color_scheme": "colorScheme",
    "border_style": "borderStyle",
    "divider_style": "dividerStyle",
    "card_style": "cardStyle",
    "spacing": "spacing",
    "border_radius": "borderRadius",
    "logo_size": "logoSize",
    "shadow_level": "shadowLevel",
}

COLOR_KEYS: frozenset[str] = frozenset(
    {
        "primary",
        "secondary",
        "accent",
        "background",
        "foreground",
        "text_primary",
        "text_secondary",
        "text_muted",
    }
)

# Conjunto fechado de valores aceitos por chave enumerada
ENUM_VALUES: dict[str, frozenset[str]] = {
    "background_style": frozenset({"solid", "gradient", "pattern"}),
    "color_scheme": frozenset({"primary", "secondary", "monochrome", "vibrant"}),
    "border_style": frozenset({"rounded", "sharp", "soft"}),
    "divider_style": frozenset({"line", "gradient", "decorative", "none"}),
    "card_style": frozenset({"elevated", "flat", "bordered", "glass"}),
    "spacing": frozenset({"compact", "comfortable", "spacious"}),
    "logo_size": frozenset({"small", "medium", "large", "60"}),
    "shadow_level": frozenset({"none", "subtle", "elevated", "strong"}),
}


@dataclass(frozen=True, slots=True)
class StyleTokens:
    """Conjunto plano de constantes visuais de um fluxo."""

    # Cores
    primary: str
    secondary: str
    accent: str
    background: str
    foreground: str
    text_primary: str
    text_secondary: str
    text_muted: str

    # Design
    background_style: BackgroundStyle
    color_scheme: ColorScheme
    border_style: BorderStyle
    divider_style: DividerStyle
    card_style: CardStyle
    spacing: Spacing

    # Layout
    border_radius: str
    logo_size: LogoSize
    shadow_level: ShadowLevel

    def to_dict(self) -> dict[str, str]:
        """Serializa com as chaves camelCase do documento de design."""
        return {TOKEN_KEYS[key]: value for key, value in asdict(self).items()}

    def brand_colors(self) -> dict[str, str]:
        """Trio de cores repassado ao renderer como `brand_colors`."""
        return {"primary": self.primary, "secondary": self.secondary, "accent": self.accent}

    def to_css_variables(self) -> dict[str, str]:
        """Variáveis CSS injetadas no container do fluxo."""
        return {
            "--template-primary": self.primary,
            "--template-secondary": self.secondary,
            "--template-accent": self.accent,
            "--template-background": self.background,
            "--template-foreground": self.foreground,
            "--radius": self.border_radius,
        }
