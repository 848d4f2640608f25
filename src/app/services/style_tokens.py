"""Resolução de tokens de estilo em quatro camadas.

Ordem de prioridade (esquerda → direita, a última vence):
    defaults base → defaults da família de template → designConfig do
    snapshot → `locked_design_tokens` da campanha.

Uma camada só sobrescreve as chaves que fornece com valor presente:
string não vazia para cores/medidas, valor do conjunto fechado para enums.
Função pura; logs são apenas informativos.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from app.domain.style_tokens import COLOR_KEYS, ENUM_VALUES, TOKEN_KEYS, StyleTokens

logger = logging.getLogger(__name__)

BASE_DEFAULTS = StyleTokens(
    primary="hsl(221.2 83.2% 53.3%)",
    secondary="hsl(210 40% 98%)",
    accent="hsl(210 40% 98%)",
    background="hsl(0 0% 100%)",
    foreground="hsl(222.2 84% 4.9%)",
    text_primary="hsl(222.2 84% 4.9%)",
    text_secondary="hsl(215.4 16.3% 46.9%)",
    text_muted="hsl(215.4 16.3% 46.9%)",
    background_style="solid",
    color_scheme="primary",
    border_style="rounded",
    divider_style="line",
    card_style="elevated",
    spacing="comfortable",
    border_radius="0.5rem",
    logo_size="medium",
    shadow_level="elevated",
)

TEMPLATE_DEFAULTS: dict[str, dict[str, str]] = {
    "classic": {
        "colorScheme": "primary",
        "cardStyle": "elevated",
        "borderStyle": "rounded",
    },
    "modern": {
        "colorScheme": "vibrant",
        "cardStyle": "glass",
        "borderStyle": "soft",
    },
    "minimal": {
        "colorScheme": "monochrome",
        "cardStyle": "flat",
        "borderStyle": "sharp",
        "spacing": "spacious",
    },
}


def normalize_color(value: Any) -> str:
    """Normaliza uma cor (hex/HSL/nomeada) para o token.

    Sem conversão de espaço de cor: hex e HSL passam inalterados (apenas
    espaços nas bordas são removidos). Não-strings viram vazio.
    """
    if not isinstance(value, str):
        return ""
    return value.strip()


def _override_value(key: str, raw: Any) -> str | None:
    """Valor aceito para `key`, ou None se a camada não deve sobrescrever."""
    if key in COLOR_KEYS:
        color = normalize_color(raw)
        return color or None

    if key in ENUM_VALUES:
        # logoSize aceita o número 60 legado além da string
        candidate = str(raw) if isinstance(raw, int | str) and not isinstance(raw, bool) else None
        if candidate in ENUM_VALUES[key]:
            return candidate
        return None

    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def merge_tokens(base: StyleTokens, override: Any) -> StyleTokens:
    """Aplica uma camada sobre `base`; camadas que não são objeto são ignoradas."""
    if not isinstance(override, dict):
        return base

    changes: dict[str, str] = {}
    for key, json_key in TOKEN_KEYS.items():
        if json_key not in override:
            continue
        value = _override_value(key, override[json_key])
        if value is not None:
            changes[key] = value
        elif override[json_key] not in (None, ""):
            logger.debug(
                "style_token_override_ignored",
                extra={"token": json_key, "value_type": type(override[json_key]).__name__},
            )

    return replace(base, **changes) if changes else base


def _field(source: Any, name: str) -> Any:
    """Lê `name` de dict ou de objeto (modelo pydantic, dataclass)."""
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


def find_design_config(flow_snapshot: Any) -> dict[str, Any] | None:
    """Localiza o designConfig do snapshot.

    Ordem: `designConfig` → `flow_config.designConfig` →
    `published_snapshot.designConfig`; o primeiro presente vence.
    """
    if flow_snapshot is None:
        return None

    candidates = (
        _field(flow_snapshot, "designConfig") or _field(flow_snapshot, "design_config"),
        _field(_field(flow_snapshot, "flow_config"), "designConfig"),
        _field(_field(flow_snapshot, "published_snapshot"), "designConfig"),
    )
    for candidate in candidates:
        if isinstance(candidate, dict) and candidate:
            return candidate
    return None


def resolve_style_tokens(
    campaign: Any = None,
    flow_snapshot: Any = None,
    template_id: str | None = None,
) -> StyleTokens:
    """Resolve o conjunto completo de tokens para um fluxo.

    Args:
        campaign: Campanha (dict ou objeto) com `locked_design_tokens` opcional
        flow_snapshot: Snapshot/registro de fluxo com designConfig opcional
        template_id: Família de design ("classic", "modern", "minimal")

    Returns:
        StyleTokens com todas as chaves definidas.
    """
    tokens = BASE_DEFAULTS

    if template_id and template_id in TEMPLATE_DEFAULTS:
        tokens = merge_tokens(tokens, TEMPLATE_DEFAULTS[template_id])
    elif template_id:
        logger.debug("style_template_unknown", extra={"template_id": template_id})

    design_config = find_design_config(flow_snapshot)
    if design_config:
        tokens = merge_tokens(tokens, design_config)

    locked = _field(campaign, "locked_design_tokens")
    if locked:
        tokens = merge_tokens(tokens, locked)

    logger.info(
        "style_tokens_resolved",
        extra={
            "campaign_id": _field(campaign, "id"),
            "template_id": template_id,
            "has_flow_design_config": design_config is not None,
            "has_locked_tokens": bool(locked),
        },
    )
    return tokens


class StyleTokenResolver:
    """Fachada com template default configurável (FLOW_DEFAULT_TEMPLATE)."""

    def __init__(self, default_template_id: str = "") -> None:
        self._default_template_id = default_template_id

    def resolve(
        self,
        campaign: Any = None,
        flow_snapshot: Any = None,
        template_id: str | None = None,
    ) -> StyleTokens:
        return resolve_style_tokens(
            campaign,
            flow_snapshot,
            template_id or self._default_template_id or None,
        )
