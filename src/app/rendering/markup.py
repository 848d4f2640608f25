"""Marcação inline restrita da seção `text`.

Padrões aceitos: **negrito**, *itálico*, __sublinhado__, [texto](url)
e quebra de linha. O texto é escapado antes da substituição, então
qualquer HTML embutido aparece literalmente e nunca é interpretado.
"""

from __future__ import annotations

import html
import re

EMPTY_TEXT_PLACEHOLDER = "Click to edit text..."

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")
_UNDERLINE = re.compile(r"__(.*?)__")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

SAFE_URL_SCHEMES: tuple[str, ...] = ("http://", "https://", "mailto:", "tel:", "/", "#")
SAFE_IMAGE_SCHEMES: tuple[str, ...] = ("http://", "https://", "/", "data:image/")

_CSS_FORBIDDEN_CHARS = frozenset(";{}<>\\\"'")
_CSS_FORBIDDEN_TOKENS: tuple[str, ...] = ("url(", "expression(", "/*", "@import", "javascript:")


def is_safe_url(url: str) -> bool:
    """Apenas esquemas navegáveis conhecidos; `javascript:` e afins são recusados."""
    candidate = html.unescape(url).strip().lower()
    return candidate.startswith(SAFE_URL_SCHEMES)


def is_safe_image_url(url: str) -> bool:
    """Imagens: http(s), caminho relativo ou `data:image/`."""
    candidate = html.unescape(url).strip().lower()
    return candidate.startswith(SAFE_IMAGE_SCHEMES)


def is_safe_css_value(value: object) -> bool:
    """Valor de propriedade CSS isolado: sem `;`, blocos, comentários ou `url(`."""
    text = str(value).lower()
    if any(char in text for char in _CSS_FORBIDDEN_CHARS):
        return False
    return not any(token in text for token in _CSS_FORBIDDEN_TOKENS)


def _link(match: re.Match[str]) -> str:
    label, url = match.group(1), match.group(2)
    if not is_safe_url(url):
        return label
    return f'<a href="{url}" class="text-blue-600 underline">{label}</a>'


def format_text_markup(content: str | None) -> str:
    """Converte a marcação inline em HTML seguro.

    Args:
        content: Texto bruto do config da seção

    Returns:
        HTML com apenas strong/em/u/a/br; texto vazio vira o placeholder.
    """
    if not content:
        return EMPTY_TEXT_PLACEHOLDER

    escaped = html.escape(content, quote=True)
    escaped = _BOLD.sub(r"<strong>\1</strong>", escaped)
    escaped = _ITALIC.sub(r"<em>\1</em>", escaped)
    escaped = _UNDERLINE.sub(r"<u>\1</u>", escaped)
    escaped = _LINK.sub(_link, escaped)
    return escaped.replace("\n", "<br/>")
