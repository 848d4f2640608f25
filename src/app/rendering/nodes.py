"""Árvore de nós de UI produzida pelo renderer.

Independente de framework: a camada de UI consome os nós diretamente ou
serializa com `to_html()`. Texto é sempre escapado; apenas o marcador
inline da seção `text` produz HTML bruto (via `trusted_html`).
"""

from __future__ import annotations

import html
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from app.rendering.markup import is_safe_css_value
from config.logging import log_fallback

logger = logging.getLogger(__name__)

VOID_TAGS: frozenset[str] = frozenset({"br", "hr", "img", "input"})


def _css_name(name: str) -> str:
    """`backgroundColor` → `background-color`; variáveis `--x` passam inalteradas."""
    if name.startswith("--"):
        return name
    return "".join(f"-{char.lower()}" if char.isupper() else char for char in name)


def _style_attr(style: dict[str, Any]) -> str:
    """Serializa o estilo inline; valores que escapariam da propriedade são omitidos."""
    declarations: list[str] = []
    for key, value in style.items():
        if value in (None, ""):
            continue
        if not is_safe_css_value(value):
            log_fallback(logger, "render_node", reason="unsafe_style_value", property=key)
            continue
        declarations.append(f"{_css_name(key)}: {value}")
    return "; ".join(declarations)


@dataclass(slots=True)
class RenderNode:
    """Nó de UI.

    Attributes:
        tag: Elemento (div, button, img, ...)
        classes: Classes utilitárias (string com espaços)
        style: Estilo inline em camelCase (valores None são omitidos)
        attrs: Atributos HTML (data-*, href, src, ...)
        children: Nós filhos na ordem de renderização
        text: Texto puro (escapado na serialização)
        trusted_html: HTML já sanitizado (somente do marcador inline)
        actions: Handlers de interação por nome (ex: "click", "change")
    """

    tag: str = "div"
    classes: str = ""
    style: dict[str, Any] = field(default_factory=dict)
    attrs: dict[str, Any] = field(default_factory=dict)
    children: list[RenderNode] = field(default_factory=list)
    text: str | None = None
    trusted_html: str | None = None
    actions: dict[str, Callable[..., Any]] = field(default_factory=dict)

    def walk(self) -> Iterator[RenderNode]:
        """Percorre a árvore em profundidade (pré-ordem)."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, predicate: Callable[[RenderNode], bool]) -> list[RenderNode]:
        return [node for node in self.walk() if predicate(node)]

    def find(self, predicate: Callable[[RenderNode], bool]) -> RenderNode | None:
        return next((node for node in self.walk() if predicate(node)), None)

    def by_role(self, role: str) -> list[RenderNode]:
        """Nós marcados com `data-role`."""
        return self.find_all(lambda node: node.attrs.get("data-role") == role)

    def text_content(self) -> str:
        """Texto visível concatenado (HTML confiável é incluído sem tags)."""
        parts: list[str] = []
        for node in self.walk():
            if node.text:
                parts.append(node.text)
        return " ".join(parts)

    def to_html(self) -> str:
        attrs: dict[str, Any] = {}
        if self.classes.strip():
            attrs["class"] = " ".join(self.classes.split())
        style = _style_attr(self.style)
        if style:
            attrs["style"] = style
        attrs.update({k: v for k, v in self.attrs.items() if v is not None and v is not False})
        if self.actions:
            attrs["data-action"] = " ".join(sorted(self.actions))

        rendered_attrs = "".join(
            f" {name}" if value is True else f' {name}="{html.escape(str(value), quote=True)}"'
            for name, value in attrs.items()
        )

        if self.tag in VOID_TAGS:
            return f"<{self.tag}{rendered_attrs}/>"

        inner = ""
        if self.trusted_html is not None:
            inner = self.trusted_html
        elif self.text is not None:
            inner = html.escape(self.text)
        inner += "".join(child.to_html() for child in self.children)
        return f"<{self.tag}{rendered_attrs}>{inner}</{self.tag}>"


def el(tag: str, *children: RenderNode, classes: str = "", **kwargs: Any) -> RenderNode:
    """Atalho para montar nós: `el("div", el("p", text="x"), classes="p-4")`."""
    return RenderNode(tag=tag, classes=classes, children=list(children), **kwargs)


def text_node(tag: str, value: str, classes: str = "", **kwargs: Any) -> RenderNode:
    return RenderNode(tag=tag, classes=classes, text=value, **kwargs)
