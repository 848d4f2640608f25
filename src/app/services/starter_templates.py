"""Loader dos templates iniciais de fluxo.

Carrega `assets/starter_templates.yaml` (estrutura padrão de certificação +
presets de design) para uso como rascunho inicial de novos fluxos.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from config.logging import log_fallback

logger = logging.getLogger(__name__)

_STARTER_TEMPLATES_PATH = Path(__file__).resolve().parents[1] / "assets" / "starter_templates.yaml"

DEFAULT_STARTER_TEMPLATE_ID = "classic-certification"


class StarterTemplateError(Exception):
    """Erro ao carregar templates iniciais."""


@dataclass(frozen=True, slots=True)
class StarterTemplate:
    """Template pré-construído (páginas + preset de design)."""

    id: str
    name: str
    description: str = ""
    category: str = "certification"
    design_type: str = ""
    icon: str = ""
    pages: tuple[dict[str, Any], ...] = ()
    design_config: dict[str, Any] = field(default_factory=dict)
    global_header: dict[str, Any] | None = None

    def to_flow_config(self) -> dict[str, Any]:
        """Rascunho (`flow_config`) independente do cache."""
        config: dict[str, Any] = {
            "pages": copy.deepcopy(list(self.pages)),
            "designConfig": copy.deepcopy(self.design_config),
        }
        if self.global_header is not None:
            config["globalHeader"] = copy.deepcopy(self.global_header)
        return config


def _parse_template(raw: dict[str, Any]) -> StarterTemplate:
    template_id = raw.get("id")
    if not template_id:
        raise StarterTemplateError("template sem id")
    pages = raw.get("pages") or []
    if not isinstance(pages, list):
        raise StarterTemplateError(f"template {template_id}: pages deve ser lista")
    return StarterTemplate(
        id=str(template_id),
        name=str(raw.get("name", "")),
        description=str(raw.get("description", "")),
        category=str(raw.get("category", "certification")),
        design_type=str(raw.get("designType", "")),
        icon=str(raw.get("icon", "")),
        pages=tuple(pages),
        design_config=dict(raw.get("designConfig") or {}),
        global_header=raw.get("globalHeader"),
    )


@lru_cache(maxsize=1)
def load_starter_templates() -> tuple[StarterTemplate, ...]:
    """Carrega os templates iniciais do YAML (cached).

    Returns:
        Tupla de templates; vazia se o arquivo estiver ausente ou inválido.
    """
    if not _STARTER_TEMPLATES_PATH.exists():
        log_fallback(logger, "starter_templates", reason="file_missing", path=str(_STARTER_TEMPLATES_PATH))
        return ()

    try:
        with _STARTER_TEMPLATES_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            raise StarterTemplateError("YAML deve ser um dicionário")
        templates = tuple(_parse_template(raw) for raw in data.get("templates") or [])
    except (yaml.YAMLError, StarterTemplateError) as e:
        logger.error(
            "starter_templates_parse_failed",
            extra={"error": str(e), "path": str(_STARTER_TEMPLATES_PATH)},
        )
        return ()

    logger.debug("starter_templates_loaded", extra={"templates_count": len(templates)})
    return templates


def get_starter_template(template_id: str) -> StarterTemplate | None:
    """Retorna o template com `template_id` ou None."""
    return next((t for t in load_starter_templates() if t.id == template_id), None)


def default_flow_config(template_id: str | None = None) -> dict[str, Any]:
    """Rascunho inicial para `create_flow`.

    Usa `template_id` (ou o clássico); sem templates disponíveis devolve
    um rascunho vazio com `pages: []`.
    """
    template = get_starter_template(template_id or DEFAULT_STARTER_TEMPLATE_ID)
    if template is None:
        log_fallback(logger, "starter_templates", reason="template_missing", template_id=template_id)
        return {"pages": []}
    return template.to_flow_config()


def clear_cache() -> None:
    """Limpa cache (útil para testes)."""
    load_starter_templates.cache_clear()
