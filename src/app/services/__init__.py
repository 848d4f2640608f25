"""Serviços de aplicação.

Unidades reutilizáveis de orquestração (sem IO direto).
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.content_loader import ContentLoadError, FlowContentLoader, FlowLoadResult
from app.services.flow_manager import FlowManager
from app.services.operation_result import OperationResult
from app.services.starter_templates import (
    StarterTemplate,
    default_flow_config,
    get_starter_template,
    load_starter_templates,
)
from app.services.style_tokens import StyleTokenResolver, resolve_style_tokens
from app.services.template_manager import TemplateManager

__all__ = [
    "ContentLoadError",
    "FlowContentLoader",
    "FlowLoadResult",
    "FlowManager",
    "OperationResult",
    "StarterTemplate",
    "StyleTokenResolver",
    "TemplateManager",
    "default_flow_config",
    "get_starter_template",
    "load_starter_templates",
    "resolve_style_tokens",
]
