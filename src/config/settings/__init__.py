"""Agregador de settings do certiflow.

Re-exporta todas as settings e funções de cada módulo.
"""

from __future__ import annotations

from config.settings.backend import (
    BackendKind,
    BackendSettings,
    get_backend_settings,
)
from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.flow import (
    FALLBACK_STORE_OPTIONS,
    FlowSettings,
    get_flow_settings,
)

__all__ = [
    "FALLBACK_STORE_OPTIONS",
    "BackendKind",
    "BackendSettings",
    "BaseSettings",
    "Environment",
    "FlowSettings",
    "get_backend_settings",
    "get_base_settings",
    "get_flow_settings",
]
