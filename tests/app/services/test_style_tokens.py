"""Testes do StyleTokenResolver (resolução em quatro camadas)."""

from __future__ import annotations

from dataclasses import fields

import pytest

from app.domain.snapshot import FlowTemplateSnapshot
from app.domain.style_tokens import StyleTokens
from app.services.style_tokens import (
    BASE_DEFAULTS,
    StyleTokenResolver,
    find_design_config,
    merge_tokens,
    normalize_color,
    resolve_style_tokens,
)


class TestResolveStyleTokens:
    def test_everything_absent_returns_base_defaults(self) -> None:
        """Sem campanha, snapshot ou template: defaults base completos."""
        tokens = resolve_style_tokens()
        assert tokens == BASE_DEFAULTS
        assert all(getattr(tokens, f.name) for f in fields(StyleTokens))

    def test_layer_priority_locked_wins(self) -> None:
        campaign = {"id": "cmp-1", "locked_design_tokens": {"primary": "#ff0000"}}
        snapshot = {"designConfig": {"primary": "#00ff00", "cardStyle": "glass"}}

        tokens = resolve_style_tokens(campaign, snapshot, "minimal")

        assert tokens.primary == "#ff0000"
        assert tokens.card_style == "glass"
        # Camada de template continua valendo para chaves não sobrescritas
        assert tokens.color_scheme == "monochrome"
        assert tokens.spacing == "spacious"

    def test_template_family_defaults(self) -> None:
        tokens = resolve_style_tokens(template_id="modern")
        assert (tokens.color_scheme, tokens.card_style, tokens.border_style) == ("vibrant", "glass", "soft")

    def test_unknown_template_is_ignored(self) -> None:
        assert resolve_style_tokens(template_id="brutalist") == BASE_DEFAULTS

    def test_locked_primary_only_keeps_other_defaults(self) -> None:
        tokens = resolve_style_tokens({"locked_design_tokens": {"primary": "#123456"}})
        assert tokens.primary == "#123456"
        assert tokens.accent == BASE_DEFAULTS.accent
        assert tokens.card_style == BASE_DEFAULTS.card_style

    def test_locked_tokens_as_non_object_are_ignored(self) -> None:
        assert resolve_style_tokens({"locked_design_tokens": "red"}) == BASE_DEFAULTS

    def test_hex_and_hsl_pass_through(self) -> None:
        snapshot = {"designConfig": {"primary": "  #AbCdEf ", "accent": "hsl(10 20% 30%)"}}
        tokens = resolve_style_tokens(flow_snapshot=snapshot)
        assert tokens.primary == "#AbCdEf"
        assert tokens.accent == "hsl(10 20% 30%)"

    def test_invalid_enum_and_empty_values_do_not_override(self) -> None:
        snapshot = {"designConfig": {"cardStyle": "neon", "primary": "", "borderRadius": "  "}}
        assert resolve_style_tokens(flow_snapshot=snapshot) == BASE_DEFAULTS

    def test_legacy_numeric_logo_size(self) -> None:
        tokens = resolve_style_tokens(flow_snapshot={"designConfig": {"logoSize": 60}})
        assert tokens.logo_size == "60"

    def test_boolean_is_not_a_valid_enum(self) -> None:
        tokens = resolve_style_tokens(flow_snapshot={"designConfig": {"logoSize": True}})
        assert tokens.logo_size == BASE_DEFAULTS.logo_size


class TestFindDesignConfig:
    @pytest.mark.parametrize(
        "snapshot",
        [
            {"designConfig": {"spacing": "compact"}},
            {"flow_config": {"designConfig": {"spacing": "compact"}}},
            {"published_snapshot": {"designConfig": {"spacing": "compact"}}},
        ],
    )
    def test_lookup_locations(self, snapshot: dict) -> None:
        assert find_design_config(snapshot) == {"spacing": "compact"}

    def test_direct_design_config_wins(self) -> None:
        snapshot = {
            "designConfig": {"spacing": "compact"},
            "flow_config": {"designConfig": {"spacing": "spacious"}},
        }
        assert find_design_config(snapshot) == {"spacing": "compact"}

    def test_reads_typed_snapshot(self) -> None:
        snapshot = FlowTemplateSnapshot.model_validate({"pages": [], "designConfig": {"cardStyle": "flat"}})
        assert find_design_config(snapshot) == {"cardStyle": "flat"}

    def test_none_and_empty(self) -> None:
        assert find_design_config(None) is None
        assert find_design_config({"designConfig": {}}) is None


class TestHelpers:
    def test_normalize_color(self) -> None:
        assert normalize_color(" #fff ") == "#fff"
        assert normalize_color(123) == ""

    def test_merge_ignores_non_dict(self) -> None:
        assert merge_tokens(BASE_DEFAULTS, ["primary"]) is BASE_DEFAULTS

    def test_serialization(self) -> None:
        data = BASE_DEFAULTS.to_dict()
        assert data["textPrimary"] == BASE_DEFAULTS.text_primary
        assert data["cardStyle"] == "elevated"
        css = BASE_DEFAULTS.to_css_variables()
        assert css["--template-primary"] == BASE_DEFAULTS.primary
        assert css["--radius"] == "0.5rem"
        assert set(BASE_DEFAULTS.brand_colors()) == {"primary", "secondary", "accent"}


class TestStyleTokenResolver:
    def test_default_template_applies_when_none_given(self) -> None:
        resolver = StyleTokenResolver(default_template_id="minimal")
        assert resolver.resolve().color_scheme == "monochrome"

    def test_explicit_template_wins_over_default(self) -> None:
        resolver = StyleTokenResolver(default_template_id="minimal")
        assert resolver.resolve(template_id="modern").color_scheme == "vibrant"
