"""Testes do loader de templates iniciais (YAML)."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.services import starter_templates
from app.services.starter_templates import (
    DEFAULT_STARTER_TEMPLATE_ID,
    default_flow_config,
    get_starter_template,
    load_starter_templates,
)


@pytest.fixture(autouse=True)
def _clear_cache():
    starter_templates.clear_cache()
    yield
    starter_templates.clear_cache()


class TestLoadStarterTemplates:
    def test_ships_three_design_presets(self) -> None:
        ids = [template.id for template in load_starter_templates()]
        assert ids == ["classic-certification", "modern-certification", "minimal-certification"]

    def test_presets_share_certification_structure(self) -> None:
        page_ids = {tuple(page["id"] for page in template.pages) for template in load_starter_templates()}
        assert page_ids == {("landing-page", "store-selection", "authentication", "purchase-details", "thank-you")}

    def test_design_config_differs_per_preset(self) -> None:
        minimal = get_starter_template("minimal-certification")
        assert minimal.design_config["cardStyle"] == "flat"
        assert minimal.global_header["showHeader"] is False
        assert get_starter_template("modern-certification").design_config["cardStyle"] == "glass"

    def test_unknown_template(self) -> None:
        assert get_starter_template("nope") is None

    def test_missing_file_returns_empty(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setattr(starter_templates, "_STARTER_TEMPLATES_PATH", tmp_path / "absent.yaml")
        assert load_starter_templates() == ()

    def test_invalid_yaml_returns_empty(self, monkeypatch, tmp_path: Path) -> None:
        broken = tmp_path / "broken.yaml"
        broken.write_text("templates: [unclosed", encoding="utf-8")
        monkeypatch.setattr(starter_templates, "_STARTER_TEMPLATES_PATH", broken)
        assert load_starter_templates() == ()

    def test_template_without_id_rejects_file(self, monkeypatch, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("templates:\n  - name: Nameless\n", encoding="utf-8")
        monkeypatch.setattr(starter_templates, "_STARTER_TEMPLATES_PATH", bad)
        assert load_starter_templates() == ()


class TestDefaultFlowConfig:
    def test_uses_classic_by_default(self) -> None:
        config = default_flow_config()
        classic = get_starter_template(DEFAULT_STARTER_TEMPLATE_ID)
        assert config["designConfig"] == classic.design_config
        assert config["globalHeader"]["backgroundColor"] == "#000000"
        assert len(config["pages"]) == 5

    def test_store_selector_options_in_draft(self) -> None:
        pages = default_flow_config()["pages"]
        store_page = next(page for page in pages if page["type"] == "store_selection")
        selector = next(section for section in store_page["sections"] if section["type"] == "store_selector")
        assert selector["config"]["storeOptions"].split("\n")[-1] == "Other Retailer"

    def test_returned_config_is_independent_copy(self) -> None:
        config = default_flow_config()
        config["pages"][0]["name"] = "Changed"
        config["designConfig"]["cardStyle"] = "glass"
        fresh = default_flow_config()
        assert fresh["pages"][0]["name"] == "Welcome"
        assert fresh["designConfig"]["cardStyle"] == "bordered"

    def test_missing_templates_fall_back_to_empty_pages(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setattr(starter_templates, "_STARTER_TEMPLATES_PATH", tmp_path / "absent.yaml")
        assert default_flow_config() == {"pages": []}
