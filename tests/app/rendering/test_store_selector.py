"""Testes do seletor de loja (modos controlado e local, lista de opções)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from app.domain.sections import parse_section
from app.rendering import RenderContext, SectionRenderer, store_option_entries
from app.services.style_tokens import resolve_style_tokens
from config.settings.flow import FALLBACK_STORE_OPTIONS


def _section(store_options=None):
    config = {} if store_options is None else {"storeOptions": store_options}
    return parse_section({"id": "store", "type": "store_selector", "config": config})


@pytest.fixture
def renderer() -> SectionRenderer:
    return SectionRenderer()


@pytest.fixture
def ctx() -> RenderContext:
    return RenderContext(tokens=resolve_style_tokens())


def _option_values(node) -> list[str]:
    return [option.attrs["value"] for option in node.by_role("store-option")]


class TestStoreOptionEntries:
    def test_runtime_options_win(self, ctx) -> None:
        ctx.store_options = ["Best Buy", "Costco"]
        entries = store_option_entries(_section("Amazon\nTarget"), ctx)
        assert entries == [("Best Buy", "Best Buy"), ("Costco", "Costco"), ("other", "Other Store")]

    def test_config_text_used_when_runtime_empty(self, ctx) -> None:
        entries = store_option_entries(_section(" Amazon \n\nTarget\n"), ctx)
        assert [value for value, _ in entries] == ["Amazon", "Target", "other"]

    def test_fallback_list_when_nothing_configured(self, ctx) -> None:
        entries = store_option_entries(_section(), ctx)
        assert [value for value, _ in entries[:-1]] == list(FALLBACK_STORE_OPTIONS)

    def test_other_store_appended_exactly_once(self, ctx) -> None:
        ctx.store_options = ["Amazon", "Other Retailer"]
        entries = store_option_entries(_section(), ctx)
        assert entries.count(("other", "Other Store")) == 1
        assert entries[-1] == ("other", "Other Store")
        assert ("Other Retailer", "Other Retailer") in entries


class TestUncontrolledMode:
    def test_channel_choice_first(self, renderer, ctx) -> None:
        node = renderer.render(_section(), ctx)
        assert [opt.attrs["data-value"] for opt in node.by_role("channel-option")] == ["in-store", "online"]
        assert not node.by_role("store-select")

    def test_choose_channel_then_store(self, renderer, ctx) -> None:
        section = _section("Amazon")
        node = renderer.render(section, ctx)
        node.by_role("channel-option")[1].actions["click"]()

        node = renderer.render(section, ctx)
        assert node.by_role("channel-label")[0].text == "Online"
        assert _option_values(node) == ["Amazon", "other"]

        node.by_role("store-select")[0].actions["change"]("Amazon")
        assert ctx.store_states["store"].selected_store == "Amazon"
        node = renderer.render(section, ctx)
        assert node.by_role("store-select")[0].attrs["data-value"] == "Amazon"

    def test_changing_channel_resets_store(self, renderer, ctx) -> None:
        section = _section("Amazon")
        state = ctx.store_state("store")
        state.purchase_channel = "in-store"
        state.selected_store = "Amazon"

        node = renderer.render(section, ctx)
        node.by_role("channel-change")[0].actions["click"]()

        assert state.purchase_channel == ""
        assert state.selected_store == ""
        assert renderer.render(section, ctx).by_role("channel-option")


class TestControlledMode:
    def test_delegates_to_callbacks(self, renderer) -> None:
        on_channel = MagicMock()
        on_store = MagicMock()
        ctx = RenderContext(
            tokens=resolve_style_tokens(),
            purchase_channel="in-store",
            selected_store="Target",
            on_purchase_channel_change=on_channel,
            on_selected_store_change=on_store,
        )
        node = renderer.render(_section("Target"), ctx)
        wrapper = node.find(lambda n: "data-controlled" in n.attrs)
        assert wrapper.attrs["data-controlled"] is True
        assert node.by_role("channel-label")[0].text == "In-store"

        node.by_role("store-select")[0].actions["change"]("other")
        on_store.assert_called_once_with("other")
        node.by_role("channel-change")[0].actions["click"]()
        on_channel.assert_called_once_with("")
        assert ctx.store_states == {}

    def test_channel_without_callback_is_uncontrolled(self, renderer) -> None:
        ctx = RenderContext(tokens=resolve_style_tokens(), purchase_channel="online")
        node = renderer.render(_section(), ctx)
        assert node.by_role("channel-option")
        assert "store" in ctx.store_states

    def test_accent_color_from_brand(self, renderer) -> None:
        ctx = RenderContext(tokens=resolve_style_tokens(), brand_colors={"primary": "#ff0000"})
        node = renderer.render(_section(), ctx)
        in_store = node.by_role("channel-option")[0]
        assert in_store.style["backgroundColor"] == "#ff0000"
        assert in_store.style["--tw-ring-color"] == "#ff0000"
