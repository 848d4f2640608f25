"""Testes do SectionRenderer (wrapper, renders por tipo e contenção de erros)."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from app.domain.session import FlowSession, VerificationResult
from app.domain.snapshot import FlowPage
from app.rendering import RenderContext, SectionRenderer, validate_registry
from app.rendering.renderer import DEFAULT_INVALID_REASON
from app.rendering.sections import SECTION_RENDERERS
from app.services.style_tokens import resolve_style_tokens
from tests.fakes.fake_auth_provider import FakeAuthProvider


@pytest.fixture
def renderer() -> SectionRenderer:
    return SectionRenderer()


@pytest.fixture
def ctx() -> RenderContext:
    return RenderContext(tokens=resolve_style_tokens())


def _inner(node):
    return node.children[0]


class TestRegistry:
    def test_registry_is_exhaustive(self) -> None:
        assert validate_registry() == []

    def test_incomplete_registry_rejected(self) -> None:
        partial = dict(SECTION_RENDERERS)
        partial.pop("hero")
        with pytest.raises(ValueError, match="hero"):
            SectionRenderer(partial)


class TestWrapper:
    def test_outer_carries_background_inner_carries_layout(self, renderer, ctx) -> None:
        node = renderer.render(
            {"id": "t", "type": "text", "config": {"backgroundColor": "#fafafa", "textColor": "#111", "padding": 6}},
            ctx,
        )
        assert node.attrs == {"data-section-id": "t", "data-section-type": "text"}
        assert node.style == {"backgroundColor": "#fafafa", "width": "100%"}

        inner = _inner(node).style
        assert inner["color"] == "#111"
        assert inner["border"] == "none"
        assert inner["padding"] == "1.5rem"
        assert inner["maxWidth"] == "var(--device-width-px, 390px)"
        assert inner["boxShadow"] == "none"

    def test_default_padding_and_drop_shadow(self, renderer, ctx) -> None:
        node = renderer.render({"id": "h", "type": "hero", "config": {"dropShadow": True}}, ctx)
        inner = _inner(node).style
        assert inner["padding"] == "1rem"
        assert inner["boxShadow"] == "0px 4px 10px 0px rgba(0,0,0,0.1)"

    def test_image_never_gets_box_shadow(self, renderer, ctx) -> None:
        node = renderer.render(
            {"id": "i", "type": "image", "config": {"imageUrl": "https://x/y.png", "dropShadow": True, "shadowBlur": 12}},
            ctx,
        )
        assert _inner(node).style["boxShadow"] == "none"
        image = node.by_role("image")[0]
        assert "drop-shadow-lg" in image.classes

    def test_image_card_framing_never_keeps_shadow(self, renderer) -> None:
        glass = RenderContext(tokens=resolve_style_tokens(template_id="modern"))
        node = renderer.render({"id": "i", "type": "image", "config": {"dropShadow": True}}, glass)
        section = _inner(node).children[0]
        assert "shadow-lg" not in section.classes
        assert "bg-white/10" not in section.classes


class TestSectionTypes:
    def test_text_uses_trusted_markup(self, renderer, ctx) -> None:
        node = renderer.render({"id": "t", "type": "text", "config": {"content": "**Hi** <i>x</i>"}}, ctx)
        body = node.by_role("text-body")[0]
        assert body.trusted_html is not None
        assert "<strong>Hi</strong>" in body.trusted_html
        assert "&lt;i&gt;" in body.trusted_html
        assert body.style["fontSize"] == "16px"

    def test_image_placeholder_and_caption_color(self, renderer, ctx) -> None:
        node = renderer.render({"id": "i", "type": "image", "config": {"caption": "Hello"}}, ctx)
        assert node.by_role("image-placeholder")
        caption = node.find(lambda n: n.text == "Hello")
        assert caption is not None
        assert caption.style["color"] == "#666666"

    def test_image_dimensions(self, renderer, ctx) -> None:
        node = renderer.render({"id": "i", "type": "image", "config": {"imageUrl": "/a.png", "width": 200}}, ctx)
        image = node.by_role("image")[0]
        assert image.style == {"maxWidth": "200px", "maxHeight": "auto"}

    @pytest.mark.parametrize("section_type", ["image", "product_showcase", "card"])
    def test_unsafe_image_url_never_reaches_src(self, renderer, ctx, section_type) -> None:
        node = renderer.render(
            {"id": "i", "type": section_type, "config": {"imageUrl": "javascript:alert(1)"}},
            ctx,
        )
        assert node.find(lambda n: n.tag == "img") is None
        assert "javascript:" not in node.to_html()

    def test_unsafe_image_url_shows_placeholder(self, renderer, ctx) -> None:
        node = renderer.render({"id": "i", "type": "image", "config": {"imageUrl": "data:text/html,x"}}, ctx)
        assert node.by_role("image-placeholder")

    def test_color_injection_is_not_serialized(self, renderer, ctx) -> None:
        node = renderer.render(
            {"id": "t", "type": "text", "config": {"backgroundColor": "red; background-image:url(https://evil)"}},
            ctx,
        )
        html = node.to_html()
        assert "url(" not in html
        assert "background-image" not in html

    def test_features_items(self, renderer, ctx) -> None:
        node = renderer.render({"id": "f", "type": "features", "config": {"items": ["A", "", "B"]}}, ctx)
        assert len(node.by_role("feature-item")) == 2

    def test_cta_navigates_to_page(self, renderer, ctx) -> None:
        ctx.on_navigate_to_page = MagicMock()
        node = renderer.render({"id": "c", "type": "cta", "config": {"text": "Go", "pageId": "p2", "size": "lg"}}, ctx)
        button = node.by_role("cta")[0]
        assert button.style["backgroundColor"] == "var(--template-primary)"
        assert button.style["color"] == "#ffffff"
        assert "text-lg" in button.classes
        button.actions["click"]()
        ctx.on_navigate_to_page.assert_called_once_with("p2")

    def test_cta_unsafe_url_dropped(self, renderer, ctx) -> None:
        node = renderer.render({"id": "c", "type": "cta", "config": {"url": "javascript:alert(1)"}}, ctx)
        assert node.by_role("cta")[0].attrs["data-href"] is None

    def test_header_logo_placeholder_and_brand_logo(self, renderer, ctx) -> None:
        node = renderer.render({"id": "h", "type": "header", "config": {"logo": True}}, ctx)
        assert "LOGO" in node.text_content()
        ctx.brand_logo_url = "https://cdn/logo.png"
        node = renderer.render({"id": "h", "type": "header", "config": {"logo": True}}, ctx)
        assert node.find(lambda n: n.tag == "img").attrs["src"] == "https://cdn/logo.png"

    def test_button_actions(self, renderer, ctx) -> None:
        ctx.on_next = MagicMock()
        ctx.on_prev = MagicMock()
        renderer.render({"id": "b", "type": "button"}, ctx).by_role("button")[0].actions["click"]()
        ctx.on_next.assert_called_once()
        renderer.render({"id": "b", "type": "button", "config": {"action": "prev"}}, ctx).by_role("button")[0].actions[
            "click"
        ]()
        ctx.on_prev.assert_called_once()

    def test_link_button_requires_safe_url(self, renderer, ctx) -> None:
        node = renderer.render(
            {"id": "b", "type": "button", "config": {"action": "link", "url": "javascript:x"}}, ctx
        )
        link = node.by_role("button")[0]
        assert link.tag == "a"
        assert link.attrs["href"] is None

    def test_form_fields_and_submit(self, renderer, ctx) -> None:
        ctx.on_form_change = MagicMock()
        ctx.on_next = MagicMock()
        ctx.form_values = {"serial": "SN-1"}
        node = renderer.render(
            {"id": "form", "type": "form", "config": {"fields": [{"id": "serial", "label": "Serial"}]}},
            ctx,
        )
        field = node.by_role("form-field")[0]
        control = field.children[1]
        assert control.attrs["value"] == "SN-1"
        control.actions["change"]("SN-2")
        ctx.on_form_change.assert_called_once_with("serial", "SN-2")
        node.by_role("form-submit")[0].actions["click"]()
        ctx.on_next.assert_called_once()

    def test_card_without_drop_shadow(self, renderer, ctx) -> None:
        node = renderer.render({"id": "c", "type": "card", "config": {"title": "T"}}, ctx)
        card = _inner(node).children[0]
        assert "shadow-sm" not in card.classes
        assert "rounded-lg" in card.classes

    def test_footer_and_divider(self, renderer, ctx) -> None:
        footer = renderer.render({"id": "f", "type": "footer"}, ctx)
        assert "Powered by Panacea" in footer.text_content()
        divider = renderer.render({"id": "d", "type": "divider", "config": {"thickness": 2, "width": 50}}, ctx)
        rule = divider.find(lambda n: n.tag == "hr")
        assert rule.style["height"] == "2px"
        assert rule.style["width"] == "50%"
        assert rule.style["margin"] == "0 auto"


class TestLoginStep:
    def test_preview_forces_email_and_apple(self, renderer) -> None:
        ctx = RenderContext(tokens=resolve_style_tokens(), is_preview=True)
        node = renderer.render(
            {"id": "l", "type": "login_step", "config": {"showEmail": False, "showApple": False}}, ctx
        )
        assert node.by_role("auth-apple")
        assert node.by_role("auth-email-form")
        assert node.by_role("auth-google")

    def test_runtime_respects_config(self, renderer, ctx) -> None:
        node = renderer.render(
            {"id": "l", "type": "login_step", "config": {"showEmail": False, "showApple": False}}, ctx
        )
        assert not node.by_role("auth-apple")
        assert not node.by_role("auth-email-form")

    def test_brand_name_is_escaped_in_consent(self, renderer, ctx) -> None:
        node = renderer.render(
            {"id": "l", "type": "login_step", "config": {"brandName": "<Acme>"}}, ctx
        )
        consent = node.find(lambda n: n.trusted_html is not None and "Share my details" in n.trusted_html)
        assert "<strong>&lt;Acme&gt;</strong>" in consent.trusted_html

    @pytest.mark.asyncio
    async def test_handler_state_persists_between_renders(self, renderer) -> None:
        track = MagicMock()
        ctx = RenderContext(tokens=resolve_style_tokens(), auth_provider=FakeAuthProvider(), on_track_event=track)
        section = {"id": "l", "type": "login_step"}

        node = renderer.render(section, ctx)
        await node.by_role("login-step")[0].actions["view"]()
        await node.by_role("auth-submit")[0].actions["click"]()

        rerendered = renderer.render(section, ctx)
        assert rerendered.by_role("auth-error")[0].text == "Please fill in all fields"
        track.assert_called_once_with("auth_viewed", {})

    @pytest.mark.asyncio
    async def test_sign_up_toggle_shows_confirm_field(self, renderer, ctx) -> None:
        section = {"id": "l", "type": "login_step"}
        node = renderer.render(section, ctx)
        assert node.by_role("auth-submit")[0].text == "Sign In"
        node.by_role("auth-toggle")[0].actions["click"]()
        node = renderer.render(section, ctx)
        assert node.by_role("auth-confirm")
        assert node.by_role("auth-submit")[0].text == "Create Account"


class TestFallbacks:
    def test_unknown_section_placeholder(self, renderer, ctx, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO)
        node = renderer.render({"id": "x1", "type": "carousel"}, ctx)
        placeholder = node.by_role("unknown-section")[0]
        text = placeholder.text_content()
        assert "Unknown Section Type" in text
        assert "Type: carousel" in text
        assert "ID: x1" in text
        assert "not recognized" in text
        assert any(getattr(r, "reason", None) == "unknown_section_type" for r in caplog.records)

    def test_unknown_section_preview_is_terse(self, renderer) -> None:
        ctx = RenderContext(tokens=resolve_style_tokens(), is_preview=True)
        node = renderer.render({"id": "x1", "type": "carousel"}, ctx)
        assert "not recognized" not in node.text_content()

    def test_renderer_exception_becomes_section_error(self, ctx, caplog: pytest.LogCaptureFixture) -> None:
        def explode(section, context):
            raise RuntimeError("boom")

        renderers = dict(SECTION_RENDERERS)
        renderers["hero"] = explode
        renderer = SectionRenderer(renderers)

        node = renderer.render({"id": "h1", "type": "hero"}, ctx)
        error = node.by_role("section-error")[0]
        assert "Section Error" in error.text_content()
        assert "boom" in error.text_content()
        assert any(r.getMessage() == "section_render_failed" for r in caplog.records)

    def test_malformed_config_renders_defaults(self, renderer, ctx) -> None:
        node = renderer.render({"id": "c", "type": "cta", "config": None}, ctx)
        assert node.by_role("cta")[0].text == "Click here"


class TestPages:
    def test_render_page_orders_sections_and_sets_css_vars(self, renderer, ctx) -> None:
        page = FlowPage.model_validate(
            {
                "id": "p1",
                "type": "welcome",
                "sections": [
                    {"id": "b", "type": "text", "order": 1},
                    {"id": "a", "type": "carousel", "order": 0},
                ],
            }
        )
        node = renderer.render_page(page, ctx)
        assert node.attrs["data-page-id"] == "p1"
        assert [child.attrs["data-section-id"] for child in node.children] == ["a", "b"]
        assert node.style["--template-primary"] == ctx.tokens.primary
        assert node.style["backgroundColor"] == ctx.tokens.background

    def test_invalid_page_reason(self, renderer) -> None:
        node = renderer.render_invalid_page("QR code expired")
        assert node.by_role("invalid-reason")[0].text == "QR code expired"
        assert "Invalid QR Code" in node.text_content()
        default = renderer.render_invalid_page()
        assert default.by_role("invalid-reason")[0].text == DEFAULT_INVALID_REASON

    def test_html_serialization_has_no_raw_script(self, renderer, ctx) -> None:
        node = renderer.render({"id": "h", "type": "hero", "config": {"title": "<script>x</script>"}}, ctx)
        html = node.to_html()
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


def _session(**overrides) -> FlowSession:
    data = {
        "id": "sess-1",
        "campaign": {"id": "c1", "name": "Spring"},
        "brand": {"id": "b1", "name": "Acme"},
    }
    data.update(overrides)
    return FlowSession.model_validate(data)


class TestVerificationScreen:
    def test_pending_lists_checks_and_starts(self, renderer, ctx) -> None:
        ctx.on_run_verification = MagicMock()
        node = renderer.render_verification_result(None, ctx)

        assert node.attrs["data-role"] == "verification-pending"
        text = node.text_content()
        assert "Product Authentication" in text
        assert "Expiration date validation" in text
        node.by_role("start-verification")[0].actions["click"]()
        ctx.on_run_verification.assert_called_once_with()

    def test_pass_shows_batch_and_navigation(self, renderer, ctx) -> None:
        ctx.on_next = MagicMock()
        batch = {"batch_id": "B-7", "name": "Lot 7", "status": "generated"}
        result = VerificationResult(result="pass", batch_info=batch)
        node = renderer.render_verification_result(result, ctx)

        assert "Product Verified Successfully" in node.text_content()
        assert "B-7" in node.by_role("batch-info")[0].text_content()
        assert node.by_role("verification-reasons") == []
        node.by_role("step-next")[0].actions["click"]()
        ctx.on_next.assert_called_once_with()

    def test_warn_joins_reasons(self, renderer, ctx) -> None:
        result = VerificationResult(result="warn", reasons=("store_not_provided", "near_expiry"))
        node = renderer.render_verification_result(result, ctx)

        assert "Product Verified with Warnings" in node.text_content()
        assert node.by_role("verification-reasons")[0].text == "Warnings: store_not_provided, near_expiry"

    def test_fail_has_guidance_and_no_continue(self, renderer, ctx) -> None:
        ctx.on_prev = MagicMock()
        node = renderer.render_verification_result(VerificationResult(result="fail", reasons=("expired",)), ctx)

        assert node.attrs["data-role"] == "verification-fail"
        assert "Product Not Verified" in node.text_content()
        assert node.by_role("verification-reasons")[0].text == "Issues found: expired"
        assert node.by_role("step-next") == []
        node.by_role("step-prev")[0].actions["click"]()
        ctx.on_prev.assert_called_once_with()


class TestFinalScreen:
    def test_badge_documents_and_upsells(self, renderer, ctx) -> None:
        ctx.on_open_document = MagicMock()
        ctx.on_upsell_click = MagicMock()
        node = renderer.render_final_page(_session(verification={"result": "warn"}), ctx)

        assert "verified as authentic from Acme" in node.text_content()
        assert node.by_role("verification-badge")[0].text == "Verification: WARN"
        documents = node.by_role("document")
        assert [doc.attrs["data-doc-type"] for doc in documents] == ["coa", "test_results", "authenticity_cert"]
        documents[1].actions["click"]()
        ctx.on_open_document.assert_called_once_with("test_results")

        for upsell in node.by_role("upsell"):
            upsell.actions["click"]()
        skus = [call.args[0] for call in ctx.on_upsell_click.call_args_list]
        assert skus == ["premium-gummies", "tincture-oil", "brand-store", "newsletter-signup"]

    def test_redirect_only_for_safe_url(self, renderer, ctx) -> None:
        safe = _session(campaign={"id": "c1", "final_redirect_url": "https://acme.example"})
        link = renderer.render_final_page(safe, ctx).by_role("final-redirect")[0]
        assert link.attrs["href"] == "https://acme.example"
        assert link.text == "Visit Acme"

        unsafe = _session(campaign={"id": "c1", "final_redirect_url": "javascript:alert(1)"})
        assert renderer.render_final_page(unsafe, ctx).by_role("final-redirect") == []

    def test_without_session_still_renders(self, renderer, ctx) -> None:
        node = renderer.render_final_page(None, ctx)
        assert node.by_role("verification-badge") == []
        assert node.by_role("final-redirect") == []
        assert "Verified Authentic" in node.text_content()
