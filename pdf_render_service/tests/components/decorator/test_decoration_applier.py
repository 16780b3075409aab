import pytest
from unittest.mock import AsyncMock, call

from pdf_render_service.components.decorator.decoration_applier import DecorationApplier
from pdf_render_service.core.exceptions import InvalidSelectorError, RendererError
from pdf_render_service.core.models import (
    ImageSource,
    ImageStamp,
    MarkupSource,
    Position,
    RenderRequest,
    TextWatermark,
)


@pytest.fixture
def surface():
    mock_surface = AsyncMock()
    mock_surface.hide_elements.return_value = 1
    return mock_surface


def make_request(**kwargs) -> RenderRequest:
    return RenderRequest(source=MarkupSource(markup="<h1>Hi</h1>"), **kwargs)


@pytest.mark.asyncio
async def test_no_decorations_touch_nothing(surface):
    await DecorationApplier().apply(surface, make_request())
    surface.hide_elements.assert_not_called()
    surface.inject_style.assert_not_called()


@pytest.mark.asyncio
async def test_one_hide_call_per_selector(surface):
    await DecorationApplier().apply(surface, make_request(hide_selectors=[".ads", "#banner", "footer"]))
    assert surface.hide_elements.await_args_list == [call(".ads"), call("#banner"), call("footer")]


@pytest.mark.asyncio
async def test_blank_selectors_are_skipped(surface):
    await DecorationApplier().hide_elements(surface, ["  ", "", " .ads "])
    surface.hide_elements.assert_awaited_once_with(".ads")


@pytest.mark.asyncio
async def test_failing_selector_does_not_stop_the_rest(surface):
    surface.hide_elements.side_effect = [InvalidSelectorError("[["), 2]
    request = make_request(hide_selectors=["[[", ".ads"], watermark=TextWatermark(text="DRAFT"))

    await DecorationApplier().apply(surface, request)

    assert surface.hide_elements.await_count == 2
    surface.inject_style.assert_awaited_once()


@pytest.mark.asyncio
async def test_hide_elements_reports_failed_selectors(surface):
    surface.hide_elements.side_effect = [1, InvalidSelectorError("::bad")]
    failed = await DecorationApplier().hide_elements(surface, [".ok", "::bad"])
    assert failed == ["::bad"]


@pytest.mark.asyncio
async def test_order_is_hide_then_watermark_then_stamp(surface):
    request = make_request(
        hide_selectors=[".ads"],
        watermark=TextWatermark(text="DRAFT", position=Position.CENTER),
        stamp=ImageStamp(image=ImageSource.from_parts(url="https://cdn/x.png")),
    )

    await DecorationApplier().apply(surface, request)

    names = [c[0] for c in surface.mock_calls]
    assert names == ["hide_elements", "inject_style", "inject_style"]
    watermark_css = surface.inject_style.await_args_list[0].args[0]
    stamp_css = surface.inject_style.await_args_list[1].args[0]
    assert "body::after" in watermark_css and "'DRAFT'" in watermark_css
    assert "body::before" in stamp_css and "https://cdn/x.png" in stamp_css


@pytest.mark.asyncio
async def test_style_injection_failure_propagates(surface):
    surface.inject_style.side_effect = RendererError("page crashed")
    with pytest.raises(RendererError):
        await DecorationApplier().apply(surface, make_request(watermark=TextWatermark(text="DRAFT")))


@pytest.mark.asyncio
async def test_engine_failure_while_hiding_aborts(surface):
    surface.hide_elements.side_effect = RendererError("Target page, context or browser has been closed")
    request = make_request(hide_selectors=[".ads", "#nav"], watermark=TextWatermark(text="DRAFT"))

    with pytest.raises(RendererError):
        await DecorationApplier().apply(surface, request)

    surface.hide_elements.assert_awaited_once_with(".ads")
    surface.inject_style.assert_not_called()
