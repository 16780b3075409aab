"""
Applies a request's decorations to a loaded rendering surface.

Order is fixed: element hiding, then watermark, then stamp. Hiding is
best-effort per selector: a selector with invalid syntax is logged and
skipped, and the remaining selectors and overlays are still applied. Any other
engine failure, while hiding or injecting overlays, aborts the request.
"""
from typing import TYPE_CHECKING, List

from pdf_render_service.components.decorator.overlay_css import stamp_css, watermark_css
from pdf_render_service.core.exceptions import InvalidSelectorError
from pdf_render_service.core.logger import get_logger
from pdf_render_service.core.models import RenderRequest

if TYPE_CHECKING:
    from pdf_render_service.components.renderer.playwright_manager import RenderSurface

logger = get_logger(__name__)


class DecorationApplier:
    """Turns hide-selectors, watermark and stamp instructions into surface mutations."""

    async def apply(self, surface: 'RenderSurface', request: RenderRequest) -> None:
        await self.hide_elements(surface, request.hide_selectors)

        css = watermark_css(request.watermark)
        if css:
            logger.debug(f"Injecting {request.watermark.kind} watermark at {request.watermark.position.value}.")
            await surface.inject_style(css)

        css = stamp_css(request.stamp)
        if css:
            logger.debug(f"Injecting stamp at {request.stamp.position.value}.")
            await surface.inject_style(css)

    async def hide_elements(self, surface: 'RenderSurface', selectors: List[str]) -> List[str]:
        """
        Issues one hide call per non-empty selector.

        Returns:
            List[str]: The selectors that failed and were skipped.
        """
        failed: List[str] = []
        for selector in selectors:
            selector = selector.strip()
            if not selector:
                continue
            try:
                await surface.hide_elements(selector)
            except InvalidSelectorError as e:
                logger.warning(f"Skipping hide selector '{selector}': {e.message}")
                failed.append(selector)
        return failed
