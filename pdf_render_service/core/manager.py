"""
Orchestration of the rendering pipeline.

`RenderingManager.render()` runs the four stages strictly in order on a fresh
surface: resolve the source, apply decorations, wait for the page to settle,
export the PDF. Nothing is cached or reused between calls.
"""
from typing import TYPE_CHECKING, Optional

from pdf_render_service.components.decorator.decoration_applier import DecorationApplier
from pdf_render_service.components.renderer.playwright_manager import PlaywrightManager, RenderSurface
from pdf_render_service.core.exceptions import InvalidRequestError
from pdf_render_service.core.logger import get_logger
from pdf_render_service.core.models import (
    MISSING_SOURCE_MESSAGE,
    MarkupSource,
    RenderRequest,
    RenderResult,
    RenderSource,
    UrlSource,
)

if TYPE_CHECKING:
    from pdf_render_service.core.config import ConfigurationManager

logger = get_logger(__name__)


class RenderingManager:
    """
    Runs render requests against a shared `PlaywrightManager`.

    One instance serves the whole process; it holds no per-request state.
    """
    def __init__(
        self,
        config: Optional['ConfigurationManager'] = None,
        playwright_manager: Optional[PlaywrightManager] = None,
        decoration_applier: Optional[DecorationApplier] = None,
    ):
        """
        Args:
            config (Optional[ConfigurationManager]): Configuration used to build the
                PlaywrightManager when one is not supplied.
            playwright_manager (Optional[PlaywrightManager]): Shared browser owner.
            decoration_applier (Optional[DecorationApplier]): Overlay/hiding stage.
        """
        self.config = config
        self.playwright_manager = playwright_manager or PlaywrightManager(config=config)
        self.decoration_applier = decoration_applier or DecorationApplier()
        logger.info("RenderingManager initialized.")

    async def render(self, request: RenderRequest) -> RenderResult:
        """
        Produces the PDF for one request.

        Raises:
            InvalidRequestError: If the request carries no usable source. Raised
                before any browser context is opened.
            RendererError: If any engine operation fails.
        """
        self._check_source(request.source)
        logger.info(
            f"Rendering {request.source.kind} source "
            f"(hide_selectors={len(request.hide_selectors)}, "
            f"watermark={request.watermark.kind if request.watermark else 'none'}, "
            f"stamp={'yes' if request.stamp else 'none'})."
        )

        async with self.playwright_manager.new_surface() as surface:
            await self._resolve_source(surface, request.source)
            await self.decoration_applier.apply(surface, request)
            await surface.wait_until_stable()
            pdf_bytes = await surface.export_pdf()

        logger.info(f"Render completed: {len(pdf_bytes)} bytes.")
        return RenderResult(content=pdf_bytes)

    @staticmethod
    def _check_source(source: RenderSource) -> None:
        if isinstance(source, UrlSource) and source.url:
            return
        if isinstance(source, MarkupSource) and source.markup:
            return
        raise InvalidRequestError(MISSING_SOURCE_MESSAGE)

    async def _resolve_source(self, surface: RenderSurface, source: RenderSource) -> None:
        if isinstance(source, UrlSource):
            await surface.load_url(source.url)
        else:
            await surface.load_markup(source.markup)

    async def close(self) -> None:
        """Shuts down the shared browser."""
        await self.playwright_manager.shutdown()
